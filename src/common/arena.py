"""Fixed-capacity text arena for the record currently being parsed.

All field text of the open channel or item is appended to one bytearray.
Fields are handed out as (offset, length) views tagged with the arena
generation, and ``reset()`` starts a new generation so that views from a
previous record are rejected instead of silently reading newer data.
"""

from __future__ import annotations

from dataclasses import dataclass

from common.errors import ArenaOverflowError, StaleViewError


@dataclass(frozen=True)
class FieldRef:
    """Start of a field that is still accumulating text."""
    start: int
    generation: int


@dataclass(frozen=True)
class FieldView:
    """A closed field: a slice of the arena valid for one generation."""
    offset: int
    length: int
    generation: int


class Arena:
    def __init__(self, capacity: int):
        if capacity <= 0:
            raise ValueError("arena capacity must be positive")
        self._buffer = bytearray(capacity)
        self._offset = 0
        self._generation = 0

    @property
    def capacity(self) -> int:
        return len(self._buffer)

    @property
    def used(self) -> int:
        return self._offset

    @property
    def generation(self) -> int:
        return self._generation

    def reset(self) -> None:
        """Forget all text, invalidating every view handed out so far."""
        self._offset = 0
        self._generation += 1

    def open_field(self) -> FieldRef:
        return FieldRef(start=self._offset, generation=self._generation)

    def append(self, data: bytes) -> None:
        """Append data at the write offset.

        Raises:
            ArenaOverflowError: If the data does not fit. Nothing is written.
        """
        end = self._offset + len(data)
        if end > len(self._buffer):
            raise ArenaOverflowError(len(self._buffer))
        self._buffer[self._offset:end] = data
        self._offset = end

    def close_field(self, ref: FieldRef) -> FieldView:
        self._check_generation(ref.generation)
        return FieldView(
            offset=ref.start,
            length=self._offset - ref.start,
            generation=ref.generation,
        )

    def read(self, view: FieldView) -> str:
        self._check_generation(view.generation)
        end = view.offset + view.length
        return self._buffer[view.offset:end].decode("utf-8")

    def _check_generation(self, generation: int) -> None:
        if generation != self._generation:
            raise StaleViewError(
                f"field from arena generation {generation} used in generation {self._generation}"
            )
