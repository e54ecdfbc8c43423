"""Byte sources feeding the tokenizer in bounded chunks."""

from __future__ import annotations

import logging
from typing import BinaryIO, Iterator

import requests

from common.errors import FeedReadError

logger = logging.getLogger(__name__)


def read_chunks(stream: BinaryIO, chunk_size: int) -> Iterator[bytes]:
    """Yield chunks of at most chunk_size bytes until end of stream.

    Interrupted reads are retried; any other read failure is fatal.
    """
    while True:
        try:
            chunk = stream.read(chunk_size)
        except InterruptedError:
            continue
        except OSError as e:
            raise FeedReadError(f"read(): {e.strerror or e}") from e
        if not chunk:
            return
        yield chunk


def fetch_chunks(
    url: str,
    chunk_size: int,
    timeout: int = 30,
    user_agent: str = "rss2atom/1.0 (feed converter)",
) -> Iterator[bytes]:
    """Stream a remote feed in chunks of at most chunk_size bytes."""
    try:
        response = requests.get(
            url,
            stream=True,
            timeout=timeout,
            headers={"User-Agent": user_agent},
        )
        response.raise_for_status()
    except requests.RequestException as e:
        raise FeedReadError(f"failed to fetch {url}: {e}") from e

    logger.debug("Fetching %s (status %d)", url, response.status_code)
    with response:
        try:
            for chunk in response.iter_content(chunk_size=chunk_size):
                if chunk:
                    yield chunk
        except requests.RequestException as e:
            raise FeedReadError(f"failed to read {url}: {e}") from e
