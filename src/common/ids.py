"""Escaping of entry ids for use as filenames.

Ids are made safe for a UNIX filesystem, which forbids '/' and NUL and
treats '.' and '..' specially:

- a leading '.' is prefixed with a backslash
- '\\' becomes '\\\\', NUL becomes '\\0', '/' becomes '\\_' and a newline
  becomes '\\n' (so that NUL-separated listings stay line friendly)

``unescape_id`` reverses this exactly.
"""

from common.errors import EmptyIdError

_ESCAPES = {
    "\\": "\\\\",
    "\0": "\\0",
    "/": "\\_",
    "\n": "\\n",
}

_UNESCAPES = {
    "0": "\0",
    "_": "/",
    "n": "\n",
}


def escape_id(entry_id: str) -> str:
    if not entry_id:
        raise EmptyIdError()

    escaped = "".join(_ESCAPES.get(c, c) for c in entry_id)
    if entry_id.startswith("."):
        escaped = "\\" + escaped
    return escaped


def unescape_id(escaped: str) -> str:
    chars = []
    pending = False
    for c in escaped:
        if pending:
            chars.append(_UNESCAPES.get(c, c))
            pending = False
        elif c == "\\":
            pending = True
        else:
            chars.append(c)
    return "".join(chars)
