"""Separator-encoded byte lists used by the list queries."""

from __future__ import annotations
from typing import Iterable, List

from .constants import LIST_SEPARATOR


def encode_list(values: Iterable[str], terminated: bool = False) -> bytes:
    """
    Encode values with ``$$$``. An empty iterable encodes to ``b""``.

    By default the separator only sits between values (restriction lists).
    With ``terminated=True`` it follows every value, the last one included,
    which is the byte form of the node and subscriber lists.
    """
    parts = [v.encode("utf-8") for v in values]
    if terminated:
        return b"".join(p + LIST_SEPARATOR for p in parts)
    return LIST_SEPARATOR.join(parts)


def decode_list(data: bytes) -> List[str]:
    """Inverse of ``encode_list`` for either layout."""
    if not data:
        return []
    parts = data.split(LIST_SEPARATOR)
    # identifiers are never empty, so an empty tail is the terminator
    if parts[-1] == b"":
        parts.pop()
    return [part.decode("utf-8") for part in parts]
