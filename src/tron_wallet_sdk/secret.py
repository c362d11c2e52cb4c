from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager


def scrub(buf: bytearray) -> None:
    for i in range(len(buf)):
        buf[i] = 0


@contextmanager
def scoped_secret(value: str | bytes | bytearray) -> Iterator[bytearray]:
    """Yield a mutable copy of ``value`` that is zeroed on every exit path.

    Only the copy is scrubbed; an immutable ``str`` or ``bytes`` held by the
    caller stays in memory until it is garbage collected.
    """
    if isinstance(value, str):
        buf = bytearray(value.encode("utf-8"))
    else:
        buf = bytearray(value)
    try:
        yield buf
    finally:
        scrub(buf)
