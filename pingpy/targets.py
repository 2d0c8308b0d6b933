from __future__ import annotations

import re
from typing import Tuple

from .errors import InvalidRangeError

# "A.B.C.s-e" or "A.B.C.s-A.B.C.e" with the same prefix repeated
_RANGE_RE = re.compile(
    r"""
    (?P<prefix>\d{1,3}\.\d{1,3}\.\d{1,3}\.)   # fixed three-octet prefix
    (?P<start>\d{1,3})
    -
    (?:(?P=prefix))?                          # optional repeated prefix
    (?P<end>\d{1,3})
    """,
    re.VERBOSE,
)


def is_range(target: str) -> bool:
    return _RANGE_RE.fullmatch(target) is not None


def expand(target: str) -> Tuple[str, ...]:
    """
    Turn a target string into the ordered hosts to probe.

    Anything that is not a last-octet range comes back unchanged as a single
    host. Range bounds outside 0..255, or start > end, raise InvalidRangeError.
    """
    m = _RANGE_RE.fullmatch(target)
    if not m:
        return (target,)

    prefix = m.group("prefix")
    start = int(m.group("start"))
    end = int(m.group("end"))
    if start > end or start < 0 or end > 255:
        raise InvalidRangeError(target, start, end)

    return tuple(f"{prefix}{i}" for i in range(start, end + 1))
