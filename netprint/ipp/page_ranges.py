"""Helpers for the `page-ranges` job attribute and its text form ("1-3, 5, 8-10")."""

from typing import List, Optional, Sequence, Tuple

from .codec import Range

def valid_page_ranges(ranges: Optional[Sequence[Range]]) -> bool:
    """Return True if the ranges are ascending, non-overlapping and each lower <= upper.

    An empty list is valid and means "all pages".
    """
    last_upper = 0
    for one in ranges or ():
        if one.lower < 1 or one.lower > one.upper or one.lower <= last_upper:
            return False
        last_upper = one.upper
    return True

def format_page_ranges(ranges: Optional[Sequence[Range]]) -> str:
    parts = []
    for one in ranges or ():
        if one.lower == one.upper:
            parts.append(str(one.lower))
        else:
            parts.append(f"{one.lower}-{one.upper}")
    return ", ".join(parts)

def extract_page_ranges(text: str) -> Tuple[List[Range], bool]:
    """Parse comma separated `N` and `N-M` tokens, keeping input order.

    Bad tokens flag the result as not ok but do not stop parsing, so the returned
    list may be partial. Callers must check the flag before trusting it.
    """
    ranges: List[Range] = []
    ok = True
    if not text or not text.strip():
        return ranges, ok
    for token in text.split(","):
        token = token.strip()
        lower_text, sep, upper_text = token.partition("-")
        lower = _parse_page(lower_text)
        upper = _parse_page(upper_text) if sep else lower
        if lower is None or upper is None:
            ok = False
            continue
        if upper < lower:
            ok = False
        ranges.append(Range(lower, upper))
    return ranges, ok

def _parse_page(text: str) -> Optional[int]:
    text = text.strip()
    if not (text.isascii() and text.isdigit()):
        return None
    page = int(text)
    if page < 1:
        return None
    return page
