"""
Random selection and chronological ordering of digest entries.
"""

import random
import re
from typing import List, Optional, Sequence, TypeVar

from digest.models import DatedRecord

T = TypeVar('T')

# "紀元前500年: ..." or "1990年: ..." / "1990: ..."
BCE_YEAR_RE = re.compile(r'^紀元前(\d+)年?:')
CE_YEAR_RE = re.compile(r'^(\d+)年?:')


def random_items(items: Sequence[T], count: int, rng: Optional[random.Random] = None) -> List[T]:
    """
    Pick up to `count` items uniformly at random.

    Lists no longer than `count` come back unchanged, in their original order.
    The input is never modified.

    Args:
        items: Candidates
        count: How many to keep
        rng: Random source (defaults to the module-level generator)

    Returns:
        New list with the selected items
    """
    if len(items) <= count:
        return list(items)

    shuffled = list(items)
    (rng or random).shuffle(shuffled)
    return shuffled[:count]


def extract_year(text: str) -> int:
    """Signed year from a leading "{year}年:" label; 0 when there is none."""
    bce_match = BCE_YEAR_RE.match(text)
    if bce_match:
        return -int(bce_match.group(1))

    ce_match = CE_YEAR_RE.match(text)
    if ce_match:
        return int(ce_match.group(1))

    return 0


def _year_key(item) -> int:
    if isinstance(item, DatedRecord):
        return item.year.signed
    return extract_year(str(item))


def sort_by_year(items: Sequence[T]) -> List[T]:
    """
    Sort entries oldest first.

    Accepts DatedRecords or plain "{year}: ..." strings. Entries sharing a
    year keep their relative order.
    """
    return sorted(items, key=_year_key)
