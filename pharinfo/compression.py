from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Mapping, Optional

from pharinfo.model import CompressionAlgorithm

HUNDRED = Decimal("100")
CENT = Decimal("0.01")


@dataclass(frozen=True)
class CompressionBucket:
    label: str
    count: int
    percentage: Optional[Decimal] = None


def _relabel(counts: Mapping[str, int]) -> Dict[str, int]:
    """
    Rename the "NONE" entry to "None" and drop empty buckets.
    The renamed entry moves to the end of the iteration order.
    """
    out: Dict[str, int] = {k: int(v) for k, v in counts.items() if k != CompressionAlgorithm.NONE.value}
    out["None"] = int(counts.get(CompressionAlgorithm.NONE.value, 0))
    return {k: v for k, v in out.items() if v}


def summarize_compression(counts: Mapping[str, int]) -> List[CompressionBucket]:
    """
    Returns the non-empty buckets in display order.

    With a single bucket no percentage is computed. Otherwise every bucket but
    the last is rounded to two decimals and the last one receives whatever is
    left of 100, so the percentages always add up to exactly 100.00.
    """
    buckets = _relabel(counts)

    if len(buckets) == 1:
        label, n = next(iter(buckets.items()))
        return [CompressionBucket(label=label, count=n)]

    total = sum(buckets.values())
    last_label = list(buckets)[-1] if buckets else None
    remaining = HUNDRED

    out: List[CompressionBucket] = []
    for label, n in buckets.items():
        if label == last_label:
            percentage = remaining
        else:
            percentage = (Decimal(n) * HUNDRED / Decimal(total)).quantize(CENT, rounding=ROUND_HALF_UP)
            remaining -= percentage
        out.append(CompressionBucket(label=label, count=n, percentage=percentage))
    return out
