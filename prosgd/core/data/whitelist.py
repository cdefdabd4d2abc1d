"""
Sparse feature filtering.

Features that fire in too few tuning instances are excluded from training.
Dense models never hit the filter.
"""

import logging
from collections import Counter
from typing import MutableMapping, Optional, Sequence, Set

from .types import Candidate

logger = logging.getLogger(__name__)


def update_feature_whitelist(
    counts: Optional[MutableMapping[str, int]],
    translation_lists: Sequence[Sequence[Candidate]],
    min_segment_count: int,
) -> Set[str]:
    """
    Accumulate per-instance feature support and return the whitelist.

    Each feature is counted at most once per tuning instance, no matter
    how many candidates of that instance carry it.

    Args:
        counts: Running support counts owned by the caller, updated in
            place. None counts the current batch only.
        translation_lists: One n-best list per tuning instance
        min_segment_count: Minimum number of instances a feature must fire in

    Returns:
        Names of features with support >= min_segment_count
    """
    if min_segment_count < 1:
        raise ValueError(f"min_segment_count must be >= 1: {min_segment_count}")
    if counts is None:
        counts = Counter()

    for candidates in translation_lists:
        seen: Set[str] = set()
        for candidate in candidates:
            seen.update(candidate.features.keys())
        for name in seen:
            counts[name] = counts.get(name, 0) + 1

    whitelist = {name for name, count in counts.items() if count >= min_segment_count}
    logger.debug(f"Feature support over {len(counts)} features, {len(whitelist)} whitelisted")
    return whitelist
