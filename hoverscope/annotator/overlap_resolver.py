"""
Overlap resolution for raw matches.

Earliest start wins; among matches starting at the same offset the one found
first by the scanner wins. There is no priority between categories.
"""

import logging
from typing import List, Sequence

from .core import RawMatch

logger = logging.getLogger(__name__)


class OverlapResolver:
    """Reduces a raw match list to an ordered, non-overlapping subset."""

    @staticmethod
    def resolve_overlaps(matches: Sequence[RawMatch]) -> List[RawMatch]:
        """
        Resolve overlapping matches.

        Matches are stably sorted by start offset, then swept left to right.
        A match is kept when it starts at or after the end of the last kept
        match; otherwise it is dropped whole.

        Args:
            matches: raw matches in discovery order

        Returns:
            Non-overlapping matches in ascending start order
        """
        if not matches:
            return []

        # sorted() is stable, so discovery order breaks ties.
        sorted_matches = sorted(matches, key=lambda m: m.start)

        result = []
        last_end = -1
        for match in sorted_matches:
            if match.start >= last_end:
                result.append(match)
                last_end = match.end

        logger.debug("Overlap resolution: %s -> %s matches", len(matches), len(result))
        return result


def resolve(matches: Sequence[RawMatch]) -> List[RawMatch]:
    return OverlapResolver.resolve_overlaps(matches)
