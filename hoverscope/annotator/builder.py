"""
Splicing resolved matches back into their text.
"""

from typing import List, Sequence

from .core import AnnotationSegment, EntitySegment, RawMatch, TextSegment


def build(text: str, resolved: Sequence[RawMatch]) -> List[AnnotationSegment]:
    """
    Split ``text`` into literal and entity segments.

    ``resolved`` must be ordered and non-overlapping. Segment text is always
    sliced from ``text``, so joining every segment's text gives back ``text``.
    """
    segments: List[AnnotationSegment] = []
    last = 0
    for match in resolved:
        if match.start < last or match.end > len(text):
            raise ValueError(
                f"Match {match.start}-{match.end} is out of order or outside the text"
            )
        if match.start > last:
            segments.append(TextSegment(text[last : match.start]))
        segments.append(
            EntitySegment(
                text=text[match.start : match.end],
                key=match.key,
                category=match.category,
                start=match.start,
                end=match.end,
            )
        )
        last = match.end
    if last < len(text):
        segments.append(TextSegment(text[last:]))
    return segments


def reconstruct(segments: Sequence[AnnotationSegment]) -> str:
    return "".join(segment.text for segment in segments)
