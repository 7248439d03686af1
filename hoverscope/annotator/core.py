"""
Core data structures for the annotation pipeline.
"""

from dataclasses import dataclass
from typing import Any, Dict, Union


@dataclass(frozen=True)
class RawMatch:
    """One candidate occurrence of an entity name inside a text unit."""

    start: int
    end: int
    text: str
    key: str
    category: str

    @property
    def length(self) -> int:
        return self.end - self.start

    def shifted(self, offset: int) -> "RawMatch":
        """Copy with offsets moved by ``offset`` (unit-local -> document)."""
        return RawMatch(
            start=self.start + offset,
            end=self.end + offset,
            text=self.text,
            key=self.key,
            category=self.category,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "offset": self.start,
            "length": self.length,
            "key": self.key,
            "category": self.category,
            "match": self.text,
        }


@dataclass(frozen=True)
class TextSegment:
    """Literal text copied through unchanged."""

    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "text", "text": self.text}


@dataclass(frozen=True)
class EntitySegment:
    """Text that refers to a catalog entity."""

    text: str
    key: str
    category: str
    start: int
    end: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "entity",
            "text": self.text,
            "key": self.key,
            "category": self.category,
            "offset": self.start,
            "length": self.end - self.start,
        }


AnnotationSegment = Union[TextSegment, EntitySegment]
