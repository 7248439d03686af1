"""
Annotation pipeline package.

- core: RawMatch and annotation segment types
- scanner: pattern application over one text unit
- overlap_resolver: earliest-start overlap elimination
- builder: splicing resolved matches into segments
- pipeline: Annotator orchestrating the three stages
"""

from .builder import build, reconstruct
from .core import AnnotationSegment, EntitySegment, RawMatch, TextSegment
from .overlap_resolver import OverlapResolver, resolve
from .pipeline import Annotation, Annotator, annotate, iter_text_units
from .scanner import compile_table, scan

__all__ = [
    "RawMatch",
    "TextSegment",
    "EntitySegment",
    "AnnotationSegment",
    "scan",
    "compile_table",
    "OverlapResolver",
    "resolve",
    "build",
    "reconstruct",
    "Annotation",
    "Annotator",
    "annotate",
    "iter_text_units",
]
