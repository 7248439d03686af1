"""
Rendering entity records as ordered label/value lists.
"""

import re
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

from .catalog import RESERVED_FIELDS, EntityRecord, MergedTable

RE_SEPARATORS = re.compile(r"[_\-]+")
RE_WORD_START = re.compile(r"\b\w")


@dataclass(frozen=True)
class RenderedEntity:
    """Everything a hover surface shows for one entity."""

    title: str
    fields: Tuple[Tuple[str, str], ...]
    description: Optional[str] = None


def field_label(name: str) -> str:
    """``launch_date`` -> ``Launch Date``."""
    spaced = RE_SEPARATORS.sub(" ", name).strip()
    return RE_WORD_START.sub(lambda m: m.group(0).upper(), spaced)


def has_value(value: Any) -> bool:
    if value is None or value is False:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, dict, set)):
        return bool(value)
    return True


def field_value(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v).strip() for v in value)
    return str(value).strip()


def render_fields(record: EntityRecord, profile: Sequence[str]) -> List[Tuple[str, str]]:
    """
    Ordered (label, value) pairs for ``record``.

    Profile fields come first in profile order, then any other non-reserved
    field in the record's own order. Empty values are left out.
    """
    rendered = []
    seen = set(RESERVED_FIELDS)
    for name in profile:
        if name in seen:
            continue
        value = record.fields.get(name)
        if has_value(value):
            rendered.append((field_label(name), field_value(value)))
            seen.add(name)
    for name, value in record.fields.items():
        if name not in seen and has_value(value):
            rendered.append((field_label(name), field_value(value)))
            seen.add(name)
    return rendered


def render_entity(record: EntityRecord, table: MergedTable) -> RenderedEntity:
    return RenderedEntity(
        title=record.name,
        fields=tuple(render_fields(record, table.profile_for(record))),
        description=record.description,
    )


def format_tooltip(rendered: RenderedEntity) -> str:
    """Plain-text hover content: title, one line per field, description last."""
    lines = [rendered.title]
    lines.extend(f"{label}: {value}" for label, value in rendered.fields)
    if rendered.description:
        lines.append(rendered.description)
    return "\n".join(lines)
