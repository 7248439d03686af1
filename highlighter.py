import argparse
import json
from collections import Counter
from html import escape
from pathlib import Path
from typing import List, Sequence

from hoverscope.annotator import EntitySegment, RawMatch, build, resolve
from hoverscope.catalog import MergedTable, load_table
from hoverscope.fields import format_tooltip, render_entity
from hoverscope.sources import load_bundled_catalogs

PALETTE = [
    "#5fa8d3",
    "#72b69d",
    "#bfa75c",
    "#c87f7f",
    "#999ca1",
]


def load_matches(lines: Sequence[str]) -> List[RawMatch]:
    """
    Read annotate.py JSON lines back into matches.

    Accepts both match rows and ``--segments`` rows; plain text segments and
    zero-length matches are dropped.
    """
    matches = []
    for line in lines:
        if not line.strip():
            continue
        m = json.loads(line)
        if m.get("type") == "text" or m.get("length", 0) <= 0:
            continue
        matches.append(
            RawMatch(
                start=m["offset"],
                end=m["offset"] + m["length"],
                text=m.get("match", m.get("text", "")),
                key=m["key"],
                category=m["category"],
            )
        )
    return matches


def highlight_text(text: str, matches: Sequence[RawMatch], table: MergedTable) -> str:
    # matches may come from --no-resolve output, so resolve again
    segments = build(text, resolve(matches))
    result = []
    for segment in segments:
        raw = escape(segment.text)
        if not isinstance(segment, EntitySegment):
            result.append(raw)
            continue
        record = table.get(segment.key)
        if record is None:
            title = f"{segment.category}: {segment.text}"
        else:
            title = format_tooltip(render_entity(record, table))
        # sanitize title for HTML attribute: escape quotes, replace newlines
        safe_title = escape(title, quote=True).replace("\n", "&#10;")
        attrs = (
            f'class="hoverscope-term" data-category="{escape(segment.category)}" '
            f'data-key="{escape(segment.key, quote=True)}"'
        )
        result.append(f'<span {attrs} title="{safe_title}">{raw}</span>')
    return "".join(result)


def generate_css_for_categories(categories):
    css = []
    for i, category in enumerate(sorted(categories)):
        color = PALETTE[i % len(PALETTE)]
        css.append(
            f".hoverscope-term[data-category='{category}'] {{ border-bottom-color: {color}; }}"
        )
    return "\n        ".join(css)


def generate_html(highlighted_text, category_counts):
    legend = "\n".join(
        f"<li>{escape(category)} ({count})</li>"
        for category, count in sorted(category_counts.items())
    )
    category_styles = generate_css_for_categories(category_counts.keys())
    return f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset=\"UTF-8\">
    <style>
        body {{ font-family: sans-serif; background: #121212; color: #e0e0e0; padding: 1em; margin: 0; }}
        .hoverscope-term {{ border-bottom: 2px dotted #888; cursor: help; }}
        {category_styles}
        pre {{ white-space: pre-wrap; word-wrap: break-word; line-height: 1.4; }}
    </style>
</head>
<body>
<ul class="legend">
{legend}
</ul>
<pre>{highlighted_text}</pre>
</body>
</html>
"""


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Render annotate.py matches as HTML with hover details."
    )
    parser.add_argument("text_file", type=Path, help="Path to the input text file")
    parser.add_argument(
        "json_file",
        type=Path,
        help="Path to the JSON lines match file written by annotate.py",
    )
    parser.add_argument(
        "output_file", type=Path, help="Path to save the output HTML file"
    )
    parser.add_argument(
        "--catalog-dir",
        type=Path,
        default=None,
        help="Catalog directory used for hover details (default: bundled catalogs)",
    )
    args = parser.parse_args(argv)

    text = args.text_file.read_text(encoding="utf-8")
    with args.json_file.open(encoding="utf-8") as f:
        matches = load_matches(f.readlines())

    table = load_table(load_bundled_catalogs(args.catalog_dir))
    highlighted = highlight_text(text, matches, table)
    category_counts = Counter(m.category for m in matches)
    html = generate_html(highlighted, category_counts)
    args.output_file.write_text(html, encoding="utf-8")
    print(f"HTML file with highlights saved to: {args.output_file}")


if __name__ == "__main__":
    main()
