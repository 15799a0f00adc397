import html
from typing import Dict, Iterator, List, Tuple

from .models import CoverageResult, LegendEntry, Occurrence, Orientation, RepeatFamily, RepeatMap
from .sequence_utils import SequenceUtils

REVCOMP_CLASS = "revcomp-match"
TSV_HEADER = "sequence\tcanonical\tidentity\tstart\tend\torientation\tis_revcomp"


def render_html(coverage: CoverageResult) -> str:
    """Render the text with one span per run of identical coverage."""
    parts: List[str] = []
    text = coverage.text
    for start, end, cell in coverage.runs():
        chunk = html.escape(text[start:end])
        if cell is None:
            parts.append(chunk)
            continue
        classes = cell.family.identity
        if cell.is_revcomp:
            classes += f" {REVCOMP_CLASS}"
        parts.append(f'<span class="{classes}">{chunk}</span>')
    return "".join(parts)


def render_legend_html(legend: List[LegendEntry]) -> str:
    if not legend:
        return "<p>No repeats found.</p>"
    items = []
    for entry in legend:
        items.append(
            '<div class="legend-item">'
            f'<div class="legend-color {entry.identity}"></div>'
            f'<div class="legend-text">{html.escape(entry.canonical)}</div>'
            '</div>'
        )
    return "\n".join(items)


def render_page(coverage: CoverageResult, title: str = "Repeats") -> str:
    """Standalone HTML document with the highlighted text and the legend."""
    return (
        "<!DOCTYPE html>\n"
        f"<html><head><meta charset=\"utf-8\"><title>{html.escape(title)}</title></head>\n"
        "<body>\n"
        f"<pre id=\"highlightedOutput\">{render_html(coverage)}</pre>\n"
        f"<div id=\"legend\">\n{render_legend_html(coverage.legend)}\n</div>\n"
        "</body></html>\n"
    )


def repeat_rows(maximal_repeats: RepeatMap,
                families: List[RepeatFamily]) -> Iterator[Tuple[str, RepeatFamily, Occurrence]]:
    """Yield (sequence, family, occurrence) for every maximal repeat occurrence."""
    by_sequence: Dict[str, RepeatFamily] = {}
    for family in families:
        by_sequence[family.canonical] = family
        by_sequence[SequenceUtils.reverse_complement(family.canonical)] = family
    for sequence, locations in maximal_repeats.items():
        family = by_sequence[sequence]
        for loc in locations:
            yield sequence, family, loc


def to_tsv_row(sequence: str, family: RepeatFamily, occurrence: Occurrence) -> str:
    is_revcomp = (sequence == SequenceUtils.reverse_complement(family.canonical)
                  or occurrence.orientation is Orientation.REVCOMP)
    return (f"{sequence}\t{family.canonical}\t{family.identity}\t{occurrence.start}\t"
            f"{occurrence.end}\t{occurrence.orientation.value}\t{int(is_revcomp)}")
