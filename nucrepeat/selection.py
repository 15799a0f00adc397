"""Interactive single-needle highlighting.

A ``HighlightSession`` owns what an editor front end would otherwise keep
in globals: the text, the transient matches of the current selection and
the list of committed highlight groups.
"""
import re
from typing import List, Optional, Sequence

import numpy as np

from .errors import InvalidConfig
from .models import CoverageResult, HighlightGroup, LegendEntry, Match, RepeatFamily
from .sequence_utils import SequenceUtils


def find_matches(text: Optional[str], needle: Optional[str]) -> List[Match]:
    """Find case-insensitive hits of ``needle`` and of its reverse complement.

    Each pattern is scanned left to right without overlaps. The reverse
    complement is skipped when the needle is its own reverse complement.
    """
    matches: List[Match] = []
    if not text or not needle:
        return matches

    seq_upper, revcomp_upper = SequenceUtils.canonical_pair(needle)
    patterns = [(seq_upper, False)]
    if revcomp_upper != seq_upper:
        patterns.append((revcomp_upper, True))

    for pattern, is_revcomp in patterns:
        regex = re.compile(re.escape(pattern), re.IGNORECASE)
        for m in regex.finditer(text):
            matches.append(Match(start=m.start(), end=m.end() - 1,
                                 is_revcomp=is_revcomp, sequence=pattern))
    return matches


class HighlightSession:
    """Temporary selection plus committed highlight groups for one text."""

    PERMANENT_PALETTE = tuple(f"perm-highlight-{i}" for i in range(8))
    TEMPORARY_IDENTITY = "temp-highlight"

    def __init__(self, text: str = "", min_selection: int = 4,
                 palette: Optional[Sequence[str]] = None):
        if min_selection < 1:
            raise InvalidConfig(f"min_selection must be at least 1, got {min_selection}")
        self.palette = tuple(palette) if palette is not None else self.PERMANENT_PALETTE
        if not self.palette:
            raise InvalidConfig("palette must not be empty")
        self.min_selection = min_selection
        self.set_text(text)

    def set_text(self, text: Optional[str]):
        """Replace the text; all highlights are dropped."""
        self.text = text or ""
        self.temporary: List[Match] = []
        self.groups: List[HighlightGroup] = []
        self._color_index = 0

    def select(self, needle: Optional[str]) -> List[Match]:
        """Replace the temporary matches with the hits of ``needle``."""
        self.temporary = []
        if not needle or len(needle) < self.min_selection:
            return self.temporary

        matches = find_matches(self.text, needle)
        if matches:
            # The first hit fixes the orientation for the whole temporary group
            first = matches[0]
            canonical = SequenceUtils.reverse_complement(first.sequence) if first.is_revcomp else first.sequence
            for m in matches:
                m.is_revcomp = m.sequence != canonical
        self.temporary = matches
        return self.temporary

    def commit(self) -> Optional[HighlightGroup]:
        """Turn the temporary matches into a committed group."""
        if not self.temporary:
            return None

        canonical = next((m.sequence for m in self.temporary if not m.is_revcomp),
                         self.temporary[0].sequence)
        identity = self.palette[self._color_index % len(self.palette)]
        group = HighlightGroup(
            canonical=canonical,
            identity=identity,
            locations=[Match(m.start, m.end, m.sequence != canonical, m.sequence)
                       for m in self.temporary],
        )
        self.groups.append(group)
        self._color_index += 1
        self.temporary = []
        return group

    def legend(self) -> List[LegendEntry]:
        return [LegendEntry(g.canonical, g.identity) for g in self.groups]

    def coverage(self) -> CoverageResult:
        """Resolve both tiers into one cell per character.

        Later committed groups overwrite earlier ones and the temporary
        matches overwrite everything, wherever they sit in the text.
        """
        n = len(self.text)
        family_ids = np.full(n, -1, dtype=np.int32)
        revcomp_mask = np.zeros(n, dtype=bool)

        families = [RepeatFamily(index=i, canonical=g.canonical, identity=g.identity)
                    for i, g in enumerate(self.groups)]
        tiers = [(fam.index, g.locations) for fam, g in zip(families, self.groups)]

        if self.temporary:
            first = self.temporary[0]
            temp_family = RepeatFamily(
                index=len(families),
                canonical=next((m.sequence for m in self.temporary if not m.is_revcomp), first.sequence),
                identity=self.TEMPORARY_IDENTITY,
            )
            families.append(temp_family)
            tiers.append((temp_family.index, self.temporary))

        for fam_index, locations in tiers:
            for loc in locations:
                stop = min(loc.end + 1, n)
                if loc.start >= stop:
                    continue
                family_ids[loc.start:stop] = fam_index
                revcomp_mask[loc.start:stop] = loc.is_revcomp

        return CoverageResult(text=self.text, family_ids=family_ids,
                              revcomp_mask=revcomp_mask, families=families)
