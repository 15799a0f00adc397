from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Iterator, Tuple

import numpy as np


class Orientation(Enum):
    """How an occurrence was located inside its segment."""
    FORWARD = "forward"
    REVCOMP = "revcomp"

    @property
    def strand(self) -> str:
        return "+" if self is Orientation.FORWARD else "-"


@dataclass(frozen=True)
class Segment:
    """Maximal run of nucleotide characters in the input text."""
    text: str
    start: int  # Absolute 0-based offset in the original text

    @property
    def end(self) -> int:
        """Inclusive absolute end."""
        return self.start + len(self.text) - 1

    def __len__(self) -> int:
        return len(self.text)


@dataclass(frozen=True)
class Occurrence:
    """One located copy of a repeat (inclusive absolute coordinates)."""
    start: int
    end: int
    orientation: Orientation = Orientation.FORWARD

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    def to_bed(self, name: str, sequence: str, chrom: str = "input") -> str:
        """Convert to BED format (0-based, half-open)."""
        return f"{chrom}\t{self.start}\t{self.end + 1}\t{name}\t{len(sequence)}\t{self.orientation.strand}"


# Uppercase substring value -> occurrences, insertion ordered
RepeatMap = Dict[str, List[Occurrence]]


@dataclass
class RepeatFamily:
    """A sequence and its reverse complement displayed as one repeat."""
    index: int  # Creation order within one analysis pass
    canonical: str  # First-encountered member, never reassigned
    identity: str  # Display identity (palette class name)


@dataclass(frozen=True)
class CoverageCell:
    family: RepeatFamily
    is_revcomp: bool


@dataclass(frozen=True)
class LegendEntry:
    canonical: str
    identity: str


@dataclass
class CoverageResult:
    """Per-character family assignment plus legend.

    Backed by numpy arrays: ``family_ids`` holds the family index covering
    each character (-1 when uncovered) and ``revcomp_mask`` the reverse
    complement flag of the winning occurrence.
    """
    text: str
    family_ids: np.ndarray
    revcomp_mask: np.ndarray
    families: List[RepeatFamily] = field(default_factory=list)

    @property
    def legend(self) -> List[LegendEntry]:
        return [LegendEntry(f.canonical, f.identity) for f in self.families]

    @property
    def cells(self) -> List[Optional[CoverageCell]]:
        cells: List[Optional[CoverageCell]] = []
        for fam_id, revcomp in zip(self.family_ids.tolist(), self.revcomp_mask.tolist()):
            if fam_id < 0:
                cells.append(None)
            else:
                cells.append(CoverageCell(self.families[fam_id], bool(revcomp)))
        return cells

    def covered_count(self) -> int:
        return int(np.count_nonzero(self.family_ids >= 0))

    def runs(self) -> Iterator[Tuple[int, int, Optional[CoverageCell]]]:
        """Yield (start, end_exclusive, cell) for each run of identical cells."""
        yield from cell_runs(self.family_ids, self.revcomp_mask, self.families)


def cell_runs(family_ids: np.ndarray, revcomp_mask: np.ndarray,
              families: List) -> Iterator[Tuple[int, int, Optional[CoverageCell]]]:
    n = family_ids.size
    if n == 0:
        return
    # Break wherever the family or the flag changes
    change = np.empty(n, dtype=bool)
    change[0] = True
    change[1:] = (family_ids[1:] != family_ids[:-1]) | (revcomp_mask[1:] != revcomp_mask[:-1])
    starts = np.flatnonzero(change).tolist()
    ends = starts[1:] + [n]
    for start, end in zip(starts, ends):
        fam_id = int(family_ids[start])
        cell = None
        if fam_id >= 0:
            cell = CoverageCell(families[fam_id], bool(revcomp_mask[start]))
        yield start, end, cell


@dataclass
class Match:
    """Hit of a single user-chosen needle (inclusive coordinates)."""
    start: int
    end: int
    is_revcomp: bool
    sequence: str  # Uppercase sequence that matched


@dataclass
class HighlightGroup:
    """A committed selection and all of its locations."""
    canonical: str
    identity: str
    locations: List[Match] = field(default_factory=list)
