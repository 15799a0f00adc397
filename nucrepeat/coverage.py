import time
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .errors import InvalidConfig
from .models import CoverageResult, Orientation, RepeatFamily, RepeatMap
from .sequence_utils import SequenceUtils

# (start, end, family, is_revcomp)
Range = Tuple[int, int, RepeatFamily, bool]


class CoverageResolver:
    """Assign repeat families and flatten overlapping occurrences.

    Families are created while walking the maximal repeats in their given
    (longest first) order; the first member seen becomes canonical and the
    display identity cycles through the palette. Overlaps are resolved by
    sorting ranges by start, longer first on ties, and letting the first
    range to reach an index keep it.
    """

    DEFAULT_PALETTE = tuple(f"repeat-highlight-{i}" for i in range(10))
    MIN_PALETTE_SIZE = 8

    def __init__(self, palette: Optional[Sequence[str]] = None, show_progress: bool = False):
        palette = tuple(palette) if palette is not None else self.DEFAULT_PALETTE
        if len(palette) < self.MIN_PALETTE_SIZE:
            raise InvalidConfig(
                f"palette needs at least {self.MIN_PALETTE_SIZE} identities, got {len(palette)}")
        self.palette = palette
        self.show_progress = show_progress

    def resolve(self, text: Optional[str], maximal_repeats: RepeatMap) -> CoverageResult:
        text = text or ""
        t0 = time.time()

        families, ranges = self._assign_families(maximal_repeats)

        # Ascending start, then longer first; stable for complete ties
        ranges.sort(key=lambda r: (r[0], -r[1]))

        n = len(text)
        family_ids = np.full(n, -1, dtype=np.int32)
        revcomp_mask = np.zeros(n, dtype=bool)
        for start, end, family, is_revcomp in ranges:
            stop = min(end + 1, n)
            if start >= stop:
                continue
            window = family_ids[start:stop]
            empty = window < 0
            window[empty] = family.index
            revcomp_mask[start:stop][empty] = is_revcomp

        result = CoverageResult(text=text, family_ids=family_ids,
                                revcomp_mask=revcomp_mask, families=families)
        if self.show_progress:
            print(f"  [coverage] {len(families)} families, {result.covered_count()}/{n} "
                  f"characters covered in {time.time() - t0:.2f}s", flush=True)
        return result

    def _assign_families(self, maximal_repeats: RepeatMap) -> Tuple[List[RepeatFamily], List[Range]]:
        by_sequence: Dict[str, RepeatFamily] = {}
        families: List[RepeatFamily] = []
        ranges: List[Range] = []

        for sequence, locations in maximal_repeats.items():
            rc = SequenceUtils.reverse_complement(sequence)
            family = by_sequence.get(sequence) or by_sequence.get(rc)
            if family is None:
                identity = self.palette[len(families) % len(self.palette)]
                family = RepeatFamily(index=len(families), canonical=sequence, identity=identity)
                families.append(family)
                by_sequence[sequence] = family
                by_sequence[rc] = family

            complement_of_canonical = sequence == SequenceUtils.reverse_complement(family.canonical)
            for loc in locations:
                if loc.start > loc.end:
                    print(f"Warning: skipping range with start > end {loc} for {sequence}")
                    continue
                is_revcomp = complement_of_canonical or loc.orientation is Orientation.REVCOMP
                ranges.append((loc.start, loc.end, family, is_revcomp))

        return families, ranges
