import time
from typing import Dict, List, Optional

from .errors import check_min_length
from .models import Occurrence, Orientation, RepeatMap, Segment
from .sequence_utils import SequenceUtils


class RepeatEnumerator:
    """Exhaustive repeat discovery over every substring of every segment.

    Each segment is scanned twice, once as written and once as its reverse
    complement, and every substring of length >= min_length is recorded with
    its absolute coordinates. The scan is deliberately brute force: a segment
    of length L contributes O(L^2) substrings of average length O(L), so the
    worst case is cubic in the nucleotide length of the input.
    """

    def __init__(self, min_length: int = 8, show_progress: bool = False):
        self.min_length = check_min_length(min_length)
        self.show_progress = show_progress

    def find_repeats(self, text: Optional[str]) -> RepeatMap:
        """Return substring -> occurrences for every substring seen twice or more."""
        if not text or not isinstance(text, str):
            return {}

        occurrences: Dict[str, List[Occurrence]] = {}
        t0 = time.time()
        n_segments = 0
        for segment in SequenceUtils.segment(text):
            if len(segment) < self.min_length:
                continue
            n_segments += 1
            self._scan_segment(segment, occurrences)
            if self.show_progress:
                print(f"  [enumerate] segment @{segment.start} ({len(segment)} bp), "
                      f"{len(occurrences)} distinct substrings so far", flush=True)

        repeats = {seq: locs for seq, locs in occurrences.items() if len(locs) > 1}
        if self.show_progress:
            print(f"  [enumerate] {n_segments} segments, {len(repeats)} repeated substrings "
                  f"in {time.time() - t0:.2f}s", flush=True)
        return repeats

    def _scan_segment(self, segment: Segment, occurrences: Dict[str, List[Occurrence]]):
        seg_len = len(segment)
        base = segment.start
        min_len = self.min_length

        forward = segment.text.upper()
        revcomp = SequenceUtils.reverse_complement(segment.text).upper()

        for sequence, orientation in ((forward, Orientation.FORWARD),
                                      (revcomp, Orientation.REVCOMP)):
            for i in range(seg_len - min_len + 1):
                for j in range(i + min_len - 1, seg_len):
                    substring = sequence[i:j + 1]
                    if orientation is Orientation.FORWARD:
                        start, end = i, j
                    else:
                        start, end = SequenceUtils.revcomp_range_to_forward(i, j, seg_len)

                    location = Occurrence(base + start, base + end, orientation)
                    if substring in occurrences:
                        occurrences[substring].append(location)
                    else:
                        occurrences[substring] = [location]
