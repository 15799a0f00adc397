import re
from typing import Iterator, Optional, Tuple

from .models import Segment


class SequenceUtils:
    """Utilities for nucleotide segments and reverse complements."""

    SEGMENT_RE = re.compile(r"[ATCGNatcgn]+")
    COMPLEMENT_MAP = {
        'A': 'T', 'T': 'A', 'C': 'G', 'G': 'C', 'N': 'N',
        'a': 't', 't': 'a', 'c': 'g', 'g': 'c', 'n': 'n',
    }

    @staticmethod
    def segment(text: Optional[str]) -> Iterator[Segment]:
        """Yield maximal nucleotide runs of ``text`` left to right.

        Any character outside A/T/C/G/N (either case) is a separator. Each
        call rescans the text, so the result can be iterated again by
        calling again.
        """
        if not text:
            return
        for match in SequenceUtils.SEGMENT_RE.finditer(text):
            yield Segment(text=match.group(0), start=match.start())

    @staticmethod
    def reverse_complement(seq: Optional[str]) -> str:
        """Get reverse complement of a nucleotide sequence.

        Case is preserved per character; characters without a complement
        pass through unchanged.
        """
        if not seq:
            return ""
        complement_map = SequenceUtils.COMPLEMENT_MAP
        return ''.join(complement_map.get(b, b) for b in reversed(seq))

    @staticmethod
    def revcomp_range_to_forward(i: int, j: int, length: int) -> Tuple[int, int]:
        """Map inclusive range [i, j] of a reverse complement back to the segment.

        For a segment of ``length`` L the reverse complement index k reads
        the base at L-1-k, so [i, j] covers [L-1-j, L-1-i] of the original.
        """
        if not (0 <= i <= j < length):
            raise ValueError(f"range [{i}, {j}] is outside a segment of length {length}")
        return length - 1 - j, length - 1 - i

    @staticmethod
    def canonical_pair(seq: str) -> Tuple[str, str]:
        """Return (uppercase sequence, uppercase reverse complement)."""
        upper = seq.upper()
        return upper, SequenceUtils.reverse_complement(upper)
