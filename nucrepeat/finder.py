import time
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence

from .coverage import CoverageResolver
from .enumerator import RepeatEnumerator
from .errors import check_min_length
from .models import CoverageResult, RepeatMap, Segment
from .reducer import MaximalRepeatReducer
from .sequence_utils import SequenceUtils


@dataclass
class AnalysisResult:
    raw: RepeatMap
    maximal: RepeatMap
    coverage: CoverageResult


class RepeatFinder:
    """Main coordinator for the repeat highlighting pipeline."""

    def __init__(self, text: Optional[str], min_length: int = 8,
                 palette: Optional[Sequence[str]] = None,
                 show_progress: bool = False):
        self.text = text or ""
        self.min_length = check_min_length(min_length)
        self.show_progress = show_progress

        self.enumerator = RepeatEnumerator(self.min_length, show_progress=show_progress)
        self.reducer = MaximalRepeatReducer(self.min_length, show_progress=show_progress)
        self.resolver = CoverageResolver(palette, show_progress=show_progress)

    def find_repeats(self) -> RepeatMap:
        return self.enumerator.find_repeats(self.text)

    def reduce(self, repeat_map: RepeatMap) -> RepeatMap:
        return self.reducer.reduce(repeat_map)

    def resolve(self, maximal: RepeatMap) -> CoverageResult:
        return self.resolver.resolve(self.text, maximal)

    def find_all(self) -> AnalysisResult:
        """Execute enumeration, reduction and coverage resolution."""
        if self.show_progress:
            print(f"  [pipeline] Analyzing {len(self.text)} characters "
                  f"(min length {self.min_length})...", flush=True)
        t0 = time.time()

        raw = self.find_repeats()
        maximal = self.reduce(raw)
        coverage = self.resolve(maximal)

        if self.show_progress:
            print(f"  [pipeline] Done in {time.time() - t0:.2f}s", flush=True)
        return AnalysisResult(raw=raw, maximal=maximal, coverage=coverage)


def segment(text: Optional[str]) -> Iterator[Segment]:
    return SequenceUtils.segment(text)


def find_repeats(text: Optional[str], min_length: int = 8) -> RepeatMap:
    return RepeatEnumerator(min_length).find_repeats(text)


def reduce_to_maximal(repeat_map: RepeatMap, min_length: int = 8) -> RepeatMap:
    return MaximalRepeatReducer(min_length).reduce(repeat_map)


def resolve_coverage(text: Optional[str], maximal_repeats: RepeatMap,
                     palette: Optional[Sequence[str]] = None) -> CoverageResult:
    return CoverageResolver(palette).resolve(text, maximal_repeats)
