import time
from typing import Set

from .errors import check_min_length
from .models import RepeatMap


class MaximalRepeatReducer:
    """Keep only repeats not contained in a longer reported repeat.

    Containment is textual: a key is subsumed when its value is a substring
    of an accepted longer key, whether or not its occurrences lie inside
    that key's occurrences.
    """

    def __init__(self, min_length: int = 8, show_progress: bool = False):
        self.min_length = check_min_length(min_length)
        self.show_progress = show_progress

    def reduce(self, repeat_map: RepeatMap) -> RepeatMap:
        """Return a new map of maximal repeats, longest first."""
        if not repeat_map:
            return {}

        t0 = time.time()
        min_len = self.min_length
        # sorted() is stable, so equal lengths keep first-seen order
        ordered = sorted(repeat_map.keys(), key=len, reverse=True)

        maximal: RepeatMap = {}
        subsumed: Set[str] = set()

        for current in ordered:
            if current in subsumed:
                continue
            maximal[current] = repeat_map[current]

            current_len = len(current)
            if current_len <= min_len:
                continue
            for i in range(current_len - min_len + 1):
                for j in range(i + min_len, current_len + 1):
                    if i == 0 and j == current_len:
                        continue
                    shorter = current[i:j]
                    if shorter in repeat_map:
                        subsumed.add(shorter)

        if self.show_progress:
            print(f"  [reduce] {len(repeat_map)} -> {len(maximal)} maximal repeats "
                  f"in {time.time() - t0:.2f}s", flush=True)
        return maximal
