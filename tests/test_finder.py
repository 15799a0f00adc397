import unittest
import os
import sys
import random

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from nucrepeat.errors import InvalidConfig
from nucrepeat.finder import RepeatFinder, find_repeats, reduce_to_maximal, resolve_coverage, segment
from nucrepeat.models import Occurrence, Orientation
from nucrepeat.sequence_utils import SequenceUtils

F = Orientation.FORWARD
R = Orientation.REVCOMP


def random_text(seed: int) -> str:
    rng = random.Random(seed)
    parts = []
    for _ in range(3):
        parts.append("".join(rng.choice("ACGTacgt") for _ in range(rng.randint(6, 24))))
    return " | ".join(parts)


class FindRepeatsTests(unittest.TestCase):
    def test_min_length_zero_is_rejected(self):
        with self.assertRaises(InvalidConfig):
            find_repeats("ACGTACGT", 0)
        with self.assertRaises(InvalidConfig):
            RepeatFinder("ACGTACGT", min_length=-3)

    def test_empty_inputs(self):
        self.assertEqual(find_repeats("", 4), {})
        self.assertEqual(find_repeats(None, 4), {})
        self.assertEqual(find_repeats("hello world!", 4), {})

    def test_short_segments_are_ignored(self):
        self.assertEqual(find_repeats("ACG ACG ACG", 4), {})

    def test_palindromic_repeat_counts_both_scans(self):
        repeats = find_repeats("ATCGATCG", 4)
        self.assertEqual(repeats["ATCG"], [Occurrence(0, 3, F), Occurrence(4, 7, F), Occurrence(2, 5, R)])
        self.assertEqual(repeats["ATCGAT"], [Occurrence(0, 5, F), Occurrence(0, 5, R)])
        self.assertNotIn("TCGATC", repeats)
        self.assertNotIn("ATCGATCG", repeats)

    def test_reverse_complement_coordinates(self):
        repeats = find_repeats("GATTACA TGTAATC", 7)
        self.assertEqual(list(repeats.keys()), ["GATTACA", "TGTAATC"])
        self.assertEqual(repeats["GATTACA"], [Occurrence(0, 6, F), Occurrence(8, 14, R)])
        self.assertEqual(repeats["TGTAATC"], [Occurrence(0, 6, R), Occurrence(8, 14, F)])

    def test_lowercase_input_uses_uppercase_keys(self):
        repeats = find_repeats("acgtt xx ACGTT", 5)
        self.assertEqual(repeats["ACGTT"], [Occurrence(0, 4, F), Occurrence(9, 13, F)])

    def test_occurrences_read_back_from_text(self):
        for seed in range(5):
            text = random_text(seed)
            min_length = 3
            for key, locations in find_repeats(text, min_length).items():
                self.assertGreaterEqual(len(locations), 2)
                for loc in locations:
                    self.assertLessEqual(loc.start, loc.end)
                    self.assertGreaterEqual(loc.end - loc.start + 1, min_length)
                    piece = text[loc.start:loc.end + 1]
                    if loc.orientation is R:
                        piece = SequenceUtils.reverse_complement(piece)
                    self.assertEqual(piece.upper(), key)

    def test_segment_entry_point(self):
        self.assertEqual([s.start for s in segment("AC-GT")], [0, 3])


class ReduceToMaximalTests(unittest.TestCase):
    def test_longer_repeats_subsume_contained_ones(self):
        maximal = reduce_to_maximal(find_repeats("ATCGATCG", 4), 4)
        self.assertEqual(list(maximal.keys()), ["ATCGAT", "CGATCG"])
        self.assertEqual(maximal["ATCGAT"], [Occurrence(0, 5, F), Occurrence(0, 5, R)])
        self.assertEqual(maximal["CGATCG"], [Occurrence(2, 7, F), Occurrence(2, 7, R)])

    def test_homopolymer_run_keeps_only_longest_repeat(self):
        raw = find_repeats("AAAAAAAA", 4)
        self.assertIn("AAAA", raw)
        self.assertNotIn("AAAAAAAA", raw)  # a single copy is not a repeat
        maximal = reduce_to_maximal(raw, 4)
        self.assertEqual(list(maximal.keys()), ["AAAAAAA", "TTTTTTT"])

    def test_repeated_homopolymer_run(self):
        maximal = reduce_to_maximal(find_repeats("AAAAAAAA--AAAAAAAA", 4), 4)
        self.assertEqual(list(maximal.keys()), ["AAAAAAAA", "TTTTTTTT"])
        self.assertEqual(maximal["AAAAAAAA"], [Occurrence(0, 7, F), Occurrence(10, 17, F)])

    def test_min_length_keys_never_subsume(self):
        repeat_map = {
            "ACGT": [Occurrence(0, 3), Occurrence(10, 13)],
            "CGTA": [Occurrence(1, 4), Occurrence(11, 14)],
        }
        self.assertEqual(list(reduce_to_maximal(repeat_map, 4).keys()), ["ACGT", "CGTA"])

    def test_subsumption_is_textual_not_positional(self):
        repeat_map = {
            "GGACGTCC": [Occurrence(0, 7), Occurrence(20, 27)],
            "ACGT": [Occurrence(40, 43), Occurrence(50, 53)],
            "TTTT": [Occurrence(60, 63), Occurrence(70, 73)],
        }
        maximal = reduce_to_maximal(repeat_map, 4)
        self.assertEqual(list(maximal.keys()), ["GGACGTCC", "TTTT"])

    def test_ties_keep_first_seen_order(self):
        repeat_map = {
            "CCCC": [Occurrence(0, 3), Occurrence(5, 8)],
            "GGGGG": [Occurrence(10, 14), Occurrence(20, 24)],
            "AAAA": [Occurrence(30, 33), Occurrence(40, 43)],
        }
        self.assertEqual(list(reduce_to_maximal(repeat_map, 4).keys()), ["GGGGG", "CCCC", "AAAA"])

    def test_idempotent_and_lists_unchanged(self):
        for seed in range(5):
            raw = find_repeats(random_text(seed), 3)
            once = reduce_to_maximal(raw, 3)
            twice = reduce_to_maximal(once, 3)
            self.assertEqual(list(once.items()), list(twice.items()))
            for key, locations in once.items():
                self.assertIs(locations, raw[key])

    def test_empty_map(self):
        self.assertEqual(reduce_to_maximal({}, 4), {})
        with self.assertRaises(InvalidConfig):
            reduce_to_maximal({}, 0)


class ResolveCoverageTests(unittest.TestCase):
    def test_palindromic_pair_covers_whole_text(self):
        text = "ATCGATCG"
        coverage = resolve_coverage(text, reduce_to_maximal(find_repeats(text, 4), 4))
        cells = coverage.cells
        self.assertEqual(len(cells), 8)
        self.assertTrue(all(c is not None for c in cells))
        owners = [c.family.canonical for c in cells]
        self.assertEqual(owners, ["ATCGAT"] * 6 + ["CGATCG"] * 2)
        # palindromes equal their own reverse complement
        self.assertTrue(all(c.is_revcomp for c in cells))
        self.assertEqual([e.canonical for e in coverage.legend], ["ATCGAT", "CGATCG"])

    def test_reverse_complement_joins_family(self):
        text = "GATTACA TGTAATC"
        coverage = resolve_coverage(text, reduce_to_maximal(find_repeats(text, 7), 7))
        self.assertEqual(len(coverage.legend), 1)
        self.assertEqual(coverage.legend[0].canonical, "GATTACA")
        self.assertEqual(coverage.legend[0].identity, "repeat-highlight-0")
        cells = coverage.cells
        self.assertIsNone(cells[7])
        for i in range(0, 7):
            self.assertFalse(cells[i].is_revcomp)
        for i in range(8, 15):
            self.assertTrue(cells[i].is_revcomp)
        self.assertIs(cells[0].family, cells[14].family)

    def test_homopolymer_family(self):
        text = "AAAAAAAA"
        coverage = resolve_coverage(text, reduce_to_maximal(find_repeats(text, 4), 4))
        self.assertEqual([e.canonical for e in coverage.legend], ["AAAAAAA"])
        self.assertEqual(coverage.covered_count(), 8)
        self.assertFalse(any(c.is_revcomp for c in coverage.cells))

    def test_no_nucleotides(self):
        text = "hello world!"
        coverage = resolve_coverage(text, reduce_to_maximal(find_repeats(text, 4), 4))
        self.assertEqual(coverage.cells, [None] * len(text))
        self.assertEqual(coverage.legend, [])

    def test_empty_text(self):
        coverage = resolve_coverage("", {})
        self.assertEqual(coverage.cells, [])
        self.assertEqual(coverage.legend, [])

    def test_longer_range_wins_at_same_start(self):
        repeat_map = {
            "GGGG": [Occurrence(0, 3)],
            "TTTTTT": [Occurrence(0, 5)],
        }
        cells = resolve_coverage("x" * 12, repeat_map).cells
        self.assertEqual([c.family.canonical for c in cells[:6]], ["TTTTTT"] * 6)
        self.assertEqual(cells[6:], [None] * 6)

    def test_earlier_start_wins_overlap(self):
        repeat_map = {
            "GGGGGG": [Occurrence(4, 9)],
            "TTTT": [Occurrence(2, 5)],
        }
        cells = resolve_coverage("x" * 12, repeat_map).cells
        owners = [c.family.canonical if c else None for c in cells]
        self.assertEqual(owners, [None, None] + ["TTTT"] * 4 + ["GGGGGG"] * 4 + [None, None])

    def test_ranges_are_clipped_to_text(self):
        cells = resolve_coverage("x" * 12, {"CCCCCC": [Occurrence(10, 15)]}).cells
        self.assertEqual(len(cells), 12)
        self.assertIsNotNone(cells[10])
        self.assertIsNotNone(cells[11])

    def test_revcomp_flag_relative_to_canonical(self):
        repeat_map = {
            "AACC": [Occurrence(0, 3, F), Occurrence(10, 13, R)],
            "GGTT": [Occurrence(5, 8, F)],
        }
        coverage = resolve_coverage("x" * 14, repeat_map)
        cells = coverage.cells
        self.assertEqual(len(coverage.families), 1)
        self.assertFalse(cells[0].is_revcomp)
        self.assertTrue(cells[5].is_revcomp)
        self.assertTrue(cells[10].is_revcomp)

    def test_palette_wraps(self):
        repeat_map = {("A" * n) + "C": [Occurrence(n, n)] for n in range(1, 12)}
        coverage = resolve_coverage("x" * 20, repeat_map)
        identities = [e.identity for e in coverage.legend]
        self.assertEqual(len(identities), 11)
        self.assertEqual(identities[0], "repeat-highlight-0")
        self.assertEqual(identities[9], "repeat-highlight-9")
        self.assertEqual(identities[10], "repeat-highlight-0")

    def test_small_palette_is_rejected(self):
        with self.assertRaises(InvalidConfig):
            resolve_coverage("ACGT", {}, palette=["red", "blue"])

    def test_cells_are_exclusive_and_inside_ranges(self):
        for seed in range(5):
            text = random_text(seed)
            maximal = reduce_to_maximal(find_repeats(text, 3), 3)
            coverage = resolve_coverage(text, maximal)
            self.assertEqual(len(coverage.cells), len(text))
            spans = [(loc.start, loc.end) for locs in maximal.values() for loc in locs]
            for i, cell in enumerate(coverage.cells):
                if cell is not None:
                    self.assertTrue(any(s <= i <= e for s, e in spans))


class RepeatFinderTests(unittest.TestCase):
    def test_find_all(self):
        finder = RepeatFinder("GATTACA TGTAATC", min_length=7)
        result = finder.find_all()
        self.assertEqual(list(result.raw.keys()), ["GATTACA", "TGTAATC"])
        self.assertEqual(list(result.maximal.keys()), ["GATTACA", "TGTAATC"])
        self.assertEqual(result.coverage.covered_count(), 14)

    def test_runs(self):
        result = RepeatFinder("GATTACA TGTAATC", min_length=7).find_all()
        runs = [(s, e, c.is_revcomp if c else None) for s, e, c in result.coverage.runs()]
        self.assertEqual(runs, [(0, 7, False), (7, 8, None), (8, 15, True)])


if __name__ == "__main__":
    unittest.main()
