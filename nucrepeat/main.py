import argparse
import os
import sys
import time

from .errors import InvalidConfig
from .finder import RepeatFinder
from .render import TSV_HEADER, render_legend_html, render_page, repeat_rows, to_tsv_row


def read_input(path: str) -> str:
    """Read the whole input verbatim ('-' reads stdin)."""
    if path == "-":
        return sys.stdin.read()
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Find and highlight repeated nucleotide substrings, including reverse complements")
    parser.add_argument("input", help="Input text file ('-' for stdin)")
    parser.add_argument("--min-length", type=int, default=8,
                        help="Minimum repeat length (default: 8)")
    parser.add_argument("--format", choices=["html", "bed", "tsv", "legend"], default="html",
                        help="Output format")
    parser.add_argument("--output", "-o", help="Output file (default: stdout)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show progress")
    parser.add_argument("--profile", action="store_true",
                        help="Profile execution with cProfile and print top hotspots")

    args = parser.parse_args(argv)

    if args.input != "-" and not os.path.exists(args.input):
        print(f"Error: File {args.input} not found", file=sys.stderr)
        return 1

    text = read_input(args.input)
    start_total = time.time()

    profiler = None
    if args.profile:
        import cProfile
        profiler = cProfile.Profile()
        profiler.enable()

    try:
        finder = RepeatFinder(text, min_length=args.min_length, show_progress=args.verbose)
        result = finder.find_all()
    except InvalidConfig as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    finally:
        if profiler is not None:
            profiler.disable()

    if args.verbose:
        print(f"Maximal repeats: {len(result.maximal)} "
              f"({len(result.coverage.families)} families)", file=sys.stderr)
        print(f"Total time: {time.time() - start_total:.2f}s", file=sys.stderr)

    if profiler is not None:
        import pstats
        print("Top 20 cumulative time hotspots:", file=sys.stderr)
        stats = pstats.Stats(profiler, stream=sys.stderr)
        stats.strip_dirs().sort_stats("cumulative").print_stats(20)

    lines = []
    if args.format == "html":
        title = os.path.basename(args.input) if args.input != "-" else "stdin"
        lines.append(render_page(result.coverage, title=title).rstrip("\n"))
    elif args.format == "legend":
        lines.append(render_legend_html(result.coverage.legend))
    elif args.format == "bed":
        for sequence, family, occurrence in repeat_rows(result.maximal, result.coverage.families):
            lines.append(occurrence.to_bed(name=f"{family.identity}:{sequence}", sequence=sequence))
    elif args.format == "tsv":
        lines.append(TSV_HEADER)
        for sequence, family, occurrence in repeat_rows(result.maximal, result.coverage.families):
            lines.append(to_tsv_row(sequence, family, occurrence))

    output = "\n".join(lines) + "\n"
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(output)
        print(f"Results written to {args.output}", file=sys.stderr)
    else:
        sys.stdout.write(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
