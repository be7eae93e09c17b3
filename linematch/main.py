import argparse
import logging
import sys
import time
from pathlib import Path

from . import interactive
from .config import (
    DEFAULT_LINES, DEFAULT_PARALLELISM, DEFAULT_PROMPT, DEFAULT_BENCHMARK,
    EXIT_MATCH, EXIT_NO_MATCH,
)
from .core import format_score, load_candidates, rank, results_frame


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="linematch",
        description="Fuzzy-match lines from stdin (or a file) against a query and print them best first.",
    )
    p.add_argument("-q", "--query", default=None, metavar="QUERY",
                   help="Query string to search for (batch mode). Without it the interactive picker starts.")
    p.add_argument("-e", "--show-matches", default=None, metavar="QUERY",
                   help='Identical to "--query".')
    p.add_argument("-l", "--lines", type=int, default=DEFAULT_LINES,
                   help="Number of output lines to display.")
    p.add_argument("-s", "--show-scores", action="store_true",
                   help="Show numerical scores for each match.")
    p.add_argument("-j", "--parallelism", type=int, default=None, metavar="THREADS",
                   help=f"Maximum number of workers to use (default {DEFAULT_PARALLELISM}).")
    p.add_argument("--workers", type=int, default=None, metavar="THREADS",
                   help='Identical to "--parallelism".')
    p.add_argument("-p", "--prompt", default=DEFAULT_PROMPT,
                   help="Prompt to show when entering queries.")
    p.add_argument("-b", "--benchmark", type=int, default=DEFAULT_BENCHMARK, metavar="REPEATS",
                   help="Run that many repeated searches without output, for benchmarking.")
    p.add_argument("-i", "--input", default=None, metavar="PATH",
                   help="Read candidates from a file instead of stdin.")
    p.add_argument("--out", default=None, metavar="PATH",
                   help="Also write the ranked list as CSV.")
    p.add_argument("--progress", action="store_true",
                   help="Show a progress bar while ranking.")
    p.add_argument("-v", "--verbose", action="store_true",
                   help="Debug logging on stderr.")
    return p


def _status(msg: str) -> None:
    print(msg, file=sys.stderr)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    query = args.query if args.query is not None else (args.show_matches or "")
    if args.parallelism is None:
        args.parallelism = args.workers if args.workers is not None else DEFAULT_PARALLELISM

    if args.benchmark > 0 and not query:
        _status("[!] To benchmark, provide a query with one of the -q/-e/--query/--show-matches flags")
        return EXIT_NO_MATCH

    try:
        candidates = load_candidates(args.input if args.input else sys.stdin)
    except OSError as e:
        _status(f"[!] Could not read candidates: {e}")
        return EXIT_NO_MATCH

    if args.benchmark > 0:
        started = time.perf_counter()
        for _ in range(args.benchmark):
            rank(query, candidates, parallelism=args.parallelism)
        elapsed = time.perf_counter() - started
        _status(f"[i] {args.benchmark} searches over {len(candidates)} candidates in {elapsed:.3f}s")
        return EXIT_MATCH

    if not query:
        return interactive.run(candidates, args)

    results = rank(query, candidates, parallelism=args.parallelism, progress=args.progress)
    for result in results[:max(0, args.lines)]:
        prefix = format_score(result.score) if args.show_scores else ""
        print(f"{prefix}{result.candidate}")

    if args.out:
        out = Path(args.out)
        out.parent.mkdir(parents=True, exist_ok=True)
        results_frame(results).to_csv(out, index=False)
        _status(f"[✔] Wrote {out}")

    return EXIT_MATCH if results else EXIT_NO_MATCH


if __name__ == "__main__":
    sys.exit(main())
