"""
Tuning Sweep CLI for linematch
------------------------------
- Loads candidate lines from a file
- Varies one scoring constant over a range and re-ranks the candidates for each value
- Writes the rank of every matching candidate per value, and optionally a plot

Usage:
  python -m linematch.tools.tuning_sweep \
    --input files.txt \
    --query cfg \
    --constant match_slash \
    --start 0.5 --stop 1.2 --step 0.1 \
    --out-dir ./out \
    --save-plots \
    --no-show

Outputs (in --out-dir):
  - tuning_sweep_<constant>.csv
  - tuning_sweep_<constant>.png when --save-plots is set
"""

import argparse
import sys
from pathlib import Path
from typing import List

from linematch.config import ScoreConfig
from linematch.core import load_candidates
from linematch.diagnostics import sweep_constant, plot_sweep


def sweep_values(start: float, stop: float, step: float) -> List[float]:
    if step <= 0:
        raise ValueError("step must be positive")
    vals = []
    x = start
    while x <= stop + 1e-9:
        vals.append(round(x, 4))
        x += step
    return vals


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="linematch tuning sensitivity sweep")
    ap.add_argument("--input", required=True, help="File with one candidate per line.")
    ap.add_argument("--query", required=True)
    ap.add_argument("--constant", required=True, choices=ScoreConfig.field_names(),
                    help="ScoreConfig field to vary.")
    ap.add_argument("--start", type=float, required=True)
    ap.add_argument("--stop", type=float, required=True)
    ap.add_argument("--step", type=float, default=0.1)
    ap.add_argument("--top", type=int, default=10, help="Candidates to plot (best rank at any value).")
    ap.add_argument("--out-dir", default="./out")
    ap.add_argument("--save-plots", action="store_true", help="Save the chart as PNG next to the CSV.")
    ap.add_argument("--no-show", action="store_true", help="Do not display plots interactively (useful on headless runs).")
    args = ap.parse_args(argv)

    try:
        candidates = load_candidates(args.input)
    except OSError as e:
        print(f"[!] Could not read {args.input}: {e}", file=sys.stderr)
        return 1

    try:
        values = sweep_values(args.start, args.stop, args.step)
        sweep = sweep_constant(args.query, candidates, args.constant, values)
    except ValueError as ve:
        print(f"[!] {ve}", file=sys.stderr)
        return 1

    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    sweep_path = out_dir / f"tuning_sweep_{args.constant}.csv"
    sweep.to_csv(sweep_path, index=False)
    print(f"[✔] Wrote {sweep_path}")

    if sweep.empty:
        print(f"[i] No candidate matched {args.query!r}; nothing to plot.")
    elif not args.no_show or args.save_plots:
        import matplotlib.pyplot as plt
        plot_sweep(sweep, top=args.top)
        if args.save_plots:
            png_path = out_dir / f"tuning_sweep_{args.constant}.png"
            plt.savefig(png_path, dpi=140, bbox_inches="tight")
            print(f"[✔] Saved {png_path}")
        if args.no_show:
            plt.close()
        else:
            plt.show()

    print("\nDone.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
