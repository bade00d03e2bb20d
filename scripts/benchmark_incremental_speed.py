#!/usr/bin/env python3
"""Benchmark incremental update speed of the stateful "mss" indicator.

Compares the two slope-range methods as the lookback grows:
  - scan:   rescan lookback+1 offsets per tier per bar (O(lookback))
  - window: monotonic-deque sliding max/min (O(1) amortised)
"""
from __future__ import annotations

import argparse
import copy
import os
import sys
from time import perf_counter
from typing import List

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import numpy as np
import pandas as pd
import market_state_ta as ta


def make_close(rows: int, seed: int) -> pd.Series:
    rng = np.random.default_rng(seed)
    idx = pd.date_range("2025-01-01", periods=rows, freq="1min")
    close = 100 + rng.standard_normal(rows).cumsum() + rng.normal(0, 0.2, rows)
    return pd.Series(close, index=idx, name="close")


def parse_list(value: str) -> List[int]:
    return [int(v.strip()) for v in value.split(",") if v.strip()]


def time_call(fn, runs: int) -> float:
    times = []
    for _ in range(max(runs, 1)):
        start = perf_counter()
        fn()
        times.append(perf_counter() - start)
    return sum(times) / len(times)


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument(
        "--lookbacks",
        type=str,
        default="100,500,2000,5000",
        help="comma-separated lookback periods",
    )
    ap.add_argument("--tail", type=int, default=100, help="bars per timed update batch")
    ap.add_argument("--seed", type=int, default=7)
    ap.add_argument("--runs", type=int, default=3, help="timed runs")
    ap.add_argument(
        "--mode",
        type=str,
        default="both",
        choices=("scan", "window", "both"),
        help="slope range method",
    )
    args = ap.parse_args()

    lookbacks = parse_list(args.lookbacks)
    methods = ("scan", "window") if args.mode == "both" else (args.mode,)
    indicator = ta.STATEFUL_REGISTRY["mss"]

    print(f"[i] lookbacks: {lookbacks}")
    print(f"[i] tail: {args.tail}")
    print(f"[i] runs: {args.runs}")

    for lookback in lookbacks:
        rows = lookback + 200 + args.tail + 1
        close = make_close(rows, args.seed)
        hist = close.iloc[: rows - args.tail]
        tail = [float(v) for v in close.iloc[rows - args.tail:]]

        for method in methods:
            params = {"lookback": lookback, "range_method": method}
            # Seed state from history (not timed)
            base_state = ta.SEED_REGISTRY["mss"]({"close": hist}, params)

            def run_tail():
                state = copy.deepcopy(base_state)
                for c in tail:
                    _, state = indicator.update(state, {"close": c}, params)

            avg = time_call(run_tail, args.runs)
            print(
                f"[{method}] lookback={lookback} tail={args.tail} avg_s={avg:.6f} "
                f"s_per_bar={avg / max(args.tail, 1):.8f}"
            )


if __name__ == "__main__":
    main()
