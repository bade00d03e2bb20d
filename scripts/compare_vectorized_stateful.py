#!/usr/bin/env python3
"""Vectorised market_state() vs stateful "mss" incremental comparison.

1) seed the stateful indicator on t=0..split by replay
2) update bar by bar on t=split+1..end
3) compare both segments against the vectorised result
"""
from __future__ import annotations

import argparse
import os
import sys

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


def compare_frames(ref: pd.DataFrame, test: pd.DataFrame, eps: float) -> pd.DataFrame:
    diff = (test - ref).abs()
    rel = diff / (ref.abs() + eps)
    return pd.DataFrame(
        {
            "nan_ref": ref.isna().sum(),
            "nan_test": test.isna().sum(),
            "max_abs": diff.max(),
            "mean_abs": diff.mean(),
            "mean_rel": rel.mean(),
        }
    )


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--rows", type=int, default=3000)
    ap.add_argument("--split", type=int, default=2500, help="seed end index")
    ap.add_argument("--seed", type=int, default=7)
    ap.add_argument("--lookback", type=int, default=2000)
    ap.add_argument("--range-method", type=str, default="window", choices=("window", "scan"))
    ap.add_argument("--output", type=str, default="three", choices=("three", "single"))
    ap.add_argument("--eps", type=float, default=1e-12)
    args = ap.parse_args()

    if args.split >= args.rows:
        raise SystemExit("--split must be < --rows")

    close = make_close(args.rows, args.seed)
    params = {
        "lookback": args.lookback,
        "range_method": args.range_method,
        "output": args.output,
    }

    # Vectorised reference
    ref = ta.market_state(close, lookback=args.lookback, output=args.output)
    if ref is None:
        raise SystemExit("[X] not enough rows for the configured slope periods")

    # Stateful seed (t=0..split), then incremental (t=split+1..end)
    indicator = ta.STATEFUL_REGISTRY["mss"]
    state = ta.SEED_REGISTRY["mss"]({"close": close.iloc[: args.split + 1]}, params)
    names = indicator.output_names(params)
    rows = []
    for ts in close.index[args.split + 1:]:
        values, state = indicator.update(state, {"close": float(close.loc[ts])}, params)
        rows.append([np.nan if v is None else v for v in values])
    inc = pd.DataFrame(rows, index=close.index[args.split + 1:], columns=names)

    summary = compare_frames(ref.loc[inc.index, names], inc, args.eps)
    bands_ref = ref.loc[inc.index, names].notna()
    bands_inc = inc.notna()
    mismatched = int((bands_ref != bands_inc).any(axis=1).sum())

    print("[i] rows:", args.rows)
    print("[i] split index:", args.split)
    print("[i] compared rows:", len(inc))
    print("[i] band mismatches:", mismatched)
    print(summary)


if __name__ == "__main__":
    main()
