"""
Minimal working example for cdomproc.

This script demonstrates the user-facing workflow:
1) Load an absorbance export (CSV or Excel) from the command line
2) Compute CDOM absorption for every station in the file
3) Fit the spectral slope S275-295 and the slope ratio of each station

Intended audience:
- Users with limited programming experience
- Quick sanity check after installation

Usage:
    python scripts/run_examples.py path/to/scans.xlsx --pathlength 5
"""

import argparse
import logging

from cdomproc import compute_slope_ratio, process_absorbance
from cdomproc.io import load_absorbance_table


def main():
    parser = argparse.ArgumentParser(description="CDOM absorption and spectral slopes")
    parser.add_argument("path", help="absorbance export (.csv, .xlsx, .xls)")
    parser.add_argument("--pathlength", type=float, default=5.0, help="cuvette pathlength in cm")
    parser.add_argument("--lam-min", type=float, default=250.0)
    parser.add_argument("--lam-max", type=float, default=750.0)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    table = load_absorbance_table(args.path)
    result = process_absorbance(
        table,
        pathlength=args.pathlength,
        lam_min=args.lam_min,
        lam_max=args.lam_max,
    )

    for rec in result.records:
        try:
            sr = compute_slope_ratio(rec.wavelength, rec.ag)
        except ValueError as exc:
            print(f"{rec.station:<24} slope fit failed: {exc}")
            continue
        print(
            f"{rec.station:<24} scans={','.join(rec.good_scans):<12} "
            f"S275-295={sr.s_short.s:.5f} S350-400={sr.s_long.s:.5f} SR={sr.ratio:.3f}"
        )

    for failure in result.failures:
        print(f"{failure.station:<24} FAILED: {failure.reason}")


if __name__ == "__main__":
    main()
