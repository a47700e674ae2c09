from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import asdict, dataclass
from pathlib import Path

import pandas as pd

from agora_diet.config import load_diet_settings
from agora_diet.diet import adapt_diet
from agora_diet.io import save_diet_table
from agora_diet.setups import ALLOWED_SETUPS, InvalidSetupError, parse_setup


@dataclass(frozen=True)
class Failure:
    diet: str
    setup: str
    error_type: str
    error_message: str


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Adapt every Diet Designer diet in a directory for one or more setups.")
    p.add_argument("--diet-dir", required=True, help="Directory of tab-separated diet files (*.txt)")
    p.add_argument("--outdir", required=True, help="Output directory (one <diet>_<setup>.tsv per pair)")
    p.add_argument(
        "--setups",
        nargs="+",
        default=list(ALLOWED_SETUPS),
        help=f"Setups to write (default: all of {', '.join(ALLOWED_SETUPS)})",
    )
    p.add_argument("--config", default=None, help="YAML/JSON diet settings overrides")
    p.add_argument("--model-dir", default=None, help="Test growth of every model here (once per diet)")
    p.add_argument("--n-jobs", type=int, default=1, help="Parallel workers for growth testing (joblib).")
    p.add_argument("--no-header", action="store_true", help="Diet files have no header row")
    p.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(message)s")

    diet_dir = Path(args.diet_dir)
    diets = sorted(diet_dir.glob("*.txt"))
    if not diets:
        print(f"[ERROR] no diet files (*.txt) under: {diet_dir}", file=sys.stderr)
        return 2

    try:
        settings = load_diet_settings(args.config)
    except Exception as e:  # noqa: BLE001
        print(f"[ERROR] {e}", file=sys.stderr)
        return 2

    try:
        setups = [parse_setup(s) for s in args.setups]
    except InvalidSetupError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 2

    outdir = Path(args.outdir)
    outdir.mkdir(parents=True, exist_ok=True)
    failures: list[Failure] = []
    growth_tables: list[pd.DataFrame] = []
    for diet_path in diets:
        growth_done = False
        for setup in setups:
            # growth does not depend on the setup, test it once per diet
            model_dir = None if growth_done else args.model_dir
            try:
                result = adapt_diet(
                    diet_path,
                    setup,
                    model_dir,
                    settings=settings,
                    has_header=not args.no_header,
                    n_jobs=args.n_jobs,
                )
            except Exception as e:  # noqa: BLE001
                logging.error("Failed: %s (%s): %s", diet_path.name, setup.value, e)
                failures.append(Failure(diet_path.name, setup.value, type(e).__name__, str(e)))
                continue

            growth_done = True
            save_diet_table(result.table, outdir / f"{diet_path.stem}_{result.setup.value}.tsv")
            if result.growth is not None:
                g = result.growth.table.copy()
                g.insert(0, "diet", diet_path.stem)
                growth_tables.append(g)

    if growth_tables:
        growth = pd.concat(growth_tables, ignore_index=True)
        growth.to_csv(outdir / "growth_report.csv", index=False)
        n_fail = int((~growth["grows"]).sum())
        print(f"[OK] Growth tested: {len(growth)} diet/model pairs, {n_fail} without growth")

    if failures:
        pd.DataFrame([asdict(f) for f in failures]).to_csv(outdir / "failures.csv", index=False)
        print(f"[WARN] {len(failures)} diet/setup pairs failed (see {outdir / 'failures.csv'})", file=sys.stderr)
        return 1

    print(f"[OK] Adapted {len(diets)} diets for {', '.join(s.value for s in setups)} -> {outdir}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
