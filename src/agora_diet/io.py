from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

import pandas as pd

logger = logging.getLogger(__name__)

DIET_COLUMNS: tuple[str, ...] = ("reaction_id", "lower_bound")
UPPER_BOUND_COLUMN = "upper_bound"

MODEL_SUFFIXES: tuple[str, ...] = (".mat", ".xml", ".sbml", ".json", ".yml", ".yaml")


class DietLoadError(ValueError):
    """Raised when a diet file is missing or cannot be parsed into (reaction_id, value) rows."""


def _resolve_diet_path(path: str | Path) -> Path:
    p = Path(path)
    if p.exists():
        return p
    # Diet Designer diets are usually referred to by name, without the .txt
    with_txt = p.with_name(p.name + ".txt")
    if with_txt.exists():
        return with_txt
    raise DietLoadError(f"Diet file not found: {p}")


def validate_diet_table(
    df: pd.DataFrame,
    *,
    source: str = "diet",
    allow_duplicates: bool = False,
) -> pd.DataFrame:
    """
    Check a (reaction_id, lower_bound) table and return a clean copy.

    Ids must be non-empty, values numeric and finite, and ids unique unless allow_duplicates.
    Raises DietLoadError with ``source`` in the message.
    """
    missing = [c for c in DIET_COLUMNS if c not in df.columns]
    if missing:
        raise DietLoadError(
            f"{source} is missing required columns: {', '.join(missing)} "
            f"(got: {', '.join(map(str, df.columns))})"
        )
    if df.empty:
        raise DietLoadError(f"{source} has no rows")

    ids = df["reaction_id"].astype(str).str.strip().reset_index(drop=True)
    empty = df["reaction_id"].isna().to_numpy() | (ids == "").to_numpy()
    if empty.any():
        bad_rows = [int(i) + 1 for i in ids.index[empty]]
        raise DietLoadError(f"Empty reaction id in {source} (rows: {bad_rows})")

    raw_values = df["lower_bound"].reset_index(drop=True)
    if raw_values.dtype == object:
        raw_values = raw_values.astype(str).str.strip()
    values = pd.to_numeric(raw_values, errors="coerce").astype(float)
    bad_mask = values.isna() | values.isin([float("inf"), float("-inf")])
    if bad_mask.any():
        bad = sorted(set(ids[bad_mask].tolist()))
        raise DietLoadError(f"Non-numeric values in {source} for: {', '.join(bad)}")

    dup = ids[ids.duplicated()]
    if not dup.empty and not allow_duplicates:
        raise DietLoadError(f"Duplicate reaction ids in {source}: {', '.join(sorted(set(dup)))}")

    return pd.DataFrame({"reaction_id": ids.to_numpy(), "lower_bound": values.to_numpy()})


def load_diet_table(
    path: str | Path,
    *,
    has_header: bool = True,
    allow_duplicates: bool = False,
) -> pd.DataFrame:
    """
    Load a tab-separated diet file into a (reaction_id, lower_bound) table.

    The first column holds exchange reaction ids (e.g. ``EX_glc_D(e)``), the second the
    uptake value as exported by the Diet Designer (positive = uptake). Extra columns are ignored.

    Parameters
    ----------
    path:
        Diet file. ``path + ".txt"`` is tried when ``path`` itself does not exist.
    has_header:
        Whether the first line is a header row (Diet Designer exports have one).
    allow_duplicates:
        Accept repeated reaction ids. Adapted diets can repeat ids; raw diets must not.
    """
    p = _resolve_diet_path(path)
    logger.info("Loading diet: %s", p)

    try:
        raw = pd.read_csv(
            p,
            sep="\t",
            header=0 if has_header else None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise DietLoadError(f"Cannot parse diet file {p}: {e}") from e

    if raw.shape[1] < 2:
        raise DietLoadError(
            f"Diet file {p} must have at least two tab-separated columns (reaction id, value), "
            f"got {raw.shape[1]}"
        )

    df = validate_diet_table(
        pd.DataFrame({"reaction_id": raw.iloc[:, 0], "lower_bound": raw.iloc[:, 1]}),
        source=f"diet file {p}",
        allow_duplicates=allow_duplicates,
    )
    logger.info("Loaded %d diet constraints", len(df))
    return df


def diet_from_records(records: list[tuple[str, float]] | list[tuple[str, float, float]]) -> pd.DataFrame:
    """Build a diet table from (id, value) or (id, lb, ub) tuples."""
    if not records:
        raise DietLoadError("Diet is empty")
    widths = {len(r) for r in records}
    if widths == {2}:
        df = pd.DataFrame(records, columns=list(DIET_COLUMNS))
    elif widths == {3}:
        df = pd.DataFrame(records, columns=[*DIET_COLUMNS, UPPER_BOUND_COLUMN])
    else:
        raise DietLoadError(f"Diet records must all have 2 or all have 3 fields, got widths {sorted(widths)}")
    df["reaction_id"] = df["reaction_id"].astype(str)
    df["lower_bound"] = df["lower_bound"].astype(float)
    if df["reaction_id"].duplicated().any():
        raise DietLoadError("Duplicate reaction ids in diet records")
    return df


def diet_to_records(df: pd.DataFrame) -> list[tuple]:
    """
    Convert a diet table to (id, lb) or (id, lb, ub) tuples, the shape expected by
    "apply diet to model" helpers.
    """
    cols = list(DIET_COLUMNS)
    if UPPER_BOUND_COLUMN in df.columns:
        cols.append(UPPER_BOUND_COLUMN)
    return [tuple(row) for row in df[cols].itertuples(index=False, name=None)]


def save_diet_table(
    df: pd.DataFrame,
    out_path: str | Path,
    *,
    fmt: Literal["tsv", "csv", "parquet"] | None = None,
) -> Path:
    """
    Save a diet table as TSV, CSV or parquet, inferred by extension unless fmt is provided.
    """
    p = Path(out_path)
    p.parent.mkdir(parents=True, exist_ok=True)

    if fmt is None:
        suffix = p.suffix.lower()
        if suffix in {".tsv", ".txt"}:
            fmt = "tsv"
        elif suffix == ".csv":
            fmt = "csv"
        elif suffix == ".parquet":
            fmt = "parquet"
        else:
            raise ValueError(f"Cannot infer format from extension: {p.suffix} (use .tsv/.txt, .csv or .parquet)")

    if fmt == "tsv":
        df.to_csv(p, sep="\t", index=False)
    elif fmt == "csv":
        df.to_csv(p, index=False)
    elif fmt == "parquet":
        df.to_parquet(p, index=False)
    else:
        raise ValueError(f"Unsupported fmt: {fmt}")

    logger.info("Saved diet: %s (rows=%d, cols=%d)", p, len(df), len(df.columns))
    return p


def list_model_files(model_dir: str | Path) -> list[Path]:
    """Sorted model files (.mat/.xml/.sbml/.json/.yml/.yaml) directly under model_dir."""
    from agora_diet.growth import GrowthValidationError

    p = Path(model_dir)
    if not p.is_dir():
        raise GrowthValidationError(f"Model directory not found: {p}")
    files = sorted(f for f in p.iterdir() if f.is_file() and f.suffix.lower() in MODEL_SUFFIXES)
    if not files:
        raise GrowthValidationError(
            f"No model files found under {p} (expected one of: {', '.join(MODEL_SUFFIXES)})"
        )
    return files


def load_model(model_path: str | Path):
    """
    Load a metabolic model with the cobra.io reader matching its extension.

    Returns
    -------
    cobra.Model
    """
    from cobra.io import load_json_model, load_matlab_model, load_yaml_model, read_sbml_model

    p = Path(model_path)
    if not p.exists():
        raise FileNotFoundError(f"Model file not found: {p}")

    readers = {
        ".mat": load_matlab_model,
        ".xml": read_sbml_model,
        ".sbml": read_sbml_model,
        ".json": load_json_model,
        ".yml": load_yaml_model,
        ".yaml": load_yaml_model,
    }
    reader = readers.get(p.suffix.lower())
    if reader is None:
        raise ValueError(f"Unsupported model extension: {p.suffix}")
    logger.debug("Loading model: %s", p)
    return reader(str(p))
