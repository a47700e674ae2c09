from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import pandas as pd

from agora_diet.config import DietSettings
from agora_diet.growth import GrowthReport, ModelBackend, check_growth
from agora_diet.io import DIET_COLUMNS, load_diet_table, validate_diet_table
from agora_diet.setups import Setup, convert_to_setup, parse_setup

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdaptedDiet:
    """
    Result of adapting one diet.

    Notes
    -----
    growth is only set when a model directory was given.
    """

    setup: Setup
    table: pd.DataFrame
    growth: GrowthReport | None = None

    @property
    def growth_ok(self) -> bool | None:
        return None if self.growth is None else self.growth.all_grow


def invert_bounds(table: pd.DataFrame) -> pd.DataFrame:
    """Turn Diet Designer uptake values (positive) into exchange lower bounds (negative)."""
    out = table.copy()
    out["lower_bound"] = -out["lower_bound"].astype(float)
    # negating 0.0 yields -0.0, which would be written as "-0.0"
    out["lower_bound"] = out["lower_bound"] + 0.0
    return out


def append_exchange(table: pd.DataFrame, reaction_id: str, lower_bound: float) -> pd.DataFrame:
    row = pd.DataFrame({"reaction_id": [str(reaction_id)], "lower_bound": [float(lower_bound)]})
    return pd.concat([table, row], ignore_index=True)


def add_missing_exchanges(
    table: pd.DataFrame,
    reference_ids: Iterable[str],
    default_lb: float,
    *,
    present_ids: Iterable[str] | None = None,
) -> pd.DataFrame:
    """
    Append one row per reference id that is not yet present.

    Parameters
    ----------
    table:
        Diet table to extend; it is not modified.
    reference_ids:
        Ids that must be present. Appended rows follow this order.
    default_lb:
        Lower bound given to every appended row.
    present_ids:
        Ids considered present. Defaults to the ids of ``table``; ``adapt_diet`` passes the ids
        of the loaded diet so that every reference list is checked against the same snapshot.
    """
    present = set(table["reaction_id"] if present_ids is None else present_ids)
    missing = [rid for rid in dict.fromkeys(reference_ids) if rid not in present]
    if not missing:
        return table.copy()

    logger.debug("Adding %d missing exchanges at lb=%.6g", len(missing), default_lb)
    extra = pd.DataFrame({"reaction_id": missing, "lower_bound": [float(default_lb)] * len(missing)})
    return pd.concat([table, extra], ignore_index=True)


def rescale_micronutrients(
    table: pd.DataFrame,
    micronutrients: Iterable[str],
    *,
    threshold: float = 0.1,
    factor: float = 100.0,
) -> pd.DataFrame:
    """
    Relax micronutrient uptakes that are too small to sustain community growth.

    Rows listed in ``micronutrients`` with ``|lower_bound| <= threshold`` are multiplied by
    ``factor``. Applying this twice rescales small values twice.
    """
    out = table.copy()
    mask = out["reaction_id"].isin(set(micronutrients)) & (out["lower_bound"].abs() <= threshold)
    if mask.any():
        logger.info(
            "Relaxing %d micronutrient bounds by x%g: %s",
            int(mask.sum()),
            factor,
            ", ".join(out.loc[mask, "reaction_id"]),
        )
    out.loc[mask, "lower_bound"] = out.loc[mask, "lower_bound"] * factor
    return out


def complete_diet(original: pd.DataFrame, settings: DietSettings | None = None) -> pd.DataFrame:
    """
    Setup-independent part of the adaptation: invert, add essential/unmapped exchanges,
    add cholesterol and relax micronutrients.
    """
    settings = settings or DietSettings()
    snapshot = list(original["reaction_id"])

    table = invert_bounds(original[list(DIET_COLUMNS)])
    table = add_missing_exchanges(
        table, settings.essential_metabolites, settings.essential_lb, present_ids=snapshot
    )
    table = add_missing_exchanges(
        table, settings.unmapped_compounds, settings.unmapped_lb, present_ids=snapshot
    )
    table = append_exchange(table, settings.cholesterol_id, settings.cholesterol_lb)
    table = rescale_micronutrients(
        table,
        settings.micronutrients,
        threshold=settings.micronutrient_threshold,
        factor=settings.micronutrient_factor,
    )
    logger.info("Completed diet: %d input rows -> %d rows", len(original), len(table))
    return table


def adapt_diet(
    diet: str | Path | pd.DataFrame,
    setup: Setup | str,
    model_dir: str | Path | None = None,
    *,
    settings: DietSettings | None = None,
    has_header: bool = True,
    backend: ModelBackend | None = None,
    n_jobs: int = 1,
) -> AdaptedDiet:
    """
    Adapt a Diet Designer diet so AGORA-based models can produce biomass on it.

    Parameters
    ----------
    diet:
        Path to a tab-separated diet file, or a (reaction_id, lower_bound) table holding the
        uptake values as exported (positive = uptake).
    setup:
        Target model setup: "AGORA", "Pairwise" or "Microbiota".
    model_dir:
        If given, growth of every model in this directory is tested on the completed diet.
    """
    settings = settings or DietSettings()
    # fail before doing any work on a bad setup token
    setup = parse_setup(setup)

    if isinstance(diet, pd.DataFrame):
        original = validate_diet_table(diet, source="diet table")
    else:
        original = load_diet_table(diet, has_header=has_header)

    table = complete_diet(original, settings)

    growth = None
    if model_dir is not None:
        growth = check_growth(table, model_dir, backend=backend, settings=settings, n_jobs=n_jobs)

    adapted = convert_to_setup(table, setup, original=original, settings=settings)
    return AdaptedDiet(setup=setup, table=adapted, growth=growth)
