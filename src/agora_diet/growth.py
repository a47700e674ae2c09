from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

import pandas as pd
from joblib import Parallel, delayed

from agora_diet.config import DietSettings
from agora_diet.io import UPPER_BOUND_COLUMN, list_model_files, load_model

logger = logging.getLogger(__name__)


class GrowthValidationError(RuntimeError):
    """Raised when a model cannot be loaded, constrained or optimized during growth testing."""


class ModelBackend(Protocol):
    """What growth testing needs from a modelling library."""

    def load(self, path: Path) -> Any: ...

    def apply_diet(self, model: Any, table: pd.DataFrame) -> int:
        """Constrain the model to the diet; return the number of diet ids the model lacks."""
        ...

    def optimize_biomass(self, model: Any, biomass_prefix: str) -> tuple[str, float]:
        """Maximize the biomass reaction; return (biomass_id, objective value)."""
        ...


def configure_solver(solver: str) -> None:
    """Set the default LP solver for every model cobra creates or loads from now on."""
    import cobra

    cobra.Configuration().solver = solver
    logger.info("Default cobra solver set to %s", solver)


def find_biomass_reaction(model, prefix: str) -> str:
    for rxn in model.reactions:
        if str(rxn.id).startswith(prefix):
            return str(rxn.id)
    raise GrowthValidationError(f"No reaction starting with {prefix!r} in model {model.id}")


@dataclass(frozen=True)
class CobraBackend:
    """
    cobrapy implementation of ModelBackend.

    solver is assigned to every loaded model when set; otherwise cobra's configured default is used.
    """

    solver: str | None = None

    def load(self, path: Path):
        model = load_model(path)
        if self.solver:
            model.solver = self.solver
        return model

    def apply_diet(self, model, table: pd.DataFrame) -> int:
        """
        Close uptake on every EX_ reaction, then open it to the diet bounds.

        Diet ids missing from the model are skipped.
        """
        for rxn in model.reactions:
            if str(rxn.id).startswith("EX_"):
                rxn.lower_bound = 0.0

        has_ub = UPPER_BOUND_COLUMN in table.columns
        present = set(r.id for r in model.reactions)
        missing = 0
        for row in table.itertuples(index=False):
            rid = str(row.reaction_id)
            if rid not in present:
                missing += 1
                continue
            rxn = model.reactions.get_by_id(rid)
            new_lb = float(row.lower_bound)
            new_ub = float(row.upper_bound) if has_ub else rxn.upper_bound
            # Set both at once to avoid transient lb > ub.
            rxn.bounds = (new_lb, new_ub)
        if missing:
            logger.debug("Model %s lacks %d diet exchanges (skipped)", model.id, missing)
        return missing

    def optimize_biomass(self, model, biomass_prefix: str) -> tuple[str, float]:
        biomass_id = find_biomass_reaction(model, biomass_prefix)
        model.objective = biomass_id
        model.objective_direction = "max"
        sol = model.optimize()
        if sol.status != "optimal":
            logger.debug("Model %s: solver status %s, treating as no growth", model.id, sol.status)
            return biomass_id, 0.0
        return biomass_id, float(sol.objective_value)


@dataclass(frozen=True)
class GrowthReport:
    """Per-model growth results; one row per model file, in file order."""

    table: pd.DataFrame
    threshold: float

    @property
    def all_grow(self) -> bool:
        return bool(self.table["grows"].all())

    @property
    def failing_models(self) -> list[str]:
        return self.table.loc[~self.table["grows"], "model_file"].tolist()


def correct_test_ids(table: pd.DataFrame, corrections: dict[str, str]) -> pd.DataFrame:
    out = table.copy()
    out["reaction_id"] = out["reaction_id"].replace(corrections)
    return out


def _test_one_model(
    *,
    path: Path,
    table: pd.DataFrame,
    backend: ModelBackend,
    biomass_prefix: str,
    threshold: float,
) -> dict[str, Any]:
    try:
        model = backend.load(path)
        n_missing = backend.apply_diet(model, table)
        biomass_id, value = backend.optimize_biomass(model, biomass_prefix)
    except GrowthValidationError:
        raise
    except Exception as e:  # noqa: BLE001
        raise GrowthValidationError(f"Growth test failed for {path.name}: {e}") from e

    grows = value > threshold
    logger.debug("%s: %s = %.6g (%s)", path.name, biomass_id, value, "grows" if grows else "no growth")
    return {
        "model_file": path.name,
        "model_id": str(getattr(model, "id", path.stem)),
        "biomass_id": biomass_id,
        "objective_value": value,
        "grows": grows,
        "n_diet_missing": int(n_missing),
    }


def check_growth(
    table: pd.DataFrame,
    model_dir: str | Path,
    *,
    backend: ModelBackend | None = None,
    settings: DietSettings | None = None,
    n_jobs: int = 1,
    parallel_backend: str = "loky",
) -> GrowthReport:
    """
    Test whether every model in model_dir produces biomass on the diet.

    Parameters
    ----------
    table:
        Completed diet in AGORA naming (before setup conversion).
    model_dir:
        Directory of model files (.mat/.xml/.sbml/.json/.yml).
    backend:
        Modelling library adapter; defaults to CobraBackend().
    n_jobs:
        joblib workers. Any failing model aborts the whole run.
    """
    settings = settings or DietSettings()
    backend = backend or CobraBackend()
    files = list_model_files(model_dir)
    test_table = correct_test_ids(table, settings.id_correction_map)

    logger.info("Testing growth of %d models on the diet (n_jobs=%d)", len(files), n_jobs)
    rows = Parallel(n_jobs=n_jobs, backend=parallel_backend)(
        delayed(_test_one_model)(
            path=f,
            table=test_table,
            backend=backend,
            biomass_prefix=settings.biomass_prefix,
            threshold=settings.growth_threshold,
        )
        for f in files
    )

    report = GrowthReport(table=pd.DataFrame(rows), threshold=settings.growth_threshold)
    if report.all_grow:
        logger.info("All %d models can grow on the diet.", len(files))
    else:
        logger.warning(
            "Not all models can grow on the diet (%d/%d failing): %s",
            len(report.failing_models),
            len(files),
            ", ".join(report.failing_models),
        )
    return report
