from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from agora_diet.config import DietSettings
from agora_diet.diet import adapt_diet, complete_diet
from agora_diet.growth import (
    CobraBackend,
    GrowthValidationError,
    check_growth,
    configure_solver,
    correct_test_ids,
    find_biomass_reaction,
)


class FakeBackend:
    """Growth values keyed by model file stem; 'broken' fails to load."""

    def __init__(self, values: dict[str, float]) -> None:
        self.values = values

    def load(self, path: Path):
        if path.stem == "broken":
            raise OSError("corrupt model file")
        return {"id": path.stem}

    def apply_diet(self, model, table: pd.DataFrame) -> int:
        # uncorrected ids would count as missing
        return int((table["reaction_id"] == "EX_adocbl(e)").sum())

    def optimize_biomass(self, model, biomass_prefix: str) -> tuple[str, float]:
        return f"{biomass_prefix}_{model['id']}", self.values[model["id"]]


def _touch_models(d: Path, names: list[str]) -> Path:
    d.mkdir(exist_ok=True)
    for n in names:
        (d / f"{n}.mat").write_bytes(b"")
    return d


def test_check_growth_with_fake_backend(tmp_path: Path, glucose_diet: pd.DataFrame) -> None:
    d = _touch_models(tmp_path / "m", ["m1", "m2", "m3"])
    table = complete_diet(glucose_diet)
    backend = FakeBackend({"m1": 0.5, "m2": 1e-5, "m3": 2e-5})

    report = check_growth(table, d, backend=backend)

    assert report.table["model_file"].tolist() == ["m1.mat", "m2.mat", "m3.mat"]
    # threshold is strict: exactly 1e-5 is no growth
    assert report.table["grows"].tolist() == [True, False, True]
    assert report.table["n_diet_missing"].tolist() == [0, 0, 0]
    assert report.table["biomass_id"].iloc[0] == "biomass_m1"
    assert not report.all_grow
    assert report.failing_models == ["m2.mat"]


def test_check_growth_all_grow(tmp_path: Path, glucose_diet: pd.DataFrame) -> None:
    d = _touch_models(tmp_path / "m", ["m1", "m2"])
    report = check_growth(complete_diet(glucose_diet), d, backend=FakeBackend({"m1": 1.0, "m2": 0.1}))
    assert report.all_grow


def test_check_growth_aborts_on_model_failure(tmp_path: Path, glucose_diet: pd.DataFrame) -> None:
    d = _touch_models(tmp_path / "m", ["a", "broken", "c"])
    with pytest.raises(GrowthValidationError, match="broken.mat"):
        check_growth(complete_diet(glucose_diet), d, backend=FakeBackend({"a": 1.0, "c": 1.0}))


def test_growth_threshold_from_settings(tmp_path: Path, glucose_diet: pd.DataFrame) -> None:
    d = _touch_models(tmp_path / "m", ["m1"])
    settings = DietSettings(growth_threshold=1.0)
    report = check_growth(complete_diet(glucose_diet), d, backend=FakeBackend({"m1": 0.5}), settings=settings)
    assert not report.all_grow
    assert report.threshold == 1.0


def test_correct_test_ids_only_touches_listed_ids() -> None:
    df = pd.DataFrame({"reaction_id": ["EX_adocbl(e)", "EX_adocbl[u]"], "lower_bound": [-10.0, -1.0]})
    out = correct_test_ids(df, {"EX_adocbl(e)": "EX_adpcbl(e)"})
    assert out["reaction_id"].tolist() == ["EX_adpcbl(e)", "EX_adocbl[u]"]
    assert df["reaction_id"].iloc[0] == "EX_adocbl(e)"


def test_cobra_backend_apply_diet(toy_model) -> None:
    model = toy_model("toy", ["EX_glc_D(e)", "EX_o2(e)"])
    diet = pd.DataFrame(
        {"reaction_id": ["EX_glc_D(e)", "EX_xyl_D(e)"], "lower_bound": [-10.0, -1.0]}
    )
    missing = CobraBackend().apply_diet(model, diet)

    assert missing == 1
    assert model.reactions.get_by_id("EX_glc_D(e)").bounds == (-10.0, 1000.0)
    # exchanges not in the diet are closed for uptake
    assert model.reactions.get_by_id("EX_o2(e)").lower_bound == 0.0


def test_cobra_backend_apply_diet_with_upper_bounds(toy_model) -> None:
    model = toy_model("toy", ["EX_glc_D(e)"])
    diet = pd.DataFrame({"reaction_id": ["EX_glc_D(e)"], "lower_bound": [-10.0], "upper_bound": [-8.0]})
    CobraBackend().apply_diet(model, diet)
    assert model.reactions.get_by_id("EX_glc_D(e)").bounds == (-10.0, -8.0)


def test_cobra_backend_optimize_biomass(toy_model) -> None:
    backend = CobraBackend()
    model = toy_model("toy", ["EX_glc_D(e)", "EX_o2(e)"])
    backend.apply_diet(model, pd.DataFrame({"reaction_id": ["EX_glc_D(e)"], "lower_bound": [-10.0]}))
    biomass_id, value = backend.optimize_biomass(model, "biomass")
    assert biomass_id == "biomass_toy"
    # o2 is closed and required, so no growth
    assert value == pytest.approx(0.0)


def test_find_biomass_reaction_missing(toy_model) -> None:
    model = toy_model("toy", ["EX_glc_D(e)"])
    with pytest.raises(GrowthValidationError):
        find_biomass_reaction(model, "bio_objective")


def test_adapt_diet_with_cobra_models(tmp_path: Path, model_dir: Path, toy_model, glucose_diet) -> None:
    from cobra.io import save_json_model

    result = adapt_diet(glucose_diet, "AGORA", model_dir)
    assert result.growth_ok is True
    row = result.growth.table.iloc[0]
    assert row["model_id"] == "grower"
    assert row["objective_value"] == pytest.approx(10.0)

    # needs a metabolite the diet never provides
    save_json_model(toy_model("starver", ["EX_glc_D(e)", "EX_unobtainium(e)"]), str(model_dir / "starver.json"))
    result = adapt_diet(glucose_diet, "Pairwise", model_dir)
    assert result.growth_ok is False
    assert result.growth.failing_models == ["starver.json"]
    # setup conversion happens after growth testing
    assert result.table["reaction_id"].iloc[0] == "EX_glc_D[u]"


def test_growth_uses_agora_ids_for_any_setup(model_dir: Path, toy_model, glucose_diet) -> None:
    from cobra.io import save_json_model

    save_json_model(toy_model("cobamide", ["EX_glc_D(e)", "EX_adpcbl(e)"]), str(model_dir / "cobamide.json"))
    result = adapt_diet(glucose_diet, "Microbiota", model_dir)
    assert result.growth_ok is True


def test_configure_solver() -> None:
    import cobra

    configure_solver("glpk")
    assert "glpk" in cobra.Configuration().solver.__name__
