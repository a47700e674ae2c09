from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

DATA_DIR = Path(__file__).resolve().parents[1] / "data"


@pytest.fixture
def example_diet_path() -> Path:
    return DATA_DIR / "diets" / "example_diet.txt"


@pytest.fixture
def glucose_diet() -> pd.DataFrame:
    return pd.DataFrame({"reaction_id": ["EX_glc_D(e)"], "lower_bound": [10.0]})


def make_toy_model(model_id: str, exchanges: list[str]):
    """
    Toy model: one extracellular metabolite per exchange, a biomass reaction consuming all of them.
    Uptake is fully open so the diet alone decides growth.
    """
    from cobra import Metabolite, Model, Reaction

    m = Model(model_id)
    biomass = Reaction("biomass_toy")
    biomass.lower_bound = 0.0
    biomass.upper_bound = 1000.0
    for ex_id in exchanges:
        token = ex_id[len("EX_"):].replace("(e)", "")
        met = Metabolite(f"{token}[e]", compartment="e")
        ex = Reaction(ex_id)
        ex.add_metabolites({met: -1})
        ex.lower_bound = -1000.0
        ex.upper_bound = 1000.0
        m.add_reactions([ex])
        biomass.add_metabolites({met: -1})
    m.add_reactions([biomass])
    m.objective = "biomass_toy"
    return m


@pytest.fixture
def model_dir(tmp_path: Path) -> Path:
    """Directory with one JSON model that grows on glucose."""
    from cobra.io import save_json_model

    d = tmp_path / "models"
    d.mkdir()
    save_json_model(make_toy_model("grower", ["EX_glc_D(e)"]), str(d / "grower.json"))
    return d


@pytest.fixture
def toy_model():
    return make_toy_model
