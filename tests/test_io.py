from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from agora_diet.growth import GrowthValidationError
from agora_diet.io import (
    DietLoadError,
    diet_from_records,
    diet_to_records,
    list_model_files,
    load_diet_table,
    save_diet_table,
)


def _write(p: Path, text: str) -> Path:
    p.write_text(text, encoding="utf-8")
    return p


def test_load_example_diet(example_diet_path: Path) -> None:
    df = load_diet_table(example_diet_path)
    assert list(df.columns) == ["reaction_id", "lower_bound"]
    assert df.iloc[0].tolist() == ["EX_glc_D(e)", 10.0]
    assert len(df) == 6


def test_load_diet_without_extension(example_diet_path: Path) -> None:
    df = load_diet_table(example_diet_path.with_suffix(""))
    assert len(df) == 6


def test_load_diet_without_header(tmp_path: Path) -> None:
    p = _write(tmp_path / "d.txt", "EX_glc_D(e)\t10\nEX_fru(e)\t2\n")
    df = load_diet_table(p, has_header=False)
    assert df["reaction_id"].tolist() == ["EX_glc_D(e)", "EX_fru(e)"]
    assert df["lower_bound"].tolist() == [10.0, 2.0]


def test_load_diet_ignores_extra_columns(tmp_path: Path) -> None:
    p = _write(tmp_path / "d.txt", "id\tvalue\tnote\nEX_glc_D(e)\t10\tsugar\n")
    df = load_diet_table(p)
    assert df.iloc[0].tolist() == ["EX_glc_D(e)", 10.0]


@pytest.mark.parametrize(
    "text",
    [
        "id\n",
        "id\tvalue\n",
        "id\tvalue\nEX_glc_D(e)\tlots\n",
        "id\tvalue\n\t10\n",
        "id\tvalue\nEX_glc_D(e)\t10\nEX_glc_D(e)\t5\n",
        "id\tvalue\nEX_glc_D(e)\t\n",
        "id\tvalue\nEX_glc_D(e)\tinf\n",
    ],
)
def test_load_diet_rejects_malformed(tmp_path: Path, text: str) -> None:
    p = _write(tmp_path / "bad.txt", text)
    with pytest.raises(DietLoadError):
        load_diet_table(p)


def test_load_diet_allows_duplicates_when_asked(tmp_path: Path) -> None:
    p = _write(tmp_path / "d.tsv", "reaction_id\tlower_bound\nEX_a(e)\t-0.1\nEX_a(e)\t-50\n")
    df = load_diet_table(p, allow_duplicates=True)
    assert df["lower_bound"].tolist() == [-0.1, -50.0]


def test_load_diet_missing_file(tmp_path: Path) -> None:
    with pytest.raises(DietLoadError, match="not found"):
        load_diet_table(tmp_path / "nope")


def test_records_round_trip_shapes() -> None:
    df = diet_from_records([("EX_a(e)", -1.0, 0.0), ("EX_b(e)", -2.0, -1.0)])
    assert diet_to_records(df) == [("EX_a(e)", -1.0, 0.0), ("EX_b(e)", -2.0, -1.0)]
    with pytest.raises(DietLoadError):
        diet_from_records([("EX_a(e)", -1.0), ("EX_b(e)", -2.0, 0.0)])


def test_save_diet_table_tsv(tmp_path: Path) -> None:
    df = pd.DataFrame({"reaction_id": ["EX_a(e)"], "lower_bound": [-41.251]})
    p = save_diet_table(df, tmp_path / "out" / "diet.tsv")
    assert p.read_text(encoding="utf-8").splitlines() == ["reaction_id\tlower_bound", "EX_a(e)\t-41.251"]
    with pytest.raises(ValueError):
        save_diet_table(df, tmp_path / "diet.xlsx")


def test_list_model_files(tmp_path: Path) -> None:
    for name in ("b.mat", "a.xml", "notes.md"):
        (tmp_path / name).write_text("", encoding="utf-8")
    assert [p.name for p in list_model_files(tmp_path)] == ["a.xml", "b.mat"]

    empty = tmp_path / "empty"
    empty.mkdir()
    with pytest.raises(GrowthValidationError):
        list_model_files(empty)
    with pytest.raises(GrowthValidationError):
        list_model_files(tmp_path / "missing")
