from __future__ import annotations

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

from agora_diet import constants


class ConfigError(ValueError):
    """Raised when a config file cannot be loaded or has invalid structure."""


def load_config(path: str | Path) -> dict[str, Any]:
    """
    Load a YAML or JSON config file into a dict.

    Parameters
    ----------
    path:
        Path to a .yaml/.yml or .json file.
    """
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Config file not found: {p}")

    suffix = p.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    elif suffix == ".json":
        with p.open("r", encoding="utf-8") as f:
            data = json.load(f)
    else:
        raise ConfigError(f"Unsupported config extension: {suffix} (expected .yaml/.yml/.json)")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a mapping/dict, got: {type(data).__name__}")
    return data


_LIST_FIELDS = ("essential_metabolites", "unmapped_compounds", "micronutrients")


@dataclass(frozen=True)
class DietSettings:
    """
    Every constant the diet adaptation depends on.

    Defaults reproduce the AGORA adaptation; a settings file only needs the keys it changes.
    """

    essential_metabolites: tuple[str, ...] = constants.ESSENTIAL_METABOLITES
    essential_lb: float = constants.ESSENTIAL_DEFAULT_LB
    unmapped_compounds: tuple[str, ...] = constants.UNMAPPED_COMPOUNDS
    unmapped_lb: float = constants.UNMAPPED_DEFAULT_LB
    cholesterol_id: str = constants.CHOLESTEROL_ID
    cholesterol_lb: float = constants.CHOLESTEROL_LB
    micronutrients: tuple[str, ...] = constants.MICRONUTRIENTS
    micronutrient_threshold: float = constants.MICRONUTRIENT_THRESHOLD
    micronutrient_factor: float = constants.MICRONUTRIENT_FACTOR
    # (old id, new id) pairs; a tuple keeps the settings immutable and hashable
    id_corrections: tuple[tuple[str, str], ...] = tuple(constants.ID_CORRECTIONS.items())
    biomass_prefix: str = constants.BIOMASS_PREFIX
    growth_threshold: float = constants.GROWTH_THRESHOLD
    community_ub_fraction: float = constants.COMMUNITY_UB_FRACTION

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "DietSettings":
        """Build settings from a config mapping, rejecting unknown keys."""
        if not isinstance(data, dict):
            raise ConfigError(f"Diet settings must be a mapping/dict, got: {type(data).__name__}")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown diet settings keys: {', '.join(unknown)}")

        overrides: dict[str, Any] = {}
        for key, value in data.items():
            if key in _LIST_FIELDS:
                if not isinstance(value, list) or not all(isinstance(x, str) for x in value):
                    raise ConfigError(f"{key} must be a list of exchange reaction ids")
                overrides[key] = tuple(value)
            elif key == "id_corrections":
                if not isinstance(value, dict):
                    raise ConfigError("id_corrections must be a mapping of old id -> new id")
                overrides[key] = tuple((str(k), str(v)) for k, v in value.items())
            elif key in {"cholesterol_id", "biomass_prefix"}:
                overrides[key] = str(value)
            else:
                try:
                    overrides[key] = float(value)
                except (TypeError, ValueError) as e:
                    raise ConfigError(f"{key} must be numeric, got: {value!r}") from e

        settings = replace(cls(), **overrides)
        if settings.micronutrient_threshold < 0:
            raise ConfigError("micronutrient_threshold must be >= 0")
        if settings.growth_threshold < 0:
            raise ConfigError("growth_threshold must be >= 0")
        return settings

    @property
    def id_correction_map(self) -> dict[str, str]:
        return dict(self.id_corrections)


def load_diet_settings(path: str | Path | None = None) -> DietSettings:
    """Load settings from a YAML/JSON file, or return the defaults when path is None."""
    if path is None:
        return DietSettings()
    return DietSettings.from_mapping(load_config(path))
