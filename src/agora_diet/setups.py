from __future__ import annotations

import logging
from enum import Enum

import pandas as pd

from agora_diet import constants
from agora_diet.config import DietSettings

logger = logging.getLogger(__name__)


class InvalidSetupError(ValueError):
    """Raised when a setup token is not one of AGORA, Pairwise or Microbiota."""


class Setup(str, Enum):
    """Model setup an adapted diet is written for."""

    AGORA = "AGORA"
    PAIRWISE = "Pairwise"
    MICROBIOTA = "Microbiota"


ALLOWED_SETUPS: tuple[str, ...] = tuple(s.value for s in Setup)


def parse_setup(value: Setup | str) -> Setup:
    """Case-sensitive conversion of a setup token."""
    if isinstance(value, Setup):
        return value
    try:
        return Setup(str(value))
    except ValueError as e:
        raise InvalidSetupError(
            f"Setup not recognized: {value!r}. Allowed: {', '.join(ALLOWED_SETUPS)}"
        ) from e


def apply_id_corrections(ids: pd.Series, corrections: dict[str, str]) -> pd.Series:
    """Rename ids that AGORA spells differently (exact matches only)."""
    return ids.replace(corrections)


def community_upper_bounds(
    table: pd.DataFrame,
    original: pd.DataFrame,
    *,
    fraction: float = constants.COMMUNITY_UB_FRACTION,
) -> pd.Series:
    """
    Upper bounds enforcing a minimum uptake in community models.

    Ids present in the loaded diet get ``-fraction * original value``; everything else gets 0.
    ``original`` is the diet as loaded, before sign inversion.
    """
    lookup = dict(zip(original["reaction_id"], original["lower_bound"].astype(float)))
    ub = table["reaction_id"].map(lookup) * -float(fraction)
    # 0.0 instead of -0.0 for ids with a zero original value
    return ub.fillna(0.0) + 0.0


def convert_to_setup(
    table: pd.DataFrame,
    setup: Setup | str,
    *,
    original: pd.DataFrame,
    settings: DietSettings | None = None,
) -> pd.DataFrame:
    """
    Rewrite exchange ids (and add upper bounds) for the chosen setup.

    - AGORA: apply the AGORA id corrections.
    - Pairwise: ``(e)`` becomes ``[u]``.
    - Microbiota: add ``upper_bound``, then ``EX_`` becomes ``Diet_EX_`` and ``(e)`` becomes ``[d]``.
    """
    settings = settings or DietSettings()
    setup = parse_setup(setup)
    out = table.copy()

    if setup is Setup.AGORA:
        out["reaction_id"] = apply_id_corrections(out["reaction_id"], settings.id_correction_map)
    elif setup is Setup.PAIRWISE:
        out["reaction_id"] = out["reaction_id"].str.replace(
            constants.EXTRACELLULAR_SUFFIX, constants.PAIRWISE_SUFFIX, regex=False
        )
    elif setup is Setup.MICROBIOTA:
        out["upper_bound"] = community_upper_bounds(out, original, fraction=settings.community_ub_fraction)
        out["reaction_id"] = (
            out["reaction_id"]
            .str.replace(constants.EXCHANGE_PREFIX, constants.COMMUNITY_PREFIX, regex=False)
            .str.replace(constants.EXTRACELLULAR_SUFFIX, constants.COMMUNITY_SUFFIX, regex=False)
        )

    logger.info("Converted diet to %s setup (%d rows)", setup.value, len(out))
    return out
