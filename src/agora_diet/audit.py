from __future__ import annotations

import csv
import logging
import re
from dataclasses import dataclass
from difflib import SequenceMatcher
from pathlib import Path
from typing import Iterable

import pandas as pd

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditRow:
    reaction_id: str
    status: str  # "present" | "missing"
    lower_bound: float
    suggestion_1: str
    suggestion_2: str


def _exchange_token(reaction_id: str) -> str:
    """
    Metabolite token of an exchange id in any setup naming:
    'EX_glc_D(e)', 'EX_glc_D[u]', 'Diet_EX_glc_D[d]', 'EX_glc_D_e' -> 'glc_d'.
    """
    rid = reaction_id.strip().lower()
    rid = re.sub(r"^(diet_)?ex_", "", rid)
    rid = re.sub(r"(\([a-z]+\)|\[[a-z]+\]|_[a-z])$", "", rid)
    return rid


def suggest_exchange_replacements(model, reaction_id: str, top_k: int = 2, min_ratio: float = 0.6) -> list[str]:
    """
    Suggest model exchanges for a diet id the model lacks.

    Exact token matches (same metabolite, other compartment spelling) rank first, then
    exchanges whose token is similar enough (difflib ratio >= min_ratio).
    """
    token = _exchange_token(reaction_id)
    if not token:
        return []

    scored: list[tuple[float, str]] = []
    for rxn in model.reactions:
        rid = str(rxn.id)
        if not (rid.startswith("EX_") or rid.startswith("Diet_EX_")):
            continue
        other = _exchange_token(rid)
        if other == token:
            scored.append((2.0, rid))
            continue
        ratio = SequenceMatcher(None, token, other).ratio()
        if ratio >= min_ratio:
            scored.append((ratio, rid))

    scored.sort(key=lambda x: (-x[0], x[1]))
    return [rid for _, rid in scored[:top_k]]


def audit_diet_against_model(model, diet: pd.DataFrame) -> list[AuditRow]:
    """One row per diet constraint, marking whether the model has that exchange reaction."""
    present_ids = set(str(r.id) for r in model.reactions)

    rows: list[AuditRow] = []
    for rid, lb in zip(diet["reaction_id"].astype(str), diet["lower_bound"].astype(float)):
        status = "present" if rid in present_ids else "missing"
        suggestions = suggest_exchange_replacements(model, rid) if status == "missing" else []
        s1 = suggestions[0] if len(suggestions) > 0 else ""
        s2 = suggestions[1] if len(suggestions) > 1 else ""
        rows.append(AuditRow(reaction_id=rid, status=status, lower_bound=lb, suggestion_1=s1, suggestion_2=s2))

    n_missing = sum(1 for r in rows if r.status == "missing")
    logger.info("Audit of model %s: %d/%d diet exchanges missing", model.id, n_missing, len(rows))
    return rows


def write_audit_csv(rows: Iterable[AuditRow], out_path: str | Path) -> Path:
    p = Path(out_path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(
            f,
            fieldnames=["reaction_id", "status", "lower_bound", "suggestion_1", "suggestion_2"],
        )
        w.writeheader()
        for r in rows:
            w.writerow(
                {
                    "reaction_id": r.reaction_id,
                    "status": r.status,
                    "lower_bound": r.lower_bound,
                    "suggestion_1": r.suggestion_1,
                    "suggestion_2": r.suggestion_2,
                }
            )
    return p
