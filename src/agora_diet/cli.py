from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.logging import RichHandler

from agora_diet import __version__

app = typer.Typer(add_completion=False, help="agora_diet: adapt VMH diets to AGORA-based models")

logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_time=False, show_path=False)],
    )


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging."),
) -> None:
    """Entry point."""
    _setup_logging(verbose=verbose)


@app.command()
def version() -> None:
    """Print package version."""
    typer.echo(__version__)


@app.command()
def adapt(
    diet: Path = typer.Argument(..., help="Diet Designer file (tab-separated; .txt may be omitted)."),
    setup: str = typer.Option(..., "--setup", "-s", help="Target setup: AGORA, Pairwise or Microbiota."),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write the adapted diet (.tsv/.txt/.csv/.parquet)."),
    model_dir: Optional[Path] = typer.Option(None, "--model-dir", help="Test growth of every model in this directory."),
    config: Optional[Path] = typer.Option(None, "--config", help="YAML/JSON file overriding diet settings."),
    no_header: bool = typer.Option(False, "--no-header", help="The diet file has no header row."),
    n_jobs: int = typer.Option(1, "--n-jobs", help="Parallel workers for growth testing."),
    solver: Optional[str] = typer.Option(None, "--solver", help="LP solver for growth testing (e.g. glpk)."),
    growth_report: Optional[Path] = typer.Option(None, "--growth-report", help="Write per-model growth results (.csv)."),
) -> None:
    """Adapt a diet so AGORA-based models can grow on it."""
    from agora_diet.config import ConfigError, load_diet_settings
    from agora_diet.diet import adapt_diet
    from agora_diet.growth import CobraBackend, GrowthValidationError, configure_solver
    from agora_diet.io import DietLoadError, save_diet_table
    from agora_diet.setups import InvalidSetupError

    try:
        settings = load_diet_settings(config)
        if solver:
            configure_solver(solver)
        result = adapt_diet(
            diet,
            setup,
            model_dir,
            settings=settings,
            has_header=not no_header,
            backend=CobraBackend(solver=solver),
            n_jobs=n_jobs,
        )
    except (ConfigError, DietLoadError, InvalidSetupError, GrowthValidationError) as e:
        typer.echo(f"[ERROR] {e}", err=True)
        raise typer.Exit(code=2) from e

    if out is not None:
        save_diet_table(result.table, out)
    typer.echo(f"[OK] Adapted diet for {result.setup.value}: {len(result.table)} constraints")

    if result.growth is not None:
        if growth_report is not None:
            growth_report.parent.mkdir(parents=True, exist_ok=True)
            result.growth.table.to_csv(growth_report, index=False)
            logger.info("Saved growth report: %s", growth_report)
        n_models = len(result.growth.table)
        if not result.growth_ok:
            typer.echo(f"[FAIL] {len(result.growth.failing_models)}/{n_models} models cannot grow on the diet")
            raise typer.Exit(code=1)
        typer.echo(f"[OK] All {n_models} models can grow on the diet")


@app.command()
def audit(
    diet: Path = typer.Argument(..., help="Adapted diet table (.tsv/.txt)."),
    model: Path = typer.Argument(..., help="Model file to check the diet against."),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write the audit table (.csv)."),
) -> None:
    """List diet exchanges a model lacks, with suggested replacements."""
    from agora_diet.audit import audit_diet_against_model, write_audit_csv
    from agora_diet.io import DietLoadError, load_diet_table, load_model

    try:
        table = load_diet_table(diet, allow_duplicates=True)
    except DietLoadError as e:
        typer.echo(f"[ERROR] {e}", err=True)
        raise typer.Exit(code=2) from e

    try:
        cobra_model = load_model(model)
    except (FileNotFoundError, ValueError, OSError) as e:
        typer.echo(f"[ERROR] Cannot load model {model}: {e}", err=True)
        raise typer.Exit(code=2) from e

    rows = audit_diet_against_model(cobra_model, table)
    if out is not None:
        write_audit_csv(rows, out)
    for r in rows:
        if r.status == "missing":
            hint = ", ".join(s for s in (r.suggestion_1, r.suggestion_2) if s)
            typer.echo(f"missing: {r.reaction_id}" + (f" (try: {hint})" if hint else ""))
    n_missing = sum(1 for r in rows if r.status == "missing")
    typer.echo(f"[OK] {len(rows) - n_missing}/{len(rows)} diet exchanges present in model")


if __name__ == "__main__":
    app()
