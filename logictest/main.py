from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional

import typer

from logictest.config import get_settings
from logictest.generator import generate_test_files
from logictest.reporter import has_failures, print_results
from logictest.runner import RunConfig, available_harnesses, resolve_harness, run_test_files
from logictest.utils.logging import configure_logging

app = typer.Typer(help="sqllogictest runner CLI.")


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"harness={settings.harness} | "
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} "
        f"timeout={settings.db_statement_timeout_ms}ms | "
        f"results={settings.results_dir} truncate_queries={settings.truncate_queries}"
    )


@app.command()
def harnesses() -> None:
    """
    List the available harnesses.
    """
    typer.echo("Available harnesses: " + ", ".join(available_harnesses()))


@app.command()
def run(
    paths: List[Path] = typer.Argument(..., help="Test files, or directories holding *.test files."),
    harness: Optional[str] = typer.Option(
        None,
        "--harness",
        "-H",
        help="Engine to run against (e.g., sqlite, postgresql). Defaults to LOGICTEST_HARNESS.",
    ),
    persist: bool = typer.Option(True, "--persist/--no-persist", help="Write JSON summaries."),
    json_logs: Optional[bool] = typer.Option(
        None, "--json-logs/--text-logs", help="Emit structured JSON log lines."
    ),
) -> None:
    """
    Run test files and verify every record against the chosen harness.
    """
    settings = get_settings()
    configure_logging(
        level=settings.log_level, json_logs=settings.log_json if json_logs is None else json_logs
    )

    results = run_test_files(RunConfig(paths=paths, harness_name=harness, persist=persist))
    print_results(results)
    if has_failures(results):
        raise typer.Exit(code=1)


@app.command()
def generate(
    paths: List[Path] = typer.Argument(..., help="Test files, or directories holding *.test files."),
    harness: Optional[str] = typer.Option(
        None, "--harness", "-H", help="Engine whose results are written out."
    ),
) -> None:
    """
    Rewrite expected results from observed output into <file>.generated.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)

    written = generate_test_files(resolve_harness(harness or settings.harness), paths)
    for path in written:
        typer.echo(str(path))


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
