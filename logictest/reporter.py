from __future__ import annotations

from typing import List, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from logictest.runner import FileResult, display_path


def print_results(results: Sequence[FileResult], console: Console | None = None) -> None:
    """
    Render per-file test results as a rich table, followed by a totals row.
    """
    console = console or Console()

    if not results:
        console.print("[yellow]No test files were run.[/yellow]")
        return

    table = Table(
        title="sqllogictest Results",
        box=box.ROUNDED,
        caption="Files in run order",
    )

    table.add_column("File", style="cyan", no_wrap=True)
    table.add_column("Records", justify="right", style="magenta")
    table.add_column("Passed", justify="right", style="bold green")
    table.add_column("Failed", justify="right", style="red")
    table.add_column("Skipped", justify="right", style="yellow")
    table.add_column("Halted", justify="center")
    table.add_column("Duration (s)", justify="right", style="green")
    table.add_column("Error", style="red")

    for res in results:
        failed = res.get("failed", 0)
        table.add_row(
            display_path(res.get("path", "")),
            f"{res.get('records', 0):,}",
            f"{res.get('passed', 0):,}",
            f"[bold]{failed:,}[/bold]" if failed else "0",
            f"{res.get('skipped', 0):,}",
            "yes" if res.get("halted") else "",
            f"{res.get('duration_seconds', 0.0):.2f}",
            res.get("error") or "",
        )

    totals: List[int] = [
        sum(res.get(key, 0) for res in results)
        for key in ("records", "passed", "failed", "skipped")
    ]
    table.add_section()
    table.add_row(
        "[bold]Total[/bold]",
        *(f"{value:,}" for value in totals),
        "",
        f"{sum(res.get('duration_seconds', 0.0) for res in results):.2f}",
        str(sum(1 for res in results if res.get("error"))) + " file error(s)",
    )

    console.print(table)


def has_failures(results: Sequence[FileResult]) -> bool:
    """Whether any record failed or any file could not be run."""
    return any(res.get("failed") or res.get("error") for res in results)


__all__ = ["has_failures", "print_results"]
