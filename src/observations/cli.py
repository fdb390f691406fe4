# file: src/observations/cli.py
from __future__ import annotations

import logging
import sys
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from src.observations.config import load_config
from src.observations.tasks import run_full_pipeline

logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(message)s")
app = typer.Typer(add_completion=False)
console = Console()


@app.callback()
def main() -> None:
    """Observation harvest pipeline."""


def _strip_ipykernel_args(argv: list[str]) -> list[str]:
    """Jupyter/ipykernel injects `-f <connection_file>` into sys.argv."""
    out = [argv[0]]
    i = 1
    while i < len(argv):
        a = argv[i]
        if a in ("-f", "--f"):
            i += 2  # skip flag + value
            continue
        if a.startswith("--f="):
            i += 1
            continue
        out.append(a)
        i += 1
    return out


@app.command()
def run(
    iconic_taxa: Optional[str] = None,
    place_id: Optional[int] = None,
    term_id: Optional[int] = None,
    term_value_id: Optional[int] = None,
    d1: Optional[str] = None,
    per_page: Optional[int] = None,
    request_delay: Optional[float] = None,
    max_pages: Optional[int] = None,
    data_dir: Optional[str] = None,
    dataset_name: Optional[str] = None,
    overwrite: bool = False,
    confirm_short_page: bool = False,
):
    """Collect observations, derive date fields, write parquet outputs."""
    cfg = load_config(
        iconic_taxa=iconic_taxa,
        place_id=place_id,
        term_id=term_id,
        term_value_id=term_value_id,
        d1=d1,
        per_page=per_page,
        request_delay=request_delay,
        max_pages=max_pages,
        data_dir=data_dir,
        dataset_name=dataset_name,
        # flags only override the env when switched on
        overwrite=overwrite or None,
        confirm_short_page=confirm_short_page or None,
    )

    results = run_full_pipeline(cfg)

    table = Table(title="Observation Harvest Results")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green")

    for k, v in results.items():
        table.add_row(str(k), str(v))

    console.print(table)


if __name__ == "__main__":
    sys.argv = _strip_ipykernel_args(sys.argv)
    app(standalone_mode=False)  # <-- prevents SystemExit in Jupyter
