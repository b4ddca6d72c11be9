from __future__ import annotations

import typer
from rich import print
from rich.markup import escape
from rich.table import Table

from nog_een_bandje.config.settings import ProjectConfig, load_config
from nog_een_bandje.data.store import DEFAULT_COUNT, Dataset, LoadError, Performance, load
from nog_een_bandje.utils.io import save_json
from nog_een_bandje.web.server import DOWNLOAD_FILENAME, serve as serve_http

app = typer.Typer(help="Nog een bandje: Pinkpop & Lowlands artist explorer")

DEFAULT_CONFIG = "configs/nog_een_bandje.yaml"


def _load_dataset(cfg: ProjectConfig, data_file: str | None) -> Dataset:
    path = data_file or cfg.paths.data_file
    print(f"Loading {path} into memory...")
    try:
        dataset = load(path)
    except LoadError as exc:
        print(f"[bold red]Startup failed:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    print(f"Successfully loaded {len(dataset)} total artist performances.")
    return dataset


def _performance_table(title: str, performances: list[Performance]) -> Table:
    table = Table(title=title)
    table.add_column("Artist")
    table.add_column("Festival")
    table.add_column("Year", justify="right")
    for perf in performances:
        table.add_row(escape(perf.name), perf.festival.value, str(perf.year))
    return table


@app.command()
def serve(
    config: str = typer.Option(DEFAULT_CONFIG, help="Path to YAML config"),
    data_file: str | None = typer.Option(None, help="Performance data file (overrides config)"),
    host: str | None = typer.Option(None, help="Host to bind (overrides config)"),
    port: int | None = typer.Option(None, help="Port to bind (overrides config)"),
) -> None:
    """Load the dataset and serve the UI and JSON API."""
    cfg = load_config(config)
    dataset = _load_dataset(cfg, data_file)
    serve_http(
        dataset,
        host=host or cfg.server.host,
        port=port if port is not None else cfg.server.port,
        access_log=cfg.server.access_log,
    )


@app.command()
def random(
    count: int = typer.Option(DEFAULT_COUNT, help="How many performances (clamped to 1-5)"),
    config: str = typer.Option(DEFAULT_CONFIG, help="Path to YAML config"),
    data_file: str | None = typer.Option(None, help="Performance data file (overrides config)"),
) -> None:
    dataset = _load_dataset(load_config(config), data_file)
    print(_performance_table("Random bands", dataset.sample(count)))


@app.command()
def search(
    query: str = typer.Argument(..., help="Part of an artist name (at least 2 characters)"),
    config: str = typer.Option(DEFAULT_CONFIG, help="Path to YAML config"),
    data_file: str | None = typer.Option(None, help="Performance data file (overrides config)"),
) -> None:
    dataset = _load_dataset(load_config(config), data_file)
    matches = dataset.search(query)
    if not matches:
        print(f'No matches found for "{escape(query)}".')
        return
    print(_performance_table(f"Matches for '{escape(query)}'", matches))


@app.command()
def export(
    out: str = typer.Option(DOWNLOAD_FILENAME, help="Where to write the flattened list"),
    config: str = typer.Option(DEFAULT_CONFIG, help="Path to YAML config"),
    data_file: str | None = typer.Option(None, help="Performance data file (overrides config)"),
) -> None:
    """Write the same payload that /api/all-bands serves."""
    dataset = _load_dataset(load_config(config), data_file)
    target = save_json(out, dataset.to_records())
    print(f"Wrote {len(dataset)} performances to {target}")


if __name__ == "__main__":
    app()
