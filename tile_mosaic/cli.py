"""Rich command-line interface powered by Typer."""

from __future__ import annotations

import logging
import time
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel

from tile_mosaic.adaptive import suggest_settings
from tile_mosaic.config import AppConfig, MosaicParams
from tile_mosaic.errors import MosaicError, MosaicIOError
from tile_mosaic.image_io import encode_png_data_uri
from tile_mosaic.session import LibrarySession

app = typer.Typer(
    name="tile-mosaic",
    help="Build photomosaics out of a folder of tile images.",
    add_completion=False,
    rich_markup_mode="rich",
)
console = Console()


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=False)],
    )


def _fail(exc: MosaicError) -> typer.Exit:
    console.print(f"[bold red]✗[/bold red] {escape(str(exc))}")
    return typer.Exit(1)


# Defaults come from AppConfig - single source of truth
_DEFAULTS = AppConfig()


# -- generate command --------------------------------------------------

@app.command()
def generate(
    target: Path = typer.Argument(..., help="Path to the target image"),
    tiles: Path = typer.Option(
        ..., "--tiles", "-t", help="Folder of tile images (searched recursively)",
    ),
    output: Path = typer.Option(
        _DEFAULTS.output_path, "--output", "-o", help="Where to write the PNG",
    ),
    tile_size: int = typer.Option(
        _DEFAULTS.tile_size, "--tile-size", "-s", help="Tile edge in pixels",
    ),
    penalty: float = typer.Option(
        _DEFAULTS.penalty_factor, "--penalty", "-p", help="Reuse penalty (0 = pure colour match)",
    ),
    sigma_divisor: float = typer.Option(
        _DEFAULTS.sigma_divisor, "--sigma",
        help="Gaussian sigma = tile_size / SIGMA; <= 0 for a plain average",
    ),
    data_uri: bool = typer.Option(
        False, "--data-uri", help="Print the PNG data URI instead of writing a file",
    ),
    workers: int | None = typer.Option(
        _DEFAULTS.max_workers, "--workers", "-w", help="Threads used to load tiles",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Generate a mosaic of TARGET from the images in --tiles."""
    _setup_logging(verbose)

    console.print(Panel.fit(
        f"[bold]TILE MOSAIC[/bold]\n"
        f"Tile size: {tile_size}  |  Penalty: {penalty}  |  Sigma divisor: {sigma_divisor}\n"
        f"Tiles: {tiles}",
        border_style="cyan",
    ))

    t0 = time.perf_counter()
    session = LibrarySession(max_workers=workers)
    try:
        params = MosaicParams(
            target_image_path=target,
            tile_directory=tiles,
            tile_size=tile_size,
            penalty_factor=penalty,
            sigma_divisor=sigma_divisor,
        )
        image = session.render(params)
        if data_uri:
            typer.echo(encode_png_data_uri(image))
            return
        try:
            output.parent.mkdir(parents=True, exist_ok=True)
            image.save(output, format="PNG")
        except OSError as exc:
            msg = f"Failed to write {output}: {exc}"
            raise MosaicIOError(msg) from exc
    except MosaicError as exc:
        raise _fail(exc) from exc

    lib = session.library
    console.print(
        f"[green]✓[/green] Saved to {output}  "
        f"[dim]{image.width}x{image.height}  tiles={len(lib) if lib else 0}"
        f"  time={time.perf_counter() - t0:.1f}s[/dim]"
    )


# -- suggest command ---------------------------------------------------

@app.command()
def suggest(
    target: Path = typer.Argument(..., help="Path to the target image"),
    tiles: Path = typer.Option(..., "--tiles", "-t", help="Folder of tile images"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Suggest a tile size and penalty for TARGET and the --tiles folder."""
    _setup_logging(verbose)
    try:
        settings = suggest_settings(target, tiles)
    except MosaicError as exc:
        raise _fail(exc) from exc

    console.print(Panel.fit(
        f"Image: {settings.image_width}x{settings.image_height}  |  "
        f"Tiles found: {settings.tile_count}\n"
        f"[bold]--tile-size {settings.tile_size}  --penalty {settings.penalty_factor:g}[/bold]",
        title="Suggested settings",
        border_style="green",
    ))


if __name__ == "__main__":
    app()
