"""Click CLI for picset: render responsive image sets."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from picset.config.hierarchy import load_config_hierarchy

console = Console()
error_console = Console(stderr=True)

logger = logging.getLogger(__name__)


def _setup_logging(verbosity: int, default_level: str = "WARNING") -> None:
    """Configure logging based on verbosity level."""
    level = logging.getLevelName(default_level.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_time=False, show_path=False)],
    )


def _parse_breakpoints(
    ctx: click.Context, param: click.Parameter, values: tuple[str, ...]
) -> list[dict[str, Any]]:
    """Parse ``MAX:WIDTH`` breakpoints; an empty MAX (``:1200``) is the fallback."""
    parsed: list[dict[str, Any]] = []
    for value in values:
        max_width, sep, image_width = value.partition(":")
        if not sep:
            raise click.BadParameter(f"expected MAX:WIDTH or :WIDTH, got '{value}'")
        try:
            parsed.append(
                {
                    "max_width": int(max_width) if max_width.strip() else None,
                    "image_width": int(image_width),
                }
            )
        except ValueError:
            raise click.BadParameter(f"widths must be integers, got '{value}'") from None
    return parsed


@click.group()
@click.version_option(package_name="picset")
def cli() -> None:
    """picset: responsive image sets with a content-addressed render cache."""


@cli.command()
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "-c", "--config", "config_path", type=click.Path(exists=True), help="Image set YAML file."
)
@click.option(
    "-b",
    "--breakpoint",
    "breakpoints",
    multiple=True,
    callback=_parse_breakpoints,
    help="Breakpoint as MAX:WIDTH; ':WIDTH' is the fallback image. Repeatable.",
)
@click.option("-d", "--density", "densities", type=float, multiple=True, help="Pixel density.")
@click.option("-o", "--output-dir", type=click.Path(), help="Directory for rendered files.")
@click.option("--prefix", type=str, default=None, help="Public URL prefix for rendered files.")
@click.option("--cache-file", type=click.Path(), help="JSON cache file.")
@click.option("--no-cache", is_flag=True, default=False, help="Do not persist the render cache.")
@click.option("--threshold", type=float, default=None, help="Size consolidation threshold.")
@click.option("--quality", type=int, default=None, help="Output quality (1-100).")
@click.option("--sequential", is_flag=True, default=False, help="Render one size at a time.")
@click.option("--debug-sizes", is_flag=True, default=False, help="Print sizes onto images.")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug).")
def render(
    input_path: str,
    config_path: str | None,
    breakpoints: list[dict[str, Any]],
    densities: tuple[float, ...],
    output_dir: str | None,
    prefix: str | None,
    cache_file: str | None,
    no_cache: bool,
    threshold: float | None,
    quality: int | None,
    sequential: bool,
    debug_sizes: bool,
    verbose: int,
) -> None:
    """Render a responsive image set for INPUT_PATH and print it as JSON."""
    config = load_config_hierarchy(
        output_directory=output_dir,
        public_path_prefix=prefix,
        cache_file=cache_file,
        cache_disabled=no_cache or None,
    )
    _setup_logging(verbose, config.get("log_level", "WARNING"))

    from picset.config.loader import load_imageset_yaml
    from picset.config.schema import ImageSetConfig

    data: dict[str, Any] = {}
    try:
        if config_path:
            data = load_imageset_yaml(config_path).model_dump(exclude_unset=True)
        for key in ("pixel_densities", "size_threshold", "quality", "sequential", "max_workers"):
            data.setdefault(key, config.get(key))
        if breakpoints:
            data["breakpoints"] = breakpoints
        if densities:
            data["pixel_densities"] = list(densities)
        if threshold is not None:
            data["size_threshold"] = threshold
        if quality is not None:
            data["quality"] = quality
        if sequential:
            data["sequential"] = True
        if debug_sizes:
            data["debug_sizes"] = True
        if "breakpoints" not in data:
            raise click.UsageError("No breakpoints given; use --breakpoint or --config.")
        imageset = ImageSetConfig(**data)
    except (ValidationError, ValueError) as e:
        error_console.print(f"[red]Invalid image set:[/red] {e}")
        sys.exit(1)

    _render(Path(input_path), imageset, config, verbose)


def _render(input_path: Path, imageset: Any, config: dict, verbose: int) -> None:
    """Run one request against the configured cache."""
    from picset.cache.memory import MemoryStore
    from picset.cache.persistent import JsonFileStore
    from picset.core import process_image_request
    from picset.errors.exceptions import PicsetError
    from picset.storage import FileBlob
    from picset.types import ImageResizeRequest

    if config.get("cache_disabled"):
        store = MemoryStore()
    else:
        cache_path = Path(config["cache_file"]).expanduser()
        store = JsonFileStore(FileBlob(cache_path), on_load_error=_load_error_reporter(cache_path))

    request = ImageResizeRequest(
        cache_store=store,
        output_directory=str(config["output_directory"]),
        public_path_prefix=str(config["public_path_prefix"]),
        input_image=input_path,
        breakpoints=imageset.breakpoints,
        pixel_densities=imageset.pixel_densities,
        size_threshold=imageset.size_threshold,
        sequential=imageset.sequential,
        quality=imageset.quality,
        debug_sizes=imageset.debug_sizes,
        max_workers=imageset.max_workers,
    )

    try:
        response = asyncio.run(process_image_request(request))
    except PicsetError as e:
        error_console.print(f"[red]Error:[/red] {e.message or e}")
        sys.exit(1)

    console.print_json(response.image_set.model_dump_json())

    if verbose >= 1:
        _print_summary(response)


def _load_error_reporter(cache_path: Path):
    def report(error: Exception) -> None:
        if not cache_path.exists():
            logger.info("Starting a new cache at %s", cache_path)
        else:
            logger.warning("Ignoring unreadable cache %s: %s", cache_path, error)

    return report


def _print_summary(response: object) -> None:
    """Print a render summary."""
    from picset.types import ImageResizeResponse

    if not isinstance(response, ImageResizeResponse):
        return

    error_console.print()
    table = Table(title="Render Summary", show_header=True)
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    image_set = response.image_set
    table.add_row("Generated", str(response.generated))
    table.add_row("Cached", str(response.cached))
    table.add_row("Aspect", f"{image_set.aspect:.5f}")
    table.add_row("Sources", str(len(image_set.sources)))
    table.add_row("Fallback srcset", str(len(image_set.img)))
    error_console.print(table)


@cli.group()
def cache() -> None:
    """Cache management commands."""


@cache.command("stats")
@click.option("--cache-file", type=click.Path(), help="JSON cache file.")
def cache_stats(cache_file: str | None) -> None:
    """Show cache statistics."""
    from picset.cache.persistent import JsonFileStore
    from picset.storage import FileBlob

    config = load_config_hierarchy(cache_file=cache_file)
    cache_path = Path(config["cache_file"]).expanduser()
    errors: list[str] = []
    store = JsonFileStore(FileBlob(cache_path), on_load_error=lambda e: errors.append(e.message))
    asyncio.run(store.load())

    table = Table(title="Cache Statistics", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value")

    stats = store.stats()
    size_kb = cache_path.stat().st_size / 1024 if cache_path.exists() else 0.0
    table.add_row("Cache file", str(cache_path))
    table.add_row("Entries", str(stats.entries))
    table.add_row("Size (KB)", f"{size_kb:.1f}")
    if errors and cache_path.exists():
        table.add_row("Status", f"[yellow]unreadable: {errors[0]}[/yellow]")

    console.print(table)


@cache.command("clear")
@click.option("--cache-file", type=click.Path(), help="JSON cache file.")
@click.confirmation_option(prompt="Are you sure you want to clear the cache?")
def cache_clear(cache_file: str | None) -> None:
    """Clear all cached renders (rendered files are kept)."""
    config = load_config_hierarchy(cache_file=cache_file)
    cache_path = Path(config["cache_file"]).expanduser()
    cache_path.unlink(missing_ok=True)
    console.print("[green]Cache cleared.[/green]")


@cli.command("validate-config")
@click.argument("config_yaml", type=click.Path(exists=True))
def validate_config(config_yaml: str) -> None:
    """Validate an image set YAML file."""
    from picset.config.loader import load_imageset_yaml

    try:
        config = load_imageset_yaml(config_yaml)
        console.print(f"[green]Valid image set:[/green] {len(config.breakpoints)} breakpoints")
        for bp in config.breakpoints:
            label = "fallback" if bp.is_fallback else f"max-width {bp.max_width}px"
            console.print(f"    - {label}: {bp.image_width}px")
        densities = ", ".join(f"{d:g}x" for d in config.pixel_densities)
        console.print(f"  Densities: {densities}")
    except Exception as e:
        error_console.print(f"[red]Invalid image set:[/red] {e}")
        sys.exit(1)


def main() -> None:
    """Entry point for the CLI."""
    cli()
