import typer
from rpal import artwork, extract, legend, render, file_utils
from rpal.source import ImageAvailable
from pathlib import Path
from typing import Optional, List
import sys

import rich.traceback
from rich.console import Console


def validate_output_paths(paths: List[Optional[Path]], overwrite: bool = False) -> None:
    clobbered_files_found = [str(p) for p in paths if p is not None and p.exists()]
    if clobbered_files_found and not overwrite:
        typer.secho("Error: Files already exist:", fg=typer.colors.RED)
        for path_str in clobbered_files_found: typer.secho(f"  {path_str}", fg=typer.colors.RED)
        typer.secho("Use --yes (-y) to overwrite.", fg=typer.colors.YELLOW); raise typer.Exit(code=1)


def palette_cli(
    query: Optional[str] = typer.Argument(
        None,
        help="Free-text Rijksmuseum search, e.g. 'Vermeer'. Omit when using --image.",
        metavar="QUERY",
    ),
    image_path: Optional[Path] = typer.Option(
        None, "--image", help="Local image file to use instead of a Rijksmuseum query.",
        exists=True, file_okay=True, dir_okay=False, readable=True, resolve_path=True,
    ),
    # --- Palette Options ---
    num_colors: int = typer.Option(
        extract.DEFAULT_K, "--num-colors", "-k", help=f"Number of palette colors. Default: {extract.DEFAULT_K}."
    ),
    lightness: float = typer.Option(
        extract.DEFAULT_LIGHTNESS, "--lightness", "-l",
        help=f"0 picks the darkest tone of every color, 1 the lightest. Default: {extract.DEFAULT_LIGHTNESS}."
    ),
    seed: int = typer.Option(
        extract.KMEANS_SEED, "--seed", help=f"Random seed for clustering. Default: {extract.KMEANS_SEED}."
    ),
    explore: bool = typer.Option(
        False, "--explore", help="Show palettes for lightness 0.1 through 0.9 instead of a single one."
    ),
    # --- Reduction Options ---
    resize_dim: Optional[int] = typer.Option(None, "--resize-dim", min=1, help="Square resize dimension. Default: 512."),
    block_size: Optional[int] = typer.Option(None, "--block-size", min=1, help="Averaging block size in pixels. Default: 17."),
    blur_sigma: Optional[float] = typer.Option(None, "--blur-sigma", min=0.0, help="Per-block blur sigma. Default: 5."),
    # --- Output Options ---
    swatch_png: Optional[Path] = typer.Option(None, "--swatch-png", help="Write the palette as a PNG swatch strip."),
    swatch_svg: Optional[Path] = typer.Option(None, "--swatch-svg", help="Write the palette as an SVG swatch strip."),
    swatch_size: int = typer.Option(40, "--swatch-size", min=10, help="Swatch size for PNG/SVG output. Default: 40px."),
    yes: bool = typer.Option(False, "--yes", "-y", help="Overwrite existing files."),
):
    """
    Extracts a color palette from a Rijksmuseum painting or a local image.
    """
    command_line_str = " ".join(sys.argv)
    console = Console()

    if (query is None) == (image_path is None):
        typer.secho("Error: Give either a QUERY or --image, not both or neither.", fg=typer.colors.RED)
        raise typer.Exit(code=2)

    validate_output_paths([swatch_png, swatch_svg], overwrite=yes)

    source_label = str(image_path) if image_path else f"Rijksmuseum query '{query}'"
    typer.echo(f"Fetching image from {source_label}...")
    result = artwork.resolve_image(query=query, image_path=image_path)
    if not isinstance(result, ImageAvailable):
        typer.secho(f"No palette available: {result.reason}", fg=typer.colors.YELLOW)
        raise typer.Exit(code=1)

    try:
        art = artwork.ArtPalette(
            result.image, title=result.title,
            size=resize_dim, block_size=block_size, blur_sigma=blur_sigma,
        )
        palette = art.tune(lightness=lightness, k=num_colors, seed=seed)
        explored = art.explore(k=num_colors, seed=seed) if explore else None
    except extract.InvalidParameterError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=2)

    title = art.title or source_label
    if explored is not None:
        render.print_exploration(explored, console=console, title=title)
    else:
        render.print_palette(palette, console=console, title=title)

    metadata = {
        "Title": title,
        "Lightness": str(lightness),
        "Seed": str(seed),
    }
    if result.url:
        metadata["ImageURL"] = result.url

    if swatch_png:
        legend_image = legend.create_legend_image(palette, swatch_size=swatch_size)
        file_utils.save_palette_png(
            legend_image, swatch_png,
            command_line_invocation=command_line_str,
            additional_metadata=file_utils.palette_metadata(palette, metadata),
        )
        typer.echo(f"Swatch PNG saved to: {swatch_png}")

    if swatch_svg:
        file_utils.save_palette_svg(
            swatch_svg, palette, swatch_size=swatch_size,
            command_line_invocation=command_line_str,
            additional_metadata=metadata,
        )
        typer.echo(f"Swatch SVG saved to: {swatch_svg}")

    typer.secho(" ".join(palette.hex), fg=typer.colors.GREEN)


if __name__ == "__main__":
    rich.traceback.install(show_locals=False, suppress=[typer]) # type: ignore
    typer.run(palette_cli)
