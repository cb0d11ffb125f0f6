"""Typer-based CLI entry point."""

from __future__ import annotations

import functools
import logging
import math
import os
from pathlib import Path

import typer
from rich import print
from rich.table import Table

from .core.geometry import compute_crop_geometry
from .core.rasterizer import ExportRequest, encode_image, export_pixel_ratio, rasterize_crop
from .errors import ExportError, ICropError, ImageDecodeError, OptionsValidationError
from .models.types import CropShape, TransformState
from .settings.schema import options_from_mapping
from .utils.image_loader import alpha_bounding_box, load_qimage

app = typer.Typer(help="Render crops of an image through the iCrop transform engine")

_GUI_APP = None


def _handle_errors(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (ImageDecodeError, OptionsValidationError) as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(1) from exc
        except ICropError as exc:
            typer.echo(f"Unexpected error: {exc}", err=True)
            raise typer.Exit(1) from exc

    return wrapper


def _parse_viewport(value: str) -> tuple[float, float]:
    try:
        width_text, height_text = value.lower().split("x", 1)
        width, height = float(width_text), float(height_text)
    except ValueError:
        raise typer.BadParameter(f"Expected WIDTHxHEIGHT, got {value!r}") from None
    if width <= 0 or height <= 0:
        raise typer.BadParameter("Viewport dimensions must be positive")
    return width, height


def _ensure_gui_application() -> None:
    """Create a headless ``QGuiApplication`` so image plugins are available."""

    global _GUI_APP
    from PySide6.QtGui import QGuiApplication

    if QGuiApplication.instance() is None:
        os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
        _GUI_APP = QGuiApplication([])


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command("export")
@_handle_errors
def export_command(
    image_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Source image"),
    output: Path = typer.Argument(..., dir_okay=False, help="Destination PNG"),
    shape: str = typer.Option("circle", help="circle or rectangle"),
    viewport: str = typer.Option("400x300", help="Preview size as WIDTHxHEIGHT"),
    crop_percentage: float = typer.Option(0.8, help="Share of the shorter side used by circular crops"),
    rect_aspect_ratio: float = typer.Option(2.0, help="Width/height of rectangular crops"),
    x: float = typer.Option(0.0, help="Horizontal offset of the image centre in preview pixels"),
    y: float = typer.Option(0.0, help="Vertical offset of the image centre in preview pixels"),
    scale: float = typer.Option(1.0, help="Uniform scale (clamped to 0.1-10)"),
    angle_deg: float = typer.Option(0.0, help="Rotation in degrees"),
    resolution: str = typer.Option("native", help="native or viewport"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Crop IMAGE_PATH as the interactive view would and write a PNG."""

    _configure_logging(verbose)
    _ensure_gui_application()
    options = options_from_mapping(
        {
            "shape": shape,
            "crop_percentage": crop_percentage,
            "rect_aspect_ratio": rect_aspect_ratio,
            "export_resolution": resolution,
        }
    )
    width, height = _parse_viewport(viewport)
    image = load_qimage(image_path)
    if image is None:
        raise ImageDecodeError(f"Could not decode {image_path}")

    state = TransformState(x=x, y=y, scale=scale, angle=math.radians(angle_deg)).clamped()
    geometry = compute_crop_geometry(
        options.shape, width, height, options.crop_percentage, options.rect_aspect_ratio
    )
    request = ExportRequest.from_geometry(
        state,
        image,
        geometry,
        pixel_ratio=export_pixel_ratio(state, options.export_resolution),
        render_hints=options.render_hints(),
    )
    raster = rasterize_crop(request)
    if raster is None:
        raise ExportError("Nothing to export: the crop area is empty")
    output.write_bytes(encode_image(raster))

    bounds = alpha_bounding_box(raster)
    print(f"[green]Wrote {raster.width()}x{raster.height()} crop to {output}")
    if bounds is None:
        print("[yellow]The crop area does not overlap the image")


@app.command("geometry")
@_handle_errors
def geometry_command(
    viewport: str = typer.Option("400x300", help="Preview size as WIDTHxHEIGHT"),
    crop_percentage: float = typer.Option(0.8),
    rect_aspect_ratio: float = typer.Option(2.0),
) -> None:
    """Print the crop outline for every shape at the given viewport size."""

    options_from_mapping({"crop_percentage": crop_percentage, "rect_aspect_ratio": rect_aspect_ratio})
    width, height = _parse_viewport(viewport)
    table = Table(title=f"Crop geometry for {width:g}x{height:g}")
    for column in ("shape", "crop width", "crop height", "left", "top"):
        table.add_column(column)
    for shape in CropShape:
        geometry = compute_crop_geometry(shape, width, height, crop_percentage, rect_aspect_ratio)
        rect = geometry.rect
        table.add_row(
            shape.value,
            f"{geometry.crop_width:g}",
            f"{geometry.crop_height:g}",
            f"{rect.left():g}",
            f"{rect.top():g}",
        )
    print(table)


if __name__ == "__main__":  # pragma: no cover
    app()
