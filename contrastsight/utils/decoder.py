"""Image decoding — file or bytes to an RGBA8 numpy buffer.

Raster formats go through Pillow, SVG through CairoSVG, EMF/WMF through an
ImageMagick subprocess. Output is always (H, W, 4) uint8, top-left origin,
unassociated alpha.
"""

from __future__ import annotations

import functools
import io
import logging
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from numpy.typing import NDArray
from PIL import Image, UnidentifiedImageError

from contrastsight.errors import DecodeError, ExternalToolError

logger = logging.getLogger(__name__)

RASTER_EXTENSIONS = {".png", ".jpg", ".jpeg"}
SVG_EXTENSIONS = {".svg"}
VECTOR_EXTENSIONS = {".emf", ".wmf"}
SUPPORTED_EXTENSIONS = RASTER_EXTENSIONS | SVG_EXTENSIONS | VECTOR_EXTENSIONS

# ImageMagick 7 ships "magick"; 6.x only "convert"
_MAGICK_CANDIDATES = ("magick", "convert")
_MAGICK_TIMEOUT_S = 120


@dataclass(frozen=True)
class DecodeOptions:
    svg_density: int = 300
    vector_density: int = 300
    max_size: int = 0  # longest side; 0 = keep native size


@functools.lru_cache(maxsize=1)
def find_magick_command() -> str | None:
    """Resolve the ImageMagick executable once per process."""
    for cmd in _MAGICK_CANDIDATES:
        try:
            res = subprocess.run([cmd, "-version"], capture_output=True, timeout=_MAGICK_TIMEOUT_S)
        except (OSError, subprocess.TimeoutExpired):
            continue
        if res.returncode == 0:
            logger.debug("Using ImageMagick command %r", cmd)
            return cmd
    return None


def _to_rgba_array(img: Image.Image, source: str, max_size: int) -> NDArray[np.uint8]:
    w, h = img.size
    if w == 0 or h == 0:
        raise DecodeError(f"Could not read image size: {source}")
    rgba = img.convert("RGBA")
    if max_size and max(w, h) > max_size:
        scale = max_size / max(w, h)
        new_size = (max(1, round(w * scale)), max(1, round(h * scale)))
        rgba = rgba.resize(new_size, Image.Resampling.LANCZOS)
        logger.debug("Downscaled %s from %dx%d to %dx%d", source, w, h, *new_size)
    return np.array(rgba, dtype=np.uint8)


def _open_raster(data: bytes | Path, source: str, max_size: int) -> NDArray[np.uint8]:
    try:
        with Image.open(io.BytesIO(data) if isinstance(data, bytes) else data) as img:
            img.load()
            return _to_rgba_array(img, source, max_size)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise DecodeError(f"Could not decode {source}: {e}") from e


def rasterize_svg(svg: bytes | Path, source: str, density: int) -> bytes:
    """Rasterize SVG to PNG bytes using CairoSVG at the given DPI."""
    try:
        import cairosvg
    except (ImportError, OSError) as e:
        raise ExternalToolError(f"CairoSVG (libcairo) is not available for SVG rasterization: {e}") from e

    try:
        if isinstance(svg, Path):
            return cairosvg.svg2png(url=str(svg), dpi=density)
        return cairosvg.svg2png(bytestring=svg, dpi=density)
    except Exception as e:
        raise DecodeError(f"SVG rasterization failed for {source}: {e}") from e


def convert_vector_to_png(path: Path, density: int) -> bytes:
    """Convert EMF/WMF to PNG bytes via ImageMagick."""
    cmd = find_magick_command()
    if not cmd:
        raise ExternalToolError("ImageMagick not found (magick/convert) for EMF/WMF conversion")

    with tempfile.TemporaryDirectory(prefix="contrastsight-") as tmp:
        out_path = Path(tmp) / f"{path.name}.png"
        args = [cmd, "-density", str(density), str(path), "-background", "none", "-alpha", "on", str(out_path)]
        try:
            res = subprocess.run(args, capture_output=True, text=True, timeout=_MAGICK_TIMEOUT_S)
        except (OSError, subprocess.TimeoutExpired) as e:
            raise ExternalToolError(f"ImageMagick convert failed for {path}: {e}") from e
        if res.returncode != 0 or not out_path.exists():
            raise ExternalToolError(f"ImageMagick convert failed for {path}: {res.stderr.strip()}")
        return out_path.read_bytes()


def decode_image(path: str | Path, options: DecodeOptions | None = None) -> NDArray[np.uint8]:
    """Decode an image file into an (H, W, 4) uint8 RGBA buffer."""
    options = options or DecodeOptions()
    path = Path(path)
    source = str(path)
    if not path.is_file():
        raise DecodeError(f"Not a readable file: {source}")

    ext = path.suffix.lower()
    if ext in SVG_EXTENSIONS:
        png = rasterize_svg(path, source, options.svg_density)
        return _open_raster(png, source, options.max_size)
    if ext in VECTOR_EXTENSIONS:
        png = convert_vector_to_png(path, options.vector_density)
        return _open_raster(png, source, options.max_size)
    return _open_raster(path, source, options.max_size)


def decode_bytes(data: bytes, filename: str = "", options: DecodeOptions | None = None) -> NDArray[np.uint8]:
    """Decode uploaded bytes; SVG is detected by extension or an <svg prefix."""
    options = options or DecodeOptions()
    source = filename or "<upload>"
    if not data:
        raise DecodeError(f"Empty image data: {source}")

    ext = Path(filename).suffix.lower() if filename else ""
    head = data[:512].lstrip().lower()
    if ext in SVG_EXTENSIONS or head.startswith(b"<svg") or (head.startswith(b"<?xml") and b"<svg" in head):
        png = rasterize_svg(data, source, options.svg_density)
        return _open_raster(png, source, options.max_size)
    if ext in VECTOR_EXTENSIONS:
        with tempfile.TemporaryDirectory(prefix="contrastsight-") as tmp:
            src = Path(tmp) / Path(filename).name
            src.write_bytes(data)
            png = convert_vector_to_png(src, options.vector_density)
        return _open_raster(png, source, options.max_size)
    return _open_raster(data, source, options.max_size)
