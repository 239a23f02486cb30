"""
Text-to-Points
===============

Turns a string into a flat point set: the text is rasterized centred on a
square off-screen canvas, the raster is sampled on a regular pixel grid and
every lit sample becomes a 3D point on the z = 0 plane.

Rasterization is behind the ``TextRasterizer`` capability so the sampling
can be exercised with synthetic pixel buffers and the drawing backend can
be swapped. The bundled backend uses OpenCV:

- with a TrueType ``font_path`` it draws through ``cv2.freetype`` (shipped
  with opencv-contrib), which handles non-Latin scripts such as Sinhala;
- without one it falls back to OpenCV's Hershey font, which only has ASCII
  glyphs. Other characters are dropped, so a fully non-Latin string gives
  an empty raster (and an empty shape) rather than garbage.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Optional, Protocol

import cv2
import numpy as np

logger = logging.getLogger(__name__)


class ShapeGenerationError(Exception):
    """A shape's point set could not be generated."""


class RasterizerUnavailableError(ShapeGenerationError):
    """No usable drawing surface/font for text rasterization.

    Distinct from an empty result: a raster with no lit pixels is a valid
    (empty) shape.
    """


class TextRasterizer(Protocol):
    """Capability: draw ``text`` centred on a ``size`` x ``size`` canvas."""

    def rasterize(self, text: str, size: int) -> np.ndarray:
        """Return a 2D uint8 luminance buffer (or an RGB/RGBA buffer)."""
        ...


@dataclass
class TextSamplingConfig:
    """Canvas and sampling settings for text shapes."""
    canvas_size: int = 2048
    step: int = 8           # Pixel stride between samples
    scale: float = 0.12     # Scene units per canvas pixel
    threshold: int = 128    # Luminance a sample must exceed to emit a point
    font_path: Optional[str] = None
    font_height: int = 350  # Glyph height in canvas pixels

    @classmethod
    def from_dict(cls, config: dict) -> "TextSamplingConfig":
        """Create config from the ``shapes`` config section."""
        return cls(
            canvas_size=config.get("text_canvas_size", 2048),
            step=config.get("text_step", 8),
            scale=config.get("text_scale", 0.12),
            threshold=config.get("text_threshold", 128),
            font_path=config.get("font_path"),
            font_height=config.get("font_height", 350),
        )


class OpenCVTextRasterizer:
    """
    OpenCV text rasterizer.

    Example:
        >>> rasterizer = OpenCVTextRasterizer("/usr/share/fonts/NotoSansSinhala-Regular.ttf")
        >>> pixels = rasterizer.rasterize("ආයුබෝවන්", 2048)
    """

    def __init__(self, font_path: Optional[str] = None, font_height: int = 350):
        self.font_path = font_path
        self.font_height = font_height
        self._ft = None

    def rasterize(self, text: str, size: int) -> np.ndarray:
        canvas = np.zeros((size, size, 3), dtype=np.uint8)

        if self.font_path:
            self._draw_freetype(canvas, text, size)
        else:
            self._draw_hershey(canvas, text, size)

        return cv2.cvtColor(canvas, cv2.COLOR_BGR2GRAY)

    def _freetype(self):
        if self._ft is not None:
            return self._ft

        if not hasattr(cv2, "freetype"):
            raise RasterizerUnavailableError(
                "OpenCV was built without the freetype module; "
                "install opencv-contrib-python to render TrueType fonts"
            )
        if not Path(self.font_path).is_file():
            raise RasterizerUnavailableError(f"Font file not found: {self.font_path}")

        ft = cv2.freetype.createFreeType2()
        try:
            ft.loadFontData(fontFileName=str(self.font_path), idx=0)
        except cv2.error as e:
            raise RasterizerUnavailableError(f"Cannot load font {self.font_path}: {e}") from e

        self._ft = ft
        return ft

    def _draw_freetype(self, canvas: np.ndarray, text: str, size: int) -> None:
        ft = self._freetype()
        (w, h), _ = ft.getTextSize(text, self.font_height, -1)
        org = ((size - w) // 2, (size + h) // 2)
        ft.putText(canvas, text, org, self.font_height, (255, 255, 255), -1, cv2.LINE_AA, True)

    def _draw_hershey(self, canvas: np.ndarray, text: str, size: int) -> None:
        ascii_text = text.encode("ascii", "ignore").decode("ascii").strip()
        if ascii_text != text.strip():
            logger.warning("Hershey font cannot draw %r; configure shapes.font_path "
                           "for non-Latin text", text)
        if not ascii_text:
            return

        font = cv2.FONT_HERSHEY_SIMPLEX
        thickness = max(1, self.font_height // 12)
        font_scale = cv2.getFontScaleFromHeight(font, self.font_height, thickness)
        (w, h), _ = cv2.getTextSize(ascii_text, font, font_scale, thickness)

        # Shrink to fit long strings on the canvas
        if w > size * 0.95:
            font_scale *= size * 0.95 / w
            (w, h), _ = cv2.getTextSize(ascii_text, font, font_scale, thickness)

        org = ((size - w) // 2, (size + h) // 2)
        cv2.putText(canvas, ascii_text, org, font, font_scale, (255, 255, 255),
                    thickness, cv2.LINE_AA)


def _luminance(pixels: np.ndarray) -> np.ndarray:
    if pixels.ndim == 2:
        return pixels
    if pixels.ndim == 3 and pixels.shape[2] == 1:
        return pixels[:, :, 0]
    if pixels.ndim == 3 and pixels.shape[2] in (3, 4):
        return cv2.cvtColor(np.ascontiguousarray(pixels[:, :, :3]), cv2.COLOR_RGB2GRAY)
    raise RasterizerUnavailableError(f"Unsupported pixel buffer shape {pixels.shape}")


def sample_raster(
    pixels: np.ndarray,
    step: int = 8,
    scale: float = 0.12,
    threshold: int = 128,
) -> np.ndarray:
    """
    Convert a rasterized canvas into centred scene points.

    Every ``step``-th pixel in both directions is tested; lit samples map to
    ``((px - w/2) * scale, -(py - h/2) * scale, 0)``. The y flip turns the
    canvas's top-left origin into a centred, y-up scene.

    Returns:
        float32 array of shape (M, 3); M may be 0
    """
    gray = _luminance(pixels)
    height, width = gray.shape

    sampled = gray[::step, ::step]
    rows, cols = np.nonzero(sampled > threshold)

    points = np.zeros((len(rows), 3), dtype=np.float32)
    points[:, 0] = (cols * step - width / 2) * scale
    points[:, 1] = -(rows * step - height / 2) * scale
    return points


def text_to_points(
    text: str,
    rasterizer: TextRasterizer,
    config: Optional[TextSamplingConfig] = None,
) -> np.ndarray:
    """
    Rasterize ``text`` and sample it into a point set.

    Raises:
        RasterizerUnavailableError: no drawing surface could be produced
    """
    config = config or TextSamplingConfig()
    raw = rasterizer.rasterize(text, config.canvas_size)
    pixels = None if raw is None else np.asarray(raw)
    if pixels is None or pixels.ndim < 2 or pixels.size == 0:
        raise RasterizerUnavailableError(f"Rasterizer produced no surface for {text!r}")

    points = sample_raster(pixels, config.step, config.scale, config.threshold)
    if len(points) == 0:
        logger.warning("Text %r produced no points (unsupported glyphs?)", text)
    return points


def text_points_for_many(
    texts: Iterable[str],
    rasterizer: TextRasterizer,
    config: Optional[TextSamplingConfig] = None,
) -> Dict[str, np.ndarray]:
    """Pre-render several strings at once."""
    return {text: text_to_points(text, rasterizer, config) for text in texts}
