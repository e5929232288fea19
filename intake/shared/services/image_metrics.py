"""
Image Codec & Metrics

Pure, synchronous image analysis used by the worker pipeline.

Metrics:
========
- format / width / height: from the decoded image
- blur_score: variance of the Laplacian of luminance, divided by a
  normalization constant (higher = sharper)
- color_depth: 8 or 16, from a sample of pixels expanded to the 16-bit RGBA model

Decoding:
=========
The generic Pillow decoder is tried first. If it cannot identify the
format, JPEG and then PNG are tried explicitly. Anything that still fails
raises ImageDecodeError.

These functions are CPU-bound; the pipeline runs analyze_image_bytes in a
worker thread via asyncio.to_thread.

Usage:
======
    metrics = analyze_image_bytes(data)
    metrics.blur_score  # 3.41
"""

from dataclasses import dataclass
import io
import math
from typing import Callable

import numpy as np
from PIL import Image, JpegImagePlugin, PngImagePlugin, UnidentifiedImageError

from intake.config.settings import settings
from intake.shared.core.exceptions import ImageDecodeError
from intake.shared.core.logging import get_logger

logger = get_logger(__name__)

# Rec. 709 luma weights
LUMA_R = 0.2126
LUMA_G = 0.7152
LUMA_B = 0.0722

# Explicit codecs tried when the generic decoder cannot identify the bytes
FALLBACK_DECODERS: tuple[tuple[str, Callable[[io.BytesIO], Image.Image]], ...] = (
    ("jpeg", JpegImagePlugin.JpegImageFile),
    ("png", PngImagePlugin.PngImageFile),
)

# Pillow modes that carry more than 8 bits per sample
WIDE_MODES = ("I", "I;16", "I;16B", "I;16L", "I;16N", "F")


@dataclass
class ImageMetrics:
    """Quality metrics for one decoded image."""

    format: str
    width: int
    height: int
    blur_score: float
    color_depth: int


# ═══════════════════════════════════════════════════════════════════════════════
# DECODING
# ═══════════════════════════════════════════════════════════════════════════════


def decode_image(data: bytes) -> Image.Image:
    """
    Decode raw bytes into a fully loaded Pillow image.

    Args:
        data: Encoded image bytes

    Returns:
        Loaded PIL image

    Raises:
        ImageDecodeError: If no supported codec can decode the bytes
    """
    if not data:
        raise ImageDecodeError("Unable to decode image: empty input")

    try:
        image = Image.open(io.BytesIO(data))
        image.load()
        return image
    except UnidentifiedImageError:
        pass
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        raise ImageDecodeError(f"Unable to decode image: {e}") from e

    errors = []
    for name, decoder in FALLBACK_DECODERS:
        try:
            image = decoder(io.BytesIO(data))
            image.load()
            logger.debug("Image decoded by fallback codec", codec=name)
            return image
        except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
            errors.append(f"{name}: {e}")

    raise ImageDecodeError(
        "Unable to decode image: format not recognized",
        details={"attempts": errors},
    )


# ═══════════════════════════════════════════════════════════════════════════════
# METRICS
# ═══════════════════════════════════════════════════════════════════════════════


def _luminance(image: Image.Image) -> np.ndarray:
    """8-bit luminance plane as float64."""
    if image.mode in WIDE_MODES:
        values = np.asarray(image, dtype=np.float64)
        if image.mode == "F":
            return np.clip(values, 0.0, 255.0)
        # 16-bit gray reduced to its high byte
        return np.floor(np.clip(values, 0.0, 65535.0) / 256.0)

    rgb = np.asarray(image.convert("RGB"), dtype=np.float64)
    return LUMA_R * rgb[..., 0] + LUMA_G * rgb[..., 1] + LUMA_B * rgb[..., 2]


def compute_blur_score(image: Image.Image, normalization: float = 1000.0) -> float:
    """
    Laplacian-variance sharpness score.

    The 4-neighbour Laplacian is evaluated on interior pixels only. Images
    smaller than 3x3 have no interior and score 0.

    Args:
        image: Decoded image
        normalization: Divisor applied to the raw variance

    Returns:
        Finite, non-negative score
    """
    width, height = image.size
    if width < 3 or height < 3:
        return 0.0

    lum = _luminance(image)
    laplacian = (
        lum[:-2, 1:-1]
        + lum[2:, 1:-1]
        + lum[1:-1, :-2]
        + lum[1:-1, 2:]
        - 4.0 * lum[1:-1, 1:-1]
    )

    score = float(laplacian.var()) / normalization
    if not math.isfinite(score):
        return 0.0
    return score


def _wide_samples(image: Image.Image) -> np.ndarray:
    """16-bit model values of a one-channel wide image, as (N, 3)."""
    values = np.asarray(image, dtype=np.float64).reshape(-1, 1)
    if image.mode == "F":
        values = np.clip(values, 0.0, 255.0) * 257.0
    else:
        values = np.clip(values, 0.0, 65535.0)
    return np.repeat(values, 3, axis=1)


def _rgba_samples(image: Image.Image) -> np.ndarray:
    """Premultiplied 16-bit RGB values, as (N, 3)."""
    rgba = np.asarray(image.convert("RGBA"), dtype=np.float64).reshape(-1, 4)
    alpha = rgba[:, 3:4] * 257.0
    return rgba[:, :3] * 257.0 * alpha / 65535.0


def detect_color_depth(image: Image.Image, sample_limit: int = 1000) -> int:
    """
    Approximate bits per channel.

    Samples the first `sample_limit` pixels in row-major order, expands
    them to the 16-bit RGBA model (8-bit v -> v * 257, alpha premultiplied,
    16-bit samples unchanged) and reports 16 if any color channel value
    exceeds 255. Only fully black or fully transparent samples report 8.

    Args:
        image: Decoded image
        sample_limit: Maximum pixels to inspect

    Returns:
        8 or 16
    """
    width, height = image.size
    if sample_limit <= 0 or width == 0 or height == 0:
        return 8

    rows = min(height, -(-sample_limit // width))
    head = image.crop((0, 0, width, rows))

    if image.mode in WIDE_MODES:
        samples = _wide_samples(head)
    else:
        samples = _rgba_samples(head)

    if float(samples[:sample_limit].max()) > 255:
        return 16
    return 8


def analyze_image_bytes(
    data: bytes,
    normalization: float = settings.BLUR_NORMALIZATION,
    sample_limit: int = settings.COLOR_DEPTH_SAMPLE_LIMIT,
    warn_dimension: int = settings.LARGE_IMAGE_WARN_DIMENSION,
) -> ImageMetrics:
    """
    Decode an image and compute all metrics.

    Args:
        data: Encoded image bytes
        normalization: Blur score divisor
        sample_limit: Pixels sampled for color depth
        warn_dimension: Longest side above which a warning is logged

    Returns:
        ImageMetrics

    Raises:
        ImageDecodeError: If the bytes cannot be decoded
    """
    image = decode_image(data)
    width, height = image.size

    if max(width, height) > warn_dimension:
        logger.warning(
            "Large image, consider downsizing before analysis",
            width=width,
            height=height,
        )

    return ImageMetrics(
        format=(image.format or "unknown").lower(),
        width=width,
        height=height,
        blur_score=compute_blur_score(image, normalization),
        color_depth=detect_color_depth(image, sample_limit),
    )
