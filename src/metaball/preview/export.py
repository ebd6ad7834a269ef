"""Image export utilities for rendered frames.

Frames can be saved with their alpha channel (an RGBA PNG, transparent
wherever neither the surface nor the glow is present) or composited over
a background colour into an opaque RGB PNG.

Supported formats:
    - PNG (8-bit via Pillow)

Example:
    >>> from metaball.preview.export import save_png
    >>> from metaball.scene.composer import SceneComposer
    >>>
    >>> composer = SceneComposer(width=640, height=360)
    >>> save_png(composer, "metaballs.png")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from metaball.preview.display import process_image_for_display

if TYPE_CHECKING:
    from metaball.scene.composer import SceneComposer

logger = logging.getLogger(__name__)


def save_png(
    composer: SceneComposer,
    filepath: str | Path,
    *,
    transparent: bool = False,
    gamma: float = 1.0,
) -> None:
    """Render the composer's current frame and save it as a PNG file.

    Args:
        composer: Scene to render.
        filepath: Output file path (should end in .png).
        transparent: Keep the alpha channel instead of compositing over the
            active preset's background colour.
        gamma: Gamma value applied before quantization.
    """
    image = composer.render()
    background = None if transparent else composer.active_preset.background_color
    save_png_from_array(image, filepath, background=background, gamma=gamma)


def save_png_from_array(
    image: npt.NDArray[np.float32],
    filepath: str | Path,
    *,
    background: tuple[float, float, float] | None = None,
    gamma: float = 1.0,
) -> None:
    """Save an RGBA frame as a PNG file.

    Args:
        image: RGBA frame of shape (H, W, 4) with values in [0, 1].
        filepath: Output file path (should end in .png).
        background: RGB to composite over for an opaque PNG; None writes
            an RGBA PNG.
        gamma: Gamma value applied before quantization.
    """
    image_uint8 = image_to_uint8(image, background=background, gamma=gamma)
    mode = "RGBA" if image_uint8.shape[2] == 4 else "RGB"

    pil_image = PILImage.fromarray(image_uint8)
    pil_image.save(filepath)
    logger.info("Saved %s PNG %s (%dx%d)", mode, filepath, image.shape[1], image.shape[0])


def image_to_uint8(
    image: npt.NDArray[np.float32],
    *,
    background: tuple[float, float, float] | None = None,
    gamma: float = 1.0,
) -> npt.NDArray[np.uint8]:
    """Convert a float RGBA frame to uint8 for display/export.

    Args:
        image: RGBA frame of shape (H, W, 4).
        background: RGB to composite over; None keeps alpha.
        gamma: Gamma value.

    Returns:
        uint8 array of shape (H, W, 3) with a background, else (H, W, 4).
    """
    processed = process_image_for_display(image, background=background, gamma=gamma)
    return np.round(processed * 255.0).astype(np.uint8)


def compute_rmse(
    image_a: npt.NDArray[np.floating[npt.NBitBase]],
    image_b: npt.NDArray[np.floating[npt.NBitBase]],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
