"""Matplotlib-based preview display for rendered frames.

Frames come out of the ray marcher as straight (non-premultiplied) RGBA in
display space: the kernel already applies contrast, tone compression and
fog, so no further tone mapping is needed. What is left for display is
compositing the translucent glow over a background colour and an optional
gamma adjustment.

Example:
    >>> from metaball.preview.display import show_frame
    >>> from metaball.scene.composer import SceneComposer
    >>>
    >>> composer = SceneComposer(width=640, height=360)
    >>> show_frame(composer.render(), background=composer.active_preset.background_color)
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt


def composite_over(
    image: npt.NDArray[np.float32],
    background: tuple[float, float, float] = (0.0, 0.0, 0.0),
) -> npt.NDArray[np.float32]:
    """Composite a straight-alpha RGBA image over a solid background.

    Args:
        image: Array of shape (H, W, 4) with values in [0, 1].
        background: RGB background colour in [0, 1].

    Returns:
        RGB image of shape (H, W, 3).

    Raises:
        ValueError: If the image does not have four channels.
    """
    if image.ndim != 3 or image.shape[2] != 4:
        raise ValueError(f"Expected an (H, W, 4) RGBA image, got {image.shape}")

    rgb = image[..., :3].astype(np.float32)
    alpha = np.clip(image[..., 3:4], 0.0, 1.0).astype(np.float32)
    bg = np.asarray(background, dtype=np.float32).reshape(1, 1, 3)

    result = rgb * alpha + bg * (1.0 - alpha)
    return result.astype(np.float32)


def apply_gamma(
    image: npt.NDArray[np.float32],
    gamma: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Apply gamma encoding out = in^(1/gamma) to the colour channels.

    Alpha, if present, is left untouched.

    Args:
        image: Image array of shape (H, W, 3) or (H, W, 4) in [0, 1].
        gamma: Gamma value; 1.0 returns the image unchanged.

    Returns:
        Gamma-encoded image.
    """
    if gamma == 1.0:
        return image

    result = np.clip(image, 0.0, 1.0).astype(np.float32)
    result[..., :3] = np.power(result[..., :3], 1.0 / gamma)
    return result


def process_image_for_display(
    image: npt.NDArray[np.float32],
    background: tuple[float, float, float] | None = None,
    gamma: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Prepare a rendered frame for display or export.

    1. Composite over background (when given), dropping alpha
    2. Gamma encoding
    3. Clamping to [0, 1]

    Args:
        image: RGBA frame of shape (H, W, 4).
        background: RGB to composite over; None keeps the alpha channel.
        gamma: Gamma value (default 1.0, frames are already display-referred).

    Returns:
        RGB (H, W, 3) when a background is given, else RGBA (H, W, 4).
    """
    result = image.copy()

    if background is not None:
        result = composite_over(result, background)

    result = apply_gamma(result, gamma)
    result = np.clip(result, 0.0, 1.0)

    return result.astype(np.float32)


def show_frame(
    image: npt.NDArray[np.float32],
    *,
    background: tuple[float, float, float] = (0.0, 0.0, 0.0),
    gamma: float = 1.0,
    title: str | None = None,
    figsize: tuple[float, float] = (10, 6),
    block: bool = True,
) -> None:
    """Display a rendered frame as a Matplotlib figure.

    Args:
        image: RGBA frame of shape (H, W, 4).
        background: RGB the glow is composited over.
        gamma: Gamma value applied before display.
        title: Figure title (default shows the frame size).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    display_image = process_image_for_display(image, background=background, gamma=gamma)

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(display_image)
    ax.axis("off")

    if title is None:
        height, width = image.shape[:2]
        title = f"Metaballs - {width}x{height}"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)


def show_comparison(
    image_a: npt.NDArray[np.float32],
    image_b: npt.NDArray[np.float32],
    *,
    labels: tuple[str, str] = ("A", "B"),
    background: tuple[float, float, float] = (0.0, 0.0, 0.0),
    diff_scale: float = 10.0,
    figsize: tuple[float, float] = (16, 6),
    block: bool = True,
) -> float:
    """Display two frames side by side with their amplified difference.

    Args:
        image_a: First RGBA frame.
        image_b: Second RGBA frame, same shape as image_a.
        labels: Labels for the two frames.
        background: RGB both frames are composited over.
        diff_scale: Scale factor for difference amplification.
        figsize: Figure size in inches.
        block: Whether to block execution until figure is closed.

    Returns:
        RMSE between the two composited frames.

    Raises:
        ValueError: If the frame shapes differ.
    """
    import matplotlib.pyplot as plt

    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    display_a = process_image_for_display(image_a, background=background)
    display_b = process_image_for_display(image_b, background=background)

    diff = display_a.astype(np.float64) - display_b.astype(np.float64)
    rmse = float(np.sqrt(np.mean(diff**2)))
    diff_amplified = np.clip(np.abs(diff) * diff_scale, 0.0, 1.0)

    fig, axes = plt.subplots(1, 3, figsize=figsize)

    axes[0].imshow(display_a)
    axes[0].set_title(labels[0])
    axes[0].axis("off")

    axes[1].imshow(display_b)
    axes[1].set_title(labels[1])
    axes[1].axis("off")

    axes[2].imshow(diff_amplified)
    axes[2].set_title(f"Difference ({diff_scale}x) - RMSE: {rmse:.6f}")
    axes[2].axis("off")

    plt.tight_layout()
    plt.show(block=block)

    return rmse
