"""Post-processing and Matplotlib preview for rendered frames.

A rendered frame is a (H, W, 3) float buffer of unbounded linear radiance.
Before it is written or shown it goes through two steps:

    1. Exposure normalization: every channel is divided by the brightest
       channel value in the frame, so the result lies in [0, 1] and its
       maximum is exactly 1.0.
    2. Gamma encoding: out = in^(1/gamma). The renderer's default is the
       square-root curve (gamma 2.0).

Example:
    >>> from src.pathtracer.preview.display import finish_frame, show_preview
    >>> frame = finish_frame(image)
    >>> show_preview(frame, title="Cube scene")
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

# Gamma of the square-root curve applied to finished frames
DEFAULT_GAMMA = 2.0


def normalize_exposure(image: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Scale an image so its brightest channel value becomes 1.0.

    Args:
        image: Linear image array of shape (H, W, 3).

    Returns:
        The scaled image. An all-black (or empty) image is returned
        unchanged.
    """
    image = np.asarray(image, dtype=np.float64)
    if image.size == 0:
        return image.copy()

    brightest = float(np.max(image))
    if not brightest > 0.0:
        return image.copy()

    return image / brightest


def apply_gamma(
    image: npt.NDArray[np.float64],
    gamma: float = DEFAULT_GAMMA,
) -> npt.NDArray[np.float64]:
    """Apply gamma encoding for display.

    Args:
        image: Linear image array of shape (H, W, 3) in [0, 1] range.
        gamma: Gamma value (default 2.0, the square-root curve).

    Returns:
        Gamma encoded image.

    Raises:
        ValueError: If gamma is not positive.
    """
    if not gamma > 0.0:
        raise ValueError(f"gamma must be positive, got {gamma}")

    if gamma == 1.0:
        return image

    # Clamp to [0, 1] before gamma to avoid NaN from negative values
    image = np.clip(image, 0.0, 1.0)

    if gamma == 2.0:
        return np.sqrt(image)

    return np.power(image, 1.0 / gamma)


def finish_frame(
    image: npt.NDArray[np.float64],
    gamma: float = DEFAULT_GAMMA,
) -> npt.NDArray[np.float64]:
    """Normalize exposure and gamma encode a rendered frame.

    Args:
        image: Linear render output of shape (H, W, 3).
        gamma: Gamma value (default 2.0).

    Returns:
        Display-ready image in [0, 1] range.
    """
    return apply_gamma(normalize_exposure(image), gamma)


def show_preview(
    image: npt.NDArray[np.float64],
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (12.8, 7.2),
    block: bool = True,
) -> None:
    """Display a finished frame as a Matplotlib figure.

    Args:
        image: Display-ready image of shape (H, W, 3) in [0, 1] range,
            typically the output of finish_frame().
        title: Optional figure title (default shows the resolution).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.

    Raises:
        ValueError: If the image is not an (H, W, 3) array.
    """
    import matplotlib.pyplot as plt

    image = np.asarray(image)
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")

    fig, ax = plt.subplots(1, 1, figsize=figsize)

    # Row 0 is the top of the image, matching imshow's default origin
    ax.imshow(np.clip(image, 0.0, 1.0))
    ax.axis("off")

    if title is None:
        height, width = image.shape[:2]
        title = f"Render Preview - {width}x{height}"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)
