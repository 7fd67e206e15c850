"""Preview module for output and visualization.

This module turns rendered frames into images:

Components:
    display: Exposure normalization, gamma and Matplotlib preview
    export: PPM, QOI and PNG writers

Example:
    >>> from src.pathtracer.preview import finish_frame, save_image
    >>> save_image(finish_frame(image), "output.png")
"""

from src.pathtracer.preview.display import (
    apply_gamma,
    finish_frame,
    normalize_exposure,
    show_preview,
)
from src.pathtracer.preview.export import (
    encode_qoi,
    image_to_uint8,
    save_image,
    save_png,
    write_ppm,
    write_qoi,
)

__all__ = [
    # Post-processing
    "normalize_exposure",
    "apply_gamma",
    "finish_frame",
    # Display
    "show_preview",
    # Export functions
    "image_to_uint8",
    "write_ppm",
    "write_qoi",
    "encode_qoi",
    "save_png",
    "save_image",
]
