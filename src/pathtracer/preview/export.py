"""Image export utilities for rendered frames.

This module converts display-ready frames (the output of finish_frame) to
8-bit pixels and writes them to files.

Supported formats:
    - PPM (plain-text P3)
    - QOI (the "Quite OK Image" format, RGB, written by a small encoder)
    - PNG (8-bit via Pillow)

Channel values are converted to bytes as floor(clamp(v, 0, 1) * 256),
saturated to 255, the same rule Color.to_rgb_bytes() uses.

Example:
    >>> from src.pathtracer.preview.display import finish_frame
    >>> from src.pathtracer.preview.export import save_image
    >>> save_image(finish_frame(image), "output.qoi")
"""

from __future__ import annotations

import os
from typing import BinaryIO, TextIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

# =============================================================================
# QOI Format Constants
# =============================================================================

QOI_MAGIC = b"qoif"
QOI_OP_INDEX = 0x00
QOI_OP_DIFF = 0x40
QOI_OP_LUMA = 0x80
QOI_OP_RUN = 0xC0
QOI_OP_RGB = 0xFE
QOI_END_MARKER = bytes(7) + b"\x01"
QOI_MAX_RUN = 62
QOI_INDEX_SIZE = 64

# Channels and colorspace fields of the QOI header (RGB, sRGB with linear alpha)
QOI_CHANNELS = 3
QOI_COLORSPACE = 0

# Suffixes accepted by save_image
SUPPORTED_SUFFIXES = (".ppm", ".qoi", ".png")


def image_to_uint8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert a float image in [0, 1] to 8-bit pixels.

    Values at or below zero (and NaN) map to 0, values at or above one
    map to 255.

    Args:
        image: Float image array of shape (H, W, 3).

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.
    """
    image = np.asarray(image, dtype=np.float64)
    with np.errstate(invalid="ignore"):
        scaled = np.floor(np.minimum(image, 1.0) * 256.0)
        result = np.where(image > 0.0, np.minimum(scaled, 255.0), 0.0)
    return result.astype(np.uint8)


# =============================================================================
# PPM
# =============================================================================


def write_ppm(image: npt.NDArray[np.floating], fp: TextIO) -> None:
    """Write an image as a plain-text PPM (P3).

    Each row starts on a new line and every pixel is written as "r g b "
    with a trailing space.

    Args:
        image: Display-ready image of shape (H, W, 3).
        fp: A text file object open for writing.
    """
    pixels = image_to_uint8(image)
    height, width = pixels.shape[:2]

    fp.write(f"P3\n{width} {height}\n255\n")
    for row in pixels:
        fp.write("\n")
        fp.write("".join(f"{r} {g} {b} " for r, g, b in row.tolist()))


# =============================================================================
# QOI
# =============================================================================


def _qoi_hash(r: int, g: int, b: int) -> int:
    # Alpha is always 255
    return (r * 3 + g * 5 + b * 7 + 255 * 11) % QOI_INDEX_SIZE


def encode_qoi(image: npt.NDArray[np.floating]) -> bytes:
    """Encode an image as QOI bytes.

    Args:
        image: Display-ready image of shape (H, W, 3).

    Returns:
        The complete QOI file contents.
    """
    pixels = image_to_uint8(image)
    height, width = pixels.shape[:2]

    out = bytearray(QOI_MAGIC)
    out += width.to_bytes(4, "big")
    out += height.to_bytes(4, "big")
    out += bytes((QOI_CHANNELS, QOI_COLORSPACE))

    index: list[tuple[int, int, int]] = [(0, 0, 0)] * QOI_INDEX_SIZE
    prev = (0, 0, 0)
    run = 0

    for pixel in map(tuple, pixels.reshape(-1, 3).tolist()):
        if pixel == prev:
            run += 1
            if run == QOI_MAX_RUN:
                out.append(QOI_OP_RUN | (run - 1))
                run = 0
            continue

        if run:
            out.append(QOI_OP_RUN | (run - 1))
            run = 0

        r, g, b = pixel
        slot = _qoi_hash(r, g, b)
        if index[slot] == pixel:
            out.append(QOI_OP_INDEX | slot)
            prev = pixel
            continue
        index[slot] = pixel

        dr = r - prev[0]
        dg = g - prev[1]
        db = b - prev[2]
        dr_dg = dr - dg
        db_dg = db - dg

        if -2 <= dr <= 1 and -2 <= dg <= 1 and -2 <= db <= 1:
            out.append(QOI_OP_DIFF | (dr + 2) << 4 | (dg + 2) << 2 | (db + 2))
        elif -32 <= dg <= 31 and -8 <= dr_dg <= 7 and -8 <= db_dg <= 7:
            out.append(QOI_OP_LUMA | (dg + 32))
            out.append((dr_dg + 8) << 4 | (db_dg + 8))
        else:
            out += bytes((QOI_OP_RGB, r, g, b))

        prev = pixel

    if run:
        out.append(QOI_OP_RUN | (run - 1))

    out += QOI_END_MARKER
    return bytes(out)


def write_qoi(image: npt.NDArray[np.floating], fp: BinaryIO) -> None:
    """Write an image as QOI.

    Args:
        image: Display-ready image of shape (H, W, 3).
        fp: A binary file object open for writing.
    """
    fp.write(encode_qoi(image))


# =============================================================================
# PNG and dispatch
# =============================================================================


def save_png(image: npt.NDArray[np.floating], filepath: str | os.PathLike[str]) -> None:
    """Save an image as an 8-bit PNG file using Pillow.

    Args:
        image: Display-ready image of shape (H, W, 3).
        filepath: Output file path.
    """
    pil_image = PILImage.fromarray(image_to_uint8(image))
    pil_image.save(filepath, format="PNG")


def save_image(image: npt.NDArray[np.floating], filepath: str | os.PathLike[str]) -> None:
    """Save an image, choosing the format from the file suffix.

    Args:
        image: Display-ready image of shape (H, W, 3).
        filepath: Output path ending in .ppm, .qoi or .png.

    Raises:
        ValueError: If the suffix is not supported.
    """
    suffix = os.path.splitext(os.fspath(filepath))[1].lower()

    if suffix == ".ppm":
        with open(filepath, "w", encoding="ascii", newline="\n") as fp:
            write_ppm(image, fp)
    elif suffix == ".qoi":
        with open(filepath, "wb") as fp:
            write_qoi(image, fp)
    elif suffix == ".png":
        save_png(image, filepath)
    else:
        raise ValueError(
            f"Unsupported image format {suffix!r}, expected one of {SUPPORTED_SUFFIXES}"
        )
