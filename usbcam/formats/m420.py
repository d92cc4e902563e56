"""Planar YUV 4:2:0 capture format converted to RGB8."""

from __future__ import annotations

import numpy as np

from usbcam import constants
from usbcam.formats.base import V4L2_PIX_FMT_M420, FormatArguments, PixelFormat

# ITU-R BT.601 limited-range coefficients in 20-bit fixed point.
_SHIFT = 20
_ROUND = 1 << (_SHIFT - 1)
_CY = 1220542
_CUB = 2116026
_CUG = -409993
_CVG = -852492
_CVR = 1673527


def _i420_to_rgb(src: bytes, width: int, height: int) -> bytes:
    if width <= 0 or height <= 0:
        raise ValueError(f"image size must be positive, got {width}x{height}")
    if width % 2 or height % 2:
        raise ValueError(f"YUV 4:2:0 needs an even width and height, got {width}x{height}")
    luma = width * height
    chroma = luma // 4
    needed = luma + 2 * chroma
    if len(src) < needed:
        raise ValueError(f"frame holds {len(src)} bytes, {needed} are needed")

    data = np.frombuffer(src, dtype=np.uint8, count=needed).astype(np.int64)
    y = data[:luma].reshape(height, width)
    u = data[luma:luma + chroma].reshape(height // 2, width // 2)
    v = data[luma + chroma:].reshape(height // 2, width // 2)
    u = np.repeat(np.repeat(u, 2, axis=0), 2, axis=1) - 128
    v = np.repeat(np.repeat(v, 2, axis=0), 2, axis=1) - 128

    y00 = np.maximum(y - 16, 0) * _CY
    r = (y00 + _ROUND + _CVR * v) >> _SHIFT
    g = (y00 + _ROUND + _CVG * v + _CUG * u) >> _SHIFT
    b = (y00 + _ROUND + _CUB * u) >> _SHIFT
    rgb = np.stack((r, g, b), axis=-1)
    return np.clip(rgb, 0, 255).astype(np.uint8).tobytes()


class M4202RGB(PixelFormat):
    """YUV 4:2:0 (M420) converted to RGB8."""

    def __init__(self, args: FormatArguments | None = None) -> None:
        super().__init__("m4202rgb", V4L2_PIX_FMT_M420, constants.RGB8, 3, 8, True)
        args = args or FormatArguments()
        self.width = args.width
        self.height = args.height

    def convert(self, src: bytes, bytes_used: int = 0) -> bytes:
        """Convert a planar Y, U, V frame to packed RGB8."""
        return _i420_to_rgb(src, self.width, self.height)