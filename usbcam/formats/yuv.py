"""Packed YUV 4:2:2 capture formats in YUYV and UYVY byte order."""

from __future__ import annotations

import numpy as np

from usbcam import constants
from usbcam.formats.base import (
    V4L2_PIX_FMT_UYVY,
    V4L2_PIX_FMT_YUYV,
    FormatArguments,
    PixelFormat,
)


def _packed_yuv422_to_rgb(src: bytes, pixels: int, order: tuple[int, int, int, int]) -> bytes:
    """Convert packed 4:2:2 data to RGB8.

    ``order`` gives the positions of Y0, U, Y1 and V within each group of four bytes.
    """
    groups = (2 * pixels + 3) // 4
    needed = groups * 4
    if len(src) < needed:
        raise ValueError(f"frame holds {len(src)} bytes, {needed} are needed")
    if groups == 0:
        return b""
    quads = np.frombuffer(src, dtype=np.uint8, count=needed).reshape(groups, 4).astype(np.int32)
    y0, u, y1, v = (quads[:, index] for index in order)
    u2 = u - 128
    v2 = v - 128
    r_off = (v2 * 37221) >> 15
    g_off = ((u2 * 12975) + (v2 * 18949)) >> 15
    b_off = (u2 * 66883) >> 15

    out = np.empty((groups, 6), dtype=np.int32)
    out[:, 0] = y0 + r_off
    out[:, 1] = y0 - g_off
    out[:, 2] = y0 + b_off
    out[:, 3] = y1 + r_off
    out[:, 4] = y1 - g_off
    out[:, 5] = y1 + b_off
    return np.clip(out, 0, 255).astype(np.uint8).tobytes()


class YUYV(PixelFormat):
    """YUYV published as is."""

    def __init__(self, args: FormatArguments | None = None) -> None:
        super().__init__("yuyv", V4L2_PIX_FMT_YUYV, constants.YUV422_YUY2, 2, 8, False)


class YUYV2RGB(PixelFormat):
    """YUYV converted to RGB8."""

    def __init__(self, args: FormatArguments | None = None) -> None:
        super().__init__("yuyv2rgb", V4L2_PIX_FMT_YUYV, constants.RGB8, 3, 8, True)
        self.number_of_pixels = (args or FormatArguments()).pixels

    def convert(self, src: bytes, bytes_used: int = 0) -> bytes:
        """Convert a YUYV frame (Y0 U Y1 V per pixel pair) to RGB8."""
        return _packed_yuv422_to_rgb(src, self.number_of_pixels, (0, 1, 2, 3))


class UYVY(PixelFormat):
    """UYVY published as is."""

    def __init__(self, args: FormatArguments | None = None) -> None:
        super().__init__("uyvy", V4L2_PIX_FMT_UYVY, constants.YUV422, 2, 8, False)


class UYVY2RGB(PixelFormat):
    """UYVY converted to RGB8."""

    def __init__(self, args: FormatArguments | None = None) -> None:
        super().__init__("uyvy2rgb", V4L2_PIX_FMT_UYVY, constants.RGB8, 3, 8, True)
        self.number_of_pixels = (args or FormatArguments()).pixels

    def convert(self, src: bytes, bytes_used: int = 0) -> bytes:
        """Convert a UYVY frame (U Y0 V Y1 per pixel pair) to RGB8."""
        return _packed_yuv422_to_rgb(src, self.number_of_pixels, (1, 0, 3, 2))