"""Grey scale capture formats."""

from __future__ import annotations

import numpy as np

from usbcam import constants
from usbcam.formats.base import (
    V4L2_PIX_FMT_GREY,
    V4L2_PIX_FMT_Y10,
    V4L2_PIX_FMT_Y16,
    FormatArguments,
    PixelFormat,
)


class MONO8(PixelFormat):
    """8-bit grey published as is."""

    def __init__(self, args: FormatArguments | None = None) -> None:
        super().__init__("mono8", V4L2_PIX_FMT_GREY, constants.MONO8, 1, 8, False)


class MONO16(PixelFormat):
    """16-bit grey published as is."""

    def __init__(self, args: FormatArguments | None = None) -> None:
        super().__init__("mono16", V4L2_PIX_FMT_Y16, constants.MONO16, 1, 16, False)


class Y102MONO8(PixelFormat):
    """10-bit grey (Y10, also known as MONO10) reduced to 8-bit grey."""

    def __init__(self, args: FormatArguments | None = None) -> None:
        super().__init__("y102mono8", V4L2_PIX_FMT_Y10, constants.MONO8, 1, 8, True)
        self.number_of_pixels = (args or FormatArguments()).pixels

    def convert(self, src: bytes, bytes_used: int = 0) -> bytes:
        """Keep the top eight of each pixel's ten bits (low byte first in the source)."""
        needed = 2 * self.number_of_pixels
        if len(src) < needed:
            raise ValueError(f"frame holds {len(src)} bytes, {needed} are needed")
        if needed == 0:
            return b""
        data = np.frombuffer(src, dtype=np.uint8, count=needed).astype(np.uint16)
        low = (data[0::2] >> 2) & 0x3F
        high = (data[1::2] << 6) & 0xC0
        return (low | high).astype(np.uint8).tobytes()