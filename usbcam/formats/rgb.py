"""RGB capture format."""

from __future__ import annotations

from usbcam import constants
from usbcam.formats.base import V4L2_PIX_FMT_RGB332, FormatArguments, PixelFormat


class RGB8(PixelFormat):
    """RGB captured and published as RGB8 without conversion."""

    def __init__(self, args: FormatArguments | None = None) -> None:
        super().__init__("rgb8", V4L2_PIX_FMT_RGB332, constants.RGB8, 3, 8, False)