"""Motion JPEG capture format decoded to RGB8."""

from __future__ import annotations

import io

from PIL import Image

from usbcam import constants
from usbcam.formats.base import V4L2_PIX_FMT_MJPEG, FormatArguments, PixelFormat


class MJPEG2RGB(PixelFormat):
    """MJPEG frames decoded to RGB8."""

    def __init__(self, args: FormatArguments | None = None) -> None:
        super().__init__("mjpeg2rgb", V4L2_PIX_FMT_MJPEG, constants.RGB8, 3, 8, True)
        args = args or FormatArguments()
        self.width = args.width
        self.height = args.height
        self.av_device_format = args.av_device_format_str

    def convert(self, src: bytes, bytes_used: int = 0) -> bytes:
        """Decode one JPEG frame to packed RGB8 at the configured size.

        Raises ValueError if the frame cannot be decoded.
        """
        data = bytes(src[:bytes_used] if bytes_used > 0 else src)
        try:
            with Image.open(io.BytesIO(data)) as image:
                if image.format != "JPEG":
                    raise ValueError(f"frame is not a JPEG image but {image.format}")
                image.load()
                rgb = image.convert("RGB")
        except (OSError, SyntaxError, Image.DecompressionBombError) as exc:
            raise ValueError(f"failed to decode MJPEG frame: {exc}") from exc

        if self.width > 0 and self.height > 0 and rgb.size != (self.width, self.height):
            rgb = rgb.resize((self.width, self.height), Image.BILINEAR)
        return rgb.tobytes()