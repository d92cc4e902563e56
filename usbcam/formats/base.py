"""Pixel format descriptions shared by every capture format."""

from __future__ import annotations

from dataclasses import dataclass

from usbcam import constants


def fourcc(code: str) -> int:
    """Pack a four character code into its little-endian integer value."""
    if len(code) != 4:
        raise ValueError(f"a fourcc code has exactly four characters, got {code!r}")
    try:
        raw = code.encode("ascii")
    except UnicodeEncodeError as exc:
        raise ValueError(f"a fourcc code must be ASCII, got {code!r}") from exc
    return int.from_bytes(raw, "little")


def fourcc_to_str(value: int) -> str:
    """Render a fourcc integer as its four characters, with "-BE" for big-endian codes."""
    text = (value & 0x7FFFFFFF).to_bytes(4, "little").decode("latin-1")
    if value & (1 << 31):
        text += "-BE"
    return text


V4L2_PIX_FMT_RGB332 = fourcc("RGB1")
V4L2_PIX_FMT_GREY = fourcc("GREY")
V4L2_PIX_FMT_Y10 = fourcc("Y10 ")
V4L2_PIX_FMT_Y16 = fourcc("Y16 ")
V4L2_PIX_FMT_YUYV = fourcc("YUYV")
V4L2_PIX_FMT_UYVY = fourcc("UYVY")
V4L2_PIX_FMT_M420 = fourcc("M420")
V4L2_PIX_FMT_MJPEG = fourcc("MJPG")

_COLOR_ENCODINGS = frozenset({
    constants.RGB8, constants.BGR8, constants.RGBA8, constants.BGRA8,
    constants.RGB16, constants.BGR16, constants.RGBA16, constants.BGRA16,
    constants.NV21, constants.NV24,
})
_MONO_ENCODINGS = frozenset({constants.MONO8, constants.MONO16})
_BAYER_ENCODINGS = frozenset({
    constants.BAYER_RGGB8, constants.BAYER_BGGR8, constants.BAYER_GBRG8, constants.BAYER_GRBG8,
    constants.BAYER_RGGB16, constants.BAYER_BGGR16, constants.BAYER_GBRG16,
    constants.BAYER_GRBG16,
})
_ALPHA_ENCODINGS = frozenset({
    constants.RGBA8, constants.BGRA8, constants.RGBA16, constants.BGRA16,
})


@dataclass(frozen=True)
class FormatArguments:
    """Everything a pixel format may need to set itself up."""

    name: str = ""
    width: int = 0
    height: int = 0
    pixels: int = 0
    av_device_format_str: str = ""


class PixelFormat:
    """A V4L2 capture format together with the image encoding it is published as."""

    def __init__(
        self,
        name: str,
        v4l2: int,
        ros: str,
        channels: int,
        bit_depth: int,
        requires_conversion: bool,
    ) -> None:
        self.name = name
        self.v4l2 = v4l2
        self.ros = ros
        self.channels = channels
        self.bit_depth = bit_depth
        self.requires_conversion = requires_conversion

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(name={self.name!r}, v4l2={self.v4l2_str()!r}, "
            f"ros={self.ros!r}, channels={self.channels}, bit_depth={self.bit_depth})"
        )

    def byte_depth(self) -> int:
        """Number of bytes per channel."""
        return self.bit_depth // 8

    def v4l2_str(self) -> str:
        """The capture format as its four character code."""
        return fourcc_to_str(self.v4l2)

    def convert(self, src: bytes, bytes_used: int = 0) -> bytes:
        """Turn a captured frame into the output encoding.

        Formats that need no conversion hand the frame back as it came.
        """
        return bytes(src)

    def is_color(self) -> bool:
        """True if the output encoding is a colour encoding."""
        return self.ros in _COLOR_ENCODINGS

    def is_mono(self) -> bool:
        """True if the output encoding is grey scale."""
        return self.ros in _MONO_ENCODINGS

    def is_bayer(self) -> bool:
        """True if the output encoding is a Bayer pattern."""
        return self.ros in _BAYER_ENCODINGS

    def has_alpha(self) -> bool:
        """True if the output encoding carries an alpha channel."""
        return self.ros in _ALPHA_ENCODINGS


class DefaultPixelFormat(PixelFormat):
    """Packed YUYV published without conversion."""

    def __init__(self) -> None:
        super().__init__("yuyv", V4L2_PIX_FMT_YUYV, constants.YUV422_YUY2, 2, 8, False)