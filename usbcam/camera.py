"""Camera parameters, image geometry and selection of the capture format."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from usbcam.formats.base import FormatArguments, PixelFormat, fourcc_to_str
from usbcam.formats.m420 import M4202RGB
from usbcam.formats.mjpeg import MJPEG2RGB
from usbcam.formats.mono import MONO8, MONO16, Y102MONO8
from usbcam.formats.rgb import RGB8
from usbcam.formats.yuv import UYVY, UYVY2RGB, YUYV, YUYV2RGB
from usbcam.utils import Timestamp

logger = logging.getLogger(__name__)

_DRIVER_FORMATS = (
    RGB8, YUYV, YUYV2RGB, UYVY, UYVY2RGB, MONO8, MONO16, Y102MONO8, MJPEG2RGB, M4202RGB,
)


def driver_supported_formats(args: FormatArguments | None = None) -> list[PixelFormat]:
    """Every pixel format this driver can produce, set up with ``args``."""
    args = args or FormatArguments()
    return [format_class(args) for format_class in _DRIVER_FORMATS]


@dataclass
class Parameters:
    """Settings for one camera."""

    camera_name: str = "usb_cam"
    device_name: str = "/dev/video0"
    frame_id: str = "camera"
    io_method_name: str = "mmap"
    camera_info_url: str = "package://usb_cam/config/camera_info.yaml"
    pixel_format_name: str = "yuyv2rgb"
    av_device_format: str = "YUV422P"
    image_width: int = 600
    image_height: int = 480
    framerate: int = 30
    brightness: int = -1
    contrast: int = -1
    saturation: int = -1
    sharpness: int = -1
    gain: int = -1
    white_balance: int = -1
    exposure: int = -1
    focus: int = -1
    auto_white_balance: bool = True
    autoexposure: bool = True
    autofocus: bool = False


@dataclass(frozen=True)
class CaptureFormat:
    """One format, frame size and frame interval a device offers."""

    description: str
    pixel_format: int
    width: int
    height: int
    numerator: int = 1
    denominator: int = 30

    @property
    def frame_rate(self) -> int:
        """Frames per second, from the frame interval."""
        if self.numerator == 0:
            return 0
        return self.denominator // self.numerator

    def __str__(self) -> str:
        return f"{self.description} {self.width} x {self.height} ({self.frame_rate} Hz)"


@dataclass
class ImageInfo:
    """Geometry and latest contents of the captured image."""

    width: int
    height: int
    pixel_format: PixelFormat
    stamp: Timestamp | None = None
    data: bytes = field(default=b"", repr=False)

    def number_of_pixels(self) -> int:
        """Pixels in one image."""
        return self.width * self.height

    def bytes_per_line(self) -> int:
        """Bytes in one row of the output image."""
        return self.width * self.pixel_format.byte_depth() * self.pixel_format.channels

    def size_in_bytes(self) -> int:
        """Bytes in one output image."""
        return self.height * self.bytes_per_line()

    @property
    def fourcc(self) -> int:
        """The capture format's V4L2 code."""
        return self.pixel_format.v4l2


def find_driver_format(args: FormatArguments) -> PixelFormat:
    """Return the driver format named ``args.name``.

    Raises ValueError naming the supported formats if there is none.
    """
    found = None
    formats = driver_supported_formats(args)
    for driver_format in formats:
        if driver_format.name == args.name:
            found = driver_format
    if found is None:
        names = ", ".join(driver_format.name for driver_format in formats)
        raise ValueError(
            f"Specified format `{args.name}` is unsupported by this driver; "
            f"supported formats are: {names}"
        )
    return found


def select_pixel_format(args: FormatArguments, device_formats) -> PixelFormat:
    """Pick the driver format named in ``args`` if the device can capture it.

    Raises ValueError if the driver or the device does not support it.
    """
    driver_format = find_driver_format(args)
    selected = None
    logger.info("This device supports the following formats:")
    for device_format in device_formats:
        logger.info("\t%s", device_format)
        if device_format.pixel_format == driver_format.v4l2:
            selected = driver_format
    if selected is None:
        raise ValueError(
            f"Specified format `{args.name}` ({fourcc_to_str(driver_format.v4l2)}) "
            "is unsupported by the selected device"
        )
    return selected


def format_arguments_from_parameters(parameters: Parameters, number_of_pixels: int) -> FormatArguments:
    """Build the arguments a pixel format needs from camera parameters."""
    return FormatArguments(
        name=parameters.pixel_format_name,
        width=parameters.image_width,
        height=parameters.image_height,
        pixels=number_of_pixels,
        av_device_format_str=parameters.av_device_format,
    )