import pytest

from usbcam.camera import (
    CaptureFormat,
    ImageInfo,
    Parameters,
    driver_supported_formats,
    find_driver_format,
    format_arguments_from_parameters,
    select_pixel_format,
)
from usbcam.formats.base import FormatArguments, fourcc
from usbcam.formats.yuv import YUYV2RGB


def test_driver_supported_format_names():
    names = [fmt.name for fmt in driver_supported_formats()]
    assert names == [
        "rgb8", "yuyv", "yuyv2rgb", "uyvy", "uyvy2rgb", "mono8", "mono16",
        "y102mono8", "mjpeg2rgb", "m4202rgb",
    ]


def test_find_driver_format_passes_arguments():
    fmt = find_driver_format(FormatArguments(name="yuyv2rgb", width=4, height=2, pixels=8))
    assert isinstance(fmt, YUYV2RGB)
    assert fmt.number_of_pixels == 8


def test_find_driver_format_unknown_raises():
    with pytest.raises(ValueError, match="bananas"):
        find_driver_format(FormatArguments(name="bananas"))


def test_select_pixel_format_supported_by_device():
    device = [
        CaptureFormat("Motion-JPEG", fourcc("MJPG"), 640, 480),
        CaptureFormat("YUYV 4:2:2", fourcc("YUYV"), 640, 480),
    ]
    fmt = select_pixel_format(FormatArguments(name="yuyv"), device)
    assert fmt.name == "yuyv"
    assert fmt.v4l2 == fourcc("YUYV")


def test_select_pixel_format_unsupported_by_device():
    device = [CaptureFormat("Motion-JPEG", fourcc("MJPG"), 640, 480)]
    with pytest.raises(ValueError):
        select_pixel_format(FormatArguments(name="uyvy"), device)


def test_capture_format_frame_rate():
    fmt = CaptureFormat("YUYV", fourcc("YUYV"), 640, 480, numerator=1, denominator=15)
    assert fmt.frame_rate == 15
    assert "640 x 480" in str(fmt)


def test_parameters_defaults():
    params = Parameters()
    assert params.pixel_format_name == "yuyv2rgb"
    assert params.device_name == "/dev/video0"
    assert params.image_width == 600
    assert params.brightness == -1
    assert params.autofocus is False


def test_format_arguments_from_parameters():
    params = Parameters(pixel_format_name="mono8", image_width=32, image_height=16)
    args = format_arguments_from_parameters(params, 512)
    assert args == FormatArguments(
        name="mono8", width=32, height=16, pixels=512, av_device_format_str="YUV422P"
    )


def test_image_info_sizes():
    fmt = find_driver_format(FormatArguments(name="yuyv2rgb"))
    image = ImageInfo(width=4, height=2, pixel_format=fmt)
    assert image.number_of_pixels() == 4 * 2
    assert image.bytes_per_line() == 4 * 3
    assert image.size_in_bytes() == image.height * image.bytes_per_line()
    assert image.fourcc == fourcc("YUYV")


def test_image_info_sixteen_bit():
    fmt = find_driver_format(FormatArguments(name="mono16"))
    image = ImageInfo(width=10, height=3, pixel_format=fmt)
    assert image.bytes_per_line() == 10 * 2
    assert image.size_in_bytes() == 3 * 10 * 2