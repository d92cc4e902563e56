from usbcam import constants
from usbcam.formats.base import V4L2_PIX_FMT_RGB332, FormatArguments, fourcc_to_str
from usbcam.formats.rgb import RGB8


def test_rgb8_description():
    fmt = RGB8(FormatArguments(name="rgb8", width=640, height=480, pixels=640 * 480))
    assert (fmt.name, fmt.v4l2, fmt.ros, fmt.channels, fmt.bit_depth) == (
        "rgb8", V4L2_PIX_FMT_RGB332, constants.RGB8, 3, 8,
    )
    assert fmt.requires_conversion is False


def test_rgb8_classification():
    fmt = RGB8()
    assert fmt.is_color() is True
    assert fmt.is_mono() is False
    assert fmt.is_bayer() is False
    assert fmt.has_alpha() is False
    assert fmt.byte_depth() == 1


def test_rgb8_fourcc_string():
    assert RGB8().v4l2_str() == fourcc_to_str(V4L2_PIX_FMT_RGB332)
    assert RGB8().v4l2_str() == "RGB1"


def test_rgb8_convert_passthrough():
    data = bytes([10, 20, 30, 40, 50, 60])
    assert RGB8().convert(data, len(data)) == data