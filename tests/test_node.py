import os

import pytest

from usbcam.camera import ImageInfo
from usbcam.formats.yuv import YUYV2RGB
from usbcam.node import (
    SetParametersResult,
    UsbCamNode,
    default_parameter_values,
    resolve_device_path,
)
from usbcam.utils import IoMethod, Timestamp


class FakeCamera:
    def __init__(self):
        self.configured = None
        self.started = 0
        self.capturing = False
        self.v4l_calls = []
        self.auto_focus_calls = []
        self.image = ImageInfo(
            width=4, height=2, pixel_format=YUYV2RGB(),
            stamp=Timestamp(5, 6), data=bytes(range(24)),
        )

    def configure(self, parameters, io_method):
        self.configured = (parameters, io_method)

    def start(self):
        self.started += 1
        self.capturing = True

    def start_capturing(self):
        self.capturing = True

    def stop_capturing(self):
        self.capturing = False

    def is_capturing(self):
        return self.capturing

    def set_v4l_parameter(self, name, value):
        self.v4l_calls.append((name, value))
        return True

    def set_auto_focus(self, value):
        self.auto_focus_calls.append(value)
        return True

    def get_image(self):
        return self.image


@pytest.fixture
def device(tmp_path):
    return str(tmp_path / "video0")


def make_node(device, camera=None, published=None, **params):
    camera = camera or FakeCamera()
    sink = published if published is not None else []
    values = {"video_device": device}
    values.update(params)
    node = UsbCamNode(
        camera,
        lambda image, info: sink.append((image, info)),
        params=values,
        device_lister=lambda: {device: None},
    )
    return node, camera, sink


def test_default_parameter_values():
    values = default_parameter_values()
    assert values["camera_name"] == "default_cam"
    assert values["video_device"] == "/dev/video0"
    assert values["brightness"] == 50
    assert values["framerate"] == 30.0
    assert values["pixel_format"] == "yuyv"
    assert values["io_method"] == "mmap"


def test_construction_configures_and_starts(device):
    node, camera, _ = make_node(device)
    parameters, io_method = camera.configured
    assert io_method is IoMethod.MMAP
    assert parameters.device_name == device
    assert parameters.image_width == 640
    assert parameters.image_height == 480
    assert camera.started == 1


def test_default_v4l2_params(device):
    _, camera, _ = make_node(device)
    assert camera.v4l_calls == [
        ("brightness", 50),
        ("white_balance_temperature_auto", 1),
        ("exposure_auto", 3),
        ("focus_auto", 0),
    ]
    assert camera.auto_focus_calls == []


def test_manual_v4l2_params(device):
    _, camera, _ = make_node(
        device, brightness=-1, contrast=10, gain=7,
        auto_white_balance=False, white_balance=4000,
        autoexposure=False, exposure=100, autofocus=True,
    )
    assert camera.v4l_calls == [
        ("contrast", 10),
        ("gain", 7),
        ("white_balance_temperature_auto", 0),
        ("white_balance_temperature", 4000),
        ("exposure_auto", 1),
        ("exposure_absolute", 100),
        ("focus_auto", 1),
    ]
    assert camera.auto_focus_calls == [1]


def test_focus_absolute_when_autofocus_off(device):
    _, camera, _ = make_node(device, focus=20)
    assert camera.v4l_calls[-2:] == [("focus_auto", 0), ("focus_absolute", 20)]


def test_service_capture(device):
    node, camera, _ = make_node(device)
    assert node.service_capture(False) == "Stop Capturing"
    assert camera.capturing is False
    assert node.service_capture(True) == "Start Capturing"
    assert camera.capturing is True


def test_period_ms(device):
    node, _, _ = make_node(device)
    assert node.period_ms() == 33
    slow, _, _ = make_node(device, framerate=10.0)
    assert slow.period_ms() == 100


def test_unavailable_device_raises(device):
    camera = FakeCamera()
    with pytest.raises(RuntimeError):
        UsbCamNode(
            camera, lambda image, info: None,
            params={"video_device": device},
            device_lister=lambda: {"/dev/other": None},
        )
    assert camera.configured is None


def test_unknown_io_method_raises(device):
    with pytest.raises(ValueError):
        make_node(device, io_method="bananas")


def test_empty_frame_id_raises(device):
    with pytest.raises(ValueError):
        make_node(device, frame_id="")


def test_assign_params_ignores_unknown_and_checks_types(device):
    node, _, _ = make_node(device)
    node.assign_params({"no_such_param": 3, "exposure": 42})
    assert node.parameters.exposure == 42
    with pytest.raises(TypeError):
        node.assign_params({"brightness": "bright"})
    with pytest.raises(TypeError):
        node.assign_params({"autofocus": 1})


def test_update_publishes_nothing_when_not_capturing(device):
    node, camera, sink = make_node(device)
    camera.stop_capturing()
    node.update()
    assert sink == []


def test_update_publishes_image(device):
    node, camera, sink = make_node(device, frame_id="cam_frame")
    node.update()
    assert len(sink) == 1
    image, info = sink[0]
    assert image.width == 4
    assert image.height == 2
    assert image.encoding == "rgb8"
    assert image.step == camera.image.bytes_per_line()
    assert image.data == camera.image.data
    assert image.header.frame_id == "cam_frame"
    assert image.header.stamp == Timestamp(5, 6)
    assert info.header == image.header
    assert (info.width, info.height) == (640, 480)


def test_mjpeg_publishes_compressed(device):
    camera = FakeCamera()
    compressed, infos = [], []
    node = UsbCamNode(
        camera, lambda image, info: None,
        params={"video_device": device, "pixel_format": "mjpeg"},
        compressed_image_publisher=compressed.append,
        camera_info_publisher=infos.append,
        device_lister=lambda: {device: None},
    )
    node.update()
    assert len(compressed) == 1
    assert compressed[0].format == "jpeg"
    assert compressed[0].data == camera.image.data
    assert infos[0].header == compressed[0].header


def test_mjpeg_without_publishers_raises(device):
    with pytest.raises(ValueError):
        make_node(device, pixel_format="mjpeg")


def test_parameters_callback(device):
    node, camera, _ = make_node(device)
    camera.v4l_calls.clear()
    result = node.parameters_callback({"brightness": 80})
    assert result == SetParametersResult(successful=True, reason="success")
    assert node.parameters.brightness == 80
    assert camera.v4l_calls[0] == ("brightness", 80)


def test_resolve_device_path_plain(tmp_path):
    path = str(tmp_path / "video5")
    assert resolve_device_path(path) == path


def test_resolve_device_path_relative_symlink(tmp_path):
    target = tmp_path / "real" / "video0"
    target.parent.mkdir()
    target.write_bytes(b"")
    link = tmp_path / "camera"
    os.symlink(os.path.join("real", "video0"), link)
    assert resolve_device_path(str(link)) == str(target.resolve())


def test_resolve_device_path_absolute_symlink(tmp_path):
    target = tmp_path / "video0"
    link = tmp_path / "camera"
    os.symlink(str(target), link)
    assert resolve_device_path(str(link)) == str(target)