"""A camera node: parameters, device set-up, capture control and frame publishing."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Protocol

from usbcam.camera import ImageInfo, Parameters
from usbcam.utils import IoMethod, Timestamp, available_devices, io_method_from_string

logger = logging.getLogger(__name__)

BASE_TOPIC_NAME = "image_raw"

_DEFAULT_PARAMETER_VALUES: dict[str, Any] = {
    "camera_name": "default_cam",
    "camera_info_url": "",
    "framerate": 30.0,
    "frame_id": "default_cam",
    "image_height": 480,
    "image_width": 640,
    "io_method": "mmap",
    "pixel_format": "yuyv",
    "av_device_format": "YUV422P",
    "video_device": "/dev/video0",
    "brightness": 50,
    "contrast": -1,
    "saturation": -1,
    "sharpness": -1,
    "gain": -1,
    "auto_white_balance": True,
    "white_balance": 4000,
    "autoexposure": True,
    "exposure": 100,
    "autofocus": False,
    "focus": -1,
}


class _Camera(Protocol):
    def configure(self, parameters: Parameters, io_method: IoMethod) -> None: ...

    def start(self) -> None: ...

    def start_capturing(self) -> None: ...

    def stop_capturing(self) -> None: ...

    def is_capturing(self) -> bool: ...

    def set_v4l_parameter(self, name: str, value: int | str) -> bool: ...

    def set_auto_focus(self, value: int) -> bool: ...

    def get_image(self) -> ImageInfo: ...


@dataclass
class _Header:
    frame_id: str = ""
    stamp: Timestamp = field(default_factory=lambda: Timestamp(0, 0))


@dataclass
class _ImageMessage:
    header: _Header = field(default_factory=_Header)
    width: int = 0
    height: int = 0
    encoding: str = ""
    step: int = 0
    data: bytes = b""


@dataclass
class _CompressedImageMessage:
    header: _Header = field(default_factory=_Header)
    format: str = ""
    data: bytes = b""


@dataclass
class _CameraInfo:
    header: _Header = field(default_factory=_Header)
    width: int = 0
    height: int = 0
    camera_name: str = ""


@dataclass(frozen=True)
class SetParametersResult:
    """Outcome of a parameter update."""

    successful: bool
    reason: str


def default_parameter_values() -> dict[str, Any]:
    """The parameters the node declares, with their default values."""
    return dict(_DEFAULT_PARAMETER_VALUES)


def resolve_device_path(path: str) -> str:
    """Follow a device symlink one level, resolving a relative target fully."""
    if os.path.islink(path):
        target = Path(os.readlink(path))
        if not target.is_absolute():
            target = (Path(path).absolute().parent / target).resolve(strict=True)
        return str(target)
    return path


def _as_string(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _as_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"parameter `{name}` must be an integer, got {value!r}")
    return value


def _as_double(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"parameter `{name}` must be a number, got {value!r}")
    return float(value)


def _as_bool(name: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise TypeError(f"parameter `{name}` must be a boolean, got {value!r}")
    return value


_INT_FIELDS = {
    "image_height": "image_height",
    "image_width": "image_width",
    "brightness": "brightness",
    "contrast": "contrast",
    "saturation": "saturation",
    "sharpness": "sharpness",
    "gain": "gain",
    "white_balance": "white_balance",
    "exposure": "exposure",
    "focus": "focus",
}
_BOOL_FIELDS = {
    "auto_white_balance": "auto_white_balance",
    "autoexposure": "autoexposure",
    "autofocus": "autofocus",
}
_STRING_FIELDS = {
    "camera_name": "camera_name",
    "camera_info_url": "camera_info_url",
    "frame_id": "frame_id",
    "io_method": "io_method_name",
    "pixel_format": "pixel_format_name",
    "av_device_format": "av_device_format",
}


class UsbCamNode:
    """Configures a camera from parameters and publishes the frames it captures.

    ``image_publisher`` is called with (image, camera_info) for raw frames.
    For the ``mjpeg`` pixel format, ``compressed_image_publisher`` receives the
    compressed frame and ``camera_info_publisher`` the matching camera info.
    """

    def __init__(
        self,
        camera: _Camera,
        image_publisher: Callable[[Any, Any], None],
        *,
        params: Mapping[str, Any] | None = None,
        compressed_image_publisher: Callable[[Any], None] | None = None,
        camera_info_publisher: Callable[[Any], None] | None = None,
        device_lister: Callable[[], Mapping[str, Any]] = available_devices,
    ) -> None:
        self.camera = camera
        self.image_publisher = image_publisher
        self.compressed_image_publisher = compressed_image_publisher
        self.camera_info_publisher = camera_info_publisher
        self._device_lister = device_lister
        self._warned_no_response = False
        self.parameters = Parameters()
        self.image_msg = _ImageMessage()
        self.compressed_img_msg: _CompressedImageMessage | None = None
        self.camera_info = _CameraInfo()
        self.camera_info_msg = _CameraInfo()

        values = default_parameter_values()
        values.update(params or {})
        self.assign_params(values)
        self._init()

    def _init(self) -> None:
        p = self.parameters
        if not p.frame_id:
            raise ValueError("Required parameter `frame_id` is not set")

        self.camera_info = _CameraInfo(
            header=_Header(frame_id=p.frame_id),
            width=p.image_width,
            height=p.image_height,
            camera_name=p.device_name,
        )

        devices = self._device_lister()
        if p.device_name not in devices:
            logger.error(
                "Device specified is not available or is not a valid V4L2 device: `%s`",
                p.device_name,
            )
            logger.info("Available V4L2 devices are:")
            for name, capability in devices.items():
                logger.info("    %s", name)
                logger.info("        %s", getattr(capability, "card", capability))
            raise RuntimeError(f"V4L2 device `{p.device_name}` is not available")

        if p.pixel_format_name == "mjpeg":
            if self.compressed_image_publisher is None or self.camera_info_publisher is None:
                raise ValueError(
                    "the mjpeg pixel format needs a compressed image and a camera info publisher"
                )
            self.compressed_img_msg = _CompressedImageMessage(header=_Header(frame_id=p.frame_id))

        self.image_msg.header.frame_id = p.frame_id
        logger.info(
            "Starting '%s' (%s) at %dx%d via %s (%s) at %i FPS",
            p.camera_name, p.device_name, p.image_width, p.image_height,
            p.io_method_name, p.pixel_format_name, p.framerate,
        )

        io_method = io_method_from_string(p.io_method_name)
        if io_method is IoMethod.UNKNOWN:
            raise ValueError(f"Unknown IO method '{p.io_method_name}'")

        self.camera.configure(p, io_method)
        self.set_v4l2_params()
        self.camera.start()
        logger.info("Timer triggering every %d ms", self.period_ms())

    def assign_params(self, params: Mapping[str, Any]) -> None:
        """Copy recognised parameters into the node's settings; unknown names are logged."""
        p = self.parameters
        for name, value in params.items():
            if name in _STRING_FIELDS:
                if name == "camera_name":
                    logger.info("camera_name value: %s", _as_string(value))
                setattr(p, _STRING_FIELDS[name], _as_string(value))
            elif name == "framerate":
                rate = _as_double(name, value)
                logger.warning("framerate: %f", rate)
                p.framerate = int(rate)
            elif name == "video_device":
                p.device_name = resolve_device_path(_as_string(value))
            elif name in _INT_FIELDS:
                setattr(p, _INT_FIELDS[name], _as_int(name, value))
            elif name in _BOOL_FIELDS:
                setattr(p, _BOOL_FIELDS[name], _as_bool(name, value))
            else:
                logger.warning("Invalid parameter name: %s", name)

    def set_v4l2_params(self) -> None:
        """Send the current settings to the device."""
        p = self.parameters
        cam = self.camera
        for name in ("brightness", "contrast", "saturation", "sharpness", "gain"):
            value = getattr(p, name)
            if value >= 0:
                logger.info("Setting '%s' to %d", name, value)
                cam.set_v4l_parameter(name, value)

        if p.auto_white_balance:
            cam.set_v4l_parameter("white_balance_temperature_auto", 1)
            logger.info("Setting 'white_balance_temperature_auto' to %d", 1)
        else:
            logger.info("Setting 'white_balance' to %d", p.white_balance)
            cam.set_v4l_parameter("white_balance_temperature_auto", 0)
            cam.set_v4l_parameter("white_balance_temperature", p.white_balance)

        if not p.autoexposure:
            logger.info("Setting 'exposure_auto' to %d", 1)
            logger.info("Setting 'exposure' to %d", p.exposure)
            cam.set_v4l_parameter("exposure_auto", 1)
            cam.set_v4l_parameter("exposure_absolute", p.exposure)
        else:
            logger.info("Setting 'exposure_auto' to %d", 3)
            cam.set_v4l_parameter("exposure_auto", 3)

        if p.autofocus:
            cam.set_auto_focus(1)
            logger.info("Setting 'focus_auto' to %d", 1)
            cam.set_v4l_parameter("focus_auto", 1)
        else:
            logger.info("Setting 'focus_auto' to %d", 0)
            cam.set_v4l_parameter("focus_auto", 0)
            if p.focus >= 0:
                logger.info("Setting 'focus_absolute' to %d", p.focus)
                cam.set_v4l_parameter("focus_absolute", p.focus)

    def service_capture(self, data: bool) -> str:
        """Start or stop capturing; returns the message the service replies with."""
        if data:
            self.camera.start_capturing()
            return "Start Capturing"
        self.camera.stop_capturing()
        return "Stop Capturing"

    def period_ms(self) -> int:
        """Milliseconds between two frame updates at the configured frame rate."""
        return int(1000.0 / self.parameters.framerate)

    def _current_camera_info(self, header: _Header) -> _CameraInfo:
        return replace(self.camera_info, header=replace(header))

    def take_and_send_image(self) -> bool:
        """Grab a frame and publish it with its camera info."""
        info = self.camera.get_image()
        msg = self.image_msg
        msg.width = info.width
        msg.height = info.height
        msg.encoding = info.pixel_format.ros
        msg.step = info.bytes_per_line()
        if msg.step == 0 and msg.height:
            msg.step = info.size_in_bytes() // msg.height
        msg.data = bytes(info.data)
        msg.header.stamp = info.stamp or Timestamp(0, 0)

        self.camera_info_msg = self._current_camera_info(msg.header)
        self.image_publisher(replace(msg, header=replace(msg.header)), self.camera_info_msg)
        return True

    def take_and_send_image_mjpeg(self) -> bool:
        """Grab a compressed frame and publish it and its camera info."""
        if self.compressed_img_msg is None:
            raise RuntimeError("the node was not set up for the mjpeg pixel format")
        info = self.camera.get_image()
        msg = self.compressed_img_msg
        msg.format = "jpeg"
        msg.data = bytes(info.data)
        msg.header.stamp = info.stamp or Timestamp(0, 0)

        self.camera_info_msg = self._current_camera_info(msg.header)
        self.compressed_image_publisher(replace(msg, header=replace(msg.header)))
        self.camera_info_publisher(self.camera_info_msg)
        return True

    def parameters_callback(self, params: Mapping[str, Any]) -> SetParametersResult:
        """Apply changed parameters and push them to the device."""
        logger.debug("Setting parameters for %s", self.parameters.camera_name)
        self.assign_params(params)
        self.set_v4l2_params()
        return SetParametersResult(successful=True, reason="success")

    def update(self) -> None:
        """Publish one frame if the camera is capturing."""
        if not self.camera.is_capturing():
            return
        if self.parameters.pixel_format_name == "mjpeg":
            successful = self.take_and_send_image_mjpeg()
        else:
            successful = self.take_and_send_image()
        if not successful and not self._warned_no_response:
            self._warned_no_response = True
            logger.warning("USB camera did not respond in time.")