"""I/O method names, frame timestamps and discovery of V4L2 devices."""

from __future__ import annotations

import enum
import logging
import os
import struct
import time
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_SYSFS_DIR = "/sys/class/video4linux/"

_V4L2_CAPABILITY = struct.Struct("=16s32s32sIII12s")
# _IOR('V', 0, struct v4l2_capability)
_VIDIOC_QUERYCAP = (2 << 30) | (_V4L2_CAPABILITY.size << 16) | (ord("V") << 8) | 0


class IoMethod(enum.Enum):
    """How frames are exchanged with the capture device."""

    READ = "read"
    MMAP = "mmap"
    USERPTR = "userptr"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Timestamp:
    """A point in time split into whole seconds and nanoseconds."""

    sec: int
    nsec: int


@dataclass(frozen=True)
class DeviceCapability:
    """What a V4L2 device reports about itself."""

    driver: str
    card: str
    bus_info: str
    version: int
    capabilities: int
    device_caps: int

    @classmethod
    def from_bytes(cls, raw: bytes) -> DeviceCapability:
        driver, card, bus_info, version, caps, device_caps, _ = _V4L2_CAPABILITY.unpack(
            raw[: _V4L2_CAPABILITY.size]
        )
        return cls(
            driver=_c_string(driver),
            card=_c_string(card),
            bus_info=_c_string(bus_info),
            version=version,
            capabilities=caps,
            device_caps=device_caps,
        )


def _c_string(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("utf-8", errors="replace")


def io_method_from_string(name: str) -> IoMethod:
    """Map an I/O method name to its IoMethod; unknown names give IoMethod.UNKNOWN."""
    try:
        method = IoMethod(name)
    except ValueError:
        return IoMethod.UNKNOWN
    return method


def get_epoch_time_shift_us() -> int:
    """Microseconds to add to a monotonic clock reading to get wall-clock time."""
    epoch_us = time.time_ns() // 1000
    mono_sec, mono_nsec = divmod(time.monotonic_ns(), 1_000_000_000)
    uptime_us = mono_sec * 1_000_000 + (mono_nsec + 500) // 1000
    return epoch_us - uptime_us


def _trunc_divmod(numerator: int, denominator: int) -> tuple[int, int]:
    quotient = abs(numerator) // denominator
    if numerator < 0:
        quotient = -quotient
    return quotient, numerator - quotient * denominator


def calc_img_timestamp(buffer_sec: int, buffer_usec: int, epoch_time_shift_us: int) -> Timestamp:
    """Shift a buffer's monotonic time by the epoch shift and split it into sec/nsec."""
    buffer_time_us = buffer_sec * 1_000_000 + buffer_usec + epoch_time_shift_us
    sec, usec = _trunc_divmod(buffer_time_us, 1_000_000)
    return Timestamp(sec=sec, nsec=usec * 1000)


def _device_name_from_uevent(uevent: Path) -> str:
    try:
        with uevent.open(encoding="utf-8", errors="replace") as handle:
            for line in handle:
                index = line.find("DEVNAME=")
                if index != -1:
                    return "/dev/" + line[index + len("DEVNAME="):].rstrip("\n")
    except OSError:
        pass
    return ""


def _query_capability(fd: int) -> DeviceCapability:
    import fcntl

    buffer = bytearray(_V4L2_CAPABILITY.size)
    fcntl.ioctl(fd, _VIDIOC_QUERYCAP, buffer, True)
    return DeviceCapability.from_bytes(bytes(buffer))


def available_devices(sysfs_dir: str | os.PathLike[str] = DEFAULT_SYSFS_DIR) -> dict[str, DeviceCapability]:
    """List the V4L2 devices that can be opened and queried, keyed by device path."""
    base = Path(sysfs_dir)
    devices: dict[str, DeviceCapability] = {}
    for entry in sorted(base.iterdir()):
        if not entry.is_symlink():
            continue
        device_dir = (base / os.readlink(entry)).resolve(strict=True)
        device_name = _device_name_from_uevent(device_dir / "uevent")
        try:
            fd = os.open(device_name, os.O_RDONLY)
        except OSError:
            logger.warning(
                "Cannot open device: `%s`, double-check read / write permissions for device",
                device_name,
            )
            continue
        try:
            devices[device_name] = _query_capability(fd)
        except OSError:
            logger.warning("Could not retrieve device capabilities: `%s`", device_name)
        finally:
            os.close(fd)
    return dict(sorted(devices.items()))