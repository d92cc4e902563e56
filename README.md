# usbcam

Building blocks for capturing images from V4L2 USB cameras on Linux:

- pixel format descriptions that link a V4L2 capture format to the image
  encoding you publish (`rgb8`, `mono8`, `yuv422_yuy2`, and so on);
- converters from raw camera buffers to RGB or mono images (YUYV, UYVY,
  Y10, M420, MJPEG);
- helpers for I/O method names, frame timestamps and finding video devices;
- a camera node that holds its parameters, applies V4L2 controls through a
  camera object you supply, and publishes the frames it grabs.

## Installation

```
pip install .
```

Run the test suite with:

```
pip install .[test]
pytest
```

## Pixel formats

Each supported format is a `PixelFormat` subclass (in `usbcam.formats.base`,
`yuv`, `mono`, `rgb`, `m420` and `mjpeg`). `usbcam.camera.driver_supported_formats`
lists them all, and `find_driver_format` picks one by name, raising
`ValueError` for a name it does not know:

| name        | capture (V4L2) | output encoding | converts |
|-------------|----------------|-----------------|----------|
| `rgb8`      | RGB332         | `rgb8`          | no       |
| `yuyv`      | YUYV           | `yuv422_yuy2`   | no       |
| `yuyv2rgb`  | YUYV           | `rgb8`          | yes      |
| `uyvy`      | UYVY           | `yuv422`        | no       |
| `uyvy2rgb`  | UYVY           | `rgb8`          | yes      |
| `mono8`     | GREY           | `mono8`         | no       |
| `mono16`    | Y16            | `mono16`        | no       |
| `y102mono8` | Y10            | `mono8`         | yes      |
| `mjpeg2rgb` | MJPEG          | `rgb8`          | yes      |
| `m4202rgb`  | M420           | `rgb8`          | yes      |

A format that needs conversion turns a raw buffer into output bytes with
`convert`; formats that need none return the buffer unchanged:

```python
from usbcam.formats.base import FormatArguments
from usbcam.formats.yuv import YUYV2RGB

args = FormatArguments(name="yuyv2rgb", width=2, height=1, pixels=2)
fmt = YUYV2RGB(args)
rgb = fmt.convert(bytes([128, 128, 128, 128]), 4)  # two grey RGB pixels
```

Converters raise `ValueError` when a frame is too short for the configured
size. `MJPEG2RGB` decodes JPEG frames with Pillow and resizes the result to
the configured width and height if they differ; `M4202RGB` converts planar
YUV 4:2:0 and needs an even width and height.

Every format also reports its fourcc (`v4l2_str()`), channel count, bit and
byte depth (`byte_depth()`), and whether its output is colour, mono, Bayer
or has alpha (`is_color()`, `is_mono()`, `is_bayer()`, `has_alpha()`).
`fourcc` and `fourcc_to_str` convert between four character codes and their
integer values.

## Choosing a format for a device

`select_pixel_format(args, device_formats)` takes the format arguments and the
`CaptureFormat` entries a device offers, and returns the driver format named
in the arguments if the device can capture it; otherwise it raises
`ValueError`. `format_arguments_from_parameters` builds the arguments from a
`Parameters` object. `ImageInfo` describes an image's size, format, time stamp
and data, with `number_of_pixels()`, `bytes_per_line()` and `size_in_bytes()`.

## Colour and timing helpers

```python
from usbcam.formats.color import clip_value, yuv_to_rgb
from usbcam.utils import IoMethod, io_method_from_string, calc_img_timestamp

clip_value(300)                        # 255
yuv_to_rgb(128, 128, 128)              # (128, 128, 128)
io_method_from_string("mmap")          # IoMethod.MMAP
io_method_from_string("bananas")       # IoMethod.UNKNOWN
```

`get_epoch_time_shift_us()` measures the offset between the monotonic clock
and wall-clock time, and `calc_img_timestamp` uses it to turn a buffer time
into an epoch `Timestamp`. `available_devices()` scans the video4linux sysfs
directory (or another directory you pass) and returns a `DeviceCapability`
for each device that can be opened and queried, keyed by its `/dev` path.

## The camera node

`UsbCamNode` is built from a camera object, an image publisher callable and
optional parameter values; `default_parameter_values()` gives the defaults it
starts from. On construction it checks that the device is listed by
`available_devices()` (raising `RuntimeError` if not), checks the I/O method
(raising `ValueError` if unknown), configures and starts the camera and
applies the V4L2 controls.

Afterwards it takes parameter updates through `assign_params` or
`parameters_callback` (which returns a `SetParametersResult`), pushes them to
the device with `set_v4l2_params`, starts and stops capture through
`service_capture`, and on each `update` grabs a frame with
`take_and_send_image` (or `take_and_send_image_mjpeg` when the pixel format is
`mjpeg`, which also needs a compressed image publisher and a camera info
publisher). `period_ms()` gives the interval between updates at the configured
frame rate. Device paths given as symbolic links are resolved with
`resolve_device_path`.

## What this package does not do

- It does not open, configure or stream from a V4L2 device itself. The node
  works with a camera object you provide, which must offer `configure`,
  `start`, `start_capturing`, `stop_capturing`, `is_capturing`,
  `set_v4l_parameter`, `set_auto_focus` and `get_image` (returning an
  `ImageInfo`).
- It runs no timer and no message transport: call `UsbCamNode.update` at
  the interval `period_ms()` gives, and pass callables that deliver the
  published messages wherever you need them.
- It installs no command-line program.