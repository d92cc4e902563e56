"""Pixel formats, conversions, device helpers and a camera node for V4L2 USB cameras."""

__version__ = "0.1.0"