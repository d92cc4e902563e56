"""Clipping and YUV to RGB conversion of single pixel values."""

from __future__ import annotations

from usbcam.constants import CLIPPING_TABLE_OFFSET, UCHAR_CLIPPING_TABLE


def clip_value(val: int) -> int:
    """Clip an integer to the range 0..255."""
    index = val + CLIPPING_TABLE_OFFSET
    if 0 <= index < len(UCHAR_CLIPPING_TABLE):
        return UCHAR_CLIPPING_TABLE[index]
    return 0 if val < 0 else min(val, 255)


def yuv_to_rgb(y: int, u: int, v: int) -> tuple[int, int, int]:
    """Convert one YUV sample (each 0..255) to an (r, g, b) triple.

    Uses a matrix with the UV components spread slightly wider than the
    standard one:

        R = Y + 1.136 V
        G = Y - 0.396 U - 0.578 V
        B = Y + 2.041 U
    """
    u2 = u - 128
    v2 = v - 128
    r = y + ((v2 * 37221) >> 15)
    g = y - (((u2 * 12975) + (v2 * 18949)) >> 15)
    b = y + ((u2 * 66883) >> 15)
    return clip_value(r), clip_value(g), clip_value(b)