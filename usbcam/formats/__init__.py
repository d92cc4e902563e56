"""Pixel format descriptions and converters from raw camera buffers to RGB or mono images."""