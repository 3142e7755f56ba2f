# -*- coding: utf-8 -*-

"""
Filename: ocean_fields.py
Author: storro
Date: 2026-02-11
Description: Host-side views of texture bytes: complex fields, real fields and the butterfly table
"""

import numpy as np

from oceanfft.gpu.compute_backend import TextureHandle


def decode_texture(data: bytes, texture: TextureHandle) -> np.ndarray:
    """Raw RGBA-ordered readback bytes -> float32 array of shape (height, width, channels)."""
    fmt = texture.format
    expected = texture.width * texture.height * fmt.bytes_per_texel
    if len(data) != expected:
        raise ValueError(f"{texture.name}: got {len(data)} bytes, expected {expected}")
    values = np.frombuffer(data, dtype=fmt.dtype)
    return values.reshape(texture.height, texture.width, fmt.channels).astype(np.float32)


def real_field(data: bytes, texture: TextureHandle) -> np.ndarray:
    return decode_texture(data, texture)[..., 0]


def complex_field(data: bytes, texture: TextureHandle) -> np.ndarray:
    texels = decode_texture(data, texture)
    return (texels[..., 0] + 1j * texels[..., 1]).astype(np.complex64)

