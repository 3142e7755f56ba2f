# -*- coding: utf-8 -*-

"""
Filename: noise_source.py
Author: storro
Date: 2026-02-11
Description: Seeded uniform noise fields feeding the initial spectrum
"""

import random

from array import array

from oceanfft.gpu.compute_backend import ResourceTracker, TextureFormat, TextureHandle
from oceanfft.ocean.ocean_parameters import NoiseConfig

NOISE_FIELD_NAMES = ("noise_r0", "noise_i0", "noise_r1", "noise_i1")


class NoiseSource:
    """Four independent uniform fields of size N x N, deterministic per seed."""

    def __init__(self, config: NoiseConfig | None = None) -> None:
        self.config = config if config is not None else NoiseConfig()
        if len(self.config.seeds) != len(NOISE_FIELD_NAMES):
            raise ValueError(f"expected {len(NOISE_FIELD_NAMES)} seeds, got {len(self.config.seeds)}")

    def field(self, index: int, resolution: int) -> array:
        rng = random.Random(self.config.seeds[index])
        low, high = self.config.low, self.config.high
        count = resolution * resolution
        return array("f", (rng.uniform(low, high) for _ in range(count)))

    def fields(self, resolution: int) -> dict[str, array]:
        return {name: self.field(i, resolution) for i, name in enumerate(NOISE_FIELD_NAMES)}

    def create_textures(self, resources: ResourceTracker, resolution: int) -> dict[str, TextureHandle]:
        """Upload the four fields as sampled single channel float textures."""
        textures = {}
        for name, values in self.fields(resolution).items():
            textures[name] = resources.texture(name,
                                               resolution,
                                               resolution,
                                               TextureFormat.R32F,
                                               storage=False,
                                               data=values.tobytes())
        return textures
