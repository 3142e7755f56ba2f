# -*- coding: utf-8 -*-

"""
Filename: ocean_spectrum_generator.py
Author: storro
Date: 2026-02-11
Description: Generates the initial ocean spectrum textures h0(k) and h0(-k) using a compute shader
"""

from oceanfft.gpu.compute_backend import (
    Access,
    Binding,
    ComputeList,
    ResourceTracker,
    TextureFormat,
)
from oceanfft.gpu.parameter_blocks import SpectrumBlock
from oceanfft.ocean.noise_source import NoiseSource
from oceanfft.ocean.ocean_parameters import SpectrumParameters, groups_for


class OceanSpectrumGenerator:
    """Generates the initial ocean spectrum textures using a compute shader."""

    KERNEL = "initial_spectrum"

    def __init__(self,
                 resources: ResourceTracker,
                 resolution: int,
                 noise: NoiseSource | None = None) -> None:
        self.resolution = int(resolution)
        self.noise = noise if noise is not None else NoiseSource()
        self._backend = resources.backend

        n = self.resolution
        self.h0k = resources.texture("h0k", n, n, TextureFormat.RGBA16F)
        self.h0minusk = resources.texture("h0minusk", n, n, TextureFormat.RGBA16F)
        self.noise_textures = self.noise.create_textures(resources, n)

        self._kernel = resources.kernel(self.KERNEL)

        bindings = [
            Binding("u_h0k", self.h0k, Access.WRITE),
            Binding("u_h0minusk", self.h0minusk, Access.WRITE),
        ]
        bindings += [
            Binding(f"u_{name}", tex, Access.SAMPLED) for name, tex in self.noise_textures.items()
        ]
        self._set = resources.resource_set(self._kernel, bindings)

    def record(self, compute_list: ComputeList, params: SpectrumParameters) -> None:
        """Record the spectrum dispatch; h0 textures are complete after the barrier."""
        if params.resolution != self.resolution:
            raise ValueError(
                f"spectrum textures are {self.resolution}^2, parameters ask for {params.resolution}^2"
            )

        wind_x, wind_y = params.normalized_wind()
        groups = groups_for(self.resolution)

        compute_list.bind(self._set)
        compute_list.push(SpectrumBlock(n=self.resolution,
                                        ocean_size=int(params.ocean_size),
                                        amplitude=float(params.amplitude),
                                        wind_x=wind_x,
                                        wind_y=wind_y,
                                        wind_speed=float(params.wind_speed)))
        compute_list.dispatch(groups, groups)
        compute_list.barrier()

    def generate(self, params: SpectrumParameters) -> None:
        """Dispatch immediately and wait, filling h0k / h0minusk in place."""
        backend = self._backend
        compute_list = backend.begin("ocean_initial_spectrum")
        self.record(compute_list, params)
        backend.submit(compute_list.end(), wait=True)
