# -*- coding: utf-8 -*-

"""
Filename: ocean_displacement.py
Author: storro
Date: 2026-02-11
Description: Turns the IFFT output into a real, sign corrected and normalized displacement texture
"""

from oceanfft.gpu.compute_backend import (
    Access,
    Binding,
    ComputeList,
    ResourceSet,
    ResourceTracker,
    TextureFormat,
    TextureHandle,
)
from oceanfft.gpu.parameter_blocks import InversionBlock
from oceanfft.ocean.ocean_ifft2d import FFTResult
from oceanfft.ocean.ocean_parameters import groups_for


class OceanDisplacement:
    """
    Applies the (-1)^(x+y) checkerboard (an FFT shift without moving data,
    undoing the centered frequency indexing of the spectrum), divides by
    N^2 and keeps the real part.
    """

    KERNEL = "inversion"

    def __init__(self, resources: ResourceTracker, resolution: int) -> None:
        self.resolution = int(resolution)
        self._resources = resources
        self._kernel = resources.kernel(self.KERNEL)
        self._sets: dict[tuple[int, int], ResourceSet] = {}

    def create_output(self, name: str) -> TextureHandle:
        n = self.resolution
        return self._resources.texture(name, n, n, TextureFormat.RGBA16F)

    def prepare(self, result: FFTResult, output: TextureHandle) -> ResourceSet:
        key = (id(result.pair), id(output))
        if key not in self._sets:
            self._sets[key] = self._resources.resource_set(self._kernel, [
                Binding("u_displacement", output, Access.WRITE),
                Binding("u_pingpong0", result.pair.buffer0, Access.READ),
                Binding("u_pingpong1", result.pair.buffer1, Access.READ),
            ])
        return self._sets[key]

    def record(self, compute_list: ComputeList, result: FFTResult, output: TextureHandle) -> None:
        groups = groups_for(self.resolution)

        compute_list.bind(self.prepare(result, output))
        compute_list.push(InversionBlock(pingpong=int(result.valid), n=self.resolution))
        compute_list.dispatch(groups, groups)
        compute_list.barrier()
