# -*- coding: utf-8 -*-

"""
Filename: ocean_ifft2d.py
Author: storro
Date: 2026-02-11
Description: Converts a frequency domain field to the spatial domain using a 2D Inverse Fast Fourier Transform (IFFT)
"""

import logging

from dataclasses import dataclass
from enum import IntEnum

from oceanfft.gpu.compute_backend import (
    Access,
    Binding,
    ComputeList,
    ResourceSet,
    ResourceTracker,
    TextureFormat,
    TextureHandle,
)
from oceanfft.gpu.parameter_blocks import FFTBlock
from oceanfft.ocean.ocean_parameters import groups_for


class PingPong(IntEnum):
    """Which buffer of a ping-pong pair holds the valid data."""
    BUFFER_0 = 0
    BUFFER_1 = 1

    def flipped(self) -> "PingPong":
        return PingPong(1 - self.value)


class FFTDirection(IntEnum):
    HORIZONTAL = 0
    VERTICAL = 1


@dataclass(eq=False)
class PingPongPair:
    """Field texture plus its scratch twin, owned by one component."""

    name: str
    buffer0: TextureHandle
    buffer1: TextureHandle

    @classmethod
    def create(cls,
               resources: ResourceTracker,
               name: str,
               resolution: int) -> "PingPongPair":
        buffer0 = resources.texture(f"{name}_ping0", resolution, resolution, TextureFormat.RGBA16F)
        buffer1 = resources.texture(f"{name}_ping1", resolution, resolution, TextureFormat.RGBA16F)
        return cls(name, buffer0, buffer1)

    def buffer(self, which: PingPong) -> TextureHandle:
        return self.buffer0 if which is PingPong.BUFFER_0 else self.buffer1


@dataclass(frozen=True)
class FFTResult:
    """The pair a transform ran on and the buffer its result ended up in."""

    pair: PingPongPair
    valid: PingPong

    @property
    def texture(self) -> TextureHandle:
        return self.pair.buffer(self.valid)


class OceanIFFT2D:
    """
    Radix-2 2D FFT as 2*log2(N) butterfly passes, log2(N) along rows then
    log2(N) along columns. One instance serves every component; each
    component brings its own ping-pong pair.
    """

    KERNEL = "fft_butterfly"

    def __init__(self,
                 resources: ResourceTracker,
                 butterfly: TextureHandle,
                 resolution: int) -> None:
        n = int(resolution)
        if n <= 0 or (n & (n - 1)) != 0:
            raise ValueError("resolution must be a power of two")
        if butterfly.height != n:
            raise ValueError(f"butterfly table has {butterfly.height} rows, expected {n}")

        self.resolution = n
        self._stages = n.bit_length() - 1
        self._groups = groups_for(n)
        self._butterfly = butterfly
        self._resources = resources

        self._kernel = resources.kernel(self.KERNEL)
        self._sets: dict[int, ResourceSet] = {}

    @property
    def stages(self) -> int:
        return self._stages

    def prepare(self, pair: PingPongPair) -> ResourceSet:
        """Create (once) the resource set binding this pair to the kernel."""
        key = id(pair)
        if key not in self._sets:
            self._sets[key] = self._resources.resource_set(self._kernel, [
                Binding("u_butterfly", self._butterfly, Access.READ),
                Binding("u_pingpong0", pair.buffer0, Access.READ_WRITE),
                Binding("u_pingpong1", pair.buffer1, Access.READ_WRITE),
            ])
        return self._sets[key]

    def record_stage(self,
                     compute_list: ComputeList,
                     direction: FFTDirection,
                     stage: int,
                     pingpong: PingPong) -> PingPong:
        """
        Record one butterfly pass reading from `pingpong` and writing the
        other buffer. Returns the buffer that is valid afterwards.
        The pair's resource set must already be bound.
        """
        compute_list.push(FFTBlock(stage=stage,
                                   pingpong=int(pingpong),
                                   direction=int(direction),
                                   n=self.resolution))
        compute_list.dispatch(self._groups, self._groups)
        # every texel of the next stage may read any texel of this one
        compute_list.barrier()
        return pingpong.flipped()

    def record(self,
               compute_list: ComputeList,
               pair: PingPongPair,
               start: PingPong = PingPong.BUFFER_0) -> FFTResult:
        compute_list.bind(self.prepare(pair))

        pingpong = start
        for direction in (FFTDirection.HORIZONTAL, FFTDirection.VERTICAL):
            for stage in range(self._stages):
                pingpong = self.record_stage(compute_list, direction, stage, pingpong)

        logging.debug("FFT %s: %d passes, result in %s", pair.name, 2 * self._stages, pingpong.name)
        return FFTResult(pair, pingpong)
