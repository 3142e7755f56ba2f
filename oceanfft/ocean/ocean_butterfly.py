# -*- coding: utf-8 -*-

"""
Filename: ocean_butterfly.py
Author: storro
Date: 2026-02-11
Description: Precomputes the FFT butterfly table (twiddles + partner indices) on the GPU
"""

import math

from array import array

import numpy as np

from oceanfft.gpu.compute_backend import (
    Access,
    Binding,
    ComputeList,
    ResourceTracker,
    TextureFormat,
)
from oceanfft.gpu.parameter_blocks import ButterflyBlock
from oceanfft.ocean.ocean_parameters import groups_for, is_power_of_two


def bit_reverse(i: int, bits: int) -> int:
    r = 0
    for _ in range(bits):
        r = (r << 1) | (i & 1)
        i >>= 1
    return r


def bit_reversed_indices(n: int) -> list[int]:
    """Permutation taking position i to i with its low log2(n) bits reversed."""
    if not is_power_of_two(n):
        raise ValueError(f"n must be a power of two, got {n}")
    bits = n.bit_length() - 1
    return [bit_reverse(i, bits) for i in range(n)]


def reference_table(n: int) -> np.ndarray:
    """
    Host-side butterfly table laid out like the texture: shape (N, log2N, 4),
    indexed [row, stage] with (twiddle.re, twiddle.im, index0, index1).
    """
    log2n = n.bit_length() - 1
    rows = np.arange(n)
    br = np.asarray(bit_reversed_indices(n))
    table = np.zeros((n, log2n, 4), dtype=np.float32)

    for stage in range(log2n):
        span = 1 << stage
        step = span << 1
        k = (rows * (n // step)) % n
        angle = 2.0 * math.pi * k / n
        top_wing = (rows % step) < span

        if stage == 0:
            i0 = np.where(top_wing, br, np.roll(br, 1))
            i1 = np.where(top_wing, np.roll(br, -1), br)
        else:
            i0 = np.where(top_wing, rows, rows - span)
            i1 = np.where(top_wing, rows + span, rows)

        table[:, stage, 0] = np.cos(angle)
        table[:, stage, 1] = np.sin(angle)
        table[:, stage, 2] = i0
        table[:, stage, 3] = i1

    return table


class OceanButterflyTable:
    """
    log2(N) x N butterfly texture, computed once per resolution.

    Stage 0 reads its partner indices from the bit-reversal permutation,
    uploaded as a storage buffer; later stages use span offsets.
    """

    KERNEL = "butterfly_table"

    def __init__(self, resources: ResourceTracker, resolution: int) -> None:
        self.resolution = int(resolution)
        self.log2n = self.resolution.bit_length() - 1

        indices = array("i", bit_reversed_indices(self.resolution))
        self.bit_reversed = resources.storage_buffer("BitReversedIndices", indices.tobytes())

        # width = stage, height = row
        self.texture = resources.texture("butterfly", self.log2n, self.resolution, TextureFormat.RGBA16F)

        self._kernel = resources.kernel(self.KERNEL)
        self._set = resources.resource_set(self._kernel, [
            Binding("u_butterfly", self.texture, Access.WRITE),
            Binding("BitReversedIndices", self.bit_reversed, Access.BUFFER),
        ])

    def record(self, compute_list: ComputeList) -> None:
        compute_list.bind(self._set)
        compute_list.push(ButterflyBlock(n=self.resolution, log2n=self.log2n))
        # local size is 1 x 16
        compute_list.dispatch(self.log2n, groups_for(self.resolution))
        compute_list.barrier()

    def reference_table(self) -> np.ndarray:
        return reference_table(self.resolution)
