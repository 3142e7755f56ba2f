# -*- coding: utf-8 -*-

"""
Filename: ocean_parameters.py
Author: storro
Date: 2026-02-11
Description: Simulation parameters shared by the spectrum, time and FFT stages
"""

import logging
import math
import numbers

from dataclasses import dataclass, field, replace
from enum import Enum

from oceanfft.util.errors import OceanConfigError

# Butterfly indices are stored as half floats, which represent every
# integer exactly only up to 2048
MAX_RESOLUTION = 2048

# Local workgroup sizes baked into the compute shaders
WORKGROUP_SIZE = 16

GRAVITY = 9.81


def is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


def _is_real(value) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def groups_for(size: int, local_size: int = WORKGROUP_SIZE) -> int:
    return (int(size) + local_size - 1) // local_size


class Component(Enum):
    """Scalar displacement components, in the order they are transformed."""
    HEIGHT = "dy"
    DISPLACEMENT_X = "dx"
    DISPLACEMENT_Z = "dz"


@dataclass(frozen=True)
class SpectrumParameters:
    # Simulation texture resolution (N). Frequency domain textures and the
    # produced displacement maps are N x N. Must be a power of 2 for the FFT
    resolution: int = 256

    # World-space size of the ocean patch, the "L" parameter in Tessendorf's paper
    ocean_size: int = 1000

    # Phillips spectrum amplitude "A"
    amplitude: float = 4.0

    # Direction the wind blows to, normalized before it reaches the kernel
    wind_direction: tuple[float, float] = (1.0, 1.0)
    wind_speed: float = 30.0

    @property
    def log2_resolution(self) -> int:
        return int(self.resolution).bit_length() - 1

    def validate(self) -> "SpectrumParameters":
        """Raise OceanConfigError for anything that must not reach the GPU."""
        n = self.resolution
        if not isinstance(n, numbers.Integral) or isinstance(n, bool):
            raise OceanConfigError(f"resolution must be an int, got {n!r}")
        if not is_power_of_two(n):
            raise OceanConfigError(f"resolution must be a power of two, got {n}")
        if n < 2:
            raise OceanConfigError("resolution must be at least 2")
        if n > MAX_RESOLUTION:
            raise OceanConfigError(
                f"resolution {n} exceeds {MAX_RESOLUTION}, butterfly indices would lose precision"
            )
        size = self.ocean_size
        if not _is_real(size) or not math.isfinite(size) or size <= 0 or size != int(size):
            raise OceanConfigError(f"ocean_size must be a positive integer, got {size!r}")

        for label, value in (("amplitude", self.amplitude), ("wind_speed", self.wind_speed)):
            if not _is_real(value) or not math.isfinite(value):
                raise OceanConfigError(f"{label} must be finite, got {value}")
            if value < 0.0:
                raise OceanConfigError(f"{label} must be >= 0, got {value}")

        wind = self.wind_direction
        if (not isinstance(wind, (tuple, list)) or len(wind) != 2
                or not all(_is_real(c) and math.isfinite(c) for c in wind)):
            raise OceanConfigError(f"wind_direction must be a finite 2-vector, got {wind!r}")
        return self

    def normalized_wind(self) -> tuple[float, float]:
        wx, wy = (float(c) for c in self.wind_direction)
        length = math.hypot(wx, wy)
        if length < 1e-4:
            logging.warning("Wind direction %s is degenerate, using (1, 0)", self.wind_direction)
            return (1.0, 0.0)
        return (wx / length, wy / length)

    def with_changes(self, **changes) -> "SpectrumParameters":
        return replace(self, **changes)


@dataclass(frozen=True)
class NoiseConfig:
    # One seed per uniform noise field: r0, i0, r1, i1
    seeds: tuple[int, int, int, int] = (12345, 23456, 34567, 45678)

    # Samples are drawn from [low, high) and never reach 0 so log() stays finite
    low: float = 0.001
    high: float = 1.0


@dataclass
class OceanPipelineConfig:
    # False runs the height-only variant (Dy), True adds the horizontal Dx/Dz
    choppy: bool = True

    # Keep two output sets per component so a consumer can sample the last
    # completed frame while the next one is being computed
    double_buffered: bool = False

    # Multiplies the dt given to advance()
    time_scale: float = 1.0
    start_time: float = 0.0

    noise: NoiseConfig = field(default_factory=NoiseConfig)

    @property
    def components(self) -> tuple[Component, ...]:
        if self.choppy:
            return (Component.HEIGHT, Component.DISPLACEMENT_X, Component.DISPLACEMENT_Z)
        return (Component.HEIGHT,)
