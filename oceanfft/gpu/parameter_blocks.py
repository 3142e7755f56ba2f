# -*- coding: utf-8 -*-

"""
Filename: parameter_blocks.py
Author: storro
Date: 2026-02-11
Description: Fixed-size, order-sensitive parameter blocks pushed to each compute kernel
"""

import struct

from dataclasses import dataclass, fields
from typing import ClassVar


class ParameterBlock:
    """
    Base for the per-kernel parameter blocks.

    LAYOUT is the std430 struct layout (little endian) and packed_values()
    returns the values in layout order, padding included.
    """

    LAYOUT: ClassVar[str]

    def packed_values(self) -> tuple:
        return tuple(getattr(self, f.name) for f in fields(self))  # type: ignore[arg-type]

    def pack(self) -> bytes:
        return struct.pack(self.LAYOUT, *self.packed_values())

    @classmethod
    def size(cls) -> int:
        return struct.calcsize(cls.LAYOUT)

    def shader_inputs(self) -> dict:
        return {f"u_{f.name}": getattr(self, f.name) for f in fields(self)}  # type: ignore[arg-type]


@dataclass(frozen=True)
class SpectrumBlock(ParameterBlock):
    # int N; int L; float A; float pad; vec2 wind; float windspeed; float pad;
    LAYOUT: ClassVar[str] = "<2i6f"

    n: int
    ocean_size: int
    amplitude: float
    wind_x: float
    wind_y: float
    wind_speed: float

    def packed_values(self) -> tuple:
        return (int(self.n), int(self.ocean_size), float(self.amplitude), 0.0,
                float(self.wind_x), float(self.wind_y), float(self.wind_speed), 0.0)

    def shader_inputs(self) -> dict:
        return {
            "u_n": int(self.n),
            "u_ocean_size": int(self.ocean_size),
            "u_amplitude": float(self.amplitude),
            "u_wind_direction": (float(self.wind_x), float(self.wind_y)),
            "u_wind_speed": float(self.wind_speed),
        }


@dataclass(frozen=True)
class TimeBlock(ParameterBlock):
    # int N; int L; float t; float pad;
    LAYOUT: ClassVar[str] = "<2i2f"

    n: int
    ocean_size: int
    time: float

    def packed_values(self) -> tuple:
        return (int(self.n), int(self.ocean_size), float(self.time), 0.0)


@dataclass(frozen=True)
class ButterflyBlock(ParameterBlock):
    # int N; int log2N; int pad; int pad;
    LAYOUT: ClassVar[str] = "<4i"

    n: int
    log2n: int

    def packed_values(self) -> tuple:
        return (int(self.n), int(self.log2n), 0, 0)


@dataclass(frozen=True)
class FFTBlock(ParameterBlock):
    # int stage; int pingpong; int direction; int N;
    LAYOUT: ClassVar[str] = "<4i"

    stage: int
    pingpong: int
    direction: int
    n: int

    def packed_values(self) -> tuple:
        return (int(self.stage), int(self.pingpong), int(self.direction), int(self.n))


@dataclass(frozen=True)
class InversionBlock(ParameterBlock):
    # int pingpong; int N; int pad; int pad;
    LAYOUT: ClassVar[str] = "<4i"

    pingpong: int
    n: int

    def packed_values(self) -> tuple:
        return (int(self.pingpong), int(self.n), 0, 0)
