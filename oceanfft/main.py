# -*- coding: utf-8 -*-

"""
Filename: main.py
Author: storro
Date: 2026-02-11
Description: Headless entry point, runs the ocean pipeline for a number of frames and saves the fields
"""

import argparse
import logging

import numpy as np

from oceanfft.gpu.compute_backend import ComputeBackend
from oceanfft.gpu.panda3d_backend import Panda3DComputeBackend
from oceanfft.ocean.ocean_parameters import NoiseConfig, OceanPipelineConfig, SpectrumParameters
from oceanfft.ocean.ocean_pipeline import OceanPipeline
from oceanfft.util.logging_config import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="GPU Tessendorf ocean: spectrum, time evolution and 2D IFFT"
    )
    parser.add_argument(
        "-n",
        "--resolution",
        type=int,
        default=256,
        help="Simulation resolution N, a power of two (default: 256)",
    )
    parser.add_argument(
        "-l",
        "--ocean-size",
        type=int,
        default=1000,
        help="Patch size L in meters (default: 1000)",
    )
    parser.add_argument(
        "-a",
        "--amplitude",
        type=float,
        default=4.0,
        help="Phillips spectrum amplitude A (default: 4.0)",
    )
    parser.add_argument(
        "--wind",
        type=float,
        nargs=2,
        metavar=("X", "Y"),
        default=(1.0, 1.0),
        help="Wind direction (default: 1 1)",
    )
    parser.add_argument(
        "-w",
        "--wind-speed",
        type=float,
        default=30.0,
        help="Wind speed in m/s (default: 30.0)",
    )
    parser.add_argument(
        "--seeds",
        type=int,
        nargs=4,
        metavar="SEED",
        default=NoiseConfig().seeds,
        help="Seeds of the four noise fields",
    )
    parser.add_argument(
        "--height-only",
        action="store_true",
        help="Simulate the height component only",
    )
    parser.add_argument(
        "--double-buffered",
        action="store_true",
        help="Alternate between two output sets",
    )
    parser.add_argument(
        "-t",
        "--time-scale",
        type=float,
        default=1.0,
        help="Time scaling factor (default: 1.0)",
    )
    parser.add_argument(
        "--frames",
        type=int,
        default=1,
        help="Number of frames to simulate (default: 1)",
    )
    parser.add_argument(
        "--dt",
        type=float,
        default=1.0 / 60.0,
        help="Time step per frame in seconds (default: 1/60)",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Write the last frame's fields to this .npz file",
    )
    parser.add_argument(
        "--verify-butterfly",
        action="store_true",
        help="Compare the GPU butterfly table against the host reference",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    parser.add_argument(
        "--log-file",
        action="store_true",
        help="Also log to logs/oceanfft.log",
    )
    return parser


def params_from_args(args: argparse.Namespace) -> SpectrumParameters:
    return SpectrumParameters(
        resolution=args.resolution,
        ocean_size=args.ocean_size,
        amplitude=args.amplitude,
        wind_direction=tuple(args.wind),
        wind_speed=args.wind_speed,
    )


def config_from_args(args: argparse.Namespace) -> OceanPipelineConfig:
    return OceanPipelineConfig(
        choppy=not args.height_only,
        double_buffered=args.double_buffered,
        time_scale=args.time_scale,
        noise=NoiseConfig(seeds=tuple(args.seeds)),
    )


def create_backend() -> ComputeBackend:
    return Panda3DComputeBackend.offscreen()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    params = params_from_args(args).validate()
    backend = create_backend()
    try:
        return run(backend, params, config_from_args(args), args)
    finally:
        backend.destroy()


def run(backend: ComputeBackend,
        params: SpectrumParameters,
        config: OceanPipelineConfig,
        args: argparse.Namespace) -> int:
    with OceanPipeline(backend, params, config) as pipeline:
        if args.verify_butterfly and not pipeline.verify_butterfly_table():
            logging.error("Butterfly table verification failed")
            return 1

        for _ in range(max(args.frames, 0)):
            pipeline.advance(args.dt)
        pipeline.sync()

        if pipeline.latest_frame is None:
            logging.info("No frames rendered")
            return 0

        fields = pipeline.read_fields()
        for component, values in fields.items():
            logging.info("%s: min %.4f, max %.4f, rms %.4f",
                         component.value,
                         float(values.min()),
                         float(values.max()),
                         float(np.sqrt(np.mean(values * values))))

        if args.output:
            np.savez(args.output,
                     time=np.float32(pipeline.time),
                     **{component.value: values for component, values in fields.items()})
            logging.info("Fields written to %s", args.output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
