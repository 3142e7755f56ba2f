# -*- coding: utf-8 -*-

"""
Filename: ocean_pipeline.py
Author: storro
Date: 2026-02-11
Description: Wires spectrum, time evolution, butterfly table, IFFT and inversion into one per-frame compute list
"""

import logging

from contextlib import contextmanager
from dataclasses import dataclass

import numpy as np

from oceanfft.gpu.compute_backend import ComputeBackend, ResourceTracker, TextureHandle
from oceanfft.ocean.noise_source import NoiseSource
from oceanfft.ocean.ocean_butterfly import OceanButterflyTable
from oceanfft.ocean.ocean_displacement import OceanDisplacement
from oceanfft.ocean.ocean_fields import complex_field, decode_texture, real_field
from oceanfft.ocean.ocean_ifft2d import OceanIFFT2D, PingPong, PingPongPair
from oceanfft.ocean.ocean_parameters import Component, OceanPipelineConfig, SpectrumParameters
from oceanfft.ocean.ocean_spectrum_generator import OceanSpectrumGenerator
from oceanfft.ocean.ocean_time_spectrum import OceanTimeSpectrum
from oceanfft.util.errors import BackendCapabilityError, PipelineStateError


@dataclass(frozen=True)
class FrameOutputs:
    """Displacement textures written by one frame."""

    number: int
    time: float
    output_index: int
    fields: dict[Component, TextureHandle]
    final_pingpong: dict[Component, PingPong]


@contextmanager
def _stage(name: str):
    try:
        yield
    except BackendCapabilityError as e:
        raise e.with_stage(name) from e


class OceanPipeline:
    """
    Owns every GPU resource of one simulation. The spectrum and butterfly
    table are computed at initialize() and reused; each frame records
    time evolution then, per component, the FFT passes and the inversion.

    render_frame(wait=False) leaves synchronization to the caller, so the
    same pipeline serves blocking readback and continuous display.
    """

    def __init__(self,
                 backend: ComputeBackend,
                 params: SpectrumParameters | None = None,
                 config: OceanPipelineConfig | None = None) -> None:
        self._backend = backend
        self.params = params if params is not None else SpectrumParameters()
        self.config = config if config is not None else OceanPipelineConfig()
        self.time = float(self.config.start_time)

        self._resources: ResourceTracker | None = None
        self._ready = False
        self._in_flight = False
        self._frame_number = 0

        self.latest_frame: FrameOutputs | None = None
        self._previous_frame: FrameOutputs | None = None
        # output set index -> frame that last wrote it
        self._writers: dict[int, FrameOutputs] = {}

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def components(self) -> tuple[Component, ...]:
        return self.config.components

    @property
    def displayed_frame(self) -> FrameOutputs | None:
        """
        Frame a consumer should sample: the latest one once synchronized,
        else the one before it. A previous frame whose output set is being
        rewritten by the latest frame no longer exists, so the latest frame
        is returned; work sampling it on the same queue runs after the
        dispatches that write it.
        """
        if not self._in_flight:
            return self.latest_frame
        previous = self._previous_frame
        if previous is not None and previous.output_index == self.latest_frame.output_index:
            return self.latest_frame
        return previous

    def initialize(self) -> "OceanPipeline":
        if self._ready:
            raise PipelineStateError("pipeline is already initialized, use update_parameters()")

        # configuration errors surface before anything is allocated
        self.params.validate()
        n = int(self.params.resolution)

        logging.info("Initializing ocean pipeline: N=%d, L=%d, components=%s",
                     n, self.params.ocean_size, ",".join(c.value for c in self.components))

        resources = ResourceTracker(self._backend)
        try:
            with _stage("spectrum"):
                self._spectrum = OceanSpectrumGenerator(resources, n, NoiseSource(self.config.noise))

            with _stage("butterfly"):
                self._butterfly = OceanButterflyTable(resources, n)

            with _stage("fft"):
                self._pairs = {c: PingPongPair.create(resources, c.value, n) for c in self.components}
                self._fft = OceanIFFT2D(resources, self._butterfly.texture, n)
                for pair in self._pairs.values():
                    self._fft.prepare(pair)

            with _stage("time"):
                self._time_spectrum = OceanTimeSpectrum(
                    resources,
                    self._spectrum.h0k,
                    self._spectrum.h0minusk,
                    {c: pair.buffer(PingPong.BUFFER_0) for c, pair in self._pairs.items()},
                )

            with _stage("inversion"):
                self._displacement = OceanDisplacement(resources, n)
                output_sets = 2 if self.config.double_buffered else 1
                self._outputs = [
                    {c: self._displacement.create_output(f"{c.value}_displacement_{i}") for c in self.components}
                    for i in range(output_sets)
                ]

            compute_list = self._backend.begin("ocean_init")
            self._spectrum.record(compute_list, self.params)
            self._butterfly.record(compute_list)
            self._backend.submit(compute_list.end(), wait=True)
        except Exception:
            logging.error("Ocean pipeline initialization failed, releasing %d resources", len(resources))
            resources.release()
            raise

        self._resources = resources
        self._ready = True
        self._frame_number = 0
        self.latest_frame = None
        self._previous_frame = None
        self._writers = {}
        logging.info("Ocean pipeline ready (%d GPU resources)", len(resources))
        return self

    def _require_ready(self) -> None:
        if not self._ready:
            raise PipelineStateError("ocean pipeline is not initialized")

    def render_frame(self, time: float | None = None, wait: bool = False) -> FrameOutputs:
        """Record and submit one frame at `time` (defaults to the pipeline clock)."""
        self._require_ready()
        if time is None:
            time = self.time

        output_index = self._frame_number % len(self._outputs)
        outputs = self._outputs[output_index]

        compute_list = self._backend.begin(f"ocean_frame_{self._frame_number}")
        self._time_spectrum.record(compute_list, self.params, time)

        final_pingpong = {}
        for component in self.components:
            result = self._fft.record(compute_list, self._pairs[component])
            self._displacement.record(compute_list, result, outputs[component])
            final_pingpong[component] = result.valid

        frame = FrameOutputs(number=self._frame_number,
                             time=float(time),
                             output_index=output_index,
                             fields=dict(outputs),
                             final_pingpong=final_pingpong)

        self._backend.submit(compute_list.end(), wait=wait)

        self._previous_frame = self.latest_frame
        self.latest_frame = frame
        self._writers[output_index] = frame
        self._in_flight = not wait
        self._frame_number += 1

        logging.debug("Frame %d submitted at t=%.4f (output set %d, wait=%s)",
                      frame.number, frame.time, output_index, wait)
        return frame

    def advance(self, dt: float, wait: bool = False) -> FrameOutputs:
        self.time += float(dt) * self.config.time_scale
        return self.render_frame(self.time, wait=wait)

    def sync(self) -> None:
        self._backend.sync()
        self._in_flight = False

    def update_parameters(self, params: SpectrumParameters) -> None:
        """
        Apply new spectrum parameters. Same resolution regenerates h0 in
        place; a new resolution rebuilds the whole pipeline.
        """
        params.validate()
        if not self._ready:
            self.params = params
            return

        if self._in_flight:
            self.sync()

        if params.resolution != self.params.resolution:
            logging.info("Resolution changed %d -> %d, rebuilding ocean pipeline",
                         self.params.resolution, params.resolution)
            self.release()
            self.params = params
            self.initialize()
            return

        self.params = params
        self._spectrum.generate(params)
        logging.info("Initial spectrum regenerated")

    def release(self) -> None:
        if self._resources is None:
            return
        if self._in_flight:
            self.sync()
        logging.info("Releasing %d ocean pipeline resources", len(self._resources))
        self._resources.release()
        self._resources = None
        self._ready = False
        self.latest_frame = None
        self._previous_frame = None
        self._writers = {}

    def __enter__(self) -> "OceanPipeline":
        if not self._ready:
            self.initialize()
        return self

    def __exit__(self, *exc) -> None:
        self.release()

    # Readback

    def _read(self, texture: TextureHandle) -> bytes:
        self._require_ready()
        if self._in_flight:
            self.sync()
        return self._backend.read_texture(texture)

    def read_field(self, component: Component, frame: FrameOutputs | None = None) -> np.ndarray:
        """Spatial displacement of one component as an N x N float32 array."""
        if frame is None:
            frame = self.latest_frame
        if frame is None:
            raise PipelineStateError("no frame has been rendered yet")
        if component not in frame.fields:
            raise PipelineStateError(f"component {component.name} is not simulated by this pipeline")
        writer = self._writers.get(frame.output_index)
        if writer is None:
            raise PipelineStateError(f"frame {frame.number} belongs to released outputs")
        if writer is not frame:
            raise PipelineStateError(f"frame {frame.number} was overwritten by frame {writer.number}")
        texture = frame.fields[component]
        return real_field(self._read(texture), texture)

    def read_fields(self, frame: FrameOutputs | None = None) -> dict[Component, np.ndarray]:
        return {c: self.read_field(c, frame) for c in self.components}

    def read_complex(self, texture: TextureHandle) -> np.ndarray:
        return complex_field(self._read(texture), texture)

    def read_spectrum(self) -> tuple[np.ndarray, np.ndarray]:
        """h0(k) and h0(-k) as complex64 arrays."""
        self._require_ready()
        return self.read_complex(self._spectrum.h0k), self.read_complex(self._spectrum.h0minusk)

    def read_butterfly_table(self) -> np.ndarray:
        self._require_ready()
        texture = self._butterfly.texture
        return decode_texture(self._read(texture), texture)

    def verify_butterfly_table(self, tolerance: float = 1e-3) -> bool:
        """Compare the GPU butterfly table against the host reference."""
        table = self.read_butterfly_table()
        reference = self._butterfly.reference_table()
        max_error = float(np.max(np.abs(table - reference)))
        if max_error > tolerance:
            logging.warning("Butterfly table mismatch: max error %.6f > %.6f", max_error, tolerance)
            return False
        logging.info("Butterfly table verified (max error %.6f)", max_error)
        return True
