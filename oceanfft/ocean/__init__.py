from oceanfft.ocean.noise_source import NoiseSource
from oceanfft.ocean.ocean_butterfly import OceanButterflyTable, bit_reversed_indices
from oceanfft.ocean.ocean_displacement import OceanDisplacement
from oceanfft.ocean.ocean_ifft2d import FFTDirection, FFTResult, OceanIFFT2D, PingPong, PingPongPair
from oceanfft.ocean.ocean_parameters import (
    Component,
    NoiseConfig,
    OceanPipelineConfig,
    SpectrumParameters,
)
from oceanfft.ocean.ocean_pipeline import FrameOutputs, OceanPipeline
from oceanfft.ocean.ocean_spectrum_generator import OceanSpectrumGenerator
from oceanfft.ocean.ocean_time_spectrum import OceanTimeSpectrum

"""Ocean package public API."""

__all__ = [
    "Component",
    "FFTDirection",
    "FFTResult",
    "FrameOutputs",
    "NoiseConfig",
    "NoiseSource",
    "OceanButterflyTable",
    "OceanDisplacement",
    "OceanIFFT2D",
    "OceanPipeline",
    "OceanPipelineConfig",
    "OceanSpectrumGenerator",
    "OceanTimeSpectrum",
    "PingPong",
    "PingPongPair",
    "SpectrumParameters",
    "bit_reversed_indices",
]
