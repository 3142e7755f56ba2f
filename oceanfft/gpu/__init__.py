from oceanfft.gpu.compute_backend import (
    Access,
    Binding,
    BufferHandle,
    ComputeBackend,
    ComputeList,
    KernelHandle,
    ResourceSet,
    ResourceTracker,
    TextureFormat,
    TextureHandle,
)
from oceanfft.gpu.parameter_blocks import (
    ButterflyBlock,
    FFTBlock,
    InversionBlock,
    ParameterBlock,
    SpectrumBlock,
    TimeBlock,
)

"""Compute backend capability surface and kernel parameter blocks."""

__all__ = [
    "Access",
    "Binding",
    "BufferHandle",
    "ButterflyBlock",
    "ComputeBackend",
    "ComputeList",
    "FFTBlock",
    "InversionBlock",
    "KernelHandle",
    "ParameterBlock",
    "ResourceSet",
    "ResourceTracker",
    "SpectrumBlock",
    "TextureFormat",
    "TextureHandle",
    "TimeBlock",
]
