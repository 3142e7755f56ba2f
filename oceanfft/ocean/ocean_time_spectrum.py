# -*- coding: utf-8 -*-

"""
Filename: ocean_time_spectrum.py
Author: storro
Date: 2026-02-11
Description: Advances the initial spectrum in time and builds the frequency domain displacement fields.
"""

from oceanfft.gpu.compute_backend import (
    Access,
    Binding,
    ComputeList,
    ResourceTracker,
    TextureHandle,
)
from oceanfft.gpu.parameter_blocks import TimeBlock
from oceanfft.ocean.ocean_parameters import Component, SpectrumParameters, groups_for


class OceanTimeSpectrum:
    """
    Writes h(k, t) and, for the choppy variant, the two horizontal
    displacement spectra derived from it, into each component's field.
    Nothing is carried between frames besides t.
    """

    KERNEL = "time_spectrum"
    HEIGHT_ONLY_KERNEL = "time_spectrum_height"

    def __init__(self,
                 resources: ResourceTracker,
                 h0k: TextureHandle,
                 h0minusk: TextureHandle,
                 outputs: dict[Component, TextureHandle]) -> None:
        if Component.HEIGHT not in outputs:
            raise ValueError("the height component is always required")

        self.resolution = h0k.width
        self.outputs = dict(outputs)
        self.choppy = len(self.outputs) > 1
        if self.choppy and set(self.outputs) != set(Component):
            raise ValueError("choppy evolution needs all three components")

        self._kernel = resources.kernel(self.KERNEL if self.choppy else self.HEIGHT_ONLY_KERNEL)

        bindings = [
            Binding("u_h0k", h0k, Access.READ),
            Binding("u_h0minusk", h0minusk, Access.READ),
        ]
        bindings += [
            Binding(f"u_{component.value}", tex, Access.WRITE) for component, tex in self.outputs.items()
        ]
        self._set = resources.resource_set(self._kernel, bindings)

    def record(self, compute_list: ComputeList, params: SpectrumParameters, time: float) -> None:
        groups = groups_for(self.resolution)

        compute_list.bind(self._set)
        compute_list.push(TimeBlock(n=self.resolution,
                                    ocean_size=int(params.ocean_size),
                                    time=float(time)))
        compute_list.dispatch(groups, groups)
        compute_list.barrier()
