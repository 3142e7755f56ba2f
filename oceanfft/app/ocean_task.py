# -*- coding: utf-8 -*-

"""
Filename: ocean_task.py
Author: storro
Date: 2026-02-11
Description: Per-frame task driving the ocean pipeline from a Panda3D task manager
"""

import logging

from direct.task.Task import Task
from panda3d.core import ClockObject

from oceanfft.ocean.ocean_pipeline import FrameOutputs, OceanPipeline

from typing import TYPE_CHECKING, Callable
if TYPE_CHECKING:
    from direct.showbase.ShowBase import ShowBase


class OceanStepTask:
    """
    Advances the pipeline by the frame's dt without waiting for the GPU.
    Consumers get the frame that is safe to sample, i.e. the previous one
    while the current one is still in flight.
    """

    def __init__(
        self,
        app: "ShowBase",
        pipeline: OceanPipeline,
        on_frame: Callable[[FrameOutputs], None] | None = None,
        task_name: str = "ocean_step",
        clock=None,
    ) -> None:
        self._app = app
        self._pipeline = pipeline
        self._on_frame = on_frame
        self._task_name = task_name
        self._clock = clock if clock is not None else ClockObject.get_global_clock()

        if not self._pipeline.ready:
            self._pipeline.initialize()

        self._app.task_mgr.add(self._ocean_step_task, self._task_name)
        logging.info("Ocean step task '%s' added", self._task_name)

    def _ocean_step_task(self, task: Task) -> int:
        dt = self._clock.get_dt()
        self._pipeline.advance(dt, wait=False)

        frame = self._pipeline.displayed_frame
        if frame is not None and self._on_frame is not None:
            self._on_frame(frame)
        return task.cont

    def remove(self) -> None:
        self._app.task_mgr.remove(self._task_name)
