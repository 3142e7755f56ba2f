"""Tests for the per-frame task manager integration."""

import pytest

pytest.importorskip("direct.task.Task")

from oceanfft.app.ocean_task import OceanStepTask
from oceanfft.ocean.ocean_parameters import OceanPipelineConfig
from oceanfft.ocean.ocean_pipeline import OceanPipeline


class FakeTaskManager:
    def __init__(self):
        self.tasks = {}

    def add(self, func, name):
        self.tasks[name] = func

    def remove(self, name):
        del self.tasks[name]


class FakeApp:
    def __init__(self):
        self.task_mgr = FakeTaskManager()


class FakeClock:
    def __init__(self, dt):
        self.dt = dt

    def get_dt(self):
        return self.dt


class FakeTask:
    cont = "cont"


class TestOceanStepTask:
    """Asynchronous stepping from a task manager."""

    def test_registers_and_initializes(self, backend, small_params):
        app = FakeApp()
        pipeline = OceanPipeline(backend, small_params)
        step = OceanStepTask(app, pipeline, clock=FakeClock(0.1))

        assert "ocean_step" in app.task_mgr.tasks
        assert pipeline.ready
        step.remove()
        assert app.task_mgr.tasks == {}
        pipeline.release()

    def test_steps_without_waiting(self, backend, small_params):
        """Test that each step advances by dt and hands out the frame owning the outputs."""
        app = FakeApp()
        pipeline = OceanPipeline(backend, small_params)
        seen = []
        OceanStepTask(app, pipeline, on_frame=seen.append, clock=FakeClock(0.5))
        task = app.task_mgr.tasks["ocean_step"]

        assert task(FakeTask()) == "cont"
        assert pipeline.time == pytest.approx(0.5)
        # the first frame is still in flight
        assert seen == []

        task(FakeTask())
        assert pipeline.time == pytest.approx(1.0)
        # single buffered: the new frame rewrites the textures of the old one
        assert [frame.number for frame in seen] == [1]
        assert seen[0].time == pytest.approx(1.0)

        pipeline.release()
        assert backend.live_resources == 0

    def test_double_buffered_hands_out_previous_frame(self, backend, small_params):
        app = FakeApp()
        pipeline = OceanPipeline(backend, small_params, OceanPipelineConfig(double_buffered=True))
        seen = []
        OceanStepTask(app, pipeline, on_frame=seen.append, clock=FakeClock(0.5))
        task = app.task_mgr.tasks["ocean_step"]

        task(FakeTask())
        task(FakeTask())
        assert [frame.number for frame in seen] == [0]
        assert seen[0].time == pytest.approx(0.5)

        pipeline.release()
