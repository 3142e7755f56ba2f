import pytest

from numpy_backend import NumpyComputeBackend

from oceanfft.gpu.compute_backend import ResourceTracker
from oceanfft.ocean.ocean_parameters import OceanPipelineConfig, SpectrumParameters


@pytest.fixture
def backend():
    return NumpyComputeBackend()


@pytest.fixture
def resources(backend):
    tracker = ResourceTracker(backend)
    yield tracker
    tracker.release()


@pytest.fixture
def small_params():
    """N=8, L=10, A=1, wind (1, 0) at 10 m/s."""
    return SpectrumParameters(
        resolution=8,
        ocean_size=10,
        amplitude=1.0,
        wind_direction=(1.0, 0.0),
        wind_speed=10.0,
    )


@pytest.fixture
def choppy_config():
    return OceanPipelineConfig(choppy=True)


@pytest.fixture(scope="session")
def panda3d_backend():
    """Headless Panda3D backend; skips when no GL 4.3 context is available."""
    panda3d_backend = pytest.importorskip("oceanfft.gpu.panda3d_backend")
    from oceanfft.util.errors import BackendCapabilityError

    try:
        gpu = panda3d_backend.Panda3DComputeBackend.offscreen()
    except BackendCapabilityError as e:
        pytest.skip(f"no compute capable offscreen context: {e}")
    except Exception as e:
        pytest.skip(f"could not open a Panda3D offscreen context: {e}")
    yield gpu
    gpu.destroy()
