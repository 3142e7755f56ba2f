"""Tests for the ping-pong butterfly FFT and the inversion pass."""

import numpy as np
import pytest

from oceanfft.gpu.compute_backend import TextureFormat
from oceanfft.ocean.ocean_butterfly import OceanButterflyTable
from oceanfft.ocean.ocean_displacement import OceanDisplacement
from oceanfft.ocean.ocean_fields import real_field
from oceanfft.ocean.ocean_ifft2d import FFTDirection, FFTResult, OceanIFFT2D, PingPong, PingPongPair

def textbook_idft2(values: np.ndarray) -> np.ndarray:
    """Unnormalized 2D inverse DFT, sum over X[k] * exp(+2*pi*i*k*n/N)."""
    n = values.shape[0]
    idx = np.arange(n)
    basis = np.exp(2j * np.pi * np.outer(idx, idx) / n)
    return basis @ values @ basis

@pytest.fixture
def fft_engine(backend, resources):
    def build(n):
        butterfly = OceanButterflyTable(resources, n)
        compute_list = backend.begin()
        butterfly.record(compute_list)
        backend.submit(compute_list.end(), wait=True)
        return OceanIFFT2D(resources, butterfly.texture, n)
    return build

def run_fft(backend, engine, pair):
    compute_list = backend.begin()
    result = engine.record(compute_list, pair)
    backend.submit(compute_list.end(), wait=True)
    return result

class TestPingPong:
    """Explicit tracking of the buffer holding valid data."""

    def test_flipped(self):
        assert PingPong.BUFFER_0.flipped() is PingPong.BUFFER_1
        assert PingPong.BUFFER_1.flipped() is PingPong.BUFFER_0

    def test_pair_buffers(self, resources):
        pair = PingPongPair.create(resources, "dy", 8)
        assert pair.buffer(PingPong.BUFFER_0) is pair.buffer0
        assert pair.buffer(PingPong.BUFFER_1).name == "dy_ping1"

class TestIFFT2D:
    """The 2*log2(N) butterfly passes."""

    @pytest.mark.parametrize("n", [2, 8, 16])
    def test_matches_textbook_dft(self, backend, resources, fft_engine, n):
        """Test the result against a direct O(N^4) inverse DFT."""
        rng = np.random.default_rng(7)
        values = rng.uniform(-1, 1, (n, n)) + 1j * rng.uniform(-1, 1, (n, n))

        engine = fft_engine(n)
        pair = PingPongPair.create(resources, "field", n)
        backend.write_complex(pair.buffer0, values)

        result = run_fft(backend, engine, pair)
        np.testing.assert_allclose(backend.complex_texels(result.texture), textbook_idft2(values),
                                   rtol=1e-4, atol=1e-3)

    def test_pass_sequence(self, backend, resources, fft_engine):
        """Test that passes go horizontal then vertical with alternating buffers."""
        engine = fft_engine(8)
        pair = PingPongPair.create(resources, "field", 8)
        compute_list = backend.begin()
        result = engine.record(compute_list, pair)

        blocks = [params for _, params, _ in compute_list.dispatches()]
        assert len(blocks) == 2 * engine.stages == 6
        assert [b.direction for b in blocks] == [FFTDirection.HORIZONTAL] * 3 + [FFTDirection.VERTICAL] * 3
        assert [b.stage for b in blocks] == [0, 1, 2, 0, 1, 2]
        assert [b.pingpong for b in blocks] == [0, 1, 0, 1, 0, 1]
        # an even number of passes ends where it started
        assert result.valid is PingPong.BUFFER_0
        assert result.texture is pair.buffer0

    def test_barrier_after_every_pass(self, backend, resources, fft_engine):
        """Test that no pass reads the previous pass's output without a barrier."""
        engine = fft_engine(16)
        pair = PingPongPair.create(resources, "field", 16)
        compute_list = backend.begin()
        engine.record(compute_list, pair)

        kinds = [type(cmd).__name__ for cmd in compute_list.commands if type(cmd).__name__ != "PushCommand"]
        dispatch_positions = [i for i, kind in enumerate(kinds) if kind == "DispatchCommand"]
        for i in dispatch_positions:
            assert kinds[i + 1] == "BarrierCommand"

    def test_start_buffer_is_threaded_through(self, backend, resources, fft_engine):
        """Test that starting from buffer 1 transforms buffer 1's data."""
        n = 8
        rng = np.random.default_rng(3)
        values = rng.normal(size=(n, n)) + 0j

        engine = fft_engine(n)
        pair = PingPongPair.create(resources, "field", n)
        backend.write_complex(pair.buffer1, values)

        compute_list = backend.begin()
        result = engine.record(compute_list, pair, start=PingPong.BUFFER_1)
        backend.submit(compute_list.end(), wait=True)

        assert result.valid is PingPong.BUFFER_1
        np.testing.assert_allclose(backend.complex_texels(result.texture), textbook_idft2(values),
                                   rtol=1e-4, atol=1e-3)

    def test_one_engine_serves_many_pairs(self, backend, resources, fft_engine):
        """Test that each pair gets its own resource set on a shared engine."""
        engine = fft_engine(8)
        first = PingPongPair.create(resources, "a", 8)
        second = PingPongPair.create(resources, "b", 8)
        assert engine.prepare(first) is engine.prepare(first)
        assert engine.prepare(first) is not engine.prepare(second)

    def test_butterfly_size_checked(self, resources, fft_engine):
        engine_8 = fft_engine(8)
        with pytest.raises(ValueError, match="rows"):
            OceanIFFT2D(resources, engine_8._butterfly, 16)

class TestInversion:
    """Checkerboard sign, 1/N^2 and real part."""

    def test_round_trip(self, backend, resources, fft_engine):
        """
        Test that a centered spectrum of a real field comes back as the
        field after the FFT and the inversion pass.
        """
        n = 8
        rng = np.random.default_rng(11)
        field = rng.uniform(-0.9, 0.9, (n, n))

        y, x = np.indices((n, n))
        checkerboard = np.where((x + y) % 2 == 0, 1.0, -1.0)
        spectrum = np.fft.fft2(checkerboard * field)

        engine = fft_engine(n)
        pair = PingPongPair.create(resources, "field", n)
        backend.write_complex(pair.buffer0, spectrum)

        inversion = OceanDisplacement(resources, n)
        output = inversion.create_output("out")

        compute_list = backend.begin()
        result = engine.record(compute_list, pair)
        inversion.record(compute_list, result, output)
        backend.submit(compute_list.end(), wait=True)

        recovered = real_field(backend.read_texture(output), output)
        np.testing.assert_allclose(recovered, field, atol=1e-3)

    def test_reads_the_valid_buffer(self, backend, resources):
        """Test that the inversion reads whichever buffer the FFT result names."""
        n = 4
        pair = PingPongPair.create(resources, "field", n)
        backend.write_complex(pair.buffer1, np.full((n, n), 16.0 + 5.0j))

        inversion = OceanDisplacement(resources, n)
        output = inversion.create_output("out")

        compute_list = backend.begin()
        inversion.record(compute_list, FFTResult(pair, PingPong.BUFFER_1), output)
        backend.submit(compute_list.end(), wait=True)

        values = backend.texels(output)
        y, x = np.indices((n, n))
        expected = np.where((x + y) % 2 == 0, 1.0, -1.0)
        np.testing.assert_allclose(values[..., 0], expected)
        np.testing.assert_allclose(values[..., 1], expected)
        assert output.format is TextureFormat.RGBA16F
