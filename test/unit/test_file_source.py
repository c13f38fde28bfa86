from __future__ import annotations

import wave

import numpy as np
import pytest

from daq.file_source import decode_pcm, load_signal
from shared.models import InvalidInput


def write_wav(path, frames: np.ndarray, sample_rate: int) -> None:
    frames = np.atleast_2d(frames.T).T
    with wave.open(str(path), "wb") as wav:
        wav.setnchannels(frames.shape[1])
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(frames.astype("<i2").tobytes())


class TestDecodePcm:

    def test_16bit(self):
        raw = np.array([0, 16384, -32768], dtype="<i2").tobytes()
        data = decode_pcm(raw, 2, 1)
        assert data.shape == (3, 1)
        assert data[:, 0].tolist() == [0.0, 0.5, -1.0]

    def test_24bit_sign_extension(self):
        raw = bytes([0x00, 0x00, 0x80, 0xFF, 0xFF, 0x7F, 0x00, 0x00, 0x40])
        data = decode_pcm(raw, 3, 1)[:, 0]
        assert data[0] == -1.0
        assert data[1] == pytest.approx(1.0, abs=1e-6)
        assert data[2] == 0.5

    def test_8bit_unsigned(self):
        data = decode_pcm(bytes([128, 0, 192]), 1, 1)[:, 0]
        assert data.tolist() == [0.0, -1.0, 0.5]

    def test_interleaved_channels(self):
        raw = np.array([1, 2, 3, 4, 5, 6], dtype="<i2").tobytes()
        data = decode_pcm(raw, 2, 2)
        assert data.shape == (3, 2)
        assert data[:, 1].tolist() == [2 / 32768.0, 4 / 32768.0, 6 / 32768.0]

    def test_unsupported_width(self):
        with pytest.raises(InvalidInput):
            decode_pcm(b"\x00" * 10, 5, 1)


class TestLoadSignal:

    def test_wav_carries_sample_rate(self, tmp_path):
        path = tmp_path / "mono.wav"
        write_wav(path, np.array([0, 16384, -16384, 0]), 8000)
        samples, rate = load_signal(path)
        assert rate == 8000.0
        assert samples.tolist() == [0.0, 0.5, -0.5, 0.0]

    def test_stereo_wav_requires_channel(self, tmp_path):
        path = tmp_path / "stereo.wav"
        write_wav(path, np.array([[0, 16384], [0, -16384]]), 1000)
        with pytest.raises(InvalidInput, match="channels"):
            load_signal(path)
        samples, _ = load_signal(path, channel=1)
        assert samples.tolist() == [0.5, -0.5]

    def test_channel_out_of_range(self, tmp_path):
        path = tmp_path / "stereo.wav"
        write_wav(path, np.array([[0, 1], [2, 3]]), 1000)
        with pytest.raises(InvalidInput, match="out of range"):
            load_signal(path, channel=2)

    def test_npy_needs_sample_rate(self, tmp_path):
        path = tmp_path / "lfp.npy"
        np.save(path, np.arange(10.0))
        with pytest.raises(InvalidInput, match="sample rate unknown"):
            load_signal(path)
        samples, rate = load_signal(path, sample_rate=250)
        assert rate == 250.0
        assert samples.tolist() == list(np.arange(10.0))

    def test_npz_stored_sample_rate(self, tmp_path):
        path = tmp_path / "lfp.npz"
        np.savez(path, samples=np.ones(5), sample_rate=500.0)
        samples, rate = load_signal(path)
        assert rate == 500.0
        assert samples.size == 5

    def test_explicit_rate_overrides_stored(self, tmp_path):
        path = tmp_path / "lfp.npz"
        np.savez(path, samples=np.ones(5), sample_rate=500.0)
        _, rate = load_signal(path, sample_rate=1000.0)
        assert rate == 1000.0

    def test_npz_ambiguous_arrays(self, tmp_path):
        path = tmp_path / "two.npz"
        np.savez(path, a=np.ones(3), b=np.zeros(3), sample_rate=100.0)
        with pytest.raises(InvalidInput, match="which array"):
            load_signal(path)

    def test_empty_data_rejected(self, tmp_path):
        path = tmp_path / "empty.npy"
        np.save(path, np.array([], dtype=np.float64))
        with pytest.raises(InvalidInput, match="no samples"):
            load_signal(path, sample_rate=100)

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "lfp.mat"
        path.write_bytes(b"")
        with pytest.raises(InvalidInput, match="Unsupported file type"):
            load_signal(path, sample_rate=100)

    def test_non_positive_rate_rejected(self, tmp_path):
        path = tmp_path / "lfp.npy"
        np.save(path, np.arange(3.0))
        with pytest.raises(InvalidInput):
            load_signal(path, sample_rate=0)
