# daq/file_source.py
"""Load single-channel recordings from WAV or NumPy files for offline burst detection."""

from __future__ import annotations

import logging
import wave
from pathlib import Path
from typing import Optional, Tuple

import numpy as np

from shared.models import InvalidInput

logger = logging.getLogger(__name__)


def decode_pcm(raw_bytes: bytes, sample_width: int, n_channels: int) -> np.ndarray:
    """
    Convert raw PCM bytes to a float64 (frames, channels) array in [-1, 1).

    Handles 8-bit unsigned, 16-bit, 24-bit and 32-bit signed little-endian PCM.
    """
    if sample_width == 1:  # 8-bit unsigned
        data = (np.frombuffer(raw_bytes, dtype=np.uint8).astype(np.float64) - 128.0) / 128.0
    elif sample_width == 2:
        data = np.frombuffer(raw_bytes, dtype="<i2").astype(np.float64) / 32768.0
    elif sample_width == 3:
        raw = np.frombuffer(raw_bytes, dtype=np.uint8).reshape(-1, 3).astype(np.int32)
        val = raw[:, 0] | (raw[:, 1] << 8) | (raw[:, 2] << 16)
        # Sign extend from bit 23
        val = np.where(val & 0x800000, val - (1 << 24), val)
        data = val.astype(np.float64) / 8388608.0  # 2^23
    elif sample_width == 4:
        data = np.frombuffer(raw_bytes, dtype="<i4").astype(np.float64) / 2147483648.0  # 2^31
    else:
        raise InvalidInput(f"Unsupported sample width: {sample_width} bytes")

    frames = len(data) // n_channels
    return data[: frames * n_channels].reshape((frames, n_channels))


def _pick_channel(data: np.ndarray, channel: Optional[int], path: Path) -> np.ndarray:
    if data.ndim == 1:
        return data
    if data.ndim != 2:
        raise InvalidInput(f"{path.name}: expected 1D or 2D samples, got {data.ndim}D")
    n_channels = data.shape[1]
    if channel is None:
        if n_channels != 1:
            raise InvalidInput(f"{path.name} has {n_channels} channels; select one with channel=")
        channel = 0
    if not 0 <= channel < n_channels:
        raise InvalidInput(f"channel {channel} out of range for {n_channels} channels")
    return data[:, channel]


def read_wav(path: Path) -> Tuple[np.ndarray, float]:
    with wave.open(str(path), "rb") as wav:
        n_channels = wav.getnchannels()
        sample_rate = wav.getframerate()
        sample_width = wav.getsampwidth()
        n_frames = wav.getnframes()
        raw = wav.readframes(n_frames)
    logger.info(
        "Opened WAV file: %s (%d channels, %d Hz, %d-bit, %d frames)",
        path.name,
        n_channels,
        sample_rate,
        sample_width * 8,
        n_frames,
    )
    return decode_pcm(raw, sample_width, n_channels), float(sample_rate)


def load_signal(
    path: str | Path,
    *,
    sample_rate: Optional[float] = None,
    channel: Optional[int] = None,
) -> Tuple[np.ndarray, float]:
    """Return ``(samples, sample_rate)`` for a single channel of `path`.

    WAV files carry their own sample rate. ``.npy`` files need `sample_rate`;
    ``.npz`` archives may store it under ``sample_rate`` next to a ``samples``
    (or single unnamed) array. An explicit `sample_rate` always wins. 2D
    arrays are laid out as (frames, channels).
    """
    path = Path(path)
    suffix = path.suffix.lower()
    stored_rate: Optional[float] = None
    if suffix == ".wav":
        data, stored_rate = read_wav(path)
    elif suffix == ".npy":
        data = np.load(path, allow_pickle=False)
    elif suffix == ".npz":
        with np.load(path, allow_pickle=False) as archive:
            if "sample_rate" in archive.files:
                stored_rate = float(archive["sample_rate"])
            arrays = [name for name in archive.files if name != "sample_rate"]
            key = "samples" if "samples" in arrays else (arrays[0] if len(arrays) == 1 else None)
            if key is None:
                raise InvalidInput(f"{path.name}: cannot tell which array holds the samples")
            data = archive[key]
    else:
        raise InvalidInput(f"Unsupported file type: {path.suffix or path.name}")

    rate = sample_rate if sample_rate is not None else stored_rate
    if rate is None:
        raise InvalidInput(f"{path.name}: sample rate unknown; pass sample_rate")
    if rate <= 0:
        raise InvalidInput("sample_rate must be positive")

    samples = _pick_channel(np.asarray(data, dtype=np.float64), channel, path)
    if samples.size == 0:
        raise InvalidInput(f"{path.name} contains no samples")
    logger.debug("loaded %d samples at %g Hz from %s", samples.size, rate, path)
    return samples, float(rate)


__all__ = ["decode_pcm", "read_wav", "load_signal"]
