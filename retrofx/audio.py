from __future__ import annotations

import io
import logging
import os
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import numpy as np
import soundfile as sf  # type: ignore[import]
from numpy.typing import NDArray

from .config import SAMPLE_RATE
from .errors import AudioWriteError, InvalidConfigError

_LOGGER = logging.getLogger("retrofx.audio")

FloatArray = NDArray[np.float32]
PcmArray = NDArray[np.int16]
AudioNumbers = NDArray[np.floating[Any]] | Sequence[float]

PCM16_SCALE = 32767.0
WAV_HEADER_BYTES = 44


def ensure_audio_contract(audio: AudioNumbers) -> FloatArray:
    """Flatten to mono float32 and clamp to [-1, 1]."""

    if isinstance(audio, (str, bytes)):
        raise InvalidConfigError("audio must be a sequence of samples")
    mono: FloatArray = np.asarray(audio, dtype=np.float32).reshape(-1)
    if mono.size == 0:
        return mono
    if not np.all(np.isfinite(mono)):
        raise InvalidConfigError("audio contains NaN or infinite samples")
    return np.clip(mono, -1.0, 1.0)


def quantize_pcm16(audio: AudioNumbers) -> PcmArray:
    """Scale by 32767 and truncate toward zero, the way the sfxr ports quantize."""

    mono = ensure_audio_contract(audio)
    return (mono * np.float32(PCM16_SCALE)).astype(np.int16)


def wav_bytes(audio: AudioNumbers, *, sample_rate: int = SAMPLE_RATE) -> bytes:
    """Encode samples as a 16-bit PCM mono WAV file in memory."""

    if sample_rate <= 0:
        raise InvalidConfigError(f"sample_rate must be positive, got {sample_rate}")
    pcm = quantize_pcm16(audio)
    handle = io.BytesIO()
    try:
        sf.write(handle, pcm, sample_rate, subtype="PCM_16", format="WAV")
    except (RuntimeError, ValueError, TypeError) as exc:
        _LOGGER.warning("Failed to encode WAV data: %s", exc)
        raise AudioWriteError(f"Could not encode WAV data: {exc}") from exc
    return handle.getvalue()


def write_wav(
    path: str | Path,
    audio: AudioNumbers,
    *,
    sample_rate: int = SAMPLE_RATE,
) -> Path:
    """Write samples to ``path``; nothing is left behind if the write fails."""

    target = Path(path)
    payload = wav_bytes(audio, sample_rate=sample_rate)
    partial = target.with_name(f".{target.name}.part")
    try:
        partial.write_bytes(payload)
        os.replace(partial, target)
    except OSError as exc:
        partial.unlink(missing_ok=True)
        _LOGGER.warning("Failed to write %s: %s", target, exc)
        raise AudioWriteError(f"Could not write {target}: {exc}") from exc
    _LOGGER.debug("Wrote %d bytes to %s", len(payload), target)
    return target
