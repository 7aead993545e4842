"""
Single-voice effect renderer.

Every sample passes through the same chain, in this order:

1. envelope gain          5. noise distortion
2. pitch sweep            6. phaser tap (reads already-written output)
3. vibrato                7. low-pass / high-pass biquads
4. oscillator             8. envelope, tremolo, volume, clamp

The phaser reads back from the output buffer, so the loop is a strict
forward pass and is not vectorized. Sample state is single precision
(numpy float32 scalars) so renders match the sfxr ports sample for sample.
Phase increments that involve pi are formed and added in double precision,
then rounded back to float32.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, TypeAlias

import numpy as np
from numpy.typing import NDArray

from .config import DEFAULT_SETTINGS, SAMPLE_RATE, RenderSettings, SoundConfig, WaveForm

_LOGGER = logging.getLogger("retrofx.synth")

F32 = np.float32
FloatArray: TypeAlias = NDArray[np.float32]
Oscillator: TypeAlias = Callable[[float], np.float32]

_ZERO = F32(0.0)
_HALF = F32(0.5)
_ONE = F32(1.0)
_TWO = F32(2.0)
_THREE = F32(3.0)
_FOUR = F32(4.0)
_NEG_ONE = F32(-1.0)

DEGREE = F32(math.pi / 180.0)
DEFAULT_Q = F32(0.707)
LOW_PASS_BYPASS_HZ = F32(4000.0)

_LCG_MULTIPLIER = 1103515245
_LCG_INCREMENT = 12345
_LCG_MASK = 0x7FFFFFFF
_LCG_SCALE = F32(_LCG_MASK)
_NOISE_DRIVE = F32(20.0)

# Frame counts fit a signed 32-bit int.
_FRAME_LIMIT = float(2**31 - 1)


def _sinf(x: float) -> np.float32:
    return F32(math.sin(F32(x)))


def _cosf(x: float) -> np.float32:
    return F32(math.cos(F32(x)))


def _phase_step(rate_hz: np.float32, sample_rate: np.float32) -> float:
    return float(rate_hz * _TWO) * math.pi / float(sample_rate)


def _advance(phase: np.float32, step: float) -> np.float32:
    return F32(float(phase) + step)


def _clamp(value: np.float32) -> np.float32:
    if value < _NEG_ONE:
        return _NEG_ONE
    if value > _ONE:
        return _ONE
    return value


# =============================================================================
# OSCILLATORS (phase in cycles)
# =============================================================================


def sine(phase: float) -> np.float32:
    return _sinf(float(F32(phase) * _TWO) * math.pi)


def sawtooth(phase: float) -> np.float32:
    p = F32(phase)
    return _TWO * (p - np.floor(p + _HALF))


def square(phase: float) -> np.float32:
    p = F32(phase)
    return _NEG_ONE if p - np.floor(p) < _HALF else _ONE


def triangle(phase: float) -> np.float32:
    p = F32(phase)
    t = p - np.floor(p)
    return _FOUR * t - _ONE if t < _HALF else _THREE - _FOUR * t


OSCILLATORS: Mapping[WaveForm, Oscillator] = MappingProxyType(
    {
        WaveForm.SINE: sine,
        WaveForm.SAWTOOTH: sawtooth,
        WaveForm.SQUARE: square,
        WaveForm.TRIANGLE: triangle,
    }
)


def oscillator_for(wave_form: WaveForm | int) -> Oscillator:
    """Waveform function for ``wave_form``; unknown ids fall back to sine."""
    try:
        return OSCILLATORS[WaveForm(wave_form)]
    except ValueError:
        _LOGGER.debug("Unknown wave form %r; using sine", wave_form)
        return sine


# =============================================================================
# FILTERS
# =============================================================================


@dataclass(slots=True)
class Biquad:
    """Direct form I second-order section, coefficients normalized by a0."""

    a0: np.float32 = _ZERO
    a1: np.float32 = _ZERO
    a2: np.float32 = _ZERO
    b1: np.float32 = _ZERO
    b2: np.float32 = _ZERO
    x1: np.float32 = _ZERO
    x2: np.float32 = _ZERO
    y1: np.float32 = _ZERO
    y2: np.float32 = _ZERO

    @classmethod
    def lowpass(cls, cutoff: float, q: float, sample_rate: float) -> "Biquad":
        cos_w, alpha = _biquad_terms(cutoff, q, sample_rate)
        norm = _ONE + alpha
        return cls(
            a0=(_ONE - cos_w) / _TWO / norm,
            a1=(_ONE - cos_w) / norm,
            a2=(_ONE - cos_w) / _TWO / norm,
            b1=F32(-2.0) * cos_w / norm,
            b2=(_ONE - alpha) / norm,
        )

    @classmethod
    def highpass(cls, cutoff: float, q: float, sample_rate: float) -> "Biquad":
        cos_w, alpha = _biquad_terms(cutoff, q, sample_rate)
        norm = _ONE + alpha
        return cls(
            a0=(_ONE + cos_w) / _TWO / norm,
            a1=-(_ONE + cos_w) / norm,
            a2=(_ONE + cos_w) / _TWO / norm,
            b1=F32(-2.0) * cos_w / norm,
            b2=(_ONE - alpha) / norm,
        )

    def process(self, sample: float) -> np.float32:
        sample = F32(sample)
        output = (
            self.a0 * sample
            + self.a1 * self.x1
            + self.a2 * self.x2
            - self.b1 * self.y1
            - self.b2 * self.y2
        )
        self.x2 = self.x1
        self.x1 = sample
        self.y2 = self.y1
        self.y1 = output
        return output


def _biquad_terms(cutoff: float, q: float, sample_rate: float) -> tuple[np.float32, np.float32]:
    w = F32(2.0 * math.pi * float(cutoff) / float(sample_rate))
    return _cosf(w), _sinf(w) / (_TWO * F32(q))


def _resonance_to_q(resonance: np.float32) -> np.float32:
    return resonance if resonance > _ZERO else DEFAULT_Q


# =============================================================================
# NOISE DISTORTION
# =============================================================================


class NoiseDistortion:
    """Waveshaper driven by its own LCG stream, independent of template seeds."""

    def __init__(self, config: SoundConfig) -> None:
        noise = F32(config.noise_amount)
        self.amount = noise / F32(100.0)
        raw = (
            F32(config.frequency) * F32(1000.0)
            + noise * F32(100.0)
            + F32(config.volume) * F32(1000.0)
        )
        self.state = int(raw) & 0xFFFFFFFF if np.isfinite(raw) else 0

    def _next(self) -> np.float32:
        self.state = (self.state * _LCG_MULTIPLIER + _LCG_INCREMENT) & _LCG_MASK
        return F32(self.state) / _LCG_SCALE

    def apply(self, sample: float) -> np.float32:
        if self.amount <= _ZERO:
            return sample
        sample = F32(sample)
        rand1 = self._next()
        rand2 = self._next()
        drive = _THREE + rand1 * self.amount
        numerator = drive * sample * _NOISE_DRIVE * DEGREE
        denominator = math.pi + float(rand2 * self.amount * abs(sample))
        return _clamp(F32(float(numerator) / denominator))


# =============================================================================
# ENVELOPE
# =============================================================================


@dataclass(frozen=True, slots=True)
class Envelope:
    """Attack/sustain/decay gain curve.

    A zero-length attack is complete at t == 0 and yields its end value,
    ``1 - sustain_punch``; a zero-length decay is complete immediately.
    """

    attack: np.float32
    sustain: np.float32
    decay: np.float32
    punch_level: np.float32

    @classmethod
    def from_config(cls, config: SoundConfig) -> "Envelope":
        return cls(
            attack=F32(config.attack_time),
            sustain=F32(config.sustain_time),
            decay=F32(config.decay_time),
            punch_level=_ONE - F32(config.sustain_punch),
        )

    def gain(self, t: float) -> np.float32:
        t = F32(t)
        if t < self.attack:
            gain = self.punch_level * (t / self.attack)
        elif self.attack <= _ZERO and t <= _ZERO:
            gain = self.punch_level
        elif t < self.attack + self.sustain:
            gain = _ONE
        elif self.decay > _ZERO:
            gain = self.punch_level * (_ONE - (t - self.attack - self.sustain) / self.decay)
        else:
            gain = _ZERO
        return gain if gain > _ZERO else _ZERO


# =============================================================================
# BUFFER + RENDER
# =============================================================================


def sound_duration(config: SoundConfig) -> np.float32:
    """attack + sustain + decay, summed in single precision."""
    return F32(config.attack_time) + F32(config.sustain_time) + F32(config.decay_time)


def frame_count(config: SoundConfig, sample_rate: int = SAMPLE_RATE) -> int:
    """Samples a render of ``config`` needs before any capacity cap."""
    frames = sound_duration(config) * F32(sample_rate)
    return int(min(float(frames), _FRAME_LIMIT))


@dataclass(slots=True)
class SampleBuffer:
    """Fixed-capacity output buffer; only ``samples[:sample_count]`` is meaningful."""

    samples: FloatArray
    sample_count: int = 0
    sample_rate: int = DEFAULT_SETTINGS.sample_rate
    config: SoundConfig | None = field(default=None, compare=False)

    @classmethod
    def allocate(cls, settings: RenderSettings = DEFAULT_SETTINGS) -> "SampleBuffer":
        return cls(
            samples=np.zeros(settings.max_samples, dtype=np.float32),
            sample_rate=settings.sample_rate,
        )

    @property
    def capacity(self) -> int:
        return int(self.samples.shape[0])

    def view(self) -> FloatArray:
        return self.samples[: self.sample_count]

    def __len__(self) -> int:
        return self.sample_count


def render(
    config: SoundConfig,
    *,
    settings: RenderSettings | None = None,
    buffer: SampleBuffer | None = None,
) -> SampleBuffer:
    """Render ``config`` into ``buffer`` (allocated when omitted) and return it."""

    settings = settings or DEFAULT_SETTINGS
    if buffer is None:
        buffer = SampleBuffer.allocate(settings)
    buffer.sample_rate = settings.sample_rate
    buffer.config = config
    buffer.sample_count = 0

    sample_rate = F32(settings.sample_rate)
    duration = sound_duration(config)
    total = frame_count(config, settings.sample_rate)
    if total > buffer.capacity:
        _LOGGER.debug(
            "Truncating %.3fs sound to buffer capacity of %d samples", duration, buffer.capacity
        )
        total = buffer.capacity

    wave = oscillator_for(config.wave_form)
    envelope = Envelope.from_config(config)
    noise = NoiseDistortion(config)

    low_pass_cutoff = F32(config.low_pass_cutoff)
    high_pass_cutoff = F32(config.high_pass_cutoff)
    lowpass_on = _ZERO < low_pass_cutoff < LOW_PASS_BYPASS_HZ
    highpass_on = high_pass_cutoff > _ZERO
    lowpass = (
        Biquad.lowpass(
            low_pass_cutoff, _resonance_to_q(F32(config.low_pass_resonance)), sample_rate
        )
        if lowpass_on
        else Biquad()
    )
    highpass = (
        Biquad.highpass(
            high_pass_cutoff, _resonance_to_q(F32(config.high_pass_resonance)), sample_rate
        )
        if highpass_on
        else Biquad()
    )

    frequency = F32(config.frequency)
    pitch_delta = F32(config.pitch_delta)
    pitch_delay = F32(config.pitch_delay)
    pitch_duration = F32(config.pitch_duration)
    pitch_window = duration - pitch_delay
    pitch_on = pitch_delta != _ZERO

    vibrato_rate = F32(config.vibrato_rate)
    vibrato_depth = F32(config.vibrato_depth)
    vibrato_on = vibrato_rate > _ZERO and vibrato_depth > _ZERO
    vibrato_step = _phase_step(vibrato_rate, sample_rate)

    tremolo_rate = F32(config.tremolo_rate)
    tremolo_depth = F32(config.tremolo_depth)
    tremolo_on = tremolo_rate > _ZERO and tremolo_depth > _ZERO
    tremolo_step = _phase_step(tremolo_rate, sample_rate)

    phaser_base = F32(config.phaser_base_frequency)
    phaser_depth = F32(config.phaser_depth)
    phaser_on = phaser_depth > _ZERO
    phaser_step = _phase_step(F32(config.phaser_lfo_frequency), sample_rate)

    noise_on = noise.amount > _ZERO
    volume = F32(config.volume)
    out = buffer.samples

    phase = _ZERO
    vibrato_phase = _ZERO
    tremolo_phase = _ZERO
    phaser_phase = _ZERO

    for i in range(total):
        t = F32(i) / sample_rate
        sample = _ZERO

        gain = envelope.gain(t)

        current = frequency
        if pitch_on and t >= pitch_delay:
            progress = (t - pitch_delay) / pitch_window if pitch_window > _ZERO else _ZERO
            if progress > pitch_duration:
                progress = pitch_duration
            current = current + pitch_delta * progress

        if vibrato_on:
            current = current + _sinf(vibrato_phase) * vibrato_depth
            vibrato_phase = _advance(vibrato_phase, vibrato_step)

        if current > _ZERO:
            sample = wave(phase)
            phase = phase + current / sample_rate
            if phase >= _ONE:
                phase = phase - _ONE

        if noise_on:
            sample = noise.apply(sample)

        if phaser_on:
            denominator = phaser_base + _sinf(phaser_phase) * phaser_depth + _ONE
            if denominator > _ZERO:
                delay = sample_rate / denominator
                # The tap is int(delay) samples back and must already be written.
                if _ONE <= delay < i + 1:
                    sample = sample + F32(out[i - int(delay)]) * _HALF
            phaser_phase = _advance(phaser_phase, phaser_step)

        if lowpass_on:
            sample = lowpass.process(sample)
        if highpass_on:
            sample = highpass.process(sample)

        sample = sample * gain

        if tremolo_on:
            sample = sample * (_ONE - tremolo_depth * (_ONE + _sinf(tremolo_phase)) * _HALF)
            tremolo_phase = _advance(tremolo_phase, tremolo_step)

        sample = sample * volume
        out[i] = _clamp(sample)

    buffer.sample_count = total
    return buffer


def render_samples(
    config: SoundConfig,
    *,
    settings: RenderSettings | None = None,
) -> FloatArray:
    """Render ``config`` and return just the written samples as float32."""

    return render(config, settings=settings).view().astype(np.float32)
