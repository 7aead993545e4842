"""Preset randomizers that shape a SoundConfig toward a sound category.

Each preset consumes draws from one seeded generator in a fixed order. The
order is part of the output: adding, removing or reordering a draw changes
every sound the preset produces for every seed.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Callable, Literal, TypeAlias, cast, get_args

from .config import SoundConfig, WaveForm
from .errors import InvalidTemplateError
from .rng import XorShiftRandom

_LOGGER = logging.getLogger("retrofx.templates")

TemplateName = Literal[
    "default",
    "pickup",
    "laser",
    "jump",
    "fall",
    "powerup",
    "explosion",
    "blip",
    "hit",
    "fart",
    "random",
]
TemplateInput: TypeAlias = TemplateName | str | int

# Ordinal order matches the historical integer ids (DEFAULT=0 ... RANDOM=10).
TEMPLATE_NAMES: tuple[TemplateName, ...] = get_args(TemplateName)

Fields: TypeAlias = dict[str, Any]
_Shaper: TypeAlias = Callable[[XorShiftRandom, Fields], None]

_ALL_WAVES = (WaveForm.SINE, WaveForm.SAWTOOTH, WaveForm.SQUARE, WaveForm.TRIANGLE)


def parse_template(value: TemplateInput) -> TemplateName:
    """Resolve a template name (case-insensitive) or ordinal to its canonical name."""

    match value:
        case bool():
            raise InvalidTemplateError(f"Unknown template: {value!r}")
        case int():
            if 0 <= value < len(TEMPLATE_NAMES):
                return TEMPLATE_NAMES[value]
            raise InvalidTemplateError(
                f"Unknown template ordinal: {value}. Valid: 0..{len(TEMPLATE_NAMES) - 1}"
            )
        case str():
            name = value.strip().lower()
            if name in TEMPLATE_NAMES:
                return cast(TemplateName, name)
            raise InvalidTemplateError(
                f"Unknown template: {value!r}. Valid: {list(TEMPLATE_NAMES)}"
            )
        case _:
            raise InvalidTemplateError(f"Unsupported template type: {type(value).__name__}")


def _delayed_sweep_start(rng: XorShiftRandom) -> float:
    # The candidate is drawn before the coin flip, whichever way it lands.
    candidate = rng.next_float(0.0, 0.3)
    return candidate if rng.next_bool(0.5) else 0.0


def _default(rng: XorShiftRandom, fields: Fields) -> None:
    _ = rng, fields


def _pickup(rng: XorShiftRandom, fields: Fields) -> None:
    fields["wave_form"] = rng.next_choice(_ALL_WAVES)
    fields["sustain_punch"] = rng.next_float(0.0, 0.8)
    fields["sustain_time"] = rng.next_float(0.05, 0.2)
    fields["decay_time"] = rng.next_float(0.1, 0.3)
    fields["frequency"] = rng.next_float(900.0, 1700.0)
    if rng.next_bool(0.5):
        fields["pitch_delta"] = rng.next_float(100.0, 500.0)
        fields["pitch_duration"] = 0.0
        fields["pitch_delay"] = rng.next_float(0.0, 0.7)


def _laser(rng: XorShiftRandom, fields: Fields) -> None:
    fields["wave_form"] = rng.next_choice(_ALL_WAVES)
    fields["sustain_punch"] = rng.next_float(0.0, 0.8)
    fields["sustain_time"] = rng.next_float(0.05, 0.1)
    fields["decay_time"] = rng.next_float(0.0, 0.2)
    fields["frequency"] = rng.next_float(100.0, 1300.0)
    fields["pitch_delta"] = rng.next_float(-fields["frequency"], -100.0)
    fields["pitch_duration"] = 1.0
    fields["pitch_delay"] = _delayed_sweep_start(rng)


def _jump(rng: XorShiftRandom, fields: Fields) -> None:
    fields["wave_form"] = rng.next_choice((WaveForm.SAWTOOTH, WaveForm.SQUARE))
    fields["sustain_punch"] = rng.next_float(0.0, 0.8)
    fields["sustain_time"] = rng.next_float(0.2, 0.5)
    fields["decay_time"] = rng.next_float(0.1, 0.2)
    fields["frequency"] = rng.next_float(100.0, 500.0)
    fields["pitch_delta"] = rng.next_float(200.0, 500.0)
    fields["pitch_duration"] = 1.0
    fields["pitch_delay"] = _delayed_sweep_start(rng)


def _fall(rng: XorShiftRandom, fields: Fields) -> None:
    fields["wave_form"] = rng.next_choice(
        (WaveForm.SAWTOOTH, WaveForm.SQUARE, WaveForm.TRIANGLE)
    )
    fields["sustain_punch"] = 0.0
    fields["sustain_time"] = rng.next_float(0.2, 0.5)
    fields["decay_time"] = rng.next_float(0.2, 0.5)
    fields["frequency"] = rng.next_float(80.0, 500.0)
    fields["pitch_delta"] = -fields["frequency"]
    fields["pitch_duration"] = 1.0
    fields["pitch_delay"] = rng.next_float(0.0, 0.2)
    fields["vibrato_rate"] = rng.next_float(8.0, 18.0)
    fields["vibrato_depth"] = rng.next_float(10.0, 30.0)
    fields["tremolo_rate"] = rng.next_float(5.0, 18.0)
    fields["tremolo_depth"] = rng.next_float(0.0, 1.0)


def _powerup(rng: XorShiftRandom, fields: Fields) -> None:
    fields["wave_form"] = rng.next_choice(_ALL_WAVES)
    fields["sustain_punch"] = rng.next_float(0.0, 1.0)
    fields["sustain_time"] = rng.next_float(0.2, 0.5)
    fields["decay_time"] = rng.next_float(0.1, 0.5)
    fields["frequency"] = rng.next_float(200.0, 1000.0)
    fields["pitch_delta"] = rng.next_float(100.0, 300.0)
    fields["pitch_duration"] = 1.0
    fields["pitch_delay"] = _delayed_sweep_start(rng)
    fields["vibrato_rate"] = rng.next_float(10.0, 18.0)
    fields["vibrato_depth"] = rng.next_float(50.0, 100.0)


def _explosion(rng: XorShiftRandom, fields: Fields) -> None:
    fields["wave_form"] = rng.next_choice(_ALL_WAVES)
    fields["volume"] = 0.3
    fields["sustain_punch"] = rng.next_float(0.0, 0.3)
    fields["sustain_time"] = rng.next_float(0.4, 1.3)
    fields["decay_time"] = rng.next_float(0.1, 0.5)
    fields["frequency"] = rng.next_float(0.0, 200.0)
    fields["pitch_delta"] = -fields["frequency"]
    fields["pitch_duration"] = 1.0
    fields["pitch_delay"] = rng.next_float(0.0, 0.3)
    fields["vibrato_rate"] = rng.next_float(0.0, 70.0)
    fields["vibrato_depth"] = rng.next_float(0.0, 100.0)
    fields["tremolo_rate"] = rng.next_float(0.0, 70.0)
    fields["tremolo_depth"] = rng.next_float(0.0, 1.0)
    fields["phaser_depth"] = rng.next_float(300.0, 1000.0)
    fields["noise_amount"] = rng.next_float(300.0, 500.0)


def _blip(rng: XorShiftRandom, fields: Fields) -> None:
    fields["wave_form"] = rng.next_choice(_ALL_WAVES)
    fields["sustain_time"] = rng.next_float(0.02, 0.1)
    fields["decay_time"] = rng.next_float(0.0, 0.04)
    fields["frequency"] = rng.next_float(600.0, 3000.0)


def _hit(rng: XorShiftRandom, fields: Fields) -> None:
    fields["wave_form"] = rng.next_choice(_ALL_WAVES)
    fields["sustain_time"] = rng.next_float(0.01, 0.03)
    fields["sustain_punch"] = rng.next_float(0.0, 0.5)
    fields["decay_time"] = rng.next_float(0.0, 0.2)
    fields["frequency"] = rng.next_float(20.0, 500.0)
    fields["pitch_delta"] = rng.next_float(-fields["frequency"], -fields["frequency"] * 0.2)
    fields["noise_amount"] = rng.next_float(0.0, 100.0)


def _fart(rng: XorShiftRandom, fields: Fields) -> None:
    fields["wave_form"] = WaveForm.SAWTOOTH
    fields["volume"] = 0.7
    fields["sustain_punch"] = rng.next_float(0.0, 0.2)
    fields["sustain_time"] = rng.next_float(0.1, 0.5)
    fields["decay_time"] = rng.next_float(0.3, 0.5)
    fields["frequency"] = rng.next_float(30.0, 150.0)
    fields["pitch_delta"] = -fields["frequency"] / 2.0
    fields["pitch_duration"] = 1.0
    fields["pitch_delay"] = 0.1
    fields["vibrato_rate"] = rng.next_float(8.0, 18.0)
    fields["vibrato_depth"] = rng.next_float(10.0, 30.0)
    fields["tremolo_rate"] = rng.next_float(35.0, 70.0)
    fields["tremolo_depth"] = rng.next_float(0.6, 1.0)
    fields["low_pass_cutoff"] = fields["frequency"] * 10.0
    fields["low_pass_resonance"] = 10.0
    fields["noise_amount"] = rng.next_float(0.0, 30.0)


# (field, lo, hi) in draw order; the waveform choice comes first.
_RANDOM_RANGES: tuple[tuple[str, float, float], ...] = (
    ("volume", 0.0, 1.0),
    ("attack_time", 0.0, 2.0),
    ("sustain_time", 0.0, 2.0),
    ("sustain_punch", 0.0, 1.0),
    ("decay_time", 0.0, 2.0),
    ("frequency", 0.0, 4000.0),
    ("pitch_delta", -4000.0, 4000.0),
    ("pitch_duration", 0.0, 1.0),
    ("pitch_delay", 0.0, 1.0),
    ("vibrato_rate", 0.0, 70.0),
    ("vibrato_depth", 0.0, 100.0),
    ("tremolo_rate", 0.0, 70.0),
    ("tremolo_depth", 0.0, 1.0),
    ("high_pass_cutoff", 0.0, 4000.0),
    ("high_pass_resonance", 0.0, 30.0),
    ("low_pass_cutoff", 0.0, 4000.0),
    ("low_pass_resonance", 0.0, 30.0),
    ("phaser_base_frequency", 0.0, 1000.0),
    ("phaser_lfo_frequency", 0.0, 200.0),
    ("phaser_depth", 0.0, 1000.0),
    ("noise_amount", 0.0, 500.0),
)


def _random(rng: XorShiftRandom, fields: Fields) -> None:
    fields["wave_form"] = rng.next_choice(_ALL_WAVES)
    for name, lo, hi in _RANDOM_RANGES:
        fields[name] = rng.next_float(lo, hi)


_SHAPERS: Mapping[TemplateName, _Shaper] = MappingProxyType(
    {
        "default": _default,
        "pickup": _pickup,
        "laser": _laser,
        "jump": _jump,
        "fall": _fall,
        "powerup": _powerup,
        "explosion": _explosion,
        "blip": _blip,
        "hit": _hit,
        "fart": _fart,
        "random": _random,
    }
)


def apply_template(template: TemplateInput, seed: int = 0) -> SoundConfig:
    """Build a SoundConfig for ``template`` from a fresh generator seeded with ``seed``.

    Seed 0 draws a clock-derived seed, so only non-zero seeds reproduce.
    """
    name = parse_template(template)
    rng = XorShiftRandom.seeded(seed)
    fields: Fields = SoundConfig().to_dict()
    _SHAPERS[name](rng, fields)
    _LOGGER.debug("Applied template %s with seed %d", name, rng.seed)
    return SoundConfig.model_validate(fields)
