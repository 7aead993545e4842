from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from enum import IntEnum
from typing import Any, Literal, NamedTuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from .errors import InvalidConfigError

_LOGGER = logging.getLogger("retrofx.config")

SAMPLE_RATE = 44_100
MAX_DURATION = 4.0
SAMPLE_RATE_ENV = "RETROFX_SAMPLE_RATE"
MAX_DURATION_ENV = "RETROFX_MAX_DURATION"


class WaveForm(IntEnum):
    SINE = 0
    SAWTOOTH = 1
    SQUARE = 2
    TRIANGLE = 3


class SoundConfig(BaseModel):
    """Parameters for one sound effect.

    Field order is significant: it is the positional order used by the
    ``?fx=`` text codec. Times are in seconds, frequencies in Hz.
    """

    wave_form: WaveForm = WaveForm.SINE
    volume: float = 0.5

    attack_time: float = Field(default=0.0, ge=0.0)
    sustain_time: float = Field(default=0.07, ge=0.0)
    sustain_punch: float = 0.0
    decay_time: float = Field(default=0.3, ge=0.0)

    frequency: float = 700.0
    pitch_delta: float = 0.0
    pitch_duration: float = 1.0
    pitch_delay: float = Field(default=0.0, ge=0.0)

    vibrato_rate: float = 0.0
    vibrato_depth: float = 0.0

    tremolo_rate: float = 0.0
    tremolo_depth: float = 0.0

    high_pass_cutoff: float = 0.0
    high_pass_resonance: float = 0.0
    low_pass_cutoff: float = 4000.0
    low_pass_resonance: float = 0.0

    phaser_base_frequency: float = 100.0
    phaser_lfo_frequency: float = 50.0
    phaser_depth: float = 0.0

    noise_amount: float = 0.0

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
        allow_inf_nan=False,
    )

    def to_dict(self, *, by_alias: bool = False) -> dict[str, Any]:
        data = self.model_dump(by_alias=by_alias)
        key = "waveForm" if by_alias else "wave_form"
        data[key] = int(data[key])
        return data


FieldKind = Literal["int", "float"]


class FieldSpec(NamedTuple):
    index: int
    name: str
    alias: str
    kind: FieldKind


FIELD_SCHEMA: tuple[FieldSpec, ...] = tuple(
    FieldSpec(
        index=index,
        name=name,
        alias=to_camel(name),
        kind="int" if name == "wave_form" else "float",
    )
    for index, name in enumerate(SoundConfig.model_fields)
)
FIELD_COUNT = len(FIELD_SCHEMA)


def default_sound() -> SoundConfig:
    return SoundConfig()


def parse_config(payload: Mapping[str, Any]) -> SoundConfig:
    """Parse a mapping with snake_case or camelCase keys, raising InvalidConfigError."""

    try:
        return SoundConfig.model_validate(dict(payload))
    except ValidationError as exc:
        _LOGGER.warning("Failed to parse sound config: %s", exc)
        raise InvalidConfigError(str(exc)) from exc


def coerce_config(config: SoundConfig | Mapping[str, Any] | None) -> SoundConfig:
    match config:
        case None:
            raise InvalidConfigError("A sound config is required")
        case SoundConfig():
            return config
        case Mapping():
            return parse_config(config)
        case _:
            raise InvalidConfigError(f"Unsupported config type: {type(config).__name__}")


class RenderSettings(BaseModel):
    """Output format and render bounds shared by the engine and the container writer."""

    sample_rate: int = Field(default=SAMPLE_RATE, gt=0)
    max_duration: float = Field(default=MAX_DURATION, gt=0.0)

    model_config = ConfigDict(frozen=True, extra="forbid", allow_inf_nan=False)

    @property
    def max_samples(self) -> int:
        return int(self.sample_rate * self.max_duration)


DEFAULT_SETTINGS = RenderSettings()


def load_settings(environ: Mapping[str, str] | None = None) -> RenderSettings:
    """Build RenderSettings from ``RETROFX_*`` environment overrides."""

    env = os.environ if environ is None else environ
    overrides: dict[str, str] = {}
    if env.get(SAMPLE_RATE_ENV):
        overrides["sample_rate"] = env[SAMPLE_RATE_ENV]
    if env.get(MAX_DURATION_ENV):
        overrides["max_duration"] = env[MAX_DURATION_ENV]
    if not overrides:
        return DEFAULT_SETTINGS
    try:
        return RenderSettings.model_validate(overrides)
    except ValidationError as exc:
        _LOGGER.warning("Invalid render settings in environment: %s", exc)
        raise InvalidConfigError(str(exc)) from exc
