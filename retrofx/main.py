from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import numpy as np
from numpy.typing import DTypeLike, NDArray
from pydantic import BaseModel, ConfigDict

from .audio import FloatArray, wav_bytes, write_wav
from .codec import decode_params, encode_params
from .config import RenderSettings, SoundConfig, coerce_config, load_settings
from .errors import InvalidConfigError
from .logging_utils import report_failure
from .synth import render_samples
from .templates import TemplateInput, apply_template

_LOGGER = logging.getLogger("retrofx.main")

ConfigInput = SoundConfig | Mapping[str, Any]


class Sound(BaseModel):
    """A rendered effect together with the parameters that produced it."""

    config: SoundConfig
    samples: FloatArray
    sample_rate: int

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        arbitrary_types_allowed=True,
    )

    @property
    def duration(self) -> float:
        return len(self.samples) / self.sample_rate

    def __len__(self) -> int:
        return len(self.samples)

    def to_numpy(self) -> FloatArray:
        return self.samples

    def __array__(self, dtype: DTypeLike | None = None, copy: bool | None = None) -> NDArray[Any]:
        return np.asarray(self.samples, dtype=dtype)

    def to_wav_bytes(self) -> bytes:
        return wav_bytes(self.samples, sample_rate=self.sample_rate)

    def save(self, path: str | Path) -> Path:
        return write_wav(path, self.samples, sample_rate=self.sample_rate)

    def to_url(self) -> str:
        return encode_params(self.config)


def synthesize(config: ConfigInput, *, settings: RenderSettings | None = None) -> Sound:
    """Render a config (or a mapping of its fields) into a Sound."""

    resolved = coerce_config(config)
    settings = settings or load_settings()
    samples = render_samples(resolved, settings=settings)
    _LOGGER.debug("Rendered %d samples at %d Hz", samples.size, settings.sample_rate)
    return Sound(config=resolved, samples=samples, sample_rate=settings.sample_rate)


def generate(
    template: TemplateInput,
    seed: int = 0,
    *,
    settings: RenderSettings | None = None,
) -> Sound:
    """Randomize ``template`` with ``seed`` and render the result."""

    return synthesize(apply_template(template, seed), settings=settings)


def create_sound_from_template(template: TemplateInput, seed: int = 0) -> bytes:
    try:
        return generate(template, seed).to_wav_bytes()
    except Exception as exc:
        report_failure(_LOGGER, "create_sound_from_template", exc)
        raise


def create_sound_from_template_to_file(
    template: TemplateInput,
    seed: int,
    path: str | Path,
) -> Path:
    if path is None:
        raise InvalidConfigError("An output path is required")
    try:
        return generate(template, seed).save(path)
    except Exception as exc:
        report_failure(_LOGGER, "create_sound_from_template_to_file", exc)
        raise


def create_sound_from_config(config: ConfigInput) -> bytes:
    try:
        return synthesize(config).to_wav_bytes()
    except Exception as exc:
        report_failure(_LOGGER, "create_sound_from_config", exc)
        raise


def create_sound_from_config_to_file(config: ConfigInput, path: str | Path) -> Path:
    if path is None:
        raise InvalidConfigError("An output path is required")
    try:
        return synthesize(config).save(path)
    except Exception as exc:
        report_failure(_LOGGER, "create_sound_from_config_to_file", exc)
        raise


def create_sound_from_url(url: str) -> SoundConfig:
    return decode_params(url)


def get_url_from_sound(config: ConfigInput) -> str:
    return encode_params(coerce_config(config))
