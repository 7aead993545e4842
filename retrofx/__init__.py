from __future__ import annotations

from .audio import quantize_pcm16, wav_bytes, write_wav
from .codec import decode_params, encode_params
from .config import (
    FIELD_SCHEMA,
    SAMPLE_RATE,
    RenderSettings,
    SoundConfig,
    WaveForm,
    default_sound,
    load_settings,
    parse_config,
)
from .errors import AudioWriteError, InvalidConfigError, InvalidTemplateError, RetroFxError
from .logging_utils import configure_logging as _configure_logging
from .main import (
    Sound,
    create_sound_from_config,
    create_sound_from_config_to_file,
    create_sound_from_template,
    create_sound_from_template_to_file,
    create_sound_from_url,
    generate,
    get_url_from_sound,
    synthesize,
)
from .rng import XorShiftRandom, resolve_seed
from .synth import SampleBuffer, frame_count, render, render_samples
from .templates import TEMPLATE_NAMES, TemplateName, apply_template, parse_template

__all__ = [
    "FIELD_SCHEMA",
    "SAMPLE_RATE",
    "TEMPLATE_NAMES",
    "AudioWriteError",
    "InvalidConfigError",
    "InvalidTemplateError",
    "RenderSettings",
    "RetroFxError",
    "SampleBuffer",
    "Sound",
    "SoundConfig",
    "TemplateName",
    "WaveForm",
    "XorShiftRandom",
    "apply_template",
    "create_sound_from_config",
    "create_sound_from_config_to_file",
    "create_sound_from_template",
    "create_sound_from_template_to_file",
    "create_sound_from_url",
    "decode_params",
    "default_sound",
    "encode_params",
    "frame_count",
    "generate",
    "get_url_from_sound",
    "load_settings",
    "parse_config",
    "parse_template",
    "quantize_pcm16",
    "render",
    "render_samples",
    "resolve_seed",
    "synthesize",
    "wav_bytes",
    "write_wav",
]

__version__ = "0.1.0"

_configure_logging()
del _configure_logging
