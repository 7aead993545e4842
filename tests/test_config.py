from __future__ import annotations

from types import MappingProxyType

import pytest
from pydantic import ValidationError

from retrofx.config import (
    FIELD_COUNT,
    FIELD_SCHEMA,
    RenderSettings,
    SoundConfig,
    WaveForm,
    coerce_config,
    default_sound,
    load_settings,
    parse_config,
)
from retrofx.errors import InvalidConfigError


def test_defaults_match_baseline_sound() -> None:
    sound = default_sound()

    assert sound.wave_form is WaveForm.SINE
    assert sound.volume == 0.5
    assert sound.attack_time == 0.0
    assert sound.sustain_time == pytest.approx(0.07)
    assert sound.decay_time == pytest.approx(0.3)
    assert sound.frequency == 700.0
    assert sound.pitch_duration == 1.0
    assert sound.low_pass_cutoff == 4000.0
    assert sound.phaser_base_frequency == 100.0
    assert sound.phaser_lfo_frequency == 50.0
    assert sound.noise_amount == 0.0


def test_camel_case_aliases_are_accepted() -> None:
    sound = SoundConfig.model_validate({"waveForm": 2, "lowPassCutoff": 1200.0})

    assert sound.wave_form is WaveForm.SQUARE
    assert sound.low_pass_cutoff == 1200.0


def test_to_dict_by_alias_uses_integer_waveform() -> None:
    data = SoundConfig(wave_form=WaveForm.TRIANGLE).to_dict(by_alias=True)

    assert data["waveForm"] == 3
    assert type(data["waveForm"]) is int
    assert data["phaserLfoFrequency"] == 50.0


@pytest.mark.parametrize(
    "payload",
    [
        {"sustain_time": -0.1},
        {"attack_time": -1.0},
        {"pitch_delay": -0.5},
        {"wave_form": 4},
        {"frequency": float("nan")},
        {"volume": float("inf")},
        {"unknown_field": 1.0},
    ],
)
def test_invalid_fields_are_rejected(payload: dict[str, float]) -> None:
    with pytest.raises(ValidationError):
        SoundConfig.model_validate(payload)


def test_config_is_frozen() -> None:
    sound = SoundConfig()

    with pytest.raises(ValidationError):
        sound.volume = 1.0  # type: ignore[misc]


def test_field_schema_order() -> None:
    assert FIELD_COUNT == 22
    assert [spec.index for spec in FIELD_SCHEMA] == list(range(22))
    assert FIELD_SCHEMA[0].name == "wave_form"
    assert FIELD_SCHEMA[0].alias == "waveForm"
    assert FIELD_SCHEMA[0].kind == "int"
    assert FIELD_SCHEMA[6].name == "frequency"
    assert FIELD_SCHEMA[16].alias == "lowPassCutoff"
    assert FIELD_SCHEMA[21].name == "noise_amount"
    assert all(spec.kind == "float" for spec in FIELD_SCHEMA[1:])


def test_parse_config_wraps_validation_errors() -> None:
    with pytest.raises(InvalidConfigError):
        parse_config({"decayTime": -2})


def test_coerce_config_requires_a_config() -> None:
    with pytest.raises(InvalidConfigError):
        coerce_config(None)
    with pytest.raises(InvalidConfigError):
        coerce_config(42)  # type: ignore[arg-type]
    assert coerce_config({"volume": 0.25}).volume == 0.25


def test_coerce_config_accepts_any_mapping() -> None:
    frozen = MappingProxyType({"waveForm": 3, "sustain_time": 0.2})
    config = coerce_config(frozen)

    assert config.wave_form is WaveForm.TRIANGLE
    assert config.sustain_time == 0.2
    assert coerce_config(config) is config


def test_render_settings_defaults() -> None:
    settings = RenderSettings()

    assert settings.sample_rate == 44_100
    assert settings.max_duration == 4.0
    assert settings.max_samples == 176_400


def test_load_settings_reads_environment() -> None:
    settings = load_settings({"RETROFX_SAMPLE_RATE": "22050", "RETROFX_MAX_DURATION": "2.5"})

    assert settings.sample_rate == 22_050
    assert settings.max_samples == 55_125


def test_load_settings_without_overrides_is_default() -> None:
    assert load_settings({}) == RenderSettings()


def test_load_settings_rejects_bad_values() -> None:
    with pytest.raises(InvalidConfigError):
        load_settings({"RETROFX_SAMPLE_RATE": "fast"})
    with pytest.raises(InvalidConfigError):
        load_settings({"RETROFX_MAX_DURATION": "-1"})
