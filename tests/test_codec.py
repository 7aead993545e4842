from __future__ import annotations

import pytest

from retrofx.codec import decode_params, encode_params, params_to_values, values_to_params
from retrofx.config import SoundConfig, WaveForm
from retrofx.errors import InvalidConfigError
from retrofx.templates import TEMPLATE_NAMES, apply_template

DEFAULT_FX = (
    "?fx=0%2C0.5%2C0%2C0.07%2C0%2C0.3%2C700%2C0%2C1%2C0%2C0%2C0"
    "%2C0%2C0%2C0%2C0%2C4000%2C0%2C100%2C50%2C0%2C0"
)


def test_default_encoding() -> None:
    assert encode_params(SoundConfig()) == DEFAULT_FX


def test_values_are_plain_comma_list() -> None:
    values = params_to_values(SoundConfig(wave_form=WaveForm.SQUARE, volume=0.25))
    assert values.split(",")[:2] == ["2", "0.25"]
    assert len(values.split(",")) == 22


def test_decode_default() -> None:
    decoded = decode_params(DEFAULT_FX)

    assert decoded == SoundConfig()
    assert decoded.wave_form is WaveForm.SINE
    assert decoded.frequency == 700.0


@pytest.mark.parametrize("name", TEMPLATE_NAMES)
def test_template_round_trip(name: str) -> None:
    config = apply_template(name, 1234)
    assert decode_params(encode_params(config)) == config


@pytest.mark.parametrize(
    "url",
    [
        "",
        "?",
        "not-a-valid-url",
        "https://example.com?other=param",
        "https://example.com/sounds",
    ],
)
def test_missing_fx_gives_defaults(url: str) -> None:
    assert decode_params(url) == SoundConfig()


def test_partial_list_keeps_defaults() -> None:
    decoded = decode_params("?fx=2,0.8")

    assert decoded.wave_form is WaveForm.SQUARE
    assert decoded.volume == 0.8
    assert decoded.frequency == 700.0


def test_extra_tokens_are_ignored() -> None:
    values = params_to_values(SoundConfig()) + ",1,2,3"
    assert values_to_params(values) == SoundConfig()


def test_malformed_tokens_are_skipped() -> None:
    decoded = decode_params("?fx=1,loud,,0.2,nan,inf")

    assert decoded.wave_form is WaveForm.SAWTOOTH
    assert decoded.volume == 0.5
    assert decoded.attack_time == 0.0
    assert decoded.sustain_time == 0.2
    assert decoded.sustain_punch == 0.0
    assert decoded.decay_time == 0.3


def test_out_of_range_values_are_skipped() -> None:
    decoded = decode_params("?fx=9,0.5,-1,0.1")

    assert decoded.wave_form is WaveForm.SINE
    assert decoded.attack_time == 0.0
    assert decoded.sustain_time == 0.1


def test_fractional_waveform_truncates() -> None:
    assert decode_params("?fx=2.7").wave_form is WaveForm.SQUARE


def test_full_url_with_other_params() -> None:
    decoded = decode_params("https://example.com/play?a=1&fx=3%2C0.9&b=2#top")

    assert decoded.wave_form is WaveForm.TRIANGLE
    assert decoded.volume == 0.9


def test_bare_query_string() -> None:
    assert decode_params("fx=1,0.1").volume == 0.1


def test_plus_decodes_as_space() -> None:
    assert decode_params("?fx=1,+0.4").volume == 0.4


def test_negative_pitch_delta_survives() -> None:
    config = SoundConfig(pitch_delta=-350.5)
    assert decode_params(encode_params(config)).pitch_delta == -350.5


def test_none_is_rejected() -> None:
    with pytest.raises(InvalidConfigError):
        decode_params(None)  # type: ignore[arg-type]
    with pytest.raises(InvalidConfigError):
        encode_params(None)  # type: ignore[arg-type]
