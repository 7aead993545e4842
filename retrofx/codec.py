"""``?fx=`` text form of a SoundConfig.

The fragment carries all fields as comma-joined numbers in FIELD_SCHEMA
order, percent-encoded, e.g. ``?fx=0%2C0.5%2C0%2C0.07%2C...``. Decoding is
lenient: anything it cannot use leaves the corresponding default in place.
"""

from __future__ import annotations

import logging
import math
from urllib.parse import parse_qs, quote, urlsplit

from pydantic import ValidationError

from .config import FIELD_COUNT, FIELD_SCHEMA, FieldSpec, SoundConfig
from .errors import InvalidConfigError

_LOGGER = logging.getLogger("retrofx.codec")

FX_PARAM = "fx"


def _format_value(spec: FieldSpec, value: float) -> str:
    if spec.kind == "int":
        return str(int(value))
    number = float(value)
    if number.is_integer() and abs(number) < 1e15:
        return str(int(number))
    # repr is the shortest string that parses back to the same double.
    return repr(number)


def _parse_token(spec: FieldSpec, token: str) -> float | int | None:
    try:
        number = float(token.strip())
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    if spec.kind == "int":
        return int(number)
    return number


def params_to_values(config: SoundConfig) -> str:
    """Comma-joined field values without URL wrapping or escaping."""

    return ",".join(
        _format_value(spec, getattr(config, spec.name)) for spec in FIELD_SCHEMA
    )


def values_to_params(values: str) -> SoundConfig:
    """Parse a comma-joined value list onto the default SoundConfig.

    Tokens map to fields by position. Extra tokens are ignored, missing ones
    keep their defaults, and a token that is not a usable number for its
    field is skipped.
    """
    fields = SoundConfig().to_dict()
    for spec, token in zip(FIELD_SCHEMA, values.split(",")[:FIELD_COUNT]):
        value = _parse_token(spec, token)
        if value is None:
            _LOGGER.debug("Skipping unparseable %s token %r", spec.alias, token)
            continue
        candidate = {**fields, spec.name: value}
        try:
            SoundConfig.model_validate(candidate)
        except ValidationError:
            _LOGGER.debug("Skipping out-of-range %s value %r", spec.alias, value)
            continue
        fields = candidate
    return SoundConfig.model_validate(fields)


def encode_params(config: SoundConfig) -> str:
    """Return the ``?fx=...`` query fragment for ``config``."""

    if config is None:
        raise InvalidConfigError("A sound config is required")
    return f"?{FX_PARAM}={quote(params_to_values(config), safe='')}"


def decode_params(url: str) -> SoundConfig:
    """Read the ``fx`` parameter of ``url`` back into a SoundConfig.

    ``url`` may be a full URL, a ``?fx=...`` fragment, or a bare query
    string. Without an ``fx`` parameter the default config is returned.
    """
    if url is None:
        raise InvalidConfigError("A URL is required")
    if not isinstance(url, str):
        raise InvalidConfigError(f"Unsupported URL type: {type(url).__name__}")

    query = urlsplit(url).query if "?" in url else url
    values = parse_qs(query, keep_blank_values=True).get(FX_PARAM)
    if not values:
        _LOGGER.debug("No %s parameter in %r; using defaults", FX_PARAM, url)
        return SoundConfig()
    return values_to_params(values[0])
