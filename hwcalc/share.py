"""
Compact query-string form of a configuration, for shareable links.

Each field maps to a short key, e.g.
``p=8&mq=Q4&ctx=8192&kvq=Q8&mm=DISCRETE_GPU&sm=128&gpu=24&im=incremental&bs=1``.
Keys that are missing fall back to the request defaults.
"""

from urllib.parse import parse_qs, urlencode

from pydantic import ValidationError

from .calculator import CalculationConfig
from .models import CalculationRequest

# query key -> config field
SHARE_KEYS = {
    "p": "params",
    "mq": "model_quantization",
    "ctx": "context_length",
    "kvq": "kv_cache_quantization",
    "mm": "memory_mode",
    "sm": "system_memory_gb",
    "gpu": "gpu_vram_gb",
    "im": "inference_mode",
    "bs": "batch_size",
}

FIELD_KEYS = {field: key for key, field in SHARE_KEYS.items()}


class ShareDecodeError(ValueError):
    """Raised when a share query string cannot be turned into a configuration."""


def _format_value(value) -> str:
    if hasattr(value, "value"):
        return value.value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def encode_config(config: CalculationConfig) -> str:
    """Encode a configuration as a compact query string."""
    values = {
        key: _format_value(getattr(config, field))
        for key, field in SHARE_KEYS.items()
    }
    return urlencode(values)


def decode_config(query: str) -> CalculationConfig:
    """
    Decode a query string produced by encode_config.

    Values are validated by CalculationRequest, so the same rules apply as
    for a JSON request. Unknown keys and empty fields are ignored.

    Raises:
        ShareDecodeError: if a value fails validation
    """
    parsed = parse_qs(query.lstrip("?"), keep_blank_values=True)
    values = {
        field: parsed[key][-1]
        for key, field in SHARE_KEYS.items()
        if key in parsed
    }

    try:
        request = CalculationRequest(**values)
    except ValidationError as e:
        problems = []
        for error in e.errors():
            field = error["loc"][0] if error["loc"] else ""
            key = FIELD_KEYS.get(field, field)
            problems.append(f"'{key}': {error['msg']} (got {values.get(field)!r})")
        raise ShareDecodeError("Invalid share query: " + "; ".join(problems)) from e

    return request.to_config()
