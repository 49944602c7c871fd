"""Exchange connectivity module."""

from .client import (
    DecodingError,
    PoloniexClient,
    PoloniexClientError,
    TransportError,
)
from .params import NonceGenerator, build_params, encode_params

__all__ = [
    "DecodingError",
    "NonceGenerator",
    "PoloniexClient",
    "PoloniexClientError",
    "TransportError",
    "build_params",
    "encode_params",
]
