"""Linear-algebra backends for the SPG solver."""

from .linalg import (
    SUPPORTED_BACKENDS,
    BlasBackend,
    LinalgBackend,
    NumPyBackend,
    TorchBackend,
    default_backend,
    get_backend,
)

__all__ = [
    "LinalgBackend",
    "NumPyBackend",
    "BlasBackend",
    "TorchBackend",
    "SUPPORTED_BACKENDS",
    "get_backend",
    "default_backend",
]
