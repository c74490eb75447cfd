"""Dense linear-algebra primitives used by the SPG solver.

The solver never calls numpy or torch directly in its iteration loop. It goes
through a :class:`LinalgBackend`, which exposes the handful of BLAS-style
operations the algorithm needs. Every operation writes into a buffer supplied
by the caller, so a solve allocates nothing once its scratch buffers exist.

Backends are selected by name, see :func:`get_backend`:

- ``"blas"``: ``scipy.linalg.blas`` level-1/2 routines on float64 numpy
  arrays (default).
- ``"numpy"``: plain numpy ufuncs. ``axpy`` and ``asum`` go through a
  per-thread work buffer of the operand's shape, allocated on first use.
- ``"torch"`` / ``"torch_cuda"``: float64 PyTorch tensors with in-place ops.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Any, Sequence

import numpy as np
import torch
from scipy.linalg import blas as _blas


class LinalgBackend(ABC):
    """Abstract set of vector/matrix primitives over backend-native buffers."""

    name: str = "abstract"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

    # -- buffer management -------------------------------------------------

    @abstractmethod
    def empty(self, shape: int | Sequence[int]) -> Any:
        """Allocate an uninitialised float64 buffer."""

    @abstractmethod
    def asarray(self, a: Any) -> Any:
        """Return ``a`` as a contiguous float64 buffer of this backend."""

    def columns(self, a: Any) -> Any:
        """Return a ``(d, k)`` buffer whose rows are the columns of ``a``.

        Column ``j`` of a ``(k, d)`` matrix becomes the contiguous row ``j``
        of the result, so per-column solves can operate on plain views.
        """
        return self.asarray(np.asarray(a, dtype=np.float64).T)

    @abstractmethod
    def to_numpy(self, x: Any) -> np.ndarray:
        """Copy a buffer back to a host numpy array."""

    # -- primitives --------------------------------------------------------

    @abstractmethod
    def copy(self, x: Any, y: Any) -> None:
        """``y := x``."""

    @abstractmethod
    def axpy(self, alpha: float, x: Any, y: Any) -> None:
        """``y := alpha * x + y``."""

    @abstractmethod
    def dot(self, x: Any, y: Any) -> float:
        """Inner product of two vectors."""

    @abstractmethod
    def asum(self, x: Any) -> float:
        """Sum of absolute values (the 1-norm)."""

    @abstractmethod
    def gemv(self, a: Any, x: Any, y: Any) -> None:
        """``y := a @ x`` for a square row-major matrix ``a``."""

    @abstractmethod
    def clip(self, x: Any, lo: float, hi: float, out: Any) -> None:
        """``out := min(max(x, lo), hi)`` componentwise. ``out`` may alias ``x``."""

    @abstractmethod
    def add_scalar(self, c: float, x: Any) -> None:
        """``x := x + c`` componentwise."""


class NumPyBackend(LinalgBackend):
    """Reference backend built on numpy ufuncs.

    Intermediate results land in work buffers owned by the calling thread, so
    concurrent solves sharing one backend never write to the same memory.
    """

    name = "numpy"

    def __init__(self) -> None:
        self._local = threading.local()

    def _work(self, like: np.ndarray) -> np.ndarray:
        buffers = getattr(self._local, "buffers", None)
        if buffers is None:
            buffers = self._local.buffers = {}
        buf = buffers.get(like.shape)
        if buf is None:
            buf = buffers[like.shape] = np.empty(like.shape, dtype=np.float64)
        return buf

    def empty(self, shape: int | Sequence[int]) -> np.ndarray:
        return np.empty(shape, dtype=np.float64)

    def asarray(self, a: Any) -> np.ndarray:
        if isinstance(a, torch.Tensor):
            a = a.detach().cpu().numpy()
        return np.ascontiguousarray(a, dtype=np.float64)

    def to_numpy(self, x: np.ndarray) -> np.ndarray:
        return np.array(x, dtype=np.float64, copy=True)

    def copy(self, x: np.ndarray, y: np.ndarray) -> None:
        np.copyto(y, x)

    def axpy(self, alpha: float, x: np.ndarray, y: np.ndarray) -> None:
        work = self._work(x)
        np.multiply(x, alpha, out=work)
        np.add(y, work, out=y)

    def dot(self, x: np.ndarray, y: np.ndarray) -> float:
        return float(np.dot(x, y))

    def asum(self, x: np.ndarray) -> float:
        work = self._work(x)
        np.abs(x, out=work)
        return float(work.sum())

    def gemv(self, a: np.ndarray, x: np.ndarray, y: np.ndarray) -> None:
        np.dot(a, x, out=y)

    def clip(self, x: np.ndarray, lo: float, hi: float, out: np.ndarray) -> None:
        np.clip(x, lo, hi, out=out)

    def add_scalar(self, c: float, x: np.ndarray) -> None:
        np.add(x, c, out=x)


class BlasBackend(NumPyBackend):
    """Backend calling the reference BLAS routines shipped with SciPy.

    Matrices are kept row-major; ``gemv`` hands the transposed (hence
    column-major) view to ``dgemv`` with ``trans=1`` so no copy is made.
    """

    name = "blas"

    @staticmethod
    def _flat(a: np.ndarray) -> np.ndarray:
        return a.reshape(-1)

    def copy(self, x: np.ndarray, y: np.ndarray) -> None:
        target = self._flat(y)
        out = _blas.dcopy(self._flat(x), target)
        if out is not target:
            target[...] = out

    def axpy(self, alpha: float, x: np.ndarray, y: np.ndarray) -> None:
        target = self._flat(y)
        out = _blas.daxpy(self._flat(x), target, a=alpha)
        if out is not target:
            target[...] = out

    def dot(self, x: np.ndarray, y: np.ndarray) -> float:
        return float(_blas.ddot(x, y))

    def asum(self, x: np.ndarray) -> float:
        return float(_blas.dasum(x))

    def gemv(self, a: np.ndarray, x: np.ndarray, y: np.ndarray) -> None:
        out = _blas.dgemv(1.0, a.T, x, beta=0.0, y=y, trans=1, overwrite_y=1)
        if out is not y:
            y[...] = out


class TorchBackend(LinalgBackend):
    """Backend on float64 PyTorch tensors.

    Args:
        device: Torch device the buffers live on (default CPU).
    """

    name = "torch"

    def __init__(self, device: torch.device | str = "cpu") -> None:
        self.device = torch.device(device)

    def __repr__(self) -> str:
        return f"TorchBackend(device={self.device})"

    def empty(self, shape: int | Sequence[int]) -> torch.Tensor:
        return torch.empty(shape, dtype=torch.float64, device=self.device)

    def asarray(self, a: Any) -> torch.Tensor:
        if isinstance(a, torch.Tensor):
            return a.detach().to(device=self.device, dtype=torch.float64).contiguous()
        host = np.ascontiguousarray(a, dtype=np.float64)
        return torch.as_tensor(host, device=self.device).contiguous()

    def columns(self, a: Any) -> torch.Tensor:
        return self.asarray(a).T.contiguous()

    def to_numpy(self, x: torch.Tensor) -> np.ndarray:
        return x.detach().cpu().numpy().copy()

    def copy(self, x: torch.Tensor, y: torch.Tensor) -> None:
        y.copy_(x)

    def axpy(self, alpha: float, x: torch.Tensor, y: torch.Tensor) -> None:
        y.add_(x, alpha=alpha)

    def dot(self, x: torch.Tensor, y: torch.Tensor) -> float:
        return float(torch.dot(x, y).item())

    def asum(self, x: torch.Tensor) -> float:
        return float(torch.linalg.vector_norm(x, ord=1).item())

    def gemv(self, a: torch.Tensor, x: torch.Tensor, y: torch.Tensor) -> None:
        torch.mv(a, x, out=y)

    def clip(self, x: torch.Tensor, lo: float, hi: float, out: torch.Tensor) -> None:
        torch.clamp(x, lo, hi, out=out)

    def add_scalar(self, c: float, x: torch.Tensor) -> None:
        x.add_(c)


SUPPORTED_BACKENDS = ("blas", "numpy", "torch", "torch_cuda")


def get_backend(name: str | LinalgBackend) -> LinalgBackend:
    """
    Create a backend from its name.

    Args:
        name: One of ``"blas"``, ``"numpy"``, ``"torch"``, ``"torch_cuda"``.
            A :class:`LinalgBackend` instance is returned unchanged.

    Returns:
        A backend instance.

    Raises:
        RuntimeError: If ``"torch_cuda"`` is requested but CUDA is not available.
        ValueError: If the backend name is not supported.
    """
    if isinstance(name, LinalgBackend):
        return name
    if name == "blas":
        return BlasBackend()
    elif name == "numpy":
        return NumPyBackend()
    elif name == "torch":
        return TorchBackend("cpu")
    elif name == "torch_cuda":
        if not torch.cuda.is_available():
            raise RuntimeError(
                "CUDA backend requested but torch.cuda.is_available() is False"
            )
        backend = TorchBackend("cuda")
        backend.name = "torch_cuda"
        return backend
    else:
        raise ValueError(
            f"Unsupported backend name: {name!r}. "
            f"Supported backends: {list(SUPPORTED_BACKENDS)}"
        )


def default_backend() -> LinalgBackend:
    """Return the default backend (SciPy BLAS)."""
    return get_backend("blas")


__all__ = [
    "LinalgBackend",
    "NumPyBackend",
    "BlasBackend",
    "TorchBackend",
    "SUPPORTED_BACKENDS",
    "get_backend",
    "default_backend",
]
