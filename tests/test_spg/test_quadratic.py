import numpy as np
import pytest

from hclasso.backend import get_backend
from hclasso.spg.quadratic import GradientOracle, QuadraticModel


@pytest.fixture(params=["numpy", "blas", "torch"])
def ops(request):
    return get_backend(request.param)


def _setup(ops):
    G = ops.asarray([[2.0, 1.0], [1.0, 3.0]])
    w = ops.asarray([1.0, -1.0])
    model = QuadraticModel(ops, 2).assign(G, w, 0.5)
    return G, model, GradientOracle(G, model)


def test_model_constants(ops):
    G, model, _ = _setup(ops)
    assert np.allclose(ops.to_numpy(model.hess), [[4.0, 2.0], [2.0, 6.0]])
    assert np.allclose(ops.to_numpy(model.beta), [1.5, -2.5])
    # the shared input is left alone
    assert np.allclose(ops.to_numpy(G), [[2.0, 1.0], [1.0, 3.0]])


def test_model_reassign_overwrites(ops):
    G, model, _ = _setup(ops)
    model.assign(G, ops.asarray([0.0, 0.0]), 2.0)
    assert np.allclose(ops.to_numpy(model.beta), [-2.0, -2.0])
    assert np.allclose(ops.to_numpy(model.hess), [[4.0, 2.0], [2.0, 6.0]])


def test_gradient(ops):
    _, _, oracle = _setup(ops)
    g = ops.empty(2)
    oracle.gradient(ops.asarray([0.5, 1.0]), g)
    assert np.allclose(ops.to_numpy(g), [2.5, 9.5])


def test_smooth_value(ops):
    _, _, oracle = _setup(ops)
    tmp = ops.empty(2)
    assert oracle.smooth_value(ops.asarray([0.5, 1.0]), tmp) == pytest.approx(6.25)


def test_curvature(ops):
    _, _, oracle = _setup(ops)
    tmp = ops.empty(2)
    assert oracle.curvature(ops.asarray([1.0, -1.0]), tmp) == pytest.approx(6.0)


def test_gradient_matches_finite_differences(rng):
    ops = get_backend("numpy")
    k = 4
    B = rng.standard_normal((k, k))
    G_host = B @ B.T
    w_host = rng.standard_normal(k)
    G = ops.asarray(G_host)
    oracle = GradientOracle(G, QuadraticModel(ops, k).assign(G, ops.asarray(w_host), 0.3))
    x = rng.uniform(0.0, 1.0, size=k)
    g = ops.empty(k)
    tmp = ops.empty(k)
    oracle.gradient(x, g)

    eps = 1e-6
    fd = np.empty(k)
    for i in range(k):
        e = np.zeros(k)
        e[i] = eps
        fd[i] = (oracle.smooth_value(x + e, tmp) - oracle.smooth_value(x - e, tmp)) / (2 * eps)
    assert np.allclose(g, fd, atol=1e-5)
