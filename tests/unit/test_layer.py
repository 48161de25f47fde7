import numpy as np
import pytest

from ffnets.core.activations import Activator
from ffnets.core.layer import CalculationLayer


def _layer(inputs=3, outputs=2, activator=Activator.IDENTITY, seed=0):
    return CalculationLayer(inputs, outputs, activator, rng=np.random.default_rng(seed))


def test_shapes_and_uniform_initialisation():
    layer = _layer(inputs=4, outputs=6)
    assert layer.weights.shape == (4, 6)
    assert layer.bias.shape == (6,)
    assert tuple(layer.structure) == (4, 6)
    assert np.all(np.abs(layer.weights) <= 0.5)
    assert np.all(np.abs(layer.bias) <= 0.5)
    assert np.unique(layer.weights).size == layer.weights.size


def test_invoke_computes_affine_then_activation():
    layer = _layer(activator=Activator.TANH)
    x = np.array([0.5, -1.0, 2.0])
    out = np.zeros(2)
    result = layer.invoke(x, out)
    assert result is out
    np.testing.assert_allclose(out, np.tanh(x @ layer.weights + layer.bias))


def test_adjust_updates_parameters_and_propagates_upstream():
    layer = _layer()
    weights = layer.weights.copy()
    bias = layer.bias.copy()
    x = np.array([1.0, 2.0, -1.0])
    output = np.zeros(2)
    layer.invoke(x, output)
    downstream = np.array([0.1, -0.2])
    upstream = np.zeros(3)

    layer.adjust(x, output, upstream, downstream.copy(), -0.5, 0.5)

    np.testing.assert_allclose(upstream, weights @ downstream)
    np.testing.assert_allclose(layer.weights, weights - 0.25 * np.outer(x, downstream))
    np.testing.assert_allclose(layer.bias, bias - 0.25 * downstream)


def test_adjust_multiplies_by_output_derivative_in_place():
    layer = _layer(activator=Activator.SIGMOID)
    output = np.array([0.25, 0.5])
    gradient = np.array([1.0, 1.0])
    layer.adjust(np.zeros(3), output, None, gradient, -1.0)
    np.testing.assert_allclose(gradient, [0.1875, 0.25])


def test_lasso_and_ridge_shrink_weights_only():
    layer = _layer()
    weights = layer.weights.copy()
    bias = layer.bias.copy()
    layer.adjust(np.ones(3), np.zeros(2), None, np.zeros(2), -0.1, lasso=0.01, ridge=0.2)
    expected = weights - 0.1 * (0.01 * np.sign(weights) + 0.2 * weights)
    np.testing.assert_allclose(layer.weights, expected)
    np.testing.assert_array_equal(layer.bias, bias)


def test_scale_and_accessors():
    layer = _layer()
    layer.set_weight(1, 0, 2.0)
    layer.set_bias(1, -4.0)
    layer.scale(0.5)
    assert layer.get_weight(1, 0) == pytest.approx(1.0)
    assert layer.get_bias(1) == pytest.approx(-2.0)


def test_equality_requires_same_activator_and_values():
    first = _layer(seed=3)
    second = _layer(seed=3)
    assert first == second
    second.activator = Activator.TANH
    assert first != second
    third = _layer(seed=4)
    assert first != third
    with pytest.raises(TypeError):
        hash(first)
