"""Trainer updates must equal gradient descent on the configured error."""

import numpy as np
import pytest

import ffnets
from ffnets import Activator, Error, Network

HIDDEN = [Activator.IDENTITY, Activator.RECTIFIER, Activator.SIGMOID, Activator.TANH]

DELTA = 1e-5
RATE = 1.0


def _mazur_trainer():
    trainer = ffnets.builder(2, 2, 2)
    trainer.weight(0, 0, 0, 0.15).weight(0, 1, 0, 0.20)
    trainer.weight(0, 0, 1, 0.25).weight(0, 1, 1, 0.30)
    trainer.bias(0, 0, 0.35).bias(0, 1, 0.35)
    trainer.weight(1, 0, 0, 0.40).weight(1, 1, 0, 0.45)
    trainer.weight(1, 0, 1, 0.50).weight(1, 1, 1, 0.55)
    trainer.bias(1, 0, 0.60).bias(1, 1, 0.60)
    return trainer.rate(0.5).error(Error.HALF_SQUARED_DIFFERENCE)


def test_worked_example_forward_pass():
    trainer = _mazur_trainer()
    output = trainer.network.new_invoker().invoke([0.05, 0.10])
    np.testing.assert_allclose(output, [0.75136507, 0.772928465], atol=1e-8)
    assert trainer.error_value([0.01, 0.99], output) == pytest.approx(0.298371109, abs=1e-8)


def test_worked_example_single_update():
    trainer = _mazur_trainer()
    trainer.train([0.05, 0.10], [0.01, 0.99])

    expected = {
        (1, 0, 0): 0.35891648,
        (1, 1, 0): 0.408666186,
        (1, 0, 1): 0.511301270,
        (1, 1, 1): 0.561370121,
        (0, 0, 0): 0.149780716,
        (0, 1, 0): 0.19956143,
        (0, 0, 1): 0.24975114,
        (0, 1, 1): 0.29950229,
    }
    for (layer, input, output), weight in expected.items():
        assert trainer.get_weight(layer, input, output) == pytest.approx(weight, abs=1e-6)

    after = trainer.error_value([0.01, 0.99], trainer.network.new_invoker().invoke([0.05, 0.10]))
    assert after < 0.298371109


def _numerical_step(trainer, x, target):
    """Return the weights and biases after one central-difference descent step."""

    invoker = trainer.network.new_invoker()

    def error():
        return trainer.error_value(target, invoker.invoke(x))

    weights, biases = [], []
    for layer, (rows, columns) in enumerate(trainer.structure()):
        w = np.zeros((rows, columns))
        b = np.zeros(columns)
        for output in range(columns):
            for input in range(rows):
                original = trainer.get_weight(layer, input, output)
                trainer.weight(layer, input, output, original + DELTA)
                upper = error()
                trainer.weight(layer, input, output, original - DELTA)
                lower = error()
                trainer.weight(layer, input, output, original)
                w[input, output] = original - RATE * (upper - lower) / (2 * DELTA)
            original = trainer.get_bias(layer, output)
            trainer.bias(layer, output, original + DELTA)
            upper = error()
            trainer.bias(layer, output, original - DELTA)
            lower = error()
            trainer.bias(layer, output, original)
            b[output] = original - RATE * (upper - lower) / (2 * DELTA)
        weights.append(w)
        biases.append(b)
    return weights, biases


def _assert_matches_numerical(network, x, target):
    trainer = network.new_trainer().rate(RATE)
    weights, biases = _numerical_step(trainer, x, target)
    trainer.train(x, target)
    for expected, actual in zip(weights, network.get_weights()):
        np.testing.assert_allclose(actual, expected, atol=1e-7)
    for expected, actual in zip(biases, network.get_biases()):
        np.testing.assert_allclose(actual, expected, atol=1e-7)


@pytest.mark.parametrize("hidden", HIDDEN, ids=lambda a: a.name)
@pytest.mark.parametrize(
    "output", [Activator.IDENTITY, Activator.SIGMOID, Activator.TANH], ids=lambda a: a.name
)
def test_squared_difference_gradients(hidden, output):
    network = (
        Network.builder(3, seed=17).layer(4, hidden).layer(3, hidden).layer(2, output).get()
    )
    assert network.new_trainer().configuration.error is Error.HALF_SQUARED_DIFFERENCE
    _assert_matches_numerical(network, [0.4, -0.7, 0.25], [0.3, -0.2])


@pytest.mark.parametrize("hidden", HIDDEN, ids=lambda a: a.name)
def test_softmax_cross_entropy_gradients(hidden):
    network = (
        Network.builder(3, seed=23)
        .layer(4, hidden)
        .layer(3, hidden)
        .layer(3, Activator.SOFTMAX)
        .get()
    )
    assert network.new_trainer().configuration.error is Error.CROSS_ENTROPY
    _assert_matches_numerical(network, [-0.3, 0.8, 0.1], [0.0, 1.0, 0.0])


def test_float32_training_tracks_float64():
    wide = Network.builder(2, seed=4).layer(3, Activator.TANH).layer(1, Activator.IDENTITY).get()
    narrow = Network.builder(2, dtype=np.float32, seed=4).layer(3, Activator.TANH).layer(1, Activator.IDENTITY).get()
    for trainer in (wide.new_trainer().rate(0.1), narrow.new_trainer().rate(0.1)):
        for _ in range(20):
            trainer.train([0.5, -0.5], [0.25])
    for w64, w32 in zip(wide.get_weights(), narrow.get_weights()):
        np.testing.assert_allclose(w32, w64, atol=1e-4)
