import numpy as np
import pytest

from sigmanet.core.types import Gradients, ParameterSet, Topology
from sigmanet.data.registry import ClassificationDataset
from sigmanet.initializers import random_parameters
from sigmanet.training.config import CostFunction, Regularization
from sigmanet.training.evaluator import Evaluator
from sigmanet.training.schedule import LearningRateController
from sigmanet.training.trainer import Network, SGDOptimizer, Trainer


def _params(value=2.0):
    return ParameterSet(
        weights=[np.full((3, 2), value), np.full((2, 3), value)],
        biases=[np.full(3, value), np.full(2, value)],
    )


def _grads(value=0.01):
    return Gradients(
        weights=[np.full((3, 2), value), np.full((2, 3), value)],
        biases=[np.full(3, value), np.full(2, value)],
    )


def test_plain_step_averages_over_batch():
    params = _params()
    opt = SGDOptimizer(LearningRateController(0.5))
    opt.step(params, _grads(0.4), batch_size=4)
    assert np.allclose(params.weights[0], 2.0 - 0.5 * 0.4 / 4)
    assert np.allclose(params.biases[1], 2.0 - 0.5 * 0.4 / 4)


def test_l2_shrinks_weights_but_not_biases():
    plain = _params()
    regularized = _params()
    grads = _grads()
    SGDOptimizer(LearningRateController(0.5)).step(plain, grads, batch_size=2)
    l2 = SGDOptimizer(
        LearningRateController(0.5),
        regularization=Regularization.L2,
        lam=5.0,
        training_size=10,
    )
    assert l2.regularization_factor() == pytest.approx(1.0 - 0.5 * 5.0 / 10)
    l2.step(regularized, grads, batch_size=2)

    for w_plain, w_reg in zip(plain.weights, regularized.weights):
        assert np.all(np.abs(w_reg) < np.abs(w_plain))
        assert np.allclose(w_plain - w_reg, (1.0 - 0.75) * 2.0)
    for b_plain, b_reg in zip(plain.biases, regularized.biases):
        assert np.array_equal(b_plain, b_reg)


def test_step_uses_current_schedule_rate():
    schedule = LearningRateController(1.0)
    opt = SGDOptimizer(schedule)
    schedule.rate = 0.1
    params = _params(0.0)
    opt.step(params, _grads(1.0), batch_size=1)
    assert np.allclose(params.weights[0], -0.1)


def test_step_rejects_empty_batch():
    with pytest.raises(ValueError):
        SGDOptimizer(LearningRateController(1.0)).step(_params(), _grads(), batch_size=0)


def test_trailing_partial_batch_uses_its_own_size():
    rng = np.random.default_rng(0)
    dataset = ClassificationDataset(
        "tiny",
        rng.standard_normal((5, 2)),
        [0, 1, 0, 1, 0],
        rng.standard_normal((2, 2)),
        [0, 1],
        num_classes=2,
    )
    topology = Topology.of([2, 3, 2])
    network = Network(topology, random_parameters(topology, rng), CostFunction.QUADRATIC)
    optimizer = SGDOptimizer(LearningRateController(1.0))
    batch_sizes = []
    step = optimizer.step

    def recording_step(parameters, grads, batch_size):
        batch_sizes.append(batch_size)
        step(parameters, grads, batch_size)

    optimizer.step = recording_step
    trainer = Trainer(network, optimizer, Evaluator())
    trainer.run(dataset, epochs=1, mini_batch=2, shuffle=False)
    assert batch_sizes == [2, 2, 1]
    assert optimizer.training_size == 5


def test_non_positive_l2_factor_rejected():
    opt = SGDOptimizer(
        LearningRateController(1.0),
        regularization=Regularization.L2,
        lam=10.0,
        training_size=5,
    )
    with pytest.raises(ValueError):
        opt.regularization_factor()
    params = _params()
    with pytest.raises(ValueError):
        opt.step(params, _grads(), batch_size=1)
    assert np.allclose(params.weights[0], 2.0)


def test_trainer_rejects_l2_factor_for_small_training_set():
    rng = np.random.default_rng(0)
    dataset = ClassificationDataset(
        "tiny",
        rng.standard_normal((4, 2)),
        [0, 1, 0, 1],
        rng.standard_normal((2, 2)),
        [0, 1],
        num_classes=2,
    )
    topology = Topology.of([2, 2])
    params = random_parameters(topology, rng)
    before = params.copy()
    network = Network(topology, params)
    optimizer = SGDOptimizer(
        LearningRateController(3.0), regularization=Regularization.L2, lam=5.0
    )
    with pytest.raises(ValueError):
        Trainer(network, optimizer, Evaluator()).run(dataset, epochs=1, mini_batch=2)
    assert np.array_equal(network.parameters.weights[0], before.weights[0])
