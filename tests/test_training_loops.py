import numpy as np
import pytest

from sigmanet.checkpoints import CheckpointSink
from sigmanet.core.types import ParameterSet, Topology
from sigmanet.data.registry import ClassificationDataset
from sigmanet.data.synthetic import build_blobs, build_xor
from sigmanet.initializers import random_parameters
from sigmanet.training.config import AdaptiveRate, CostFunction
from sigmanet.training.evaluator import Evaluator
from sigmanet.training.schedule import LearningRateController
from sigmanet.training.trainer import Network, SGDOptimizer, Trainer


def _trainer(sizes, *, lr, seed, cost=CostFunction.CROSS_ENTROPY, evaluator=None, callbacks=None):
    topology = Topology.of(sizes)
    network = Network(topology, random_parameters(topology, np.random.default_rng(seed)), cost)
    optimizer = SGDOptimizer(LearningRateController(lr))
    return Trainer(network, optimizer, evaluator or Evaluator(), callbacks=callbacks)


def _zero_network(sizes):
    topology = Topology.of(sizes)
    dims = topology.sizes
    params = ParameterSet(
        weights=[np.zeros((o, i)) for i, o in zip(dims[:-1], dims[1:])],
        biases=[np.zeros(o) for o in dims[1:]],
    )
    return Network(topology, params)


def _fixed_dataset(test_labels):
    n = len(test_labels)
    return ClassificationDataset(
        "fixed",
        np.ones((4, 2)),
        [0, 1, 0, 1],
        np.ones((n, 2)),
        test_labels,
        num_classes=2,
    )


def test_separable_blobs_converge():
    dataset = build_blobs(n_points=200, classes=2, spread=3.0, noise=0.5, seed=0)
    trainer = _trainer([2, 4, 2], lr=1.0, seed=0)
    result = trainer.run(dataset, epochs=30, mini_batch=10, rng=np.random.default_rng(0))
    assert result.history[-1]["accuracy"] >= 0.95
    assert result.history[-1]["train_cost"] < result.history[0]["train_cost"]


def test_xor_converges_for_some_seed():
    dataset = build_xor(n_points=200, noise=0.2, seed=0)
    best = 0.0
    for seed in (0, 1, 2, 3):
        trainer = _trainer([2, 4, 2], lr=2.0, seed=seed)
        result = trainer.run(dataset, epochs=200, mini_batch=10, rng=np.random.default_rng(seed))
        best = max(best, max(m["accuracy"] for m in result.history))
        if best >= 0.95:
            break
    assert best >= 0.95


def test_quadratic_cost_training_reduces_cost():
    dataset = build_blobs(n_points=150, classes=3, seed=2)
    trainer = _trainer([2, 6, 3], lr=3.0, seed=1, cost=CostFunction.QUADRATIC)
    result = trainer.run(dataset, epochs=15, mini_batch=10, rng=np.random.default_rng(1))
    assert result.history[-1]["train_cost"] < result.history[0]["train_cost"]


def test_callbacks_receive_one_based_epochs():
    seen = []
    dataset = build_xor(n_points=40, seed=0)
    trainer = _trainer([2, 3, 2], lr=1.0, seed=0, callbacks=[lambda e, m: seen.append((e, m))])
    result = trainer.run(dataset, epochs=3, mini_batch=8)
    assert [epoch for epoch, _ in seen] == [1, 2, 3]
    assert set(seen[0][1]) == {"accuracy", "error", "successes", "train_cost", "learning_rate"}
    assert result.epochs == 3
    assert result.best_successes == max(int(m["successes"]) for m in result.history)


def test_run_rejects_mismatched_dataset():
    dataset = build_xor(n_points=40, seed=0)
    trainer = _trainer([3, 2], lr=1.0, seed=0)
    with pytest.raises(ValueError):
        trainer.run(dataset, epochs=1, mini_batch=4)
    with pytest.raises(ValueError):
        _trainer([2, 2], lr=1.0, seed=0).run(dataset, epochs=1, mini_batch=0)


def test_evaluator_ties_go_to_the_first_class():
    network = _zero_network([2, 3, 2])
    result = Evaluator().evaluate(network, _fixed_dataset([0, 1, 0, 1, 1]))
    assert result.successes == 2
    assert result.total == 5
    assert result.error == pytest.approx(0.6)
    assert not result.saved


def test_evaluator_drives_adaptive_schedule():
    network = _zero_network([2, 2])
    schedule = LearningRateController(0.5, AdaptiveRate.LINEAR)
    Evaluator(schedule).evaluate(network, _fixed_dataset([0, 0, 0]))
    assert schedule.rate == pytest.approx(LearningRateController.MIN_RATE)


def test_best_model_saved_on_ties_and_improvements(tmp_path):
    network = _zero_network([2, 3, 2])
    sink = CheckpointSink(tmp_path)
    evaluator = Evaluator(sink=sink, save_best=True, min_score=0)
    dataset = _fixed_dataset([0, 1, 0])
    first = evaluator.evaluate(network, dataset)
    second = evaluator.evaluate(network, dataset)
    assert first.saved and second.saved
    assert evaluator.best_successes == 2
    assert (tmp_path / "model-2-2x3x2.npz").exists()


def test_best_model_not_saved_below_min_score(tmp_path):
    network = _zero_network([2, 3, 2])
    evaluator = Evaluator(sink=CheckpointSink(tmp_path), save_best=True, min_score=3)
    result = evaluator.evaluate(network, _fixed_dataset([0, 1, 0]))
    assert not result.saved
    assert not list(tmp_path.iterdir())


def test_failed_checkpoint_does_not_stop_training(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("")
    evaluator = Evaluator(sink=CheckpointSink(blocker / "ckpt"), save_best=True)
    trainer = _trainer([2, 3, 2], lr=1.0, seed=0, evaluator=evaluator)
    result = trainer.run(build_xor(n_points=40, seed=0), epochs=2, mini_batch=8)
    assert len(result.history) == 2


def test_save_best_requires_sink():
    with pytest.raises(ValueError):
        Evaluator(save_best=True)


def test_sink_unused_without_save_best(tmp_path):
    network = _zero_network([2, 3, 2])
    evaluator = Evaluator(sink=CheckpointSink(tmp_path), save_best=False)
    result = evaluator.evaluate(network, _fixed_dataset([0, 1, 0]))
    assert not result.saved
    assert evaluator.best_successes == 0
    assert not list(tmp_path.iterdir())
