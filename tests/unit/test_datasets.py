import numpy as np
import pytest

from sigmanet.data import available_datasets, get_dataset
from sigmanet.data.registry import ClassificationDataset
from sigmanet.data.synthetic import build_blobs, build_xor
from sigmanet.data.utils import deterministic_split


def _pairs(dataset):
    return sorted(
        (tuple(dataset.train_inputs[i]), int(dataset.train_labels[i]))
        for i in range(dataset.training_size())
    )


def test_shuffle_keeps_inputs_paired_with_labels():
    dataset = build_xor(n_points=40, seed=2)
    before = _pairs(dataset)
    dataset.shuffle(np.random.default_rng(9))
    assert _pairs(dataset) == before


def test_shuffle_is_seeded():
    first = build_blobs(n_points=60, seed=1)
    second = build_blobs(n_points=60, seed=1)
    first.shuffle(np.random.default_rng(4))
    second.shuffle(np.random.default_rng(4))
    assert np.array_equal(first.train_inputs, second.train_inputs)
    assert np.array_equal(first.train_labels, second.train_labels)


def test_shuffle_leaves_test_split_alone():
    dataset = build_xor(n_points=40, seed=2)
    test_inputs = dataset.test_inputs.copy()
    dataset.shuffle(np.random.default_rng(0))
    assert np.array_equal(dataset.test_inputs, test_inputs)


def test_xor_labels_follow_quadrants():
    dataset = build_xor(n_points=200, noise=0.05, seed=0)
    signs = np.sign(dataset.train_inputs)
    expected = (signs[:, 0] != signs[:, 1]).astype(int)
    assert np.array_equal(dataset.train_labels, expected)
    assert dataset.num_classes == 2
    assert dataset.splits == {"train": 160, "test": 40}


def test_examples_expose_inputs_and_targets():
    dataset = build_blobs(n_points=30, classes=3, seed=0)
    example = dataset.training_example(0)
    assert example.inputs.shape == (2,)
    target = example.target(3)
    assert target[example.label] == 1.0
    assert dataset.test_example(0).label in range(3)


def test_registry_lists_and_builds_datasets():
    assert {"blobs", "mnist", "xor"} <= set(available_datasets())
    dataset = get_dataset("xor", n_points=20, seed=1)
    assert dataset.name == "xor"
    with pytest.raises(KeyError):
        get_dataset("does-not-exist")


def test_offline_mnist_fixture_has_mnist_shapes():
    dataset = get_dataset("mnist", offline=True, fixture_train=50, fixture_test=20)
    assert dataset.input_size() == 784
    assert dataset.training_size() == 50
    assert dataset.test_size() == 20
    assert dataset.num_classes == 10
    assert 0.0 <= dataset.train_inputs.min() and dataset.train_inputs.max() <= 1.0
    assert dataset.provenance["mode"] == "offline"


def test_mnist_from_local_archive(tmp_path):
    rng = np.random.default_rng(0)
    archive = tmp_path / "mnist.npz"
    np.savez(
        archive,
        x_train=rng.integers(0, 256, size=(12, 28, 28), dtype=np.uint8),
        y_train=np.arange(12) % 10,
        x_test=rng.integers(0, 256, size=(4, 28, 28), dtype=np.uint8),
        y_test=np.arange(4),
    )
    dataset = get_dataset("mnist", path=archive, max_train=10)
    assert dataset.training_size() == 10
    assert dataset.test_size() == 4
    assert dataset.train_inputs.max() <= 1.0


def test_dataset_validation():
    with pytest.raises(ValueError):
        ClassificationDataset("bad", np.ones((3, 2)), [0, 1], np.ones((1, 2)), [0], num_classes=2)
    with pytest.raises(ValueError):
        ClassificationDataset("bad", np.ones((2, 2)), [0, 5], np.ones((1, 2)), [0], num_classes=2)
    with pytest.raises(ValueError):
        ClassificationDataset("bad", np.ones((2, 2)), [0, 1], np.ones((0, 2)), [], num_classes=2)


def test_deterministic_split_is_disjoint_and_seeded():
    first = deterministic_split(50, test_split=0.2, seed=3)
    second = deterministic_split(50, test_split=0.2, seed=3)
    assert np.array_equal(first.train, second.train)
    assert first.sizes == {"train": 40, "test": 10}
    assert not set(first.train.tolist()) & set(first.test.tolist())
    with pytest.raises(ValueError):
        deterministic_split(10, test_split=1.0)


def test_offline_flag_defaults_to_environment(monkeypatch):
    monkeypatch.setenv("SIGMANET_DATA_OFFLINE", "1")
    dataset = get_dataset("mnist", fixture_train=20, fixture_test=10)
    assert dataset.provenance["mode"] == "offline"


def test_online_mode_from_environment_uses_download(tmp_path, monkeypatch):
    from sigmanet.data import mnist as mnist_module

    archive = tmp_path / "mnist.npz"
    np.savez(
        archive,
        x_train=np.zeros((6, 28, 28), dtype=np.uint8),
        y_train=np.arange(6) % 10,
        x_test=np.zeros((3, 28, 28), dtype=np.uint8),
        y_test=np.arange(3),
    )
    requested = []

    def fake_download(cache_root):
        requested.append(cache_root)
        return archive

    monkeypatch.setenv("SIGMANET_DATA_OFFLINE", "0")
    monkeypatch.setattr(mnist_module, "_download", fake_download)
    dataset = get_dataset("mnist", cache_dir=tmp_path / "cache")
    assert requested == [tmp_path / "cache"]
    assert dataset.provenance["mode"] == "cache"
    assert dataset.training_size() == 6

    monkeypatch.setattr(mnist_module, "_download", lambda _: pytest.fail("downloaded offline"))
    assert get_dataset("mnist", offline=True, fixture_train=10, fixture_test=5).test_size() == 5
