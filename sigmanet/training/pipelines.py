"""Pipeline assembly: presets, dataset, network and reporting for one run."""

from __future__ import annotations

import json
import logging
import time
from copy import deepcopy
from pathlib import Path
from typing import Dict, Mapping

import numpy as np

from ..checkpoints import CheckpointSink
from ..core.types import RunResult
from ..data import registry
from ..initializers import InitMode, initialize_parameters
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from .config import AdaptiveRate, NetworkConfig, Regularization
from .evaluator import Evaluator
from .schedule import LearningRateController
from .trainer import Network, SGDOptimizer, Trainer

logger = logging.getLogger(__name__)

_PRESETS: Dict[str, Mapping[str, object]] = {
    "xor-tiny": {
        "data": {"name": "xor", "options": {"n_points": 200, "noise": 0.2, "seed": 0}},
        "model": {"topology": [2, 4, 2], "cost": "cross_entropy"},
        "train": {
            "epochs": 60,
            "batch_size": 10,
            "lr": 2.0,
            "seed": 7,
            "run_dir": "runs/xor-tiny",
            "enable_plots": False,
        },
    },
    "blobs-quick": {
        "data": {"name": "blobs", "options": {"n_points": 300, "classes": 3, "seed": 0}},
        "model": {"topology": [2, 8, 3], "cost": "cross_entropy"},
        "train": {
            "epochs": 20,
            "batch_size": 10,
            "lr": 1.0,
            "seed": 1,
            "run_dir": "runs/blobs-quick",
            "enable_plots": False,
        },
    },
    "mnist-classic": {
        "data": {"name": "mnist", "options": {}},
        "model": {"topology": [784, 30, 10], "cost": "quadratic"},
        "train": {
            "epochs": 30,
            "batch_size": 10,
            "lr": 3.0,
            "seed": 0,
            "run_dir": "runs/mnist-classic",
            "enable_plots": False,
        },
    },
    "mnist-l2-adaptive": {
        "data": {"name": "mnist", "options": {}},
        "model": {"topology": [784, 100, 10], "cost": "cross_entropy"},
        "train": {
            "epochs": 60,
            "batch_size": 10,
            "lr": 0.5,
            "regularization": "l2",
            "lambda": 5.0,
            "adaptive_lr": "linear",
            "save_best": True,
            "min_score": 9700,
            "seed": 0,
            "run_dir": "runs/mnist-l2-adaptive",
            "enable_plots": True,
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"


def _read_preset_file(path: Path) -> Mapping[str, object]:
    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        import yaml

        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported preset file type: {path.suffix}")

    if not isinstance(data, Mapping):
        raise TypeError(f"Preset {path.name} must decode to a mapping")
    return data


def _file_presets(preset_dir: Path | None = None) -> Dict[str, Mapping[str, object]]:
    preset_dir = preset_dir or _PRESET_DIR
    found: Dict[str, Mapping[str, object]] = {}
    if not preset_dir.exists():
        return found
    for file in sorted(preset_dir.iterdir()):
        if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
            continue
        data = _read_preset_file(file)
        missing = {"data", "model", "train"} - set(data)
        if missing:
            raise KeyError(
                f"Preset {file.name} is missing required sections: {', '.join(sorted(missing))}"
            )
        found[file.stem] = json.loads(json.dumps(data))
    return found


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {}
    combined.update({name: deepcopy(cfg) for name, cfg in _PRESETS.items()})
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    available = presets()
    if name not in available:
        raise KeyError(f"Unknown preset: {name}")
    return available[name]


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    """Train and evaluate one network described by ``config``."""

    data_cfg = dict(config["data"])  # type: ignore[arg-type]
    model_cfg = dict(config["model"])  # type: ignore[arg-type]
    train_cfg = dict(config["train"])  # type: ignore[arg-type]

    dataset = registry.get_dataset(
        str(data_cfg["name"]),
        offline=_offline_flag(config),
        cache_dir=train_cfg.get("cache_dir"),
        **dict(data_cfg.get("options", {})),
    )
    net_cfg = NetworkConfig.from_mapping(model_cfg, train_cfg)
    topology = net_cfg.topology
    if dataset.input_size() != topology.input_size:
        raise ValueError(
            f"Configured input size {topology.input_size} but dataset "
            f"{dataset.name!r} has {dataset.input_size()} features"
        )
    if dataset.num_classes > topology.output_size:
        raise ValueError(
            f"Configured output size {topology.output_size} cannot encode "
            f"{dataset.num_classes} classes"
        )

    run_dir = _resolve_run_dir(train_cfg, dataset.name)
    run_dir.mkdir(parents=True, exist_ok=True)

    rng = np.random.default_rng(net_cfg.seed)
    parameters = initialize_parameters(
        topology,
        net_cfg.init,
        rng=rng,
        path=net_cfg.init_path,
        directory=net_cfg.init_dir,
    )
    network = Network(topology=topology, parameters=parameters, cost=net_cfg.cost)
    schedule = LearningRateController(net_cfg.learning_rate, net_cfg.adaptive_rate)
    optimizer = SGDOptimizer(
        schedule=schedule,
        regularization=net_cfg.regularization,
        lam=net_cfg.lam,
        training_size=dataset.training_size(),
    )
    sink = CheckpointSink(run_dir / "checkpoints")
    evaluator = Evaluator(
        schedule,
        sink,
        save_best=net_cfg.save_best,
        min_score=net_cfg.min_score,
    )

    _print_startup_summary(net_cfg, dataset_name=dataset.name, splits=dataset.splits)

    jsonl = JsonlSink(run_dir / "metrics.jsonl", split="test", seed=net_cfg.seed)
    csv_sink = CsvSink(run_dir / "metrics.csv", split="test")
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))
    trainer = Trainer(network, optimizer, evaluator, callbacks=[jsonl, csv_sink, plots])

    started = time.time()
    result = trainer.run(
        dataset,
        epochs=net_cfg.epochs,
        mini_batch=net_cfg.mini_batch,
        shuffle=net_cfg.shuffle,
        rng=rng,
    )
    plots.close()
    logger.info("Finished %d epochs in %.1fs", net_cfg.epochs, time.time() - started)

    safe_config = json.loads(json.dumps(config))
    safe_config["resolved"] = net_cfg.to_dict()
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=safe_config,
        dataset_provenance=dataset.provenance,
        topology=topology,
    )
    summary_tail = int(train_cfg.get("summary_tail", 32))
    summary_path = write_summary(jsonl.path, run_dir / "summary.json", tail=summary_tail)
    (run_dir / "config.json").write_text(json.dumps(safe_config, indent=2))

    return RunResult(
        epochs=result.epochs,
        best_successes=result.best_successes,
        history=result.history,
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
        summary_path=summary_path,
    )


def _offline_flag(config: Mapping[str, object]) -> bool | None:
    value = config.get("offline")
    return None if value is None else bool(value)


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str) -> Path:
    if "run_dir" in train_cfg:
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset


def _print_startup_summary(
    cfg: NetworkConfig,
    *,
    dataset_name: str,
    splits: Mapping[str, int],
) -> None:
    print("=== sigmanet run ===")
    print(f"Dataset         : {dataset_name} {dict(splits)}")
    print(f"Topology        : {cfg.topology.describe()}")
    print(f"Parameters      : {cfg.topology.parameter_count()}")
    print(f"Cost function   : {cfg.cost.value}")
    print(f"Learning rate   : {cfg.learning_rate}")
    print(f"Adaptive rate   : {cfg.adaptive_rate.value}")
    if cfg.adaptive_rate is not AdaptiveRate.NONE:
        print(f"  threshold     : {LearningRateController.ERROR_THRESHOLD}")
        print(f"  minimum rate  : {LearningRateController.MIN_RATE}")
    print(f"Regularization  : {cfg.regularization.value}")
    if cfg.regularization is Regularization.L2:
        print(f"  lambda        : {cfg.lam}")
    print(f"Mini-batch      : {cfg.mini_batch}")
    print(f"Epochs          : {cfg.epochs}")
    print(f"Shuffle         : {cfg.shuffle}")
    print(f"Save best       : {cfg.save_best}")
    if cfg.save_best:
        print(f"  from score    : {cfg.min_score}")
    print(f"Initialisation  : {cfg.init.value}")
    if cfg.init is not InitMode.RANDOM:
        print(f"  directory     : {cfg.init_dir}")
    print("====================")


__all__ = ["load_preset", "presets", "run_pipeline"]
