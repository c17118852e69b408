"""Hyperparameter configuration for a training run."""

from __future__ import annotations

import enum
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Sequence

from ..core.types import Topology
from ..initializers import InitMode


class CostFunction(enum.Enum):
    QUADRATIC = "quadratic"
    CROSS_ENTROPY = "cross_entropy"


class Regularization(enum.Enum):
    NONE = "none"
    L2 = "l2"


class AdaptiveRate(enum.Enum):
    NONE = "none"
    LINEAR = "linear"
    QUADRATIC = "quadratic"
    SQRT = "sqrt"


def _enum_value(kind: type[enum.Enum], value: Any) -> enum.Enum:
    if isinstance(value, kind):
        return value
    key = str(value).strip().lower().replace("-", "_")
    try:
        return kind(key)
    except ValueError as exc:
        choices = ", ".join(member.value for member in kind)
        raise ValueError(f"Unknown {kind.__name__} {value!r}. Choose one of: {choices}") from exc


@dataclass(frozen=True)
class NetworkConfig:
    """Validated hyperparameters accepted by the pipeline."""

    topology: Topology
    learning_rate: float
    cost: CostFunction = CostFunction.CROSS_ENTROPY
    regularization: Regularization = Regularization.NONE
    lam: float = 0.0
    adaptive_rate: AdaptiveRate = AdaptiveRate.NONE
    mini_batch: int = 10
    epochs: int = 1
    shuffle: bool = True
    save_best: bool = False
    min_score: int = 0
    seed: int = 0
    init: InitMode = InitMode.RANDOM
    init_path: str | None = None
    init_dir: str = "."

    def __post_init__(self) -> None:
        if self.learning_rate <= 0:
            raise ValueError(f"learning_rate must be positive, got {self.learning_rate}")
        if self.mini_batch < 1:
            raise ValueError(f"mini_batch must be >= 1, got {self.mini_batch}")
        if self.epochs < 0:
            raise ValueError(f"epochs must be >= 0, got {self.epochs}")
        if self.lam < 0:
            raise ValueError(f"lambda must be >= 0, got {self.lam}")
        if self.regularization is Regularization.L2 and self.lam == 0:
            raise ValueError("L2 regularization requires a positive lambda")
        if self.min_score < 0:
            raise ValueError(f"min_score must be >= 0, got {self.min_score}")
        if self.init is InitMode.LOAD_NAMED and not self.init_path:
            raise ValueError("init 'load_named' requires init_path")

    @classmethod
    def from_mapping(
        cls,
        model_cfg: Mapping[str, Any],
        train_cfg: Mapping[str, Any],
    ) -> "NetworkConfig":
        """Build a config from the ``model`` and ``train`` preset sections."""

        return cls(
            topology=Topology.of(_build_dims(model_cfg)),
            learning_rate=float(train_cfg.get("lr", 3.0)),
            cost=_enum_value(CostFunction, model_cfg.get("cost", "cross_entropy")),
            regularization=_enum_value(Regularization, train_cfg.get("regularization", "none")),
            lam=float(train_cfg.get("lambda", 0.0)),
            adaptive_rate=_enum_value(AdaptiveRate, train_cfg.get("adaptive_lr", "none")),
            mini_batch=int(train_cfg.get("batch_size", 10)),
            epochs=int(train_cfg.get("epochs", 1)),
            shuffle=bool(train_cfg.get("shuffle", True)),
            save_best=bool(train_cfg.get("save_best", False)),
            min_score=int(train_cfg.get("min_score", 0)),
            seed=int(train_cfg.get("seed", 0)),
            init=_enum_value(InitMode, model_cfg.get("init", "random")),
            init_path=model_cfg.get("init_path"),
            init_dir=str(model_cfg.get("init_dir", ".")),
        )

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["topology"] = list(self.topology.sizes)
        for key, value in payload.items():
            if isinstance(value, enum.Enum):
                payload[key] = value.value
        return payload


def _build_dims(model_cfg: Mapping[str, Any]) -> Sequence[int]:
    if "topology" in model_cfg:
        return [int(s) for s in model_cfg["topology"]]
    dims = [int(model_cfg.get("d_in", 784))]
    dims.extend(int(h) for h in model_cfg.get("hidden", []))
    dims.append(int(model_cfg.get("d_out", 10)))
    return dims


__all__ = ["AdaptiveRate", "CostFunction", "NetworkConfig", "Regularization"]
