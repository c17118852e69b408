"""Headless-safe plotting of per-epoch accuracy."""

from __future__ import annotations

from pathlib import Path
from typing import List, Mapping, Tuple


class PlotAdapter:
    """Collect test accuracy per epoch and draw it with matplotlib on close."""

    def __init__(self, run_dir: str | Path, enable_plots: bool = False):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self._history: List[Tuple[int, float, float]] = []
        if self.enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        if not self.enable_plots:
            return
        self._history.append(
            (epoch, float(metrics.get("accuracy", 0.0)), float(metrics.get("train_cost", 0.0)))
        )

    def close(self) -> Path | None:
        if not self.enable_plots or not self._history:
            return None
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt  # imported lazily for headless safety

        epochs, accuracy, cost = zip(*self._history)
        fig, (ax_acc, ax_cost) = plt.subplots(1, 2, figsize=(10, 4))
        ax_acc.plot(epochs, [100.0 * a for a in accuracy], marker="o")
        ax_acc.set_xlabel("Epoch")
        ax_acc.set_ylabel("Test accuracy (%)")
        ax_cost.plot(epochs, cost, color="tab:red")
        ax_cost.set_xlabel("Epoch")
        ax_cost.set_ylabel("Mean training cost")
        fig.suptitle("Training curve")
        plot_path = self.run_dir / "accuracy.png"
        fig.savefig(plot_path)
        plt.close(fig)
        return plot_path

    __call__ = on_epoch


__all__ = ["PlotAdapter"]
