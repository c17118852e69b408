import json
from pathlib import Path

import pytest

from cli.main import main


def test_cli_runs_preset(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    main(["--preset", "xor-tiny", "--epochs", "2"])
    run_dir = Path("runs/xor-tiny")
    assert (run_dir / "metrics.jsonl").exists()
    assert (run_dir / "manifest.json").exists()
    assert (run_dir / "summary.json").exists()

    payload = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert payload["epochs"] == 2
    assert 0.0 <= payload["final_accuracy"] <= 1.0


def test_cli_applies_yaml_override_and_dumps_config(tmp_path, capsys):
    override = tmp_path / "override.yaml"
    override.write_text("train:\n  lr: 1.5\n  batch_size: 4\n")
    dump = tmp_path / "resolved.json"
    main(
        [
            "--preset",
            "xor-tiny",
            "--config",
            str(override),
            "--epochs",
            "1",
            "--seed",
            "5",
            "--run-dir",
            str(tmp_path / "run"),
            "--dump-config",
            str(dump),
        ]
    )
    dumped = json.loads(dump.read_text())
    assert dumped["train"]["lr"] == 1.5
    assert dumped["train"]["seed"] == 5
    assert dumped["model"]["topology"] == [2, 4, 2]
    assert (tmp_path / "run" / "metrics.jsonl").exists()


def test_cli_lists_presets(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--list-presets"])
    assert exc.value.code == 0
    assert "xor-tiny" in capsys.readouterr().out.split()


def test_cli_plots_when_enabled(tmp_path):
    main(["--preset", "xor-tiny", "--epochs", "2", "--enable-plots", "--run-dir", str(tmp_path)])
    assert (tmp_path / "accuracy.png").exists()
