"""Tests for the command-line interface."""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from conformer.cli import app

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """A project config pointing every path into tmp_path."""
    path = tmp_path / "test.yaml"
    path.write_text(
        f"""
project: test
staging:
  path: {tmp_path / "staging"}
warehouse:
  url: sqlite:///{tmp_path / "warehouse.db"}
output:
  output_root: {tmp_path / "output"}
""",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def staged(write_staged: Callable[[str, str, list[dict[str, Any]]], Path]) -> None:
    write_staged(
        "postgresql",
        "customer",
        [
            {
                "ma_khach_hang": "KH001",
                "ho_ten": "Nguyễn Văn An",
                "email": "an@gmail.com",
                "ngay_sinh": "1990-04-12",
            },
            {
                "ma_khach_hang": "KH002",
                "ho_ten": "Lê 2 Bình",
                "email": "binh@gmail.com",
                "ngay_sinh": "1991-01-01",
            },
        ],
    )


class TestCli:
    """Tests for the conformer commands."""

    def test_version(self) -> None:
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "conformer version" in result.stdout

    def test_init_warehouse(self, config_file: Path, tmp_path: Path) -> None:
        result = runner.invoke(app, ["init-warehouse", "--config", str(config_file)])
        assert result.exit_code == 0, result.stdout
        assert (tmp_path / "warehouse.db").exists()

    def test_reset_requires_confirmation(self, config_file: Path) -> None:
        runner.invoke(app, ["init-warehouse", "--config", str(config_file)])
        result = runner.invoke(
            app, ["init-warehouse", "--config", str(config_file), "--reset"], input="n\n"
        )
        assert result.exit_code != 0

        result = runner.invoke(
            app, ["init-warehouse", "--config", str(config_file), "--reset", "--yes"]
        )
        assert result.exit_code == 0

    def test_run(self, config_file: Path, staged: None, tmp_path: Path) -> None:
        result = runner.invoke(app, ["run", "--config", str(config_file)])
        assert result.exit_code == 0, result.stdout
        assert "Data Quality" in result.stdout
        assert "Warehouse Load" in result.stdout

        report = json.loads(
            (tmp_path / "output" / "test" / "errors.json").read_text(encoding="utf-8")
        )
        assert len(report["customer"]) == 1
        assert (tmp_path / "output" / "test" / "run.log").exists()

        stats = runner.invoke(app, ["warehouse-stats", "--config", str(config_file)])
        assert stats.exit_code == 0
        assert "dim_customer" in stats.stdout

    def test_validate_fails_on_rejections(
        self, config_file: Path, staged: None, tmp_path: Path
    ) -> None:
        result = runner.invoke(app, ["validate", "--config", str(config_file)])
        assert result.exit_code == 1
        assert "Rejected Records" in result.stdout
        assert not (tmp_path / "warehouse.db").exists()

    def test_missing_staging(self, config_file: Path) -> None:
        result = runner.invoke(app, ["run", "--config", str(config_file)])
        assert result.exit_code == 1
        assert "Staging directory not found" in result.stdout

    def test_invalid_config(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.yaml"
        path.write_text("warehouse:\n  echo: true\n", encoding="utf-8")
        result = runner.invoke(app, ["run", "--config", str(path)])
        assert result.exit_code == 1

    def test_malformed_config(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.yaml"
        path.write_text("project: [shop\n", encoding="utf-8")
        result = runner.invoke(app, ["run", "--config", str(path)])
        assert result.exit_code == 1
        assert "Malformed YAML" in result.stdout

    def test_missing_config_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["run", "--config", str(tmp_path / "none.yaml")])
        assert result.exit_code != 0
