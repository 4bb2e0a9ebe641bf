"""Tests for the build related CLI commands."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

import faasbuild.main as main
from faasbuild import __version__, configuration
from faasbuild.build import BuildError, BuildImageConfig
from faasbuild.configuration import BuildDefaults
from faasbuild.main import app
from faasbuild.versioncontrol import TagFormat

runner = CliRunner()

REQUIRED = ["build", "-i", "alexellis/hello", "-n", "hello", "--handler", "hello", "-l", "python"]


@pytest.fixture()
def isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    config_dir = tmp_path / "config"
    monkeypatch.setattr(configuration, "_CONFIG_DIR", config_dir)
    monkeypatch.setattr(configuration, "_CONFIG_FILE", config_dir / "config.toml")
    return config_dir / "config.toml"


@pytest.fixture()
def captured_build(monkeypatch: pytest.MonkeyPatch, isolated_config: Path):
    captured: dict[str, BuildImageConfig] = {}

    def fake_build_image(config: BuildImageConfig) -> str:
        captured["config"] = config
        return f"{config.image}:latest"

    monkeypatch.setattr(main, "build_image", fake_build_image)
    return captured


def test_version_command() -> None:
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_build_passes_options_through(captured_build) -> None:
    result = runner.invoke(
        app,
        [
            *REQUIRED,
            "--squash",
            "-b",
            "MODE=prod",
            "-b",
            "ADDITIONAL_PACKAGE=curl git",
            "--build-label",
            "team=core",
            "-o",
            "dev",
            "--build-flag",
            "--platform linux/amd64",
            "--copy-extra",
            "secrets/",
            "--tag",
            "branch",
        ],
    )

    assert result.exit_code == 0, result.stdout
    assert "Image built successfully: alexellis/hello:latest" in result.stdout
    config = captured_build["config"]
    assert config.function_name == "hello"
    assert config.handler == "hello"
    assert config.squash is True
    assert config.no_cache is False
    assert config.build_arg_map == {"MODE": "prod", "ADDITIONAL_PACKAGE": "curl git"}
    assert config.build_label_map == {"team": "core"}
    assert config.build_options == ("dev",)
    assert config.build_flags == ("--platform linux/amd64",)
    assert config.copy_extra_paths == ("secrets/",)
    assert config.tag_format is TagFormat.BRANCH_AND_SHA


def test_build_applies_stored_defaults(captured_build, isolated_config: Path) -> None:
    configuration.save_config(BuildDefaults(tag=TagFormat.SHA, no_cache=True, quiet=True))

    result = runner.invoke(app, [*REQUIRED, "--cache"])

    assert result.exit_code == 0
    config = captured_build["config"]
    assert config.tag_format is TagFormat.SHA
    assert config.no_cache is False
    assert config.quiet_build is True


def test_build_shrinkwrap_message(captured_build) -> None:
    result = runner.invoke(app, [*REQUIRED, "--shrinkwrap"])

    assert result.exit_code == 0
    assert captured_build["config"].shrink_wrap is True
    assert "hello shrink-wrapped to build" in result.stdout


def test_build_rejects_malformed_build_arg(captured_build) -> None:
    result = runner.invoke(app, [*REQUIRED, "-b", "MODE"])

    assert result.exit_code == 1
    assert "Invalid --build-arg value 'MODE'" in (result.stderr or "")
    assert "config" not in captured_build


def test_build_reports_build_errors(
    monkeypatch: pytest.MonkeyPatch, isolated_config: Path
) -> None:
    def failing_build(config: BuildImageConfig) -> str:
        raise BuildError("[hello] received non-zero exit code from build, error: boom")

    monkeypatch.setattr(main, "build_image", failing_build)

    result = runner.invoke(app, REQUIRED)

    assert result.exit_code == 1
    assert "received non-zero exit code" in (result.stderr or "")


def test_build_options_lists_template_options(workspace: Path) -> None:
    result = runner.invoke(app, ["build-options", "python"])

    assert result.exit_code == 0
    assert "- dev: make automake" in result.stdout
    assert "- net: curl make" in result.stdout


def test_build_options_unknown_language(workspace: Path) -> None:
    result = runner.invoke(app, ["build-options", "ruby"])

    assert result.exit_code == 1
    assert "No template descriptor" in (result.stderr or "")


def test_build_end_to_end_shrinkwrap(workspace: Path, isolated_config: Path) -> None:
    result = runner.invoke(app, [*REQUIRED, "--shrinkwrap"])

    assert result.exit_code == 0, result.stderr
    function_dir = workspace / "build" / "hello" / "function"
    assert (function_dir / "handler.py").is_file()
    assert not (function_dir / "build").exists()
