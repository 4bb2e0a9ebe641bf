"""Shared fixtures for faasbuild tests."""

from pathlib import Path

import pytest


@pytest.fixture()
def workspace(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Create a project with a python template and a ``hello`` handler, and cd into it."""

    project = tmp_path / "project"
    template_dir = project / "template" / "python"
    (template_dir / "function").mkdir(parents=True)
    (template_dir / "template.yml").write_text(
        "\n".join(
            [
                "language: python",
                "fprocess: python index.py",
                "build_options:",
                "  - name: dev",
                "    packages: [make, automake]",
                "  - name: net",
                "    packages: [curl, make]",
            ]
        )
        + "\n"
    )
    (template_dir / "Dockerfile").write_text("FROM python:3-alpine\n")
    (template_dir / "index.py").write_text("import function.handler\n")
    (template_dir / "function" / "handler.py").write_text("# template placeholder\n")
    (template_dir / "function" / "__init__.py").write_text("")

    dockerfile_dir = project / "template" / "dockerfile"
    dockerfile_dir.mkdir(parents=True)
    (dockerfile_dir / "template.yml").write_text("language: dockerfile\n")

    handler = project / "hello"
    handler.mkdir()
    (handler / "handler.py").write_text("def handle(req):\n    return req\n")
    (handler / "requirements.txt").write_text("requests\n")
    (handler / "build").mkdir()
    (handler / "build" / "stale.txt").write_text("old output\n")
    (handler / "template").mkdir()
    (handler / "template" / "copy.yml").write_text("nope\n")

    monkeypatch.chdir(project)
    monkeypatch.delenv("CI", raising=False)
    monkeypatch.delenv("http_proxy", raising=False)
    monkeypatch.delenv("https_proxy", raising=False)
    return project
