"""Tests for faasbuild.scope."""

from pathlib import Path

import pytest

from faasbuild.scope import ScopeViolationError, path_in_scope


def test_path_in_scope_accepts_descendant(tmp_path: Path) -> None:
    nested = tmp_path / "secrets" / "token"

    assert path_in_scope(nested, tmp_path) == nested.resolve()


def test_path_in_scope_resolves_relative_paths(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.chdir(tmp_path)

    assert path_in_scope("secrets/", ".") == (tmp_path / "secrets").resolve()
    assert path_in_scope("a/../b", ".") == (tmp_path / "b").resolve()


def test_path_in_scope_rejects_scope_itself(tmp_path: Path) -> None:
    with pytest.raises(ScopeViolationError, match="equal the entire project"):
        path_in_scope(tmp_path / "sub" / "..", tmp_path)


def test_path_in_scope_rejects_parent_traversal(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)

    with pytest.raises(ScopeViolationError, match="outside of the build context"):
        path_in_scope("../../etc", ".")


def test_path_in_scope_rejects_sibling_with_shared_prefix(tmp_path: Path) -> None:
    scope = tmp_path / "scope"
    sibling = tmp_path / "scope-evil" / "file"

    with pytest.raises(ScopeViolationError):
        path_in_scope(sibling, scope)
