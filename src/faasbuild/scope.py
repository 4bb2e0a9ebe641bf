"""Containment checks for user supplied copy paths."""

from pathlib import Path


class ScopeViolationError(RuntimeError):
    """Raised when a path resolves outside of its allowed scope."""


def path_in_scope(path: str | Path, scope: str | Path) -> Path:
    """Return the absolute form of ``path`` if it lies strictly inside ``scope``.

    Both paths are resolved first. The scope itself is rejected: copying the
    entire project into the build context is never allowed.
    """

    scope_abs = Path(scope).resolve()
    path_abs = Path(path).resolve()

    if path_abs == scope_abs:
        raise ScopeViolationError(
            f"forbidden path appears to equal the entire project: {path} ({path_abs})"
        )

    if path_abs.is_relative_to(scope_abs):
        return path_abs

    raise ScopeViolationError(
        f"forbidden path appears to be outside of the build context: {path} ({path_abs})"
    )
