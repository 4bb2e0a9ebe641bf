"""Assembly of the on-disk Docker build context for a function."""

import logging
import os
import shutil
from collections.abc import Sequence
from pathlib import Path

from faasbuild.scope import path_in_scope
from faasbuild.template import template_path

logger = logging.getLogger(__name__)

BUILD_DIR = Path("build")
DEFAULT_HANDLER_FOLDER = "function"
DEFAULT_DIR_PERMISSIONS = 0o700
CI_DIR_PERMISSIONS = 0o777

# Names in the handler directory that are never overlaid into the context.
RESERVED_HANDLER_ENTRIES = frozenset({"build", "template"})


def is_running_in_ci() -> bool:
    """Return whether the CI environment variable is set to "true" or "1"."""

    return os.environ.get("CI") in ("true", "1")


def directory_permissions() -> int:
    """Mode for directories created in the build context."""

    return CI_DIR_PERMISSIONS if is_running_in_ci() else DEFAULT_DIR_PERMISSIONS


def build_context_path(function_name: str) -> Path:
    return BUILD_DIR / function_name


def make_dirs(path: Path, mode: int) -> None:
    """Create ``path`` and any missing parents, each with ``mode``."""

    for directory in [*reversed(path.parents), path]:
        if not directory.is_dir():
            directory.mkdir(mode=mode)


def _extra_path_destination(extra_path: str, source: Path, scope: Path) -> Path:
    """Location of an extra path inside the function folder, as the caller wrote it."""

    relative = Path(os.path.normpath(extra_path))
    if relative.is_absolute():
        relative = Path(*relative.parts[1:])
    if relative.parts and relative.parts[0] == os.pardir:
        return source.relative_to(scope)
    return relative


def copy_files(source: Path, destination: Path) -> None:
    """Recursively copy ``source`` onto ``destination``, merging directories."""

    if source.is_dir():
        shutil.copytree(source, destination, dirs_exist_ok=True)
    else:
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, destination)


def create_build_context(
    function_name: str,
    handler: str | Path,
    language: str,
    use_function: bool,
    handler_folder: str,
    copy_extra_paths: Sequence[str] = (),
) -> Path:
    """Create a fresh build context and return its root.

    Any previous context for ``function_name`` is removed first. When
    ``use_function`` is true the language template is copied into the root and
    the handler lands in ``<root>/<handler_folder>``; otherwise the handler is
    copied straight into the root next to its own Dockerfile. Extra paths must
    lie inside the current working directory.
    """

    context = build_context_path(function_name)
    logger.info("Clearing temporary build folder: %s", context)
    if context.exists():
        shutil.rmtree(context)

    function_path = context
    if use_function:
        function_path = context / (handler_folder or DEFAULT_HANDLER_FOLDER)

    handler = Path(handler)
    logger.info("Preparing: %s/ %s", handler, function_path)
    make_dirs(function_path, directory_permissions())

    if use_function:
        copy_files(template_path(language), context)

    for entry in sorted(handler.iterdir()):
        if entry.name in RESERVED_HANDLER_ENTRIES:
            logger.info('Skipping "%s" folder', entry.name)
            continue
        copy_files(entry, function_path / entry.name)

    scope = Path.cwd().resolve()
    for extra_path in copy_extra_paths:
        source = path_in_scope(extra_path, scope)
        # Without a template, function_path is the context root itself.
        destination = _extra_path_destination(extra_path, source, scope)
        copy_files(source, function_path / destination)

    return context
