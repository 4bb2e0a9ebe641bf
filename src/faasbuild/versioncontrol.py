"""Derive image tags from the state of the surrounding git checkout."""

import logging
import subprocess
from enum import Enum

logger = logging.getLogger(__name__)


class TagResolutionError(RuntimeError):
    """Raised when the selected tag format needs git data that is unavailable."""


class TagFormat(str, Enum):
    """How the image tag is derived."""

    DEFAULT = "latest"
    SHA = "sha"
    BRANCH_AND_SHA = "branch"
    DESCRIBE = "describe"


def _git(*args: str) -> str:
    """Run a git query and return its trimmed output, or "" on any failure."""

    try:
        completed = subprocess.run(
            ["git", *args],
            capture_output=True,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        logger.debug("git %s failed: %s", " ".join(args), exc)
        return ""

    return completed.stdout.strip()


def git_sha() -> str:
    return _git("rev-parse", "--short", "HEAD")


def git_branch() -> str:
    return _git("rev-parse", "--symbolic-full-name", "--abbrev-ref", "HEAD")


def git_describe() -> str:
    return _git("describe", "--tags", "--always")


def get_image_tag_values(tag_format: TagFormat) -> tuple[str, str]:
    """Return the ``(branch, version)`` pair used to name the image."""

    branch = ""
    version = ""

    if tag_format is TagFormat.SHA:
        version = git_sha()
        if not version:
            raise TagResolutionError(
                "cannot tag image with Git SHA as this is not a Git repository"
            )
    elif tag_format is TagFormat.BRANCH_AND_SHA:
        branch = git_branch()
        if not branch:
            raise TagResolutionError(
                "cannot tag image with Git branch and SHA as this is not a Git repository"
            )
        version = git_sha()
        if not version:
            raise TagResolutionError(
                "cannot tag image with Git SHA as this is not a Git repository"
            )
    elif tag_format is TagFormat.DESCRIBE:
        version = git_describe()
        if not version:
            raise TagResolutionError(
                "cannot tag image with Git Tag and SHA as this is not a Git repository"
            )

    return branch, version


def build_image_name(
    tag_format: TagFormat, image: str, version: str, branch: str
) -> str:
    """Combine the base image with the resolved git values."""

    name = image
    if ":" not in image.rsplit("/", 1)[-1]:
        name += ":latest"

    if tag_format in (TagFormat.SHA, TagFormat.DESCRIBE):
        return f"{name}-{version}"
    if tag_format is TagFormat.BRANCH_AND_SHA:
        return f"{name}-{branch}-{version}"
    return name
