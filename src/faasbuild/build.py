"""Image build pipeline for functions backed by the docker CLI."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from faasbuild.context import create_build_context
from faasbuild.docker import DockerBuild, get_docker_build_command
from faasbuild.execute import ExecTask
from faasbuild.packages import BuildOptionError, get_build_option_packages
from faasbuild.scope import ScopeViolationError
from faasbuild.template import (
    TemplateError,
    descriptor_path,
    is_language_template,
    is_valid_template,
    load_language_template,
)
from faasbuild.versioncontrol import (
    TagFormat,
    TagResolutionError,
    build_image_name,
    get_image_tag_values,
)

logger = logging.getLogger(__name__)


class BuildError(RuntimeError):
    """Raised when the container image build fails."""


@dataclass(frozen=True, slots=True)
class BuildImageConfig:
    """Everything needed to build the image of one function."""

    image: str
    handler: str
    function_name: str
    language: str
    no_cache: bool = False
    squash: bool = False
    shrink_wrap: bool = False
    quiet_build: bool = False
    build_arg_map: dict[str, str] = field(default_factory=dict)
    build_label_map: dict[str, str] = field(default_factory=dict)
    build_flags: tuple[str, ...] = ()
    build_options: tuple[str, ...] = ()
    copy_extra_paths: tuple[str, ...] = ()
    tag_format: TagFormat = TagFormat.DEFAULT


def _ensure_handler_path(config: BuildImageConfig, image_name: str) -> None:
    if not config.function_name:
        raise BuildError(f"building {image_name}, a function name is required")

    handler = Path(config.handler) if config.handler else None
    if handler is None or not handler.is_dir():
        raise BuildError(
            f"building {image_name}, {config.handler or '<empty>'} is an invalid path"
        )


def build_image(config: BuildImageConfig) -> str:
    """Build the function image described by ``config`` and return its name.

    In shrink-wrap mode only the build context is prepared and docker is
    never called.
    """

    if not is_valid_template(config.language):
        raise BuildError(
            f"language template: {config.language} not supported, "
            "build a custom Dockerfile"
        )

    try:
        template = load_language_template(descriptor_path(config.language))
    except TemplateError as exc:
        raise BuildError(f"error reading language template: {exc}") from exc

    try:
        branch, version = get_image_tag_values(config.tag_format)
    except TagResolutionError as exc:
        raise BuildError(str(exc)) from exc

    image_name = build_image_name(config.tag_format, config.image, version, branch)

    _ensure_handler_path(config, image_name)

    try:
        context = create_build_context(
            function_name=config.function_name,
            handler=config.handler,
            language=config.language,
            use_function=is_language_template(config.language),
            handler_folder=template.handler_folder,
            copy_extra_paths=config.copy_extra_paths,
        )
    except ScopeViolationError as exc:
        raise BuildError(f"[{config.function_name}] {exc}") from exc
    except OSError as exc:
        raise BuildError(
            f"[{config.function_name}] failed to prepare the build context: {exc}"
        ) from exc

    logger.info(
        "Building: %s with %s template. Please wait..", image_name, config.language
    )

    if config.shrink_wrap:
        logger.info("%s shrink-wrapped to %s", config.function_name, context)
        return image_name

    try:
        packages = get_build_option_packages(
            config.build_options, config.language, template.build_options
        )
    except BuildOptionError as exc:
        raise BuildError(str(exc)) from exc

    docker_build = DockerBuild(
        image=image_name,
        no_cache=config.no_cache,
        squash=config.squash,
        http_proxy=os.environ.get("http_proxy", ""),
        https_proxy=os.environ.get("https_proxy", ""),
        build_arg_map=config.build_arg_map,
        build_opt_packages=packages,
        build_label_map=config.build_label_map,
        build_flags=config.build_flags,
    )
    command, args = get_docker_build_command(docker_build)

    task = ExecTask(
        command=command,
        args=args,
        cwd=context,
        stream_stdio=not config.quiet_build,
    )

    try:
        result = task.run()
    except FileNotFoundError as exc:
        raise BuildError(
            f"The '{command}' CLI is not installed or not found in PATH."
        ) from exc
    except OSError as exc:
        raise BuildError(
            f"[{config.function_name}] failed to run {command}: {exc}"
        ) from exc

    if result.exit_code != 0:
        raise BuildError(
            f"[{config.function_name}] received non-zero exit code from build, "
            f"error: {result.stderr}"
        )

    logger.info("Image: %s built.", image_name)
    return image_name
