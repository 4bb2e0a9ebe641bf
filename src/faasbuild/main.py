"""faasbuild CLI entry point implemented with Typer."""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence
from pathlib import Path

import typer

from faasbuild.build import BuildError, BuildImageConfig, build_image
from faasbuild.configuration import (
    BuildDefaults,
    ConfigError,
    config_path,
    delete_config,
    load_config,
    save_config,
)
from faasbuild.context import build_context_path
from faasbuild.template import TemplateError, get_build_options_for
from faasbuild.versioncontrol import TagFormat

from . import __version__

app = typer.Typer(
    help="Build container images for functions from language templates."
)


class PairError(ValueError):
    """Raised when a KEY=VALUE option is malformed."""


def _configure_logging(verbose: bool) -> None:
    """Send library progress messages to stderr."""

    root = logging.getLogger()
    level = logging.DEBUG if verbose else logging.INFO
    root.setLevel(level)

    # Prevent duplicate handlers if the CLI is invoked repeatedly in-process
    if root.handlers:
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("[%(levelname).4s] %(message)s"))
    root.addHandler(handler)


def _fail(message: str) -> typer.Exit:
    """Report ``message`` on stderr and return the exit to raise."""

    typer.secho(message, err=True, fg=typer.colors.RED)
    return typer.Exit(code=1)


def _parse_inline_pairs(pairs: Sequence[str], option: str) -> dict[str, str]:
    """Parse KEY=VALUE pairs passed via the CLI."""

    data: dict[str, str] = {}
    for raw in pairs:
        if "=" not in raw:
            raise PairError(
                f"Invalid {option} value '{raw}'. Expected the format KEY=VALUE."
            )
        key, value = raw.split("=", 1)
        key = key.strip()
        if not key:
            raise PairError(f"{option} keys cannot be empty.")
        data[key] = value

    return data


def _load_defaults() -> BuildDefaults:
    try:
        stored = load_config()
    except ConfigError as exc:
        raise _fail(str(exc)) from exc

    return stored or BuildDefaults()


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Print debug output, including the docker command."
    ),
) -> None:
    """Build container images for functions from language templates."""

    _configure_logging(verbose)


@app.command()
def version() -> None:
    """Print the version"""
    typer.echo(__version__)
    raise typer.Exit()


@app.command()
def build(
    image: str = typer.Option(..., "--image", "-i", help="Base name of the image to build."),
    name: str = typer.Option(..., "--name", "-n", help="Name of the function."),
    handler: Path = typer.Option(
        ...,
        "--handler",
        file_okay=False,
        help="Directory containing the function's source code.",
    ),
    lang: str = typer.Option(
        ..., "--lang", "-l", help="Language template to use, or 'dockerfile'."
    ),
    no_cache: bool | None = typer.Option(
        None, "--no-cache/--cache", help="Do not use the docker build cache."
    ),
    squash: bool | None = typer.Option(
        None, "--squash/--no-squash", help="Squash the image layers."
    ),
    shrinkwrap: bool = typer.Option(
        False,
        "--shrinkwrap",
        help="Only prepare the build context under ./build without calling docker.",
    ),
    quiet: bool | None = typer.Option(
        None, "--quiet/--no-quiet", help="Do not stream the docker build output."
    ),
    build_args: list[str] = typer.Option(
        [],
        "--build-arg",
        "-b",
        help="KEY=VALUE build-arg for docker. Repeat for multiple values.",
        show_default=False,
    ),
    build_labels: list[str] = typer.Option(
        [],
        "--build-label",
        help="KEY=VALUE label for the image. Repeat for multiple values.",
        show_default=False,
    ),
    build_options: list[str] = typer.Option(
        [],
        "--build-option",
        "-o",
        help="Build option declared by the template. Repeat for multiple options.",
        show_default=False,
    ),
    build_flags: list[str] = typer.Option(
        [],
        "--build-flag",
        help="Extra flag passed to docker build, e.g. '--platform linux/amd64'.",
        show_default=False,
    ),
    copy_extra: list[str] = typer.Option(
        [],
        "--copy-extra",
        help="Path inside the current directory to copy next to the handler.",
        show_default=False,
    ),
    tag: TagFormat | None = typer.Option(
        None,
        "--tag",
        case_sensitive=False,
        help="How to tag the image: latest, sha, branch or describe.",
    ),
) -> None:
    """Build a function image from a language template."""

    defaults = _load_defaults()

    try:
        build_arg_map = _parse_inline_pairs(build_args, "--build-arg")
        build_label_map = _parse_inline_pairs(build_labels, "--build-label")
    except PairError as exc:
        raise _fail(str(exc)) from exc

    config = BuildImageConfig(
        image=image,
        handler=str(handler),
        function_name=name,
        language=lang,
        no_cache=defaults.no_cache if no_cache is None else no_cache,
        squash=defaults.squash if squash is None else squash,
        shrink_wrap=shrinkwrap,
        quiet_build=defaults.quiet if quiet is None else quiet,
        build_arg_map=build_arg_map,
        build_label_map=build_label_map,
        build_flags=tuple(build_flags),
        build_options=tuple(build_options),
        copy_extra_paths=tuple(copy_extra),
        tag_format=defaults.tag if tag is None else tag,
    )

    try:
        built_image = build_image(config)
    except BuildError as exc:
        raise _fail(str(exc)) from exc

    if shrinkwrap:
        typer.secho(
            f"{name} shrink-wrapped to {build_context_path(name)}",
            fg=typer.colors.GREEN,
        )
        return

    typer.secho(f"Image built successfully: {built_image}", fg=typer.colors.GREEN)


@app.command("build-options")
def build_options_list(
    lang: str = typer.Argument(..., help="Language template to inspect."),
) -> None:
    """List the build options declared by a language template."""

    try:
        options = get_build_options_for(lang)
    except TemplateError as exc:
        raise _fail(str(exc)) from exc

    if not options:
        typer.secho(f"No build options declared for {lang}.", fg=typer.colors.YELLOW)
        return

    typer.secho(f"Build options for {lang}:", fg=typer.colors.CYAN)
    for option in options:
        typer.echo(f"- {option.name}: {' '.join(option.packages)}")


@app.command()
def config(
    tag: TagFormat | None = typer.Option(
        None, "--tag", case_sensitive=False, help="Default tag format."
    ),
    no_cache: bool | None = typer.Option(
        None, "--no-cache/--cache", help="Disable the docker build cache by default."
    ),
    squash: bool | None = typer.Option(
        None, "--squash/--no-squash", help="Squash image layers by default."
    ),
    quiet: bool | None = typer.Option(
        None, "--quiet/--no-quiet", help="Hide docker build output by default."
    ),
    show_path: bool = typer.Option(
        False, "--show-path", help="Print the configuration file location."
    ),
    clear: bool = typer.Option(
        False,
        "--clear",
        help="Delete the stored defaults instead of updating them.",
    ),
) -> None:
    """Save or clear the defaults used by the build command."""

    if clear:
        if any(value is not None for value in (tag, no_cache, squash, quiet)):
            raise _fail("Cannot combine default options with --clear.")

        try:
            removed = delete_config()
        except ConfigError as exc:  # pragma: no cover - defensive guard
            raise _fail(str(exc)) from exc

        if removed:
            typer.secho("faasbuild configuration deleted.", fg=typer.colors.GREEN)
        else:
            typer.secho(
                "No faasbuild configuration found to delete.",
                fg=typer.colors.YELLOW,
            )

        if show_path:
            typer.echo(f"Location: {config_path()}")

        return

    defaults = _load_defaults()
    if tag is not None:
        defaults.tag = tag
    if no_cache is not None:
        defaults.no_cache = no_cache
    if squash is not None:
        defaults.squash = squash
    if quiet is not None:
        defaults.quiet = quiet

    saved_path = save_config(defaults)

    typer.secho("faasbuild configuration saved.", fg=typer.colors.GREEN)
    if show_path:
        typer.echo(f"Location: {saved_path}")


if __name__ == "__main__":
    app()
