"""Synthesis of the ``docker build`` command line."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from faasbuild.packages import dedupe

# Build-arg that is merged with the resolved build-option packages rather
# than passed through as-is.
ADDITIONAL_PACKAGE_BUILD_ARG = "ADDITIONAL_PACKAGE"


@dataclass(slots=True)
class DockerBuild:
    """Fully resolved inputs of a single ``docker build`` invocation."""

    image: str
    no_cache: bool = False
    squash: bool = False
    http_proxy: str = ""
    https_proxy: str = ""
    build_arg_map: Mapping[str, str] = field(default_factory=dict)
    build_opt_packages: Sequence[str] = ()
    build_label_map: Mapping[str, str] = field(default_factory=dict)
    build_flags: Sequence[str] = ()


def build_flag_slice(build: DockerBuild) -> list[str]:
    """Return the flags placed between ``docker build`` and ``--tag``."""

    flags: list[str] = []

    if build.no_cache:
        flags.append("--no-cache")
    if build.squash:
        flags.append("--squash")

    if build.http_proxy:
        flags.extend(["--build-arg", f"http_proxy={build.http_proxy}"])
    if build.https_proxy:
        flags.extend(["--build-arg", f"https_proxy={build.https_proxy}"])

    for flag in build.build_flags:
        flags.extend(flag.split())

    packages = list(build.build_opt_packages)
    for key, value in build.build_arg_map.items():
        if key == ADDITIONAL_PACKAGE_BUILD_ARG:
            packages.extend(value.split())
        else:
            flags.extend(["--build-arg", f"{key}={value}"])

    if packages:
        joined = " ".join(dedupe(packages))
        flags.extend(["--build-arg", f"{ADDITIONAL_PACKAGE_BUILD_ARG}={joined}"])

    for key, value in build.build_label_map.items():
        flags.extend(["--label", f"{key}={value}"])

    return flags


def get_docker_build_command(build: DockerBuild) -> tuple[str, list[str]]:
    """Return the executable and its arguments, run from the context root."""

    args = ["build", *build_flag_slice(build), "--tag", build.image, "."]
    return "docker", args
