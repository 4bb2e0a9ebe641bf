"""Resolution of template build options into package lists."""

from collections.abc import Iterable, Sequence

from faasbuild.template import BuildOption


class BuildOptionError(RuntimeError):
    """Raised when a requested build option is not declared by the template."""


def dedupe(items: Iterable[str]) -> list[str]:
    """Drop repeated entries while keeping the first-seen order."""

    seen: set[str] = set()
    return [item for item in items if not (item in seen or seen.add(item))]


def get_packages(
    available: Sequence[BuildOption], requested: Sequence[str]
) -> tuple[list[str], bool]:
    """Expand requested option names into packages.

    The boolean is ``False`` as soon as a name matches no declared option; the
    packages gathered up to that point are returned but must not be used.
    """

    packages: list[str] = []

    for name in requested:
        option = next((opt for opt in available if opt.name == name), None)
        if option is None:
            return packages, False
        packages.extend(option.packages)

    return dedupe(packages), True


def get_build_option_packages(
    requested: Sequence[str], language: str, available: Sequence[BuildOption]
) -> list[str]:
    """Return the packages for ``requested`` or fail naming the template."""

    if not requested:
        return []

    packages, all_found = get_packages(available, requested)
    if not all_found:
        raise BuildOptionError(
            f"You're using a build option unavailable for {language}. "
            f"Please check template/{language}/template.yml for supported build options."
        )

    return packages
