"""Loading of language template descriptors from ./template/<language>."""

from dataclasses import dataclass
from pathlib import Path

import yaml

TEMPLATE_DIR = Path("template")
TEMPLATE_DESCRIPTOR = "template.yml"
DOCKERFILE_LANGUAGE = "dockerfile"


class TemplateError(RuntimeError):
    """Raised when a language template is missing or malformed."""


@dataclass(frozen=True, slots=True)
class BuildOption:
    """A named bundle of packages a template lets callers opt into."""

    name: str
    packages: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class LanguageTemplate:
    """Parsed contents of a template.yml descriptor."""

    language: str
    handler_folder: str = ""
    fprocess: str = ""
    welcome_message: str = ""
    build_options: tuple[BuildOption, ...] = ()


def template_path(language: str) -> Path:
    """Return the directory holding the template files for ``language``."""

    # Both Dockerfile and dockerfile are accepted
    if not is_language_template(language):
        language = DOCKERFILE_LANGUAGE
    return TEMPLATE_DIR / language


def descriptor_path(language: str) -> Path:
    return template_path(language) / TEMPLATE_DESCRIPTOR


def is_language_template(language: str) -> bool:
    """Return whether ``language`` overlays a template rather than a bare Dockerfile."""

    return language.lower() != DOCKERFILE_LANGUAGE


def _parse_build_options(raw: object, path: Path) -> tuple[BuildOption, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise TemplateError(f"'build_options' in {path} must be a list.")

    options: list[BuildOption] = []
    names: set[str] = set()
    for entry in raw:
        if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
            raise TemplateError(f"Every build option in {path} needs a 'name'.")
        name = entry["name"].strip()
        if name in names:
            raise TemplateError(f"Build option '{name}' is declared twice in {path}.")
        names.add(name)

        packages = entry.get("packages") or []
        if not isinstance(packages, list):
            raise TemplateError(
                f"The packages of build option '{name}' in {path} must be a list."
            )
        options.append(
            BuildOption(name=name, packages=tuple(str(pkg) for pkg in packages))
        )

    return tuple(options)


def load_language_template(path: Path) -> LanguageTemplate:
    """Parse the template descriptor stored at ``path``."""

    if not path.is_file():
        raise TemplateError(f"No template descriptor found at {path}.")

    try:
        document = yaml.safe_load(path.read_text())
    except yaml.YAMLError as exc:
        raise TemplateError(f"Failed to parse {path}: {exc}") from exc

    if not isinstance(document, dict):
        raise TemplateError(f"The template descriptor {path} must be a mapping.")

    return LanguageTemplate(
        language=str(document.get("language") or path.parent.name),
        handler_folder=str(document.get("handler_folder") or ""),
        fprocess=str(document.get("fprocess") or ""),
        welcome_message=str(document.get("welcome_message") or ""),
        build_options=_parse_build_options(document.get("build_options"), path),
    )


def is_valid_template(language: str) -> bool:
    """Return whether ``language`` names a usable template."""

    if not is_language_template(language):
        return True

    if not template_path(language).is_dir():
        return False

    try:
        load_language_template(descriptor_path(language))
    except TemplateError:
        return False

    return True


def get_build_options_for(language: str) -> tuple[BuildOption, ...]:
    """Return the build options declared by the template for ``language``."""

    return load_language_template(descriptor_path(language)).build_options
