"""Project type detection from marker files."""

from __future__ import annotations

import os

_SIGNATURES = (
    ("go.mod", "\ue627", "go"),
    ("Cargo.toml", "\ue7a8", "rust"),
    ("package.json", "\ue718", "node"),
    ("tsconfig.json", "\ue628", "typescript"),
    ("Gemfile", "\ue23e", "ruby"),
    ("requirements.txt", "\ue73c", "python"),
    ("setup.py", "\ue73c", "python"),
    ("pyproject.toml", "\ue73c", "python"),
    ("pom.xml", "\ue256", "java"),
    ("build.gradle", "\ue256", "java"),
    ("mix.exs", "\ue62d", "elixir"),
    ("Makefile", "\ue615", ""),
    (".git", "\ue725", ""),
)

FOLDER_ICON = "\uf115"


def detect(path: str | os.PathLike[str]) -> tuple[str, str]:
    """Return (icon, language) for the project at path; first marker wins."""
    for marker, icon, language in _SIGNATURES:
        if os.path.exists(os.path.join(path, marker)):
            return icon, language
    return FOLDER_ICON, ""


def detect_icon(path: str | os.PathLike[str]) -> str:
    """Return the Nerd Font icon for the project at path."""
    return detect(path)[0]


def detect_language(path: str | os.PathLike[str]) -> str:
    """Return the language name for the project at path, or ""."""
    return detect(path)[1]