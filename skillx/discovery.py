"""Script discovery inside a skill's ``scripts/`` directory."""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from pathlib import Path

# Canonical lookup order: typed scripts, plain scripts, Python, shell.
SUPPORTED_EXTENSIONS: tuple[str, ...] = (
    ".ts",
    ".mts",
    ".cts",
    ".js",
    ".mjs",
    ".cjs",
    ".py",
    ".sh",
)
SHEBANG = "shebang"
MAIN_SCRIPT = "main"


@dataclass(frozen=True)
class ScriptMatch:
    path: Path
    extension: str  # one of SUPPORTED_EXTENSIONS or SHEBANG


def find_script_for_base(base_path: str | Path) -> ScriptMatch | None:
    """Resolve ``scripts/<name>`` to a concrete script file.

    Tries every supported extension in canonical order, then an extensionless
    executable with a ``#!`` header.
    """
    base = str(base_path)
    for extension in SUPPORTED_EXTENSIONS:
        candidate = Path(f"{base}{extension}")
        if is_regular_file(candidate):
            return ScriptMatch(path=candidate, extension=extension)

    if is_executable_with_shebang(base):
        return ScriptMatch(path=Path(base), extension=SHEBANG)

    return None


def list_available_commands(scripts_dir: str | Path) -> list[str]:
    """List command names runnable from ``scripts_dir``, excluding ``main``."""
    if not is_directory(scripts_dir):
        return []

    commands: set[str] = set()
    try:
        entries = list(os.scandir(scripts_dir))
    except OSError:
        return []

    for entry in entries:
        try:
            if not entry.is_file():
                continue
        except OSError:
            continue

        stem, extension = os.path.splitext(entry.name)
        if extension in SUPPORTED_EXTENSIONS:
            if stem != MAIN_SCRIPT:
                commands.add(stem)
            continue

        if entry.name != MAIN_SCRIPT and is_executable_with_shebang(entry.path):
            commands.add(entry.name)

    return sorted(commands)


def is_directory(target: str | Path) -> bool:
    try:
        return Path(target).is_dir()
    except OSError:
        return False


def is_regular_file(target: str | Path) -> bool:
    try:
        return Path(target).is_file()
    except OSError:
        return False


def is_executable_with_shebang(target: str | Path) -> bool:
    """True for a regular file with any execute bit set whose first bytes are ``#!``."""
    try:
        info = os.stat(target)
        if not stat.S_ISREG(info.st_mode):
            return False
        if not info.st_mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH):
            return False
        with open(target, "rb") as handle:
            return handle.read(2) == b"#!"
    except OSError:
        return False
