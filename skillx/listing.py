"""Enumerate runnable skills across all search roots."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from skillx.config import get_configured_skill_paths
from skillx.context import ResolveContext
from skillx.discovery import MAIN_SCRIPT, find_script_for_base, is_directory, list_available_commands
from skillx.logging import get_logger
from skillx.resolve import get_skill_search_roots

log = get_logger(__name__)


@dataclass(frozen=True)
class ListedSkill:
    name: str
    root: Path


def has_runnable_scripts(skill_root: str | Path) -> bool:
    """A skill is runnable when ``scripts/`` holds a main script or any other command."""
    scripts_dir = Path(skill_root) / "scripts"
    if not is_directory(scripts_dir):
        return False
    if find_script_for_base(scripts_dir / MAIN_SCRIPT):
        return True
    return bool(list_available_commands(scripts_dir))


def _child_directory_names(root: Path) -> list[str]:
    try:
        entries = list(os.scandir(root))
    except OSError:
        return []
    names: list[str] = []
    for entry in entries:
        try:
            if entry.is_dir():
                names.append(entry.name)
        except OSError:
            continue
    return sorted(names)


def list_available_skills(context: ResolveContext | None = None) -> list[ListedSkill]:
    """List runnable skills, one per name, highest-precedence source first.

    Configured exact overrides come first, then each search root in order with
    its skills sorted by name.
    """
    context = context or ResolveContext()
    seen: set[str] = set()
    skills: list[ListedSkill] = []

    for name, skill_root in get_configured_skill_paths(context).items():
        if name in seen or not has_runnable_scripts(skill_root):
            continue
        seen.add(name)
        skills.append(ListedSkill(name=name, root=skill_root))

    for root in get_skill_search_roots(context):
        if not is_directory(root):
            continue
        for name in _child_directory_names(root):
            if name in seen:
                continue
            skill_root = root / name
            if not has_runnable_scripts(skill_root):
                continue
            seen.add(name)
            skills.append(ListedSkill(name=name, root=skill_root))

    log.debug("Listed skills", count=len(skills))
    return skills
