import json
import shutil
import subprocess
from pathlib import Path

import pytest

from skillx.context import ResolveContext
from skillx.listing import ListedSkill, has_runnable_scripts, list_available_skills

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def _write_script(skill_root: Path, file_name: str) -> None:
    scripts_dir = skill_root / "scripts"
    scripts_dir.mkdir(parents=True, exist_ok=True)
    (scripts_dir / file_name).write_text("echo ok\n", encoding="utf-8")


def _git_repo(tmp_path: Path) -> tuple[Path, Path]:
    repo_root = tmp_path / "repo"
    repo_cwd = repo_root / "nested"
    repo_cwd.mkdir(parents=True)
    subprocess.run(["git", "init"], cwd=repo_root, check=True, capture_output=True)
    return repo_root.resolve(), repo_cwd


def _write_config(home: Path, payload: dict) -> None:
    config_path = home / ".skillx" / "config.json"
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")


def test_lists_only_skills_with_runnable_scripts(tmp_path: Path):
    home = tmp_path / "home"
    skills = home / ".agents" / "skills"
    _write_script(skills / "alpha", "main.ts")
    _write_script(skills / "gamma", "do.py")
    _write_script(skills / "beta", "notes.txt")
    (skills / "delta").mkdir(parents=True)

    listed = list_available_skills(ResolveContext(cwd=home, home_dir=home, env={}))

    assert [entry.name for entry in listed] == ["alpha", "gamma"]


@requires_git
def test_deduplicates_by_precedence_and_includes_codex_paths(tmp_path: Path):
    repo_root, repo_cwd = _git_repo(tmp_path)
    home = tmp_path / "home"
    _write_script(repo_root / ".codex" / "skills" / "zeta", "main.sh")
    _write_script(home / ".claude" / "skills" / "zeta", "main.ts")
    _write_script(home / ".codex" / "skills" / "omega", "main.ts")

    listed = list_available_skills(ResolveContext(cwd=repo_cwd, home_dir=home, env={}))

    assert listed == [
        ListedSkill(name="zeta", root=repo_root / ".codex" / "skills" / "zeta"),
        ListedSkill(name="omega", root=home / ".codex" / "skills" / "omega"),
    ]


@requires_git
def test_includes_workspace_skills_dir_and_openclaw_home(tmp_path: Path):
    repo_root, repo_cwd = _git_repo(tmp_path)
    home = tmp_path / "home"
    _write_script(repo_root / "skills" / "workspace-skill", "main.ts")
    _write_script(home / ".openclaw" / "skills" / "home-skill", "main.ts")

    listed = list_available_skills(ResolveContext(cwd=repo_cwd, home_dir=home, env={}))

    assert listed == [
        ListedSkill(name="workspace-skill", root=repo_root / "skills" / "workspace-skill"),
        ListedSkill(name="home-skill", root=home / ".openclaw" / "skills" / "home-skill"),
    ]


def test_ordering_is_root_major_then_name_minor(tmp_path: Path):
    home = tmp_path / "home"
    _write_script(home / ".agents" / "skills" / "zulu", "main.py")
    _write_script(home / ".codex" / "skills" / "alpha", "main.py")

    listed = list_available_skills(ResolveContext(cwd=home, home_dir=home, env={}))

    assert [entry.name for entry in listed] == ["zulu", "alpha"]


def test_prefers_configured_skill_paths_over_discovered_roots(tmp_path: Path):
    home = tmp_path / "home"
    configured_root = tmp_path / "custom"
    _write_script(configured_root / "scripts-owner", "main.ts")
    _write_script(home / ".agents" / "skills" / "scripts-owner", "main.ts")
    _write_script(home / ".agents" / "skills" / "from-root", "main.ts")
    _write_config(home, {"skillPaths": {"scripts-owner": str(configured_root / "scripts-owner")}})

    listed = list_available_skills(ResolveContext(cwd=home, home_dir=home, env={}))

    assert listed == [
        ListedSkill(name="scripts-owner", root=configured_root / "scripts-owner"),
        ListedSkill(name="from-root", root=home / ".agents" / "skills" / "from-root"),
    ]


def test_includes_configured_skill_roots_before_discovered_roots(tmp_path: Path):
    home = tmp_path / "home"
    custom_root = tmp_path / "custom-root"
    _write_script(custom_root / "alpha", "main.ts")
    _write_script(home / ".agents" / "skills" / "alpha", "main.ts")
    _write_script(home / ".agents" / "skills" / "beta", "main.ts")
    _write_config(home, {"skillRoots": [str(custom_root)]})

    listed = list_available_skills(ResolveContext(cwd=home, home_dir=home, env={}))

    assert listed == [
        ListedSkill(name="alpha", root=custom_root / "alpha"),
        ListedSkill(name="beta", root=home / ".agents" / "skills" / "beta"),
    ]


def test_skips_configured_override_without_scripts(tmp_path: Path):
    home = tmp_path / "home"
    empty_override = tmp_path / "empty-override"
    empty_override.mkdir()
    _write_script(home / ".agents" / "skills" / "alpha", "main.py")
    _write_config(home, {"skillPaths": {"alpha": str(empty_override)}})

    listed = list_available_skills(ResolveContext(cwd=home, home_dir=home, env={}))

    assert listed == [ListedSkill(name="alpha", root=home / ".agents" / "skills" / "alpha")]


def test_has_runnable_scripts_accepts_main_or_named_commands(tmp_path: Path):
    _write_script(tmp_path / "with-main", "main.sh")
    _write_script(tmp_path / "with-command", "sync.js")
    _write_script(tmp_path / "with-notes", "README.md")

    assert has_runnable_scripts(tmp_path / "with-main")
    assert has_runnable_scripts(tmp_path / "with-command")
    assert not has_runnable_scripts(tmp_path / "with-notes")
    assert not has_runnable_scripts(tmp_path / "missing")
