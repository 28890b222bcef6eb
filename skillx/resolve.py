"""Search-root resolution: where skills may live, in precedence order."""

from __future__ import annotations

import subprocess
from pathlib import Path

from skillx.config import get_configured_skill_path, get_configured_skill_roots
from skillx.context import ResolveContext
from skillx.logging import get_logger

log = get_logger(__name__)

# Repository-relative skill directories, highest precedence first.
REPO_SKILL_DIRS: tuple[tuple[str, ...], ...] = (
    (".agents", "skill"),
    (".agent", "skills"),
    (".agents", "skills"),
    (".claude", "skills"),
    (".codex", "skills"),
    ("skills",),
)

_GIT_TIMEOUT_SECONDS = 10


def resolve_repo_root(cwd: str | Path) -> Path | None:
    """Return the canonical top-level directory of the git repository containing ``cwd``."""
    try:
        completed = subprocess.run(
            ["git", "-C", str(cwd), "rev-parse", "--show-toplevel"],
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            check=False,
            timeout=_GIT_TIMEOUT_SECONDS,
        )
    except (OSError, subprocess.SubprocessError):
        return None
    if completed.returncode != 0:
        return None

    top_level = (completed.stdout or "").strip()
    if not top_level:
        return None
    return Path(top_level).resolve()


def _home_skill_roots(context: ResolveContext) -> list[Path]:
    home = context.get_home_dir()

    def _from_env(name: str, default: Path) -> Path:
        value = context.get_env_value(name)
        return context.absolute(value) if value else default

    openclaw_state = context.get_env_value("OPENCLAW_STATE_DIR")
    openclaw_default = (
        context.absolute(openclaw_state) / "skills" if openclaw_state else home / ".openclaw" / "skills"
    )
    codex_home = context.get_env_value("CODEX_HOME")
    codex_skills = context.absolute(codex_home) / "skills" if codex_home else home / ".codex" / "skills"

    return [
        _from_env("SCRIPT_SKILLS_HOME", home / ".agents" / "skills"),
        home / ".agent" / "skills",
        _from_env("SCRIPT_CLAUDE_SKILLS_HOME", home / ".claude" / "skills"),
        _from_env("SCRIPT_OPENCLAW_SKILLS_HOME", openclaw_default),
        codex_skills,
    ]


def _dedupe(paths: list[Path], context: ResolveContext) -> list[Path]:
    deduped: list[Path] = []
    seen: set[Path] = set()
    for raw in paths:
        path = context.absolute(raw)
        if path in seen:
            continue
        seen.add(path)
        deduped.append(path)
    return deduped


def get_skill_search_roots(context: ResolveContext | None = None) -> list[Path]:
    """Compute every directory that may contain skills, highest precedence first.

    Order: configured roots, repository-local roots (only inside a git
    repository), then home and environment-derived roots. Duplicates are
    dropped keeping the first occurrence.
    """
    context = context or ResolveContext()
    ordered: list[Path] = list(get_configured_skill_roots(context))

    repo_root = resolve_repo_root(context.get_cwd())
    if repo_root is not None:
        ordered.extend(repo_root.joinpath(*parts) for parts in REPO_SKILL_DIRS)

    ordered.extend(_home_skill_roots(context))

    roots = _dedupe(ordered, context)
    log.debug("Resolved skill search roots", repo_root=str(repo_root) if repo_root else None, count=len(roots))
    return roots


def get_skill_candidate_paths(skill_name: str, context: ResolveContext | None = None) -> list[Path]:
    """Candidate skill directories for ``skill_name``: configured override first, then every root."""
    context = context or ResolveContext()
    candidates: list[Path] = []
    override = get_configured_skill_path(skill_name, context)
    if override is not None:
        candidates.append(override)
    candidates.extend(root / skill_name for root in get_skill_search_roots(context))
    return _dedupe(candidates, context)
