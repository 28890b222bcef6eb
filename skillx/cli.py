"""Command-line interface for skillx."""

import os
import signal
from typing import List, Optional

import typer

from skillx import __version__
from skillx.config import save_skill_path_override, save_skill_root
from skillx.context import ResolveContext
from skillx.discovery import SUPPORTED_EXTENSIONS
from skillx.dispatch import dispatch_skill_command
from skillx.exceptions import SkillxError
from skillx.listing import list_available_skills
from skillx.logging import configure_logging, get_logger

log = get_logger(__name__)

EPILOG = (
    "Examples: skillx my-skill --dry-run | skillx my-skill do --dry-run | skillx --list. "
    "Entrypoint: scripts/main.{py,ts,js}. "
    f"Supported script extensions: {', '.join(SUPPORTED_EXTENSIONS)}."
)

CONTEXT_SETTINGS = {
    "help_option_names": ["-h", "--help"],
    # Everything after the skill name belongs to the script.
    "allow_interspersed_args": False,
    "ignore_unknown_options": True,
}

app = typer.Typer(add_completion=False, context_settings=CONTEXT_SETTINGS)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


def _fail(message: str, code: int = 1) -> typer.Exit:
    typer.echo(f"skillx: {message}", err=True)
    return typer.Exit(code=code)


def is_invalid_skill_name(skill_name: str) -> bool:
    return not skill_name or "/" in skill_name or "\\" in skill_name or ".." in skill_name


def _reraise_signal(name: str) -> None:
    """Terminate this process with the same signal that killed the child."""
    signum = getattr(signal, name, None)
    if signum is None:
        return
    try:
        signal.signal(signum, signal.SIG_DFL)
    except (OSError, ValueError):
        # SIGKILL and SIGSTOP cannot be caught.
        pass
    os.kill(os.getpid(), signum)


def _list_skills(context: ResolveContext) -> None:
    skills = list_available_skills(context)
    if not skills:
        typer.echo("No skills found.")
        return
    for skill in skills:
        typer.echo(skill.name)


def _add_root(raw_root: str, context: ResolveContext) -> None:
    result = save_skill_root(raw_root, context)
    typer.echo(f"Added skills root {result.resolved_skill_root} ({result.config_path})")


def _set_path(assignment: str, context: ResolveContext) -> None:
    name, sep, raw_path = assignment.partition("=")
    name = name.strip()
    if not sep or not name or not raw_path.strip():
        raise _fail("--set-path expects NAME=DIR")
    if is_invalid_skill_name(name):
        raise _fail(f"invalid skill name '{name}'")
    result = save_skill_path_override(name, raw_path.strip(), context)
    typer.echo(f"Set '{name}' to {result.resolved_skill_path} ({result.config_path})")


@app.command(epilog=EPILOG, context_settings=CONTEXT_SETTINGS)
def main(
    ctx: typer.Context,
    skill: Optional[str] = typer.Argument(None, metavar="SKILL", help="Skill to run.", show_default=False),
    args: Optional[List[str]] = typer.Argument(
        None,
        metavar="[SCRIPT] [ARGS]...",
        help="Optional script name, then arguments passed to the script verbatim.",
        show_default=False,
    ),
    list_skills: bool = typer.Option(False, "--list", help="List available skills."),
    add_root: Optional[str] = typer.Option(
        None, "--add-root", metavar="DIR", help="Save an extra skills root in the config file."
    ),
    set_path: Optional[str] = typer.Option(
        None, "--set-path", metavar="NAME=DIR", help="Save an exact path override for one skill."
    ),
    show_version: bool = typer.Option(
        False, "-v", "--version", callback=_version_callback, is_eager=True, help="Show version and exit."
    ),
) -> None:
    """Run skill scripts from skill directories."""
    configure_logging()
    context = ResolveContext()
    positionals = [skill] if skill is not None else []
    positionals.extend(args or [])

    requested = (("--list", list_skills), ("--add-root", add_root), ("--set-path", set_path))
    actions = [flag for flag, given in requested if given]
    if len(actions) > 1:
        raise _fail(f"choose only one of {', '.join(actions)}")

    if actions:
        if positionals:
            raise _fail(f"{actions[0]} does not accept positional arguments")
        try:
            if list_skills:
                _list_skills(context)
            elif add_root is not None:
                _add_root(add_root, context)
            else:
                _set_path(set_path or "", context)
        except SkillxError as exc:
            raise _fail(str(exc))
        raise typer.Exit(code=0)

    if skill is None:
        typer.echo(ctx.get_help(), err=True)
        raise typer.Exit(code=1)

    if is_invalid_skill_name(skill):
        raise _fail(f"invalid skill name '{skill}'")

    try:
        result = dispatch_skill_command(skill, list(args or []), context)
    except SkillxError as exc:
        log.debug("Dispatch failed", skill=skill, error=str(exc))
        raise _fail(str(exc))

    if result.signal:
        _reraise_signal(result.signal)
        raise typer.Exit(code=1)
    raise typer.Exit(code=result.code)


def run() -> None:
    """Console script entry point."""
    app(prog_name="skillx")
