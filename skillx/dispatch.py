"""Route ``<skill> [args...]`` to a concrete script across candidate skill roots."""

from __future__ import annotations

import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from skillx.context import ResolveContext
from skillx.discovery import MAIN_SCRIPT, find_script_for_base, is_directory, list_available_commands
from skillx.exceptions import RunnerError
from skillx.logging import get_logger
from skillx.resolve import get_skill_candidate_paths
from skillx.runners import RunResult, run_script

log = get_logger(__name__)

EXIT_RUNTIME_FAILURE = 1
EXIT_USAGE = 2
EXIT_NOT_FOUND = 127

RunScriptFn = Callable[[Path, list[str]], RunResult]


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of dispatching within one root or across all candidates.

    ``handled`` False means the root did not provide the skill and the next
    candidate should be tried.
    """

    handled: bool
    code: int
    signal: str | None = None


_NOT_HANDLED = DispatchResult(handled=False, code=EXIT_RUNTIME_FAILURE)


def dispatch_skill_command(
    skill_name: str,
    args: list[str],
    context: ResolveContext | None = None,
    stderr: TextIO | None = None,
    run_script_impl: RunScriptFn | None = None,
) -> DispatchResult:
    """Run ``skill_name`` from the first candidate root that handles it."""
    context = context or ResolveContext()
    stderr = stderr or sys.stderr

    for skill_root in get_skill_candidate_paths(skill_name, context):
        result = dispatch_within_skill_root(
            skill_name,
            skill_root,
            args,
            stderr=stderr,
            run_script_impl=run_script_impl,
        )
        if result.handled:
            return result

    stderr.write(f"skillx: command not found: {skill_name}\n")
    return DispatchResult(handled=False, code=EXIT_NOT_FOUND)


def dispatch_within_skill_root(
    skill_name: str,
    skill_root: str | Path,
    args: list[str],
    stderr: TextIO | None = None,
    run_script_impl: RunScriptFn | None = None,
) -> DispatchResult:
    """Dispatch inside a single candidate skill root.

    An explicit subcommand script wins over ``main``; ``main`` receives the
    full argument list. A root with other commands but no match is a usage
    error; a root without any runnable script is not handled.
    """
    stderr = stderr or sys.stderr
    run_script_impl = run_script_impl or run_script

    scripts_dir = Path(skill_root) / "scripts"
    if not is_directory(scripts_dir):
        return _NOT_HANDLED

    subcommand = args[0] if args else None

    if subcommand:
        match = find_script_for_base(scripts_dir / subcommand)
        if match:
            return _run_selected_script(match.path, args[1:], run_script_impl, stderr)

    main_match = find_script_for_base(scripts_dir / MAIN_SCRIPT)
    if main_match:
        return _run_selected_script(main_match.path, list(args), run_script_impl, stderr)

    commands = list_available_commands(scripts_dir)
    if commands:
        if subcommand:
            stderr.write(f"{skill_name}: unknown command '{subcommand}'\n")
        else:
            stderr.write(f"{skill_name}: no default 'main' script found\n")
        stderr.write(f"Usage: {skill_name} <command> [args...]\n")
        stderr.write(f"Available commands: {' '.join(commands)}\n")
        return DispatchResult(handled=True, code=EXIT_USAGE)

    return _NOT_HANDLED


def _run_selected_script(
    script_path: Path,
    script_args: list[str],
    run_script_impl: RunScriptFn,
    stderr: TextIO,
) -> DispatchResult:
    log.debug("Dispatching script", script=str(script_path), args=script_args)
    try:
        result = run_script_impl(script_path, script_args)
    except RunnerError as exc:
        stderr.write(f"skillx: {exc}\n")
        return DispatchResult(handled=True, code=EXIT_RUNTIME_FAILURE)

    code = result.code if result.code is not None else EXIT_RUNTIME_FAILURE
    return DispatchResult(handled=True, code=code, signal=result.signal)
