"""Runtime planning and process execution for skill scripts.

``resolve_execution_plan`` maps a script's extension to the external command
that should run it. Each extension family has an ordered fallback chain of
``RuntimeOption`` entries; the first available one builds the plan. Host
capabilities (which commands exist, what version they report) come from an
injectable ``RuntimeProbe`` so planning is deterministic under test.
"""

from __future__ import annotations

import re
import shutil
import signal
import subprocess
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import cache
from pathlib import Path
from typing import Protocol

from skillx.discovery import is_executable_with_shebang
from skillx.exceptions import RunnerError, ScriptSpawnError
from skillx.logging import get_logger

log = get_logger(__name__)

JAVASCRIPT_EXTENSIONS = frozenset({".js", ".mjs", ".cjs"})
TYPESCRIPT_EXTENSIONS = frozenset({".ts", ".mts", ".cts"})
PYTHON_EXTENSIONS = frozenset({".py"})
SHELL_EXTENSIONS = frozenset({".sh"})

# Minimum minor version per node major for native TypeScript execution.
# Majors above the highest listed one are always accepted.
NODE_TYPESCRIPT_MINOR_FLOOR: dict[int, int] = {
    22: 18,
    23: 0,
    24: 3,
}

_VERSION_RE = re.compile(r"^v?(\d+)\.(\d+)\.(\d+)")
_VERSION_PROBE_TIMEOUT_SECONDS = 10


@dataclass(frozen=True)
class ExecutionPlan:
    command: str
    args: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class RunResult:
    code: int | None
    signal: str | None = None


class RuntimeProbe(Protocol):
    def exists(self, command: str) -> bool: ...

    def version(self, command: str) -> str | None: ...


class SystemRuntimeProbe:
    """Probe the real host: PATH lookup and ``<command> --version``."""

    def exists(self, command: str) -> bool:
        return shutil.which(command) is not None

    def version(self, command: str) -> str | None:
        try:
            completed = subprocess.run(
                [command, "--version"],
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                check=False,
                timeout=_VERSION_PROBE_TIMEOUT_SECONDS,
            )
        except (OSError, subprocess.SubprocessError):
            return None
        if completed.returncode != 0:
            return None
        output = f"{completed.stdout or ''}{completed.stderr or ''}".strip()
        return output or None


@dataclass(frozen=True)
class RuntimeOption:
    """One entry of a fallback chain: a readiness check and a plan builder."""

    name: str
    available: Callable[[], bool]
    build: Callable[[str, list[str]], ExecutionPlan]


def _direct(command: str, *prefix: str) -> Callable[[str, list[str]], ExecutionPlan]:
    def build(script_path: str, script_args: list[str]) -> ExecutionPlan:
        return ExecutionPlan(command=command, args=[*prefix, script_path, *script_args])

    return build


def _first_available(
    chain: list[RuntimeOption],
    script_path: str,
    script_args: list[str],
) -> ExecutionPlan | None:
    for option in chain:
        if option.available():
            log.debug("Selected runtime", runtime=option.name, script=script_path)
            return option.build(script_path, script_args)
    return None


def supports_native_typescript(version: str | None) -> bool:
    """Whether a node version string can run TypeScript files directly."""
    if not version:
        return False
    match = _VERSION_RE.match(version.strip())
    if not match:
        return False

    major = int(match.group(1))
    minor = int(match.group(2))
    if major > max(NODE_TYPESCRIPT_MINOR_FLOOR):
        return True
    floor = NODE_TYPESCRIPT_MINOR_FLOOR.get(major)
    if floor is None:
        return False
    return minor >= floor


def default_node_path() -> str:
    return shutil.which("node") or "node"


def _plan_typescript(
    script_path: str,
    script_args: list[str],
    probe: RuntimeProbe,
    node_path: str,
) -> ExecutionPlan:
    node_version = cache(lambda: probe.version(node_path))
    chain = [
        RuntimeOption("bun", lambda: probe.exists("bun"), _direct("bun")),
        RuntimeOption("node", lambda: supports_native_typescript(node_version()), _direct(node_path)),
        RuntimeOption("tsx", lambda: probe.exists("tsx"), _direct("tsx")),
        RuntimeOption("ts-node", lambda: probe.exists("ts-node"), _direct("ts-node")),
        RuntimeOption("deno", lambda: probe.exists("deno"), _direct("deno", "run")),
    ]
    plan = _first_available(chain, script_path, script_args)
    if plan is not None:
        return plan

    detected = node_version()
    raise RunnerError(
        " ".join(
            [
                "No supported TypeScript runner found for .ts script.",
                "Supported TypeScript runners: bun, node (v22.18+, v23+, or v24.3+), tsx, ts-node, deno.",
                f"Detected node version: {detected}."
                if detected
                else f"Node version could not be detected from '{node_path}'.",
            ]
        )
    )


def _plan_python(script_path: str, script_args: list[str], probe: RuntimeProbe) -> ExecutionPlan:
    chain = [
        RuntimeOption("uv", lambda: probe.exists("uv"), _direct("uv", "run")),
        RuntimeOption("python3", lambda: probe.exists("python3"), _direct("python3")),
    ]
    plan = _first_available(chain, script_path, script_args)
    if plan is None:
        raise RunnerError(
            "No Python runtime found for .py script. Install `uv` (recommended) or `python3`."
        )
    return plan


def _plan_shell(script_path: str, script_args: list[str], probe: RuntimeProbe) -> ExecutionPlan:
    chain = [RuntimeOption("bash", lambda: probe.exists("bash"), _direct("bash"))]
    plan = _first_available(chain, script_path, script_args)
    if plan is None:
        raise RunnerError("`bash` is required to run .sh scripts.")
    return plan


def resolve_execution_plan(
    script_path: str | Path,
    script_args: list[str],
    probe: RuntimeProbe | None = None,
    node_path: str | None = None,
) -> ExecutionPlan:
    """Decide which external command runs ``script_path``.

    Args:
        script_path: Resolved script file.
        script_args: Arguments passed through to the script.
        probe: Host capability probe (defaults to ``SystemRuntimeProbe``).
        node_path: Node executable used for JavaScript and native TypeScript.

    Returns:
        The execution plan.

    Raises:
        RunnerError: If no usable runtime exists for the script.
    """
    probe = probe or SystemRuntimeProbe()
    path = str(script_path)
    args = list(script_args)
    extension = Path(path).suffix.lower()

    if extension in JAVASCRIPT_EXTENSIONS:
        return ExecutionPlan(command=node_path or default_node_path(), args=[path, *args])
    if extension in TYPESCRIPT_EXTENSIONS:
        return _plan_typescript(path, args, probe, node_path or default_node_path())
    if extension in PYTHON_EXTENSIONS:
        return _plan_python(path, args, probe)
    if extension in SHELL_EXTENSIONS:
        return _plan_shell(path, args, probe)

    if is_executable_with_shebang(path):
        return ExecutionPlan(command=path, args=args)

    raise RunnerError(f"Unsupported script type: {path}")


def _signal_name(returncode: int) -> str | None:
    if returncode >= 0:
        return None
    try:
        return signal.Signals(-returncode).name
    except ValueError:
        return None


def run_script(
    script_path: str | Path,
    script_args: list[str],
    probe: RuntimeProbe | None = None,
    node_path: str | None = None,
) -> RunResult:
    """Plan and run a script with inherited stdio, blocking until it exits.

    Raises:
        RunnerError: If no runtime is available (nothing was spawned).
        ScriptSpawnError: If the planned command could not be started.
    """
    plan = resolve_execution_plan(script_path, script_args, probe=probe, node_path=node_path)
    log.debug("Running script", command=plan.command, args=plan.args)

    try:
        process = subprocess.Popen([plan.command, *plan.args])
    except OSError as exc:
        raise ScriptSpawnError(plan.command, exc.strerror or str(exc)) from exc

    with process:
        while True:
            try:
                returncode = process.wait()
                break
            except KeyboardInterrupt:
                # The terminal delivers the interrupt to the child as well; let it finish.
                continue

    name = _signal_name(returncode)
    if name is not None:
        return RunResult(code=None, signal=name)
    return RunResult(code=returncode, signal=None)
