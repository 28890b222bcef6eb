"""skillx - Run skill scripts from skill directories."""

__version__ = "0.1.0"

from skillx.context import ResolveContext
from skillx.discovery import SUPPORTED_EXTENSIONS, find_script_for_base, list_available_commands
from skillx.dispatch import DispatchResult, dispatch_skill_command, dispatch_within_skill_root
from skillx.listing import ListedSkill, list_available_skills
from skillx.resolve import get_skill_candidate_paths, get_skill_search_roots, resolve_repo_root
from skillx.runners import ExecutionPlan, RunResult, resolve_execution_plan, run_script

__all__ = [
    "SUPPORTED_EXTENSIONS",
    "DispatchResult",
    "ExecutionPlan",
    "ListedSkill",
    "ResolveContext",
    "RunResult",
    "__version__",
    "dispatch_skill_command",
    "dispatch_within_skill_root",
    "find_script_for_base",
    "get_skill_candidate_paths",
    "get_skill_search_roots",
    "list_available_commands",
    "list_available_skills",
    "resolve_execution_plan",
    "resolve_repo_root",
    "run_script",
]
