"""Explicit resolution context threaded through every lookup."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ResolveContext:
    """Working directory, environment and home directory used for a lookup.

    Unset fields fall back to the live process values at the moment they are
    read, so a default ``ResolveContext()`` always reflects the current
    process while tests can pin every input.
    """

    cwd: str | Path | None = None
    env: Mapping[str, str] | None = None
    home_dir: str | Path | None = None

    def get_cwd(self) -> Path:
        return Path(self.cwd) if self.cwd is not None else Path.cwd()

    def get_env(self) -> Mapping[str, str]:
        return self.env if self.env is not None else os.environ

    def get_home_dir(self) -> Path:
        return Path(self.home_dir) if self.home_dir is not None else Path.home()

    def get_env_value(self, name: str) -> str | None:
        """Return a non-empty environment value, or None."""
        value = self.get_env().get(name)
        return value if value else None

    def expand_home(self, raw: str | Path) -> Path:
        """Expand a leading ``~`` against this context's home directory."""
        text = str(raw)
        if text == "~":
            return self.get_home_dir()
        if text.startswith("~/"):
            return self.get_home_dir() / text[2:]
        return Path(text)

    def absolute(self, raw: str | Path) -> Path:
        """Anchor a possibly relative path at the working directory and normalize it."""
        path = self.expand_home(raw)
        if not path.is_absolute():
            path = self.get_cwd() / path
        return Path(os.path.normpath(path))
