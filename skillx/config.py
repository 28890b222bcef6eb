"""Configuration management for skillx.

Two kinds of configuration live here:

* ``Settings``: process-level runtime settings (logging) read from
  ``SKILLX_*`` environment variables.
* The skill config file (``~/.skillx/config.json``) holding exact skill path
  overrides and extra search roots. Every accessor takes an explicit
  ``ResolveContext``; nothing about the file is cached.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from skillx.context import ResolveContext
from skillx.exceptions import ConfigurationError
from skillx.logging import get_logger

log = get_logger(__name__)

CONFIG_ENV_VAR = "SKILLX_CONFIG"
CONFIG_DIR_NAME = ".skillx"
CONFIG_FILE_NAME = "config.json"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "WARNING"
    format: str = "console"


class Settings(BaseSettings):
    """Runtime settings for skillx."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_prefix="SKILLX_",
        env_nested_delimiter="__",
    )


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings | None) -> None:
    """Set the global settings instance (None forces a reload)."""
    global _settings
    _settings = settings


class SkillxConfig(BaseModel):
    """On-disk shape of the skill config file."""

    model_config = ConfigDict(populate_by_name=True)

    skill_paths: dict[str, Any] = Field(default_factory=dict, alias="skillPaths")
    skill_roots: list[StrictStr] = Field(default_factory=list, alias="skillRoots")

    @field_validator("skill_paths")
    @classmethod
    def _keep_non_empty_paths(cls, value: dict[str, Any]) -> dict[str, str]:
        return {name: path for name, path in value.items() if isinstance(path, str) and path}

    @field_validator("skill_roots")
    @classmethod
    def _keep_non_empty_roots(cls, value: list[str]) -> list[str]:
        return [root for root in value if root]

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2) + "\n"


@dataclass
class SaveSkillPathResult:
    config_path: Path
    resolved_skill_path: Path


@dataclass
class SaveSkillRootResult:
    config_path: Path
    resolved_skill_root: Path


def get_config_path(context: ResolveContext | None = None) -> Path:
    """Resolve the config file location (``$SKILLX_CONFIG`` or ``~/.skillx/config.json``)."""
    context = context or ResolveContext()
    override = context.get_env_value(CONFIG_ENV_VAR)
    if override:
        return context.absolute(override)
    return context.get_home_dir() / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def read_skillx_config(context: ResolveContext | None = None, strict: bool = False) -> SkillxConfig:
    """Read the config file.

    A missing file is an empty config. A malformed file is an empty config
    when ``strict`` is False and a ``ConfigurationError`` otherwise.
    """
    config_path = get_config_path(context)
    try:
        raw = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return SkillxConfig()
    except (OSError, UnicodeDecodeError) as exc:
        if strict:
            raise ConfigurationError(f"failed to read config at {config_path}: {exc}") from exc
        log.warning("Ignoring unreadable config", path=str(config_path), error=str(exc))
        return SkillxConfig()

    try:
        return SkillxConfig.model_validate_json(raw)
    except ValidationError as exc:
        if strict:
            detail = exc.errors()[0]["msg"] if exc.errors() else "invalid config"
            raise ConfigurationError(f"failed to parse config at {config_path}: {detail}") from exc
        log.warning("Ignoring malformed config", path=str(config_path))
        return SkillxConfig()


def _resolve_configured_path(config_path: Path, configured: str, context: ResolveContext | None) -> Path:
    path = (context or ResolveContext()).expand_home(configured)
    if path.is_absolute():
        return path
    return Path(os.path.normpath(config_path.parent / path))


def get_configured_skill_path(skill_name: str, context: ResolveContext | None = None) -> Path | None:
    """Return the exact override path configured for ``skill_name``, if any."""
    configured = read_skillx_config(context).skill_paths.get(skill_name)
    if not configured:
        return None
    return _resolve_configured_path(get_config_path(context), configured, context)


def get_configured_skill_paths(context: ResolveContext | None = None) -> dict[str, Path]:
    """Return every configured override, in file order, as absolute paths."""
    config_path = get_config_path(context)
    return {
        name: _resolve_configured_path(config_path, configured, context)
        for name, configured in read_skillx_config(context).skill_paths.items()
    }


def get_configured_skill_roots(context: ResolveContext | None = None) -> list[Path]:
    """Return configured extra search roots, in file order, without duplicates."""
    config_path = get_config_path(context)
    roots: list[Path] = []
    seen: set[Path] = set()
    for raw in read_skillx_config(context).skill_roots:
        root = _resolve_configured_path(config_path, raw, context)
        if root in seen:
            continue
        seen.add(root)
        roots.append(root)
    return roots


def _write_config(config_path: Path, config: SkillxConfig) -> None:
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(config.to_json(), encoding="utf-8")


def save_skill_path_override(
    skill_name: str,
    skill_path: str | Path,
    context: ResolveContext | None = None,
) -> SaveSkillPathResult:
    """Persist an exact path override for one skill."""
    context = context or ResolveContext()
    resolved = context.absolute(skill_path)
    if not resolved.is_dir():
        raise ConfigurationError(f"skill path is not a directory: {resolved}")

    config_path = get_config_path(context)
    current = read_skillx_config(context, strict=True)
    skill_paths = {**current.skill_paths, skill_name: str(resolved)}
    _write_config(config_path, SkillxConfig(skill_paths=skill_paths, skill_roots=current.skill_roots))
    log.debug("Saved skill path override", skill=skill_name, path=str(resolved))
    return SaveSkillPathResult(config_path=config_path, resolved_skill_path=resolved)


def save_skill_root(skill_root: str | Path, context: ResolveContext | None = None) -> SaveSkillRootResult:
    """Append an extra search root unless it is already configured."""
    context = context or ResolveContext()
    resolved = context.absolute(skill_root)
    if not resolved.is_dir():
        raise ConfigurationError(f"skills root is not a directory: {resolved}")

    config_path = get_config_path(context)
    current = read_skillx_config(context, strict=True)
    existing = [str(_resolve_configured_path(config_path, root, context)) for root in current.skill_roots]
    roots = existing if str(resolved) in existing else [*existing, str(resolved)]
    _write_config(config_path, SkillxConfig(skill_paths=current.skill_paths, skill_roots=roots))
    log.debug("Saved skills root", root=str(resolved))
    return SaveSkillRootResult(config_path=config_path, resolved_skill_root=resolved)
