"""Custom exceptions for skillx."""


class SkillxError(Exception):
    """Base exception for skillx."""

    pass


class ConfigurationError(SkillxError):
    """Config file errors raised when the file is about to be rewritten."""

    pass


class RunnerError(SkillxError):
    """No usable runtime exists for a script."""

    pass


class ScriptSpawnError(SkillxError):
    """The planned command could not be started."""

    def __init__(self, command: str, message: str):
        super().__init__(f"failed to start '{command}': {message}")
        self.command = command
