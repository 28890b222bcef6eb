"""Allow ``python -m skillx``."""

from skillx.cli import run

if __name__ == "__main__":
    run()
