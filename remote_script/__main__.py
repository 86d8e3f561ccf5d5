"""Entry point for ``python -m remote_script``."""

from remote_script.cli import app

if __name__ == "__main__":
    app()
