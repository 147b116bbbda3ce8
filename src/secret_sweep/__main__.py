"""Entry point for running Secret Sweep as a module.

Usage:
    python -m secret_sweep [OPTIONS] COMMAND [ARGS]...
"""

from secret_sweep.cli.app import app

if __name__ == "__main__":
    app()
