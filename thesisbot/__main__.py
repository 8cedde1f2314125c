"""Entry point for running thesisbot as a module or installed script.

Usage:
    thesisbot / python -m thesisbot         → API server (uvicorn)
    thesisbot <command> ... / python -m thesisbot <command> ... → CLI
"""

import sys

import uvicorn

from thesisbot.log import setup_logging


def run() -> None:
    """Entry point: no args → API server, else → CLI."""
    setup_logging()
    if len(sys.argv) == 1:
        uvicorn.run("thesisbot.api.app:app", host="127.0.0.1", port=8000)
    else:
        from thesisbot.cli import main
        main()


if __name__ == "__main__":
    run()
