"""Entry point for `python -m window_bridge`."""

import sys

from .cli.commands import cli_main


if __name__ == "__main__":
    sys.exit(cli_main())
