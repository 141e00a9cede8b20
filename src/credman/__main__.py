# Main Entry Point - cman command line
#
# `python -m credman ...` and the `cman` console script both land here.

import sys

from .cli.commands import run


def main():
    """Run cman with the process arguments and exit with its status."""
    sys.exit(run())


if __name__ == "__main__":
    main()
