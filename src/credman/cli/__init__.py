# CLI Module - Terminal front end
#
# argparse commands, interactive prompts and console/JSON output.
# Nothing here is imported by the vault package.

from .commands import build_parser, run
from .output import Console

__all__ = ["Console", "build_parser", "run"]
