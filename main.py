#!/usr/bin/env python3
"""
chunkscribe Entry Point Script

This script initializes the CLI handler and transcribes one long recording.
"""

import sys
from chunkscribe.cli import CLIHandler

if __name__ == "__main__":
    if sys.version_info < (3, 8):
        sys.stderr.write("chunkscribe requires Python 3.8 or later.\n")
        sys.exit(1)

    cli = CLIHandler()
    cli.run()
