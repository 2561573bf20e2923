"""
Main interface for user/developer of bptree.

Utility to start repl and run commands.

Requires bptree to be installed.
"""

import sys

from bptree import parse_args_and_start


if __name__ == '__main__':
    parse_args_and_start(sys.argv[1:])
