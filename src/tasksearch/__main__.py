#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Entry point for running tasksearch as a module.

This allows the package to be executed as:
    python -m tasksearch QUERY TASKS_FILE [options]
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
