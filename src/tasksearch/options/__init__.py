#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Configuration options for tasksearch.

Options are frozen dataclasses. Use ``create_updated`` to derive a modified
copy instead of mutating an instance.
"""

from __future__ import annotations

from tasksearch.options.base import CloneFrozenMixin
from tasksearch.options.search import SearchOptions

__all__ = ["CloneFrozenMixin", "SearchOptions"]
