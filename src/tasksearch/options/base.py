#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Base mixin shared by tasksearch option dataclasses."""

from __future__ import annotations

import sys
from dataclasses import dataclass, fields, replace
from typing import Any

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self


@dataclass(frozen=True)
class CloneFrozenMixin:
    """Mixin providing frozen dataclass cloning capabilities.

    Option objects are immutable so that a session can hand the same
    instance to every evaluation without defensive copies.
    """

    def create_updated(self, **kwargs: Any) -> Self:
        """Create a new instance with updated field values.

        Parameters
        ----------
        **kwargs : Any
            Field names and their new values

        Returns
        -------
        Self
            New instance with specified fields updated. Validation in
            ``__post_init__`` runs again on the new instance.

        """
        return replace(self, **kwargs)

    @classmethod
    def field_names(cls) -> frozenset[str]:
        """Return the names of all configurable fields."""
        return frozenset(f.name for f in fields(cls))  # type: ignore[arg-type]

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-compatible snapshot of the option values."""
        snapshot: dict[str, Any] = {}
        for f in fields(self):  # type: ignore[arg-type]
            value = getattr(self, f.name)
            snapshot[f.name] = list(value) if isinstance(value, tuple) else value
        return snapshot
