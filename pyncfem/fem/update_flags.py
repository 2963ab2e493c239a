"""pyncfem.fem.update_flags
Which quantities an evaluation context has to compute, and how requests
close over their dependencies.
"""
from __future__ import annotations

from enum import IntFlag
from typing import Mapping

from pyncfem.errors import UnsupportedFlagCombinationError


class UpdateFlags(IntFlag):
    DEFAULT = 0
    VALUES = 1 << 0
    GRADIENTS = 1 << 1
    HESSIANS = 1 << 2
    QUADRATURE_POINTS = 1 << 3
    CELL_NORMAL_VECTORS = 1 << 4
    JXW_VALUES = 1 << 5


_KNOWN_BITS = 0
for _f in UpdateFlags:
    _KNOWN_BITS |= int(_f)


def _is_member(flag) -> bool:
    return isinstance(flag, UpdateFlags) and int(flag) != 0 and (int(flag) & ~_KNOWN_BITS) == 0


class FlagClosure:
    """
    Closure of an update-flag request over a dependency table.

    ``table`` maps a single flag to the flags it needs when requested
    (including itself).  Requested bits without an entry pass through as they
    are, and nothing is added for flags that were not requested, so
    ``closure(closure(f)) == closure(f)`` holds as long as no dependency
    introduces a key with further dependencies.  That last condition is
    checked on construction.
    """

    def __init__(self, table: Mapping[UpdateFlags, UpdateFlags]):
        self._table = {}
        for key, deps in table.items():
            if not _is_member(key) or bin(int(key)).count("1") != 1:
                raise UnsupportedFlagCombinationError(
                    f"Dependency table key {key!r} is not a single UpdateFlags member.")
            if not isinstance(deps, UpdateFlags) or (int(deps) & ~_KNOWN_BITS):
                raise UnsupportedFlagCombinationError(
                    f"Dependencies {deps!r} of {key!r} contain unknown flags.")
            if not deps & key:
                raise UnsupportedFlagCombinationError(
                    f"Dependencies of {key!r} must contain the flag itself, got {deps!r}.")
            self._table[UpdateFlags(key)] = UpdateFlags(deps)
        for key, deps in self._table.items():
            extra = deps & ~key
            for other, other_deps in self._table.items():
                if extra & other and other_deps & ~deps:
                    raise UnsupportedFlagCombinationError(
                        f"{key!r} pulls in {other!r}, whose own dependencies "
                        f"{other_deps!r} are not covered; the closure would not be idempotent.")

    def __call__(self, requested) -> UpdateFlags:
        requested = UpdateFlags(int(requested))
        out = requested
        for key, deps in self._table.items():
            if requested & key:
                out |= deps
        return out

    @property
    def table(self) -> dict:
        return dict(self._table)

    def __repr__(self) -> str:
        rules = ", ".join(f"{k.name}->{v!r}" for k, v in self._table.items())
        return f"<FlagClosure {rules}>"


__all__ = ["UpdateFlags", "FlagClosure"]
