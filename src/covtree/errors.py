"""Centralised exception hierarchy for covtree."""

from __future__ import annotations


class CovtreeError(Exception):
    """Base class for all custom covtree exceptions."""


# ---------------------------------------------------------------------------
# Leaf facts and ratios
# ---------------------------------------------------------------------------


class MalformedPathError(CovtreeError):
    """A leaf fact names a path that cannot be placed in the coverage tree."""


class InconsistentRatioError(CovtreeError, ValueError):
    """A ratio was created with negative counts or more covered than total items."""


# ---------------------------------------------------------------------------
# Tree structure (programmer errors, never recovered)
# ---------------------------------------------------------------------------


class StructureError(CovtreeError):
    """A tree mutation would break the level ordering of the hierarchy."""


class CyclicTreeError(StructureError):
    """A node was attached to itself or to one of its own descendants."""


class OwnershipError(StructureError):
    """A node was attached while it still belongs to another parent."""


class DeltaAlreadyComputedError(CovtreeError):
    """Delta results were recorded twice on the same coverage result."""


# ---------------------------------------------------------------------------
# Collaborators (report adapters, configuration)
# ---------------------------------------------------------------------------


class ReportError(CovtreeError):
    """Base class for errors related to coverage report handling."""


class ReportNotFoundError(ReportError):
    """Coverage report file could not be located on disk."""


class InvalidReportError(ReportError):
    """Coverage report file was found but does not contain a valid report."""


class ConfigError(CovtreeError):
    """The ``[tool.covtree]`` configuration contains an invalid value."""


__all__ = [
    "ConfigError",
    "CovtreeError",
    "CyclicTreeError",
    "DeltaAlreadyComputedError",
    "InconsistentRatioError",
    "InvalidReportError",
    "MalformedPathError",
    "OwnershipError",
    "ReportError",
    "ReportNotFoundError",
    "StructureError",
]
