"""Exception taxonomy for anchor resolution and tree searches."""
from __future__ import annotations

from typing import Any, Optional


class RelocationError(Exception):
    """Base class for all TitleTool failures."""


class InvalidQuery(RelocationError, ValueError):
    """A search was issued without a type or a name to match on."""


class InvalidArgument(RelocationError, ValueError):
    """A required argument (such as the search root) was missing."""


class ResolveFailure(RelocationError):
    """An anchor needed for relocation could not be found."""

    retryable = False

    def __init__(self, anchor: str, message: str) -> None:
        super().__init__(message)
        self.anchor = anchor


class StructuralAnchorMissing(ResolveFailure):
    """A host element that should always exist is absent (unsupported host shell)."""


class TargetNotYetPresent(ResolveFailure):
    """The control to move is not in the tree yet; it may be enabled later."""

    retryable = True

    def __init__(self, anchor: str, message: str, *, source: Optional[Any] = None) -> None:
        super().__init__(anchor, message)
        self.source = source


class OptionalAnchorMissing(ResolveFailure):
    """The alternate-mode anchor is absent; relocation degrades to primary mode only."""
