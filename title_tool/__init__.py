"""Moves a host toolbar into the main window title bar and keeps it there."""
from __future__ import annotations

from title_tool.anchors import DEFAULT_PROFILE, AnchorResolver, AnchorSet, HostProfile
from title_tool.errors import (
    InvalidArgument,
    InvalidQuery,
    OptionalAnchorMissing,
    RelocationError,
    ResolveFailure,
    StructuralAnchorMissing,
    TargetNotYetPresent,
)
from title_tool.host import HostAdapter, HostEvent, Margins, Subscription, SubscriptionSet
from title_tool.relocation import LayoutMode, MoveState, PlacementSettings, RelocationContext, RelocationEngine
from title_tool.retry import RetryCoordinator
from title_tool.tree_search import SearchQuery, first_match, search
from title_tool.version import __version__

__all__ = [
    "AnchorResolver",
    "AnchorSet",
    "DEFAULT_PROFILE",
    "HostAdapter",
    "HostEvent",
    "HostProfile",
    "InvalidArgument",
    "InvalidQuery",
    "LayoutMode",
    "Margins",
    "MoveState",
    "OptionalAnchorMissing",
    "PlacementSettings",
    "RelocationContext",
    "RelocationEngine",
    "RelocationError",
    "ResolveFailure",
    "RetryCoordinator",
    "SearchQuery",
    "StructuralAnchorMissing",
    "Subscription",
    "SubscriptionSet",
    "TargetNotYetPresent",
    "__version__",
    "first_match",
    "search",
]
