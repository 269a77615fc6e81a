"""Relocation state machine: moves the toolbar into the title bar and keeps it there."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Tuple

from title_tool.anchors import DEFAULT_PROFILE, AnchorResolver, AnchorSet, HostProfile
from title_tool.errors import InvalidArgument, StructuralAnchorMissing, TargetNotYetPresent
from title_tool.host import HostAdapter, HostEvent, Margins, Node, SubscriptionSet, child_at_path
from title_tool.logging_utils import ActivityLog
from title_tool.retry import RetryCoordinator
from title_tool.tree_search import SearchQuery, first_match

_LOGGER = logging.getLogger("TitleTool")


class MoveState(Enum):
    UNRESOLVED = "unresolved"
    PLACED = "placed"
    PERMANENTLY_IMPOSSIBLE = "permanently_impossible"

    @property
    def terminal(self) -> bool:
        return self is not MoveState.UNRESOLVED


class LayoutMode(Enum):
    PRIMARY = "primary"
    ALTERNATE = "alternate"


@dataclass(frozen=True)
class PlacementSettings:
    primary_top_margin: int = 4
    alternate_top_margin: int = 0
    info_padding: int = 10
    # Child-index path from the title anchor to the grid hosting the wrapper.
    primary_grid_path: Tuple[int, ...] = ()
    primary_grid_slot: Tuple[int, int] = (0, 4)


@dataclass
class RelocationContext:
    control: Node
    wrapper: Node
    title_anchor: Node
    alternate_anchor: Optional[Node] = None
    current_parent: Optional[Node] = None
    margins: Margins = field(default_factory=Margins)
    mode: Optional[LayoutMode] = None
    subscriptions: SubscriptionSet = field(default_factory=SubscriptionSet)


class RelocationEngine:
    """Owns the move state and the relocated toolbar for the life of the process.

    ``run`` is the idempotent entry point. While the toolbar is missing it arms
    a :class:`RetryCoordinator`; once placed it follows the host between the
    title-bar layout and the full-screen layout.
    """

    def __init__(
        self,
        host: HostAdapter,
        root_provider: Callable[[], Optional[Node]],
        *,
        profile: HostProfile = DEFAULT_PROFILE,
        placement: PlacementSettings = PlacementSettings(),
        activity_log: Optional[ActivityLog] = None,
        resolver: Optional[AnchorResolver] = None,
    ) -> None:
        self._host = host
        self._root_provider = root_provider
        self._placement = placement
        self._log = activity_log or ActivityLog()
        self.resolver = resolver or AnchorResolver(host, profile)
        self.retry = RetryCoordinator(host, self._retry_attempt)
        self._state = MoveState.UNRESOLVED
        self._context: Optional[RelocationContext] = None
        self._running = False

    @property
    def state(self) -> MoveState:
        return self._state

    @property
    def context(self) -> Optional[RelocationContext]:
        return self._context

    @property
    def profile(self) -> HostProfile:
        return self.resolver.profile

    # Entry point -----------------------------------------------------------

    def run(self) -> MoveState:
        if self._state.terminal:
            return self._state
        if self._running:
            _LOGGER.debug("Relocation already in progress; ignoring nested request")
            return self._state
        self._running = True
        try:
            self._attempt()
        except Exception:
            _LOGGER.exception("Toolbar relocation failed unexpectedly; giving up")
            self._finish(MoveState.PERMANENTLY_IMPOSSIBLE)
        finally:
            self._running = False
        return self._state

    def shutdown(self) -> None:
        if self._context is not None:
            self._context.subscriptions.dispose_all()
        self.retry.dispose()

    def _retry_attempt(self) -> bool:
        return self.run().terminal

    def _attempt(self) -> None:
        try:
            anchors = self.resolver.resolve(self._root_provider())
        except TargetNotYetPresent as exc:
            self._log.trace("%s - hooking tray layout update", exc)
            if exc.source is not None:
                self.retry.arm(exc.source)
            return
        except StructuralAnchorMissing as exc:
            self._log.error(str(exc))
            self._finish(MoveState.PERMANENTLY_IMPOSSIBLE)
            return
        except InvalidArgument as exc:
            self._log.error(f"Host tree not available: {exc}")
            return

        self._log.trace("Found toolbar")
        self._relocate(anchors)
        self._finish(MoveState.PLACED)
        self._log.info("Moved toolbar to title bar")

    def _finish(self, state: MoveState) -> None:
        self._state = state
        self.retry.dispose()

    def _relocate(self, anchors: AnchorSet) -> None:
        host = self._host
        wrapper = host.create_wrapper(anchors.source)
        host.detach(anchors.control, anchors.source)
        try:
            self._install(anchors, wrapper)
        except Exception:
            self._restore(anchors, wrapper)
            raise

    def _install(self, anchors: AnchorSet, wrapper: Node) -> None:
        host = self._host
        host.attach(anchors.control, wrapper)
        host.apply_control_fixups(anchors.control)
        self._hide_grip(anchors.control)

        if anchors.degraded is not None:
            self._log.error(str(anchors.degraded))

        context = RelocationContext(
            control=anchors.control,
            wrapper=wrapper,
            title_anchor=anchors.title_anchor,
            alternate_anchor=anchors.alternate_anchor,
            margins=Margins(top=self._placement.primary_top_margin),
        )
        self._context = context
        self.place()

        # Title bar visibility flips when switching between normal and full screen.
        context.subscriptions.add(
            host.subscribe(anchors.title_anchor, HostEvent.VISIBILITY_CHANGED, self.place)
        )
        # Other title bar content (such as the info control) can appear later.
        context.subscriptions.add(
            host.subscribe(anchors.title_anchor, HostEvent.LAYOUT_UPDATED, self.align_to_info_control)
        )

    def _restore(self, anchors: AnchorSet, wrapper: Node) -> None:
        """Put the control back in its source after a failed move."""
        host = self._host
        context = self._context
        self._context = None
        if context is not None:
            context.subscriptions.dispose_all()
            if context.current_parent is not None:
                host.detach(wrapper, context.current_parent)
        if host.parent(anchors.control) is wrapper:
            host.detach(anchors.control, wrapper)
        if host.parent(anchors.control) is None:
            host.attach(anchors.control, anchors.source)
        _LOGGER.debug("Toolbar returned to %s after failed move", self.profile.source_name)

    def _hide_grip(self, control: Node) -> None:
        grip_name = self.profile.grip_name
        if not grip_name:
            return
        grip = first_match(self._host, control, SearchQuery.by_name(grip_name))
        if grip is not None:
            self._host.set_visible(grip, False)

    # Placement -------------------------------------------------------------

    def current_mode(self) -> LayoutMode:
        context = self._context
        if context is not None and self._host.is_visible(context.title_anchor):
            return LayoutMode.PRIMARY
        return LayoutMode.ALTERNATE

    def place(self) -> Optional[LayoutMode]:
        context = self._context
        if context is None:
            return None
        host = self._host
        mode = self.current_mode()
        _LOGGER.debug("Inserting toolbar for %s layout", mode.value)

        if context.current_parent is not None:
            host.detach(context.wrapper, context.current_parent)
            context.current_parent = None

        if mode is LayoutMode.PRIMARY:
            grid = child_at_path(host, context.title_anchor, self._placement.primary_grid_path)
            if grid is None:
                self._log.error(
                    f"Title bar grid not found at child path {list(self._placement.primary_grid_path)}"
                )
            else:
                self._apply_margins(context.margins.with_top(self._placement.primary_top_margin))
                host.attach(context.wrapper, grid, slot=self._placement.primary_grid_slot)
                context.current_parent = grid
        elif context.alternate_anchor is not None:
            container = host.parent(context.alternate_anchor)
            if container is None:
                _LOGGER.debug("Full screen menu bar has no parent panel; toolbar left detached")
            else:
                self._apply_margins(context.margins.with_top(self._placement.alternate_top_margin))
                host.attach(context.wrapper, container)
                context.current_parent = container
                # The host hides the toolbar during this transition.
                host.set_visible(context.control, True)
        else:
            _LOGGER.debug("Full screen layout has no anchor; toolbar left detached")

        context.mode = mode
        return mode

    def align_to_info_control(self) -> None:
        """Keep the wrapper clear of the title bar info control."""
        context = self._context
        if context is None or self.current_mode() is not LayoutMode.PRIMARY:
            return
        profile = self.profile
        if not profile.info_control_type:
            return
        host = self._host
        info_control = first_match(host, context.title_anchor, SearchQuery.by_type(profile.info_control_type))
        if info_control is None:
            return
        target = info_control
        if profile.info_text_name:
            target = first_match(host, info_control, SearchQuery.by_name(profile.info_text_name))
            if target is None:
                _LOGGER.debug("Could not find %s in %s", profile.info_text_name, profile.info_control_type)
                return
        left = int(round(host.width(target) + self._placement.info_padding))
        if left == context.margins.left:
            return
        self._apply_margins(context.margins.with_left(left))

    def _apply_margins(self, margins: Margins) -> None:
        context = self._context
        if context is None:
            return
        context.margins = margins
        self._host.set_margins(context.wrapper, margins)
