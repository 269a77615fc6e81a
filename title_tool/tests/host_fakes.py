"""In-memory host tree used to drive the relocation core without Qt."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from title_tool.host import GridSlot, HostEvent, Margins, Subscription


@dataclass(eq=False)
class FakeNode:
    type_name: str
    name: Optional[str] = None
    visible: bool = True
    width: float = 0.0
    loaded: bool = True
    children: List["FakeNode"] = field(default_factory=list)
    parent: Optional["FakeNode"] = None
    margins: Margins = field(default_factory=Margins)
    fixed: bool = False

    def add(self, *children: "FakeNode") -> "FakeNode":
        for child in children:
            child.parent = self
            self.children.append(child)
        return self

    @property
    def label(self) -> str:
        return self.name or self.type_name

    def __repr__(self) -> str:
        return f"FakeNode({self.label})"


class FakeHost:
    def __init__(self) -> None:
        self.operations: List[Tuple] = []
        self._handlers: Dict[Tuple[int, HostEvent], List[Callable[[], None]]] = {}
        self.wrappers: List[FakeNode] = []

    # Queries ---------------------------------------------------------------

    def children(self, node: FakeNode) -> List[FakeNode]:
        return list(node.children)

    def type_name(self, node: FakeNode) -> str:
        return node.type_name

    def name(self, node: FakeNode) -> Optional[str]:
        return node.name

    def is_visible(self, node: FakeNode) -> bool:
        return node.visible

    def is_loaded(self, node: FakeNode) -> bool:
        return node.loaded

    def width(self, node: FakeNode) -> float:
        return node.width

    def parent(self, node: FakeNode) -> Optional[FakeNode]:
        return node.parent

    # Mutations -------------------------------------------------------------

    def create_wrapper(self, source: FakeNode) -> FakeNode:
        wrapper = FakeNode("QWidget", "TitleToolWrapper")
        self.wrappers.append(wrapper)
        self.operations.append(("create_wrapper", source.label))
        return wrapper

    def detach(self, node: FakeNode, container: FakeNode) -> None:
        container.children.remove(node)
        node.parent = None
        self.operations.append(("detach", node.label, container.label))

    def attach(self, node: FakeNode, container: FakeNode, slot: Optional[GridSlot] = None) -> None:
        if node.parent is not None:
            raise AssertionError(f"{node.label} already attached to {node.parent.label}")
        container.add(node)
        self.operations.append(("attach", node.label, container.label, slot))

    def set_margins(self, node: FakeNode, margins: Margins) -> None:
        node.margins = margins
        self.operations.append(("margins", node.label, margins))

    def set_visible(self, node: FakeNode, visible: bool) -> None:
        node.visible = visible
        self.operations.append(("visible", node.label, visible))

    def apply_control_fixups(self, control: FakeNode) -> None:
        control.fixed = True
        self.operations.append(("fixups", control.label))

    # Notifications ---------------------------------------------------------

    def subscribe(self, node: FakeNode, event: HostEvent, callback: Callable[[], None]) -> Subscription:
        key = (id(node), event)
        self._handlers.setdefault(key, []).append(callback)

        def _dispose() -> None:
            handlers = self._handlers.get(key, [])
            if callback in handlers:
                handlers.remove(callback)

        return Subscription(_dispose, label=f"{event.value}:{node.label}")

    def fire(self, node: FakeNode, event: HostEvent) -> int:
        handlers = list(self._handlers.get((id(node), event), []))
        for handler in handlers:
            handler()
        return len(handlers)

    def handler_count(self, node: Optional[FakeNode] = None, event: Optional[HostEvent] = None) -> int:
        total = 0
        for (node_id, registered_event), handlers in self._handlers.items():
            if node is not None and node_id != id(node):
                continue
            if event is not None and registered_event is not event:
                continue
            total += len(handlers)
        return total

    def mutations(self) -> List[Tuple]:
        return list(self.operations)


@dataclass
class HostTree:
    host: FakeHost
    root: FakeNode
    title: FakeNode
    info_text: FakeNode
    menu: Optional[FakeNode]
    menu_panel: FakeNode
    tray: Optional[FakeNode]
    toolbar: Optional[FakeNode]


def build_host_tree(
    *,
    with_tray: bool = True,
    with_toolbar: bool = True,
    with_title: bool = True,
    with_menu: bool = True,
    title_visible: bool = True,
) -> HostTree:
    host = FakeHost()
    root = FakeNode("QMainWindow", "MainWindow")
    central = FakeNode("QWidget")
    root.add(central)

    title = FakeNode("QWidget", "MainWindowTitleBar" if with_title else "OtherTitle", visible=title_visible)
    info = FakeNode("SolutionInfoControl")
    info_text = FakeNode("QLabel", "TextBorder", width=120)
    info.add(info_text)
    title.add(FakeNode("QLabel", "Caption"), info)
    central.add(title)

    menu_panel = FakeNode("QWidget", "FullScreenPanel")
    menu = None
    if with_menu:
        menu = FakeNode("QMenuBar", "PART_MainMenuBar")
        menu_panel.add(menu)
    central.add(menu_panel)

    tray = None
    toolbar = None
    if with_tray:
        tray = FakeNode("QWidget", "TopDockTray")
        tray.add(FakeNode("QToolBar", "Standard"))
        if with_toolbar:
            toolbar = FakeNode("QToolBar", "TitleBar")
            toolbar.add(FakeNode("QWidget", "ToolBarThumb"))
            tray.add(toolbar)
        central.add(tray)

    return HostTree(
        host=host,
        root=root,
        title=title,
        info_text=info_text,
        menu=menu,
        menu_panel=menu_panel,
        tray=tray,
        toolbar=toolbar,
    )
