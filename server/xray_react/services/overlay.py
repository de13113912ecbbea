from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Protocol, Sequence, Set

from xray_react.config import ELEMENT_BATCH_SIZE, PATH_BATCH_SIZE
from xray_react.services.hierarchy import DomElement, hierarchy_for_element
from xray_react.services.project_context import ProjectContext
from xray_react.services.render_tree import ComponentInfo, component_for_node, is_markup_element
from xray_react.services.scheduler import BatchScheduler, SyncScheduler

logger = logging.getLogger(__name__)


@dataclass
class OverlayEntry:
    element: Any
    name: str
    uid: Optional[str] = None
    full_path: str = ""
    filtered_path: str = ""
    highlighted: bool = False

    @property
    def search_name(self) -> str:
        return self.name.lower()

    @property
    def preferred_path(self) -> str:
        return self.filtered_path or self.full_path


class OverlaySink(Protocol):
    """Receives the finished overlay entries (the overlay wrapper)."""

    def append(self, entries: List[OverlayEntry]) -> None: ...


def component_for_element(element: DomElement, context: ProjectContext) -> ComponentInfo:
    info = component_for_node(element.render_node(), context)
    if info.name:
        return info

    tag_name = (getattr(element, "tag_name", "") or "").lower()
    if is_markup_element(tag_name):
        return ComponentInfo(name=tag_name)
    return ComponentInfo()


class OverlayActivation:
    """
    One overlay activation over a set of DOM elements.

    Elements are turned into entries in batches of ``element_batch_size``,
    then hierarchy paths are computed in batches of ``path_batch_size``, and
    the finished entries are handed to the sink. ``deactivate`` detaches the
    sink; batches already scheduled still run but their output is dropped.
    """

    def __init__(
        self,
        context: ProjectContext,
        scheduler: Optional[BatchScheduler] = None,
        element_batch_size: int = ELEMENT_BATCH_SIZE,
        path_batch_size: int = PATH_BATCH_SIZE,
    ):
        self.context = context
        self.scheduler = scheduler or SyncScheduler()
        self.element_batch_size = element_batch_size
        self.path_batch_size = path_batch_size
        self.entries: List[OverlayEntry] = []
        self._sink: Optional[OverlaySink] = None
        self._generation = 0

    @property
    def active(self) -> bool:
        return self._sink is not None

    def activate(self, elements: Iterable[DomElement], sink: OverlaySink) -> None:
        self._generation += 1
        generation = self._generation
        self._sink = sink
        self.entries = []

        candidates = [elem for elem in elements if not getattr(elem, "is_overlay", False)]
        pending: List[OverlayEntry] = []
        seen_uids: Set[str] = set()

        def process_elements(batch: Sequence[DomElement]) -> None:
            if generation != self._generation:
                return
            for element in batch:
                info = component_for_element(element, self.context)
                if not info.name or info.name == "Unknown":
                    continue
                if info.uid:
                    if info.uid in seen_uids:
                        continue
                    seen_uids.add(info.uid)
                pending.append(OverlayEntry(element=element, name=info.name, uid=info.uid))

        def process_paths(batch: Sequence[OverlayEntry]) -> None:
            if generation != self._generation:
                return
            for entry in batch:
                paths = hierarchy_for_element(entry.element, entry.name, self.context)
                entry.full_path = paths.full
                entry.filtered_path = paths.filtered

        def finish() -> None:
            sink = self._sink
            if generation != self._generation or sink is None:
                # Toggled off while batches were in flight.
                return
            self.entries = pending
            sink.append(list(pending))
            logger.debug("Overlay activation produced %d entries", len(pending))

        def elements_done() -> None:
            if generation != self._generation:
                return
            self.scheduler.schedule_batch(pending, self.path_batch_size, process_paths, finish)

        self.scheduler.schedule_batch(
            candidates, self.element_batch_size, process_elements, elements_done
        )

    def deactivate(self) -> None:
        self._generation += 1
        self._sink = None
        self.entries = []

    def search(self, term: str) -> List[OverlayEntry]:
        """
        Highlight entries whose name starts or ends with ``term``. Terms
        shorter than two characters clear all highlights.
        """
        value = (term or "").lower()
        matches: List[OverlayEntry] = []
        for entry in self.entries:
            entry.highlighted = len(value) >= 2 and (
                entry.search_name.startswith(value) or entry.search_name.endswith(value)
            )
            if entry.highlighted:
                matches.append(entry)
        return matches
