# print_designer/core/engine.py
"""
Editing engine: the single in-memory authority over one open document.

Element CRUD, selection, z-order, align / distribute and a bounded
undo/redo history. Elements are immutable, so a history entry is just the
tuple of elements that was current before an action.

One user-visible action produces exactly one history entry. Low-level
updates (update_element / update_elements) never record history on their
own; callers that batch them call save_to_history() first.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .exceptions import KindMismatchError, UnknownElementError
from .models import Canvas, Element, TemplateDoc, TemplateMeta, new_id, validate_elements
from .settings import DesignerSettings
from ..utils.log import get_logger

log = get_logger(__name__)

Snapshot = Tuple[Element, ...]

ALIGNMENTS = {
    "left": "x",
    "center": "x",
    "right": "x",
    "top": "y",
    "middle": "y",
    "bottom": "y",
}

DIRECTIONS = {"horizontal": "x", "vertical": "y"}


@dataclass
class History:
    """Undo/redo stacks of element snapshots; past is capped at *limit*."""
    limit: int = 50
    past: List[Snapshot] = field(default_factory=list)
    future: List[Snapshot] = field(default_factory=list)

    def push(self, snapshot: Snapshot) -> None:
        self.past.append(snapshot)
        overflow = len(self.past) - self.limit
        if overflow > 0:
            del self.past[:overflow]
        self.future.clear()

    def clear(self) -> None:
        self.past.clear()
        self.future.clear()


class DesignEngine:
    """
    Command API over one document's elements.

    The engine is synchronous and single-writer: every public method
    completes its mutation before returning.
    """

    def __init__(
        self,
        canvas: Canvas,
        elements: Iterable[Element] = (),
        settings: Optional[DesignerSettings] = None,
    ):
        self.settings = settings or DesignerSettings()
        self.canvas = canvas
        self.elements: Snapshot = ()
        self.selected_ids: List[str] = []
        self.history = History(limit=self.settings.history_limit)
        self.dirty = False
        self.load_elements(elements)

    @classmethod
    def from_document(cls, doc: TemplateDoc, settings: Optional[DesignerSettings] = None) -> "DesignEngine":
        return cls(doc.canvas, doc.elements, settings=settings)

    @property
    def kind(self) -> str:
        return self.canvas.kind

    # -----------------------------------------------------------------------
    # Lookup / snapshots
    # -----------------------------------------------------------------------

    def get_element(self, element_id: str) -> Element:
        for el in self.elements:
            if el.id == element_id:
                return el
        raise UnknownElementError(f"No element with id {element_id!r}")

    def find(self, element_id: str) -> Optional[Element]:
        for el in self.elements:
            if el.id == element_id:
                return el
        return None

    def snapshot(self) -> Tuple[Snapshot, Canvas]:
        """(elements, canvas) for a compiler; both are immutable."""
        return self.elements, self.canvas

    def document(self, meta: Optional[TemplateMeta] = None, **kwargs) -> TemplateDoc:
        meta = meta or TemplateMeta(kind=self.kind)
        return TemplateDoc(meta=meta, canvas=self.canvas, elements=self.elements, **kwargs)

    def in_z_order(self) -> List[Element]:
        return sorted(self.elements, key=lambda el: el.z)

    # -----------------------------------------------------------------------
    # Element CRUD
    # -----------------------------------------------------------------------

    def add_element(self, element: Element) -> str:
        """
        Add *element* with a fresh id on top of everything else and select it.
        Any id / z already on *element* is replaced.
        """
        self._check_kind(element)
        new = replace(element, id=new_id(), z=self._next_front_z())

        self.save_to_history()
        self.elements = self.elements + (new,)
        self.selected_ids = [new.id]
        self.dirty = True
        log.debug("add %s %s z=%s", new.type, new.id, new.z)
        return new.id

    def update_element(self, element_id: str, changes: Mapping[str, object]) -> None:
        """Shallow-merge *changes* into one element. Does not record history."""
        self.update_elements({element_id: changes})

    def update_elements(self, updates: Mapping[str, Mapping[str, object]] | Iterable[Tuple[str, Mapping[str, object]]]) -> None:
        """Shallow-merge changes into several elements at once. Does not record history."""
        if isinstance(updates, Mapping):
            update_map = dict(updates)
        else:
            update_map = {}
            for element_id, changes in updates:
                update_map.setdefault(element_id, {}).update(changes)
        if not update_map:
            return

        new_elements = []
        touched = False
        for el in self.elements:
            changes = update_map.get(el.id)
            if changes:
                new_elements.append(_apply_changes(el, changes))
                touched = True
            else:
                new_elements.append(el)
        if touched:
            self.elements = tuple(new_elements)
            self.dirty = True

    def remove_element(self, element_id: str) -> None:
        self.remove_elements([element_id])

    def remove_elements(self, ids: Iterable[str]) -> None:
        id_set = set(ids)
        if not any(el.id in id_set for el in self.elements):
            return

        self.save_to_history()
        self.elements = tuple(el for el in self.elements if el.id not in id_set)
        self.selected_ids = [sid for sid in self.selected_ids if sid not in id_set]
        self.dirty = True
        log.debug("removed %d element(s)", len(id_set))

    def duplicate_elements(self, ids: Optional[Iterable[str]] = None) -> List[str]:
        """
        Clone the given (default: selected) elements, offset by the configured
        delta and stacked above everything in their original relative order.
        The clones become the selection. Returns the new ids.
        """
        id_set = set(self.selected_ids if ids is None else ids)
        sources = [el for el in self.in_z_order() if el.id in id_set]
        if not sources:
            return []

        delta = self.settings.duplicate_offset
        top = self._next_front_z()
        clones = [
            replace(el, id=new_id(), z=top + i, rect=el.rect.offset(delta, delta))
            for i, el in enumerate(sources)
        ]

        self.save_to_history()
        self.elements = self.elements + tuple(clones)
        self.selected_ids = [c.id for c in clones]
        self.dirty = True
        return list(self.selected_ids)

    # -----------------------------------------------------------------------
    # Selection
    # -----------------------------------------------------------------------

    def set_selection(self, ids: Iterable[str]) -> None:
        existing = {el.id for el in self.elements}
        selection: List[str] = []
        for element_id in ids:
            if element_id in existing and element_id not in selection:
                selection.append(element_id)
        self.selected_ids = selection

    def add_to_selection(self, element_id: str) -> None:
        if element_id not in self.selected_ids and self.find(element_id) is not None:
            self.selected_ids = self.selected_ids + [element_id]

    def remove_from_selection(self, element_id: str) -> None:
        self.selected_ids = [sid for sid in self.selected_ids if sid != element_id]

    def select_all(self) -> None:
        self.selected_ids = [el.id for el in self.elements if not el.locked and not el.hidden]

    def clear_selection(self) -> None:
        self.selected_ids = []

    def selected_elements(self) -> List[Element]:
        selected = set(self.selected_ids)
        return [el for el in self.elements if el.id in selected]

    # -----------------------------------------------------------------------
    # Z-order
    # -----------------------------------------------------------------------

    def bring_to_front(self, element_id: str) -> None:
        el = self.find(element_id)
        if el is None:
            return
        others = [o.z for o in self.elements if o.id != element_id]
        if not others or el.z > max(others):
            return
        self._set_z(element_id, max(others) + 1.0)

    def send_to_back(self, element_id: str) -> None:
        el = self.find(element_id)
        if el is None:
            return
        others = [o.z for o in self.elements if o.id != element_id]
        if not others or el.z < min(others):
            return
        self._set_z(element_id, min(others) - 1.0)

    def bring_forward(self, element_id: str) -> None:
        """Swap past the next element above; the new z sits between it and the one after."""
        self._step_z(element_id, +1)

    def send_backward(self, element_id: str) -> None:
        """Swap past the next element below; the new z sits between it and the one before."""
        self._step_z(element_id, -1)

    def _step_z(self, element_id: str, direction: int) -> None:
        if self.find(element_id) is None:
            return
        order = [el for el in self.in_z_order() if el.id != element_id]
        current = self.get_element(element_id).z
        if direction > 0:
            beyond = [el for el in order if el.z > current]
            if not beyond:
                return
        else:
            beyond = [el for el in reversed(order) if el.z < current]
            if not beyond:
                return

        self.save_to_history()
        new_z = self._z_after(beyond, direction)
        if new_z is None:
            # Floats between the two neighbours are exhausted.
            self._renumber_z()
            current = self.get_element(element_id).z
            order = [el for el in self.in_z_order() if el.id != element_id]
            if direction > 0:
                beyond = [el for el in order if el.z > current]
            else:
                beyond = [el for el in reversed(order) if el.z < current]
            new_z = self._z_after(beyond, direction)
        self._replace(element_id, z=new_z)
        self.dirty = True

    @staticmethod
    def _z_after(beyond: Sequence[Element], direction: int) -> Optional[float]:
        neighbour = beyond[0].z
        if len(beyond) == 1:
            return neighbour + direction * 1.0
        further = beyond[1].z
        mid = (neighbour + further) / 2.0
        lo, hi = min(neighbour, further), max(neighbour, further)
        if lo < mid < hi:
            return mid
        return None

    def _set_z(self, element_id: str, z: float) -> None:
        self.save_to_history()
        self._replace(element_id, z=z)
        self.dirty = True

    def _renumber_z(self) -> None:
        """Dense integer z values in the current order."""
        rank: Dict[str, float] = {el.id: float(i) for i, el in enumerate(self.in_z_order())}
        self.elements = tuple(replace(el, z=rank[el.id]) for el in self.elements)

    def _next_front_z(self) -> float:
        if not self.elements:
            return 0.0
        return max(el.z for el in self.elements) + 1.0

    # -----------------------------------------------------------------------
    # Align / distribute
    # -----------------------------------------------------------------------

    def align_elements(self, alignment: str, ids: Optional[Iterable[str]] = None) -> None:
        """
        Align two or more elements (default: the selection) to the left, center,
        right, top, middle or bottom of their combined extent. Sizes are kept.

        Locked elements count towards the extent but are not moved.
        """
        try:
            axis = ALIGNMENTS[alignment]
        except KeyError:
            raise ValueError(f"Unknown alignment: {alignment!r}") from None

        selected = self._resolve(ids)
        if len(selected) < 2:
            return

        near = min(el.rect.start(axis) for el in selected)
        far = max(el.rect.start(axis) + el.rect.size(axis) for el in selected)

        updates: Dict[str, Dict[str, object]] = {}
        for el in selected:
            if el.locked:
                continue
            size = el.rect.size(axis)
            if alignment in ("left", "top"):
                target = near
            elif alignment in ("right", "bottom"):
                target = far - size
            else:
                target = (near + far) / 2.0 - size / 2.0
            updates[el.id] = {"rect": el.rect.moved_to(axis, target)}

        if not updates:
            return
        self.save_to_history()
        self.update_elements(updates)

    def distribute_elements(self, direction: str, ids: Optional[Iterable[str]] = None) -> None:
        """
        Spread three or more elements (default: the selection) so the gaps
        between them are equal. First and last stay where they are.

        Overlapping selections produce a negative gap; that is left as is.
        """
        try:
            axis = DIRECTIONS[direction]
        except KeyError:
            raise ValueError(f"Unknown distribution direction: {direction!r}") from None

        selected = sorted(self._resolve(ids), key=lambda el: el.rect.start(axis))
        if len(selected) < 3:
            return

        first, last = selected[0], selected[-1]
        span = last.rect.start(axis) + last.rect.size(axis) - first.rect.start(axis)
        occupied = sum(el.rect.size(axis) for el in selected)
        gap = (span - occupied) / (len(selected) - 1)

        updates: Dict[str, Dict[str, object]] = {}
        pos = first.rect.start(axis)
        for el in selected:
            if el is not first and el is not last and not el.locked:
                updates[el.id] = {"rect": el.rect.moved_to(axis, pos)}
            pos += el.rect.size(axis) + gap

        if not updates:
            return
        self.save_to_history()
        self.update_elements(updates)

    def _resolve(self, ids: Optional[Iterable[str]]) -> List[Element]:
        id_set = set(self.selected_ids if ids is None else ids)
        return [el for el in self.elements if el.id in id_set]

    # -----------------------------------------------------------------------
    # History
    # -----------------------------------------------------------------------

    @property
    def can_undo(self) -> bool:
        return bool(self.history.past)

    @property
    def can_redo(self) -> bool:
        return bool(self.history.future)

    def save_to_history(self) -> None:
        self.history.push(self.elements)

    def clear_history(self) -> None:
        self.history.clear()

    def undo(self) -> bool:
        if not self.history.past:
            return False
        previous = self.history.past.pop()
        self.history.future.append(self.elements)
        self.elements = previous
        self.selected_ids = []
        self.dirty = True
        return True

    def redo(self) -> bool:
        if not self.history.future:
            return False
        following = self.history.future.pop()
        self.history.past.append(self.elements)
        self.elements = following
        self.selected_ids = []
        self.dirty = True
        return True

    # -----------------------------------------------------------------------
    # Document-level
    # -----------------------------------------------------------------------

    def reset(self, canvas: Optional[Canvas] = None) -> None:
        if canvas is not None:
            self.canvas = canvas
        self.elements = ()
        self.selected_ids = []
        self.history.clear()
        self.dirty = False

    def load_elements(self, elements: Iterable[Element]) -> None:
        """Replace all elements; a freshly loaded document has no history and is clean."""
        elements = tuple(elements)
        validate_elements(self.kind, elements)
        self.elements = elements
        self.selected_ids = []
        self.history.clear()
        self.dirty = False

    def load_document(self, doc: TemplateDoc) -> None:
        self.canvas = doc.canvas
        self.load_elements(doc.elements)

    def set_canvas(self, canvas: Canvas) -> None:
        if canvas.kind != self.kind:
            raise KindMismatchError(f"Cannot switch a {self.kind!r} document to a {canvas.kind!r} canvas")
        self.canvas = canvas
        self.dirty = True

    def set_dirty(self, dirty: bool) -> None:
        self.dirty = bool(dirty)

    # -----------------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------------

    def _check_kind(self, element: Element) -> None:
        if element.canvas_kind != self.kind:
            raise KindMismatchError(
                f"{type(element).__name__} cannot be added to a {self.kind!r} canvas"
            )

    def _replace(self, element_id: str, **changes) -> None:
        self.elements = tuple(
            replace(el, **changes) if el.id == element_id else el for el in self.elements
        )


def _apply_changes(el: Element, changes: Mapping[str, object]) -> Element:
    if "id" in changes and changes["id"] != el.id:
        raise ValueError("Element ids cannot be changed")
    try:
        return replace(el, **dict(changes))
    except TypeError as e:
        raise ValueError(f"Invalid change for {el.type} element {el.id}: {e}") from e
