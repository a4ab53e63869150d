"""Attribute pool: drag values from the pool onto attributes.

Drag payloads are strings: ``"value:<n>"`` for a chip from the pool and
``"attr:<name>"`` for a value already sitting on an attribute. Dropping on
an attribute assigns or swaps; dropping on the pool returns the value.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

import gi

gi.require_version("Gtk", "4.0")
gi.require_version("Gdk", "4.0")
gi.require_version("Adw", "1")

from gi.repository import Adw, Gdk, GObject, Gtk  # noqa: E402

from v5_sheets.models.constants import ALL_ATTRIBUTES  # noqa: E402

if TYPE_CHECKING:
    from v5_sheets.gui.session import SessionManager
    from v5_sheets.gui.window import V5SheetsWindow


def _drag_source(widget: Gtk.Widget, payload: str) -> None:
    source = Gtk.DragSource(actions=Gdk.DragAction.MOVE)
    source.connect(
        "prepare",
        lambda _src, _x, _y: Gdk.ContentProvider.new_for_value(payload),
    )
    widget.add_controller(source)


def _drop_target(widget: Gtk.Widget, handler, *args: object) -> None:  # noqa: ANN001
    target = Gtk.DropTarget.new(GObject.TYPE_STRING, Gdk.DragAction.MOVE)
    target.connect("drop", handler, *args)
    widget.add_controller(target)


class AttributePoolGroup(Adw.PreferencesGroup):
    __gtype_name__ = "AttributePoolGroup"

    def __init__(
        self,
        session: SessionManager,
        window: V5SheetsWindow,
        on_changed: Callable[[], None],
    ) -> None:
        super().__init__(
            title="Attributes",
            description="Drag each value onto an attribute. Drag back here to unassign.",
        )
        self._session = session
        self._window = window
        self._on_changed = on_changed

        self._pool_box = Gtk.FlowBox(
            selection_mode=Gtk.SelectionMode.NONE,
            max_children_per_line=9,
            min_children_per_line=1,
        )
        self._pool_box.set_size_request(-1, 48)
        _drop_target(self._pool_box, self._on_drop_pool)
        self.add(self._pool_box)

        self._rows: dict[str, Adw.ActionRow] = {}
        self._value_labels: dict[str, Gtk.Label] = {}
        for name in ALL_ATTRIBUTES:
            row = Adw.ActionRow(title=name)
            label = Gtk.Label(css_classes=["title-2"])
            _drag_source(label, f"attr:{name}")
            row.add_suffix(label)
            _drop_target(row, self._on_drop_attribute, name)
            self.add(row)
            self._rows[name] = row
            self._value_labels[name] = label

        self.refresh()

    def refresh(self) -> None:
        pool = self._session.wizard.pool
        while (child := self._pool_box.get_first_child()) is not None:
            self._pool_box.remove(child)
        for value in pool.available_values():
            chip = Gtk.Button(label=str(value), css_classes=["pill"])
            _drag_source(chip, f"value:{value}")
            self._pool_box.append(chip)
        for name, label in self._value_labels.items():
            value = pool.value_of(name)
            label.set_label("–" if value is None else str(value))

    # -- Drops -----------------------------------------------------------------

    def _on_drop_attribute(
        self, _target: Gtk.DropTarget, payload: str, _x: float, _y: float, name: str,
    ) -> bool:
        kind, _, ref = payload.partition(":")
        if kind == "value":
            ok, message = self._session.drop_attribute_value(name, int(ref))
        elif kind == "attr":
            ok, message = self._session.drop_attribute_on_attribute(ref, name)
        else:
            return False
        return self._finish(ok, message)

    def _on_drop_pool(self, _target: Gtk.DropTarget, payload: str, _x: float, _y: float) -> bool:
        kind, _, ref = payload.partition(":")
        if kind != "attr":
            return False
        ok, message = self._session.return_attribute_to_pool(ref)
        return self._finish(ok, message)

    def _finish(self, ok: bool, message: str | None) -> bool:
        if not ok:
            self._window.show_message(message)
        self.refresh()
        self._on_changed()
        return ok
