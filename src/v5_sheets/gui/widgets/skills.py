"""Skill allocation group with SpinRows and a live preset label."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

import gi

gi.require_version("Gtk", "4.0")
gi.require_version("Adw", "1")

from gi.repository import Adw, Gtk  # noqa: E402

from v5_sheets.models.constants import SKILLS_BY_CATEGORY  # noqa: E402

if TYPE_CHECKING:
    from v5_sheets.gui.session import SessionManager
    from v5_sheets.gui.window import V5SheetsWindow


class SkillsGroup(Adw.PreferencesGroup):
    __gtype_name__ = "SkillsGroup"

    def __init__(
        self,
        session: SessionManager,
        window: V5SheetsWindow,
        on_changed: Callable[[], None],
    ) -> None:
        super().__init__(title="Skills")
        self._session = session
        self._window = window
        self._on_changed = on_changed
        self._updating = False

        # Preset label in the header suffix.
        self._preset_label = Gtk.Label(wrap=True)
        self._preset_label.add_css_class("dim-label")
        self.set_header_suffix(self._preset_label)

        character = session.wizard.character
        self._spin_rows: dict[str, Adw.SpinRow] = {}
        for category, names in SKILLS_BY_CATEGORY.items():
            expander = Adw.ExpanderRow(title=f"{category.title()} Skills", expanded=True)
            for name in names:
                adj = Gtk.Adjustment(
                    value=character.get_skill(name),
                    lower=0,
                    upper=session.config.max_dots,
                    step_increment=1,
                    page_increment=1,
                    page_size=0,
                )
                row = Adw.SpinRow(title=name, adjustment=adj)
                row.set_numeric(True)
                row.set_wrap(False)
                row.connect("notify::value", self._on_spin_changed, name)
                expander.add_row(row)
                self._spin_rows[name] = row
            self.add(expander)

        self._update_preset_label()

    def _on_spin_changed(self, row: Adw.SpinRow, _pspec: object, skill: str) -> None:
        if self._updating:
            return
        ok, message = self._session.set_skill(skill, int(row.get_value()))
        if not ok:
            # Revert the spin row to the sheet's value.
            self._updating = True
            row.set_value(self._session.wizard.character.get_skill(skill))
            self._updating = False
            self._window.show_message(message)
            return
        self._update_preset_label()
        self._on_changed()

    def _update_preset_label(self) -> None:
        wizard = self._session.wizard
        exact = wizard.matching_preset()
        if exact is not None:
            self._preset_label.set_label(f"Complete: {exact.name}")
            return
        names = ", ".join(p.name for p in wizard.available_presets()) or "none"
        self._preset_label.set_label(f"Fits: {names}")
