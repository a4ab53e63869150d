"""Character list grouped by chronicle, with in-creation and archived sections."""

from __future__ import annotations

from typing import TYPE_CHECKING

import gi

gi.require_version("Gtk", "4.0")
gi.require_version("Adw", "1")

from gi.repository import Adw, Gtk  # noqa: E402

from v5_sheets.engine.creation_wizard import STAGE_TITLES, CreationStage  # noqa: E402

if TYPE_CHECKING:
    from v5_sheets.gui.session import SessionManager
    from v5_sheets.gui.window import V5SheetsWindow
    from v5_sheets.models.character import CharacterBase


class CharacterListGroup(Adw.PreferencesGroup):
    __gtype_name__ = "CharacterListGroup"

    def __init__(
        self,
        session: SessionManager,
        window: V5SheetsWindow,
    ) -> None:
        super().__init__(title="Characters")
        self._session = session
        self._window = window
        self._rows: list[Gtk.Widget] = []

        self._show_archived = Gtk.ToggleButton(label="Archived")
        self._show_archived.add_css_class("flat")
        self._show_archived.connect("toggled", lambda _b: self.refresh())
        self.set_header_suffix(self._show_archived)

    def refresh(self) -> None:
        for row in self._rows:
            self.remove(row)
        self._rows.clear()

        store = self._session.store
        if self._show_archived.get_active():
            for ch in sorted(store.archived_characters(), key=lambda c: c.name.lower()):
                self._add_row(ch, "Archived")
        else:
            for chronicle, members in store.by_chronicle().items():
                for ch in members:
                    self._add_row(ch, chronicle)
            for ch in store.characters_in_creation():
                stage = STAGE_TITLES.get(CreationStage(ch.creation_progress), "")
                self._add_row(ch, f"In creation: {stage}")

        if not self._rows:
            placeholder = Adw.ActionRow(title="No characters yet")
            placeholder.add_css_class("dim-label")
            self.add(placeholder)
            self._rows.append(placeholder)

    def _add_row(self, ch: CharacterBase, subtitle: str) -> None:
        row = Adw.ActionRow(
            title=ch.name or "Unnamed",
            subtitle=f"{ch.character_type.display_name} · {subtitle}",
            activatable=True,
        )
        row.connect("activated", self._on_row_activated, ch.id)
        self.add(row)
        self._rows.append(row)

    def _on_row_activated(self, _row: Adw.ActionRow, character_id: str) -> None:
        ch = self._session.store.get(character_id)
        if ch is None:
            return
        if ch.is_in_creation:
            ok, message = self._session.resume_creation(character_id)
            if not ok:
                self._window.show_message(message)
                return
        else:
            self._session.cancel_creation(discard=False)
            self._session.select(character_id)
        self._window.emit("selection-changed")
