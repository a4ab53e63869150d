"""Main application window: character list on the left, sheet or wizard on the right."""

from __future__ import annotations

import gi

gi.require_version("Gtk", "4.0")
gi.require_version("Adw", "1")

from gi.repository import Adw, GObject, Gtk  # noqa: E402

from v5_sheets.models.constants import ALL_CHARACTER_TYPES, CharacterType  # noqa: E402


class V5SheetsWindow(Adw.ApplicationWindow):
    __gtype_name__ = "V5SheetsWindow"

    __gsignals__ = {
        "characters-changed": (GObject.SignalFlags.RUN_FIRST, None, ()),
        "selection-changed": (GObject.SignalFlags.RUN_FIRST, None, ()),
    }

    def __init__(self, **kwargs) -> None:  # noqa: ANN003
        super().__init__(**kwargs)
        self.set_title("V5 Character Sheets")
        self.set_default_size(1000, 720)

        session = self.get_application().session

        # -- Header bar -------------------------------------------------------
        header = Adw.HeaderBar()

        new_box = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=6)
        for character_type in ALL_CHARACTER_TYPES:
            btn = Gtk.Button(label=f"New {character_type.display_name}")
            btn.connect("clicked", self._on_new_clicked, character_type)
            new_box.append(btn)
        header.pack_start(new_box)

        import_btn = Gtk.Button(label="Import QR")
        import_btn.connect("clicked", self._on_import_clicked)
        header.pack_end(import_btn)

        # -- Left pane: character list ----------------------------------------
        from v5_sheets.gui.widgets.character_list import CharacterListGroup

        left_page = Adw.PreferencesPage()
        self._list = CharacterListGroup(session=session, window=self)
        left_page.add(self._list)

        left_scroll = Gtk.ScrolledWindow(
            hscrollbar_policy=Gtk.PolicyType.NEVER,
            vscrollbar_policy=Gtk.PolicyType.AUTOMATIC,
            vexpand=True,
        )
        left_scroll.set_size_request(300, -1)
        left_scroll.set_child(left_page)

        # -- Right pane: sheet or wizard --------------------------------------
        from v5_sheets.gui.widgets.sheet import SheetPanel
        from v5_sheets.gui.widgets.wizard import WizardPanel

        self._sheet = SheetPanel(session=session, window=self)
        self._wizard = WizardPanel(session=session, window=self)

        empty = Adw.StatusPage(
            title="No character selected",
            description="Pick a character or create a new one.",
        )

        self._stack = Gtk.Stack(hexpand=True, vexpand=True)
        self._stack.add_named(empty, "empty")
        self._stack.add_named(self._sheet, "sheet")
        self._stack.add_named(self._wizard, "wizard")

        # -- Layout -----------------------------------------------------------
        panes = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=0)
        panes.append(left_scroll)
        panes.append(Gtk.Separator(orientation=Gtk.Orientation.VERTICAL))
        panes.append(self._stack)

        self._toasts = Adw.ToastOverlay()
        self._toasts.set_child(panes)

        content = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=0)
        content.append(header)
        content.append(self._toasts)
        self.set_content(content)

        # -- Signal wiring ----------------------------------------------------
        self.connect("characters-changed", self._on_characters_changed)
        self.connect("selection-changed", self._on_selection_changed)

        self._on_characters_changed(self)

    # -- Helpers ---------------------------------------------------------------

    def show_message(self, message: str | None) -> None:
        if message:
            self._toasts.add_toast(Adw.Toast(title=message))

    def show_wizard(self) -> None:
        self._wizard.refresh()
        self._stack.set_visible_child_name("wizard")

    # -- Handlers --------------------------------------------------------------

    def _on_new_clicked(self, _btn: Gtk.Button, character_type: CharacterType) -> None:
        session = self.get_application().session
        wizard = session.start_creation(character_type)
        wizard.next()
        self.show_wizard()

    def _on_import_clicked(self, _btn: Gtk.Button) -> None:
        from v5_sheets.gui.widgets.qr_dialogs import ImportDialog

        ImportDialog(session=self.get_application().session, window=self).present()

    def _on_characters_changed(self, _widget: GObject.Object) -> None:
        self._list.refresh()
        self._on_selection_changed(self)

    def _on_selection_changed(self, _widget: GObject.Object) -> None:
        session = self.get_application().session
        if session.wizard is not None:
            self.show_wizard()
            return
        if session.selected is None:
            self._stack.set_visible_child_name("empty")
            return
        self._sheet.refresh()
        self._stack.set_visible_child_name("sheet")
