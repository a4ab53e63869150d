"""Adw.Application subclass: opens the character store and the main window."""

from __future__ import annotations

import logging

import gi

gi.require_version("Gtk", "4.0")
gi.require_version("Adw", "1")

from gi.repository import Adw, Gio  # noqa: E402

from v5_sheets.gui.session import SessionManager  # noqa: E402
from v5_sheets.storage.store import CharacterStore, default_store_path  # noqa: E402

LOG = logging.getLogger(__name__)


class V5SheetsApp(Adw.Application):
    def __init__(self) -> None:
        super().__init__(
            application_id="io.github.v5_sheets",
            flags=Gio.ApplicationFlags.FLAGS_NONE,
        )
        self.session: SessionManager | None = None

    def do_activate(self) -> None:
        if self.session is None:
            path = default_store_path()
            LOG.info("Opening character store at %s", path)
            self.session = SessionManager(CharacterStore.open(path))

        from v5_sheets.gui.window import V5SheetsWindow

        win = self.get_active_window() or V5SheetsWindow(application=self)
        win.present()
