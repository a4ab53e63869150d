"""Save dialog for the printable PDF sheet.

The stored sheet is drawn and written on a worker thread; unsaved edits in
the sheet panel are not included.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import gi

gi.require_version("Gtk", "4.0")

from gi.repository import Gio, GLib, Gtk  # noqa: E402

from v5_sheets.gui.worker import run_in_background  # noqa: E402

if TYPE_CHECKING:
    from v5_sheets.gui.session import SessionManager
    from v5_sheets.gui.window import V5SheetsWindow

LOG = logging.getLogger(__name__)


def file_filter(name: str, mime_types: tuple[str, ...]) -> Gio.ListStore:
    """A one-entry filter list for ``Gtk.FileDialog``."""
    pattern = Gtk.FileFilter(name=name)
    for mime in mime_types:
        pattern.add_mime_type(mime)
    filters = Gio.ListStore.new(Gtk.FileFilter)
    filters.append(pattern)
    return filters


def save_pdf(session: SessionManager, window: V5SheetsWindow, character_id: str) -> None:
    ch = session.store.get(character_id)
    if ch is None:
        window.show_message("Character not found")
        return

    dialog = Gtk.FileDialog(
        title="Export PDF",
        modal=True,
        initial_name=f"{ch.name or 'character'}.pdf",
        filters=file_filter("PDF documents", ("application/pdf",)),
    )

    def on_chosen(dlg: Gtk.FileDialog, result: Gio.AsyncResult) -> None:
        try:
            chosen = dlg.save_finish(result)
        except GLib.Error as exc:
            LOG.debug("PDF export cancelled: %s", exc.message)
            return
        path = chosen.get_path()
        if path is None:
            window.show_message("Choose a local file to save the PDF")
            return
        run_in_background(
            lambda: session.export_pdf(character_id, path),
            lambda outcome: window.show_message(outcome[1]),
            lambda message: window.show_message(f"PDF export failed: {message}"),
        )

    dialog.save(window, None, on_chosen)
