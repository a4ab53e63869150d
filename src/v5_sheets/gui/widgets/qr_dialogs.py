"""QR export and import dialogs.

Export renders the compressed payload as a QR image on a worker thread.
Import takes the scanned payload text (pasted from any scanner app) or a
photo or screenshot of the code, previews the decoded sheet, and stores it
on confirmation.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import gi

gi.require_version("Gtk", "4.0")
gi.require_version("Gdk", "4.0")
gi.require_version("Adw", "1")

from gi.repository import Adw, Gdk, Gio, GLib, Gtk  # noqa: E402

from v5_sheets.gui.widgets.pdf_dialog import file_filter  # noqa: E402
from v5_sheets.gui.worker import run_in_background  # noqa: E402
from v5_sheets.transfer.qr import character_summary, png_bytes, render_qr  # noqa: E402

if TYPE_CHECKING:
    from v5_sheets.gui.session import SessionManager
    from v5_sheets.gui.window import V5SheetsWindow
    from v5_sheets.models.character import CharacterBase

LOG = logging.getLogger(__name__)


def _dialog_shell(window: V5SheetsWindow, title: str) -> tuple[Adw.Window, Gtk.Box]:
    dialog = Adw.Window(transient_for=window, modal=True, title=title)
    dialog.set_default_size(420, 520)
    body = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=12)
    for side in ("start", "end", "top", "bottom"):
        getattr(body, f"set_margin_{side}")(18)
    outer = Gtk.Box(orientation=Gtk.Orientation.VERTICAL)
    outer.append(Adw.HeaderBar())
    outer.append(body)
    dialog.set_content(outer)
    return dialog, body


class ExportDialog:
    """Shows one character's QR code."""

    def __init__(
        self,
        session: SessionManager,
        window: V5SheetsWindow,
        character_id: str,
    ) -> None:
        self._session = session
        self._window = window
        self._dialog, body = _dialog_shell(window, "Export QR Code")

        self._picture = Gtk.Picture(can_shrink=True, vexpand=True)
        self._spinner = Gtk.Spinner(spinning=True)
        body.append(self._spinner)
        body.append(self._picture)

        self._payload = session.export_payload(character_id)
        ch = session.store.get(character_id)
        if ch is not None:
            body.append(Gtk.Label(label=character_summary(ch), xalign=0))

        copy_btn = Gtk.Button(label="Copy Payload")
        copy_btn.connect("clicked", self._on_copy)
        copy_btn.set_sensitive(self._payload is not None)
        body.append(copy_btn)

        if self._payload is None:
            self._spinner.set_spinning(False)
            window.show_message("Character not found")
        else:
            payload = self._payload
            run_in_background(
                lambda: png_bytes(render_qr(payload)),
                self._on_rendered,
                self._on_failed,
            )

    def present(self) -> None:
        self._dialog.present()

    def _on_rendered(self, data: bytes) -> None:
        self._spinner.set_spinning(False)
        texture = Gdk.Texture.new_from_bytes(GLib.Bytes.new(data))
        self._picture.set_paintable(texture)

    def _on_failed(self, message: str) -> None:
        self._spinner.set_spinning(False)
        self._window.show_message(f"QR rendering failed: {message}")

    def _on_copy(self, _btn: Gtk.Button) -> None:
        self._dialog.get_clipboard().set_content(Gdk.ContentProvider.new_for_value(self._payload))
        self._window.show_message("Payload copied")


class ImportDialog:
    """Decodes a scanned payload and adds the character after a preview."""

    def __init__(self, session: SessionManager, window: V5SheetsWindow) -> None:
        self._session = session
        self._window = window
        self._pending: CharacterBase | None = None
        self._dialog, body = _dialog_shell(window, "Import QR Code")

        body.append(Gtk.Label(label="Paste the scanned QR payload:", xalign=0))
        self._text = Gtk.TextView(wrap_mode=Gtk.WrapMode.CHAR, monospace=True)
        scroll = Gtk.ScrolledWindow(vexpand=True, min_content_height=160)
        scroll.set_child(self._text)
        body.append(scroll)

        buttons = Gtk.Box(spacing=6, homogeneous=True)
        preview_btn = Gtk.Button(label="Preview")
        preview_btn.connect("clicked", self._on_preview)
        buttons.append(preview_btn)
        image_btn = Gtk.Button(label="Open Image…")
        image_btn.connect("clicked", self._on_open_image)
        buttons.append(image_btn)
        body.append(buttons)

        self._summary = Gtk.Label(xalign=0, wrap=True)
        body.append(self._summary)

        self._import_btn = Gtk.Button(label="Import", sensitive=False)
        self._import_btn.add_css_class("suggested-action")
        self._import_btn.connect("clicked", self._on_import)
        body.append(self._import_btn)

    def present(self) -> None:
        self._dialog.present()

    def _on_preview(self, _btn: Gtk.Button) -> None:
        buffer = self._text.get_buffer()
        text = buffer.get_text(buffer.get_start_iter(), buffer.get_end_iter(), False)
        self._import_btn.set_sensitive(False)
        run_in_background(
            lambda: self._session.preview_import(text),
            self._on_decoded,
            lambda message: self._window.show_message(message),
        )

    def _on_open_image(self, _btn: Gtk.Button) -> None:
        dialog = Gtk.FileDialog(
            title="Open QR Image",
            modal=True,
            filters=file_filter("QR images", ("image/png", "image/jpeg")),
        )
        dialog.open(self._dialog, None, self._on_image_chosen)

    def _on_image_chosen(self, dialog: Gtk.FileDialog, result: Gio.AsyncResult) -> None:
        try:
            chosen = dialog.open_finish(result)
        except GLib.Error as exc:
            LOG.debug("QR image selection cancelled: %s", exc.message)
            return
        path = chosen.get_path()
        if path is None:
            self._window.show_message("Choose a local image file")
            return
        self._import_btn.set_sensitive(False)
        run_in_background(
            lambda: self._session.preview_import_image(path),
            self._on_decoded,
            lambda message: self._window.show_message(message),
        )

    def _on_decoded(self, character: CharacterBase | None) -> None:
        self._pending = character
        if character is None:
            self._summary.set_label("Not a valid character QR code.")
            return
        self._summary.set_label(character_summary(character))
        self._import_btn.set_sensitive(True)

    def _on_import(self, _btn: Gtk.Button) -> None:
        if self._pending is None:
            return
        ok, message = self._session.accept_import(self._pending)
        if not ok:
            self._window.show_message(message)
            return
        self._window.show_message(f"Imported {self._pending.name or 'character'}")
        self._pending = None
        self._dialog.close()
        self._window.emit("characters-changed")
