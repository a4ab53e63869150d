"""Run slow work (QR encoding, payload decoding) off the GTK main loop."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import TypeVar

import gi

gi.require_version("GLib", "2.0")

from gi.repository import GLib  # noqa: E402

LOG = logging.getLogger(__name__)

T = TypeVar("T")


def run_in_background(
    work: Callable[[], T],
    on_done: Callable[[T], None],
    on_error: Callable[[str], None] | None = None,
) -> threading.Thread:
    """Run ``work`` on a daemon thread; deliver the result on the main loop."""

    def deliver(fn: Callable[..., None], *args: object) -> bool:
        fn(*args)
        return GLib.SOURCE_REMOVE

    def target() -> None:
        try:
            result = work()
        except Exception as exc:  # noqa: BLE001
            LOG.exception("Background task failed")
            if on_error is not None:
                GLib.idle_add(deliver, on_error, str(exc))
            return
        GLib.idle_add(deliver, on_done, result)

    thread = threading.Thread(target=target, daemon=True)
    thread.start()
    return thread
