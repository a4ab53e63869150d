"""QR export/import of a single character.

Export pipeline::

    character -> compact JSON -> zlib -> base64 text -> QR (error correction M)

Import runs it backwards, either on the text a scanner read from the code
or on an image of the code decoded with OpenCV. Any
failure along the way (bad base64, corrupt stream, invalid JSON, unknown
character type) is a soft failure: ``import_payload`` logs it and
returns ``None``. Payloads that are plain JSON envelopes are accepted too.
"""

from __future__ import annotations

import base64
import binascii
import io
import json
import logging
import zlib
from pathlib import Path

import cv2
import numpy as np
import qrcode
from PIL import Image
from qrcode.constants import ERROR_CORRECT_M

from v5_sheets.models.character import (
    CharacterBase,
    GhoulCharacter,
    MageCharacter,
    VampireCharacter,
)
from v5_sheets.transfer.codec import character_from_dict, character_to_dict, dumps

LOG = logging.getLogger(__name__)

COMPRESSION_LEVEL = 9


def export_payload(character: CharacterBase) -> str:
    """Character -> base64(zlib(JSON)) text suitable for a QR code."""
    raw = dumps(character_to_dict(character)).encode("utf-8")
    return base64.b64encode(zlib.compress(raw, COMPRESSION_LEVEL)).decode("ascii")


def import_payload(text: str) -> CharacterBase | None:
    """Decode scanned QR text. Returns None if it is not a character payload."""
    text = text.strip()
    if not text:
        return None
    try:
        if text.startswith("{"):
            envelope = json.loads(text)
        else:
            compressed = base64.b64decode(text, validate=True)
            envelope = json.loads(zlib.decompress(compressed).decode("utf-8"))
        return character_from_dict(envelope)
    except (binascii.Error, zlib.error, UnicodeDecodeError) as exc:
        LOG.debug("QR payload is not compressed character data: %s", exc)
    except (ValueError, RecursionError) as exc:
        LOG.warning("QR payload could not be decoded: %s", exc)
    return None


def render_qr(payload: str, box_size: int = 8, border: int = 4) -> Image.Image:
    """Render payload text as a black-on-white QR image."""
    qr = qrcode.QRCode(
        error_correction=ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(payload)
    qr.make(fit=True)
    return qr.make_image(fill_color="black", back_color="white").get_image()


def render_character_qr(character: CharacterBase, box_size: int = 8) -> Image.Image:
    return render_qr(export_payload(character), box_size=box_size)


def png_bytes(image: Image.Image) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


def decode_qr_image(image: Image.Image) -> str | None:
    """Read the QR code in ``image``. Returns None if no code could be decoded."""
    gray = np.asarray(image.convert("L"))
    text, _points, _straight = cv2.QRCodeDetector().detectAndDecode(gray)
    return text or None


def import_image(path: Path | str) -> CharacterBase | None:
    """Decode a photo or screenshot of a character QR code."""
    try:
        with Image.open(path) as image:
            text = decode_qr_image(image)
    except OSError as exc:
        LOG.warning("Could not read QR image %s: %s", path, exc)
        return None
    if text is None:
        LOG.info("No QR code found in %s", path)
        return None
    return import_payload(text)


def character_summary(character: CharacterBase) -> str:
    """Short multi-line description shown before confirming an import."""
    lines = [
        f"Character: {character.name or 'Unnamed'}",
        f"Type: {character.character_type.display_name}",
    ]
    if character.concept:
        lines.append(f"Concept: {character.concept}")
    if character.chronicle_name:
        lines.append(f"Chronicle: {character.chronicle_name}")
    if isinstance(character, VampireCharacter):
        lines.append(f"Clan: {character.clan or 'Unknown'}")
    elif isinstance(character, MageCharacter):
        lines.append(f"Arete: {character.arete}")
    elif isinstance(character, GhoulCharacter):
        lines.append(f"Humanity: {character.humanity}")
    return "\n".join(lines)
