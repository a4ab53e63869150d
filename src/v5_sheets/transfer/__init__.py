"""Serialization and QR transfer of character sheets."""

from v5_sheets.transfer.codec import (
    character_from_dict,
    character_to_dict,
    decode_collection,
    encode_collection,
)
from v5_sheets.transfer.qr import (
    character_summary,
    decode_qr_image,
    export_payload,
    import_image,
    import_payload,
    render_character_qr,
)

__all__ = [
    "character_from_dict",
    "character_summary",
    "character_to_dict",
    "decode_collection",
    "decode_qr_image",
    "encode_collection",
    "export_payload",
    "import_image",
    "import_payload",
    "render_character_qr",
]
