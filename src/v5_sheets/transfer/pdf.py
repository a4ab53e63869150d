"""Printable character sheet as a PDF.

The sheet is first flattened into titled sections of rows (text, dot
ratings, or box tracks), then drawn onto US Letter pages at 150 dpi in two
columns and written with Pillow's PDF encoder. Sections never split
across columns; one that does not fit moves to the next column or page.
"""

from __future__ import annotations

import io
import logging
import textwrap
from dataclasses import dataclass, field
from pathlib import Path

from PIL import Image, ImageDraw, ImageFont

from v5_sheets.models.character import (
    CharacterBase,
    GhoulCharacter,
    MageCharacter,
    VampireCharacter,
)
from v5_sheets.models.constants import (
    ATTRIBUTES_BY_CATEGORY,
    MAX_BLOOD_POTENCY,
    MAX_DOTS,
    SKILLS_BY_CATEGORY,
)
from v5_sheets.models.traits import HealthState, HumanityState, MageTraitState

LOG = logging.getLogger(__name__)

DPI = 150
PAGE_SIZE = (int(8.5 * DPI), 11 * DPI)
MARGIN = 75
GUTTER = 45
ROW_HEIGHT = 30
TITLE_HEIGHT = 42
SECTION_GAP = 18
FONT_SIZE = 20
TITLE_FONT_SIZE = 24
DOT_SIZE = 16
BOX_SIZE = 20
WRAP_WIDTH = 48


@dataclass(frozen=True, slots=True)
class SheetRow:
    """One printed line: plain text, a dot rating, or a track of boxes."""

    label: str
    text: str = ""
    dots: int | None = None
    max_dots: int = MAX_DOTS
    boxes: tuple[str, ...] = ()


@dataclass(slots=True)
class SheetSection:
    title: str
    rows: list[SheetRow] = field(default_factory=list)

    @property
    def height(self) -> int:
        return TITLE_HEIGHT + ROW_HEIGHT * len(self.rows) + SECTION_GAP


# ---------------------------------------------------------------------------
# Content
# ---------------------------------------------------------------------------


def _text_rows(label: str, text: str) -> list[SheetRow]:
    lines = textwrap.wrap(text, WRAP_WIDTH) or [""]
    return [SheetRow(label if i == 0 else "", line) for i, line in enumerate(lines)]


def _identity(ch: CharacterBase) -> SheetSection:
    section = SheetSection("Character")
    rows = [
        ("Name", ch.name),
        ("Type", ch.character_type.display_name),
        ("Concept", ch.concept),
        ("Chronicle", ch.chronicle_name),
    ]
    if isinstance(ch, VampireCharacter):
        rows += [
            ("Clan", ch.clan),
            ("Predator", ch.predator_path),
            ("Generation", str(ch.generation)),
        ]
    rows += [("Ambition", ch.ambition), ("Desire", ch.desire)]
    for label, text in rows:
        section.rows.extend(_text_rows(label, text))
    return section


def _status(ch: CharacterBase) -> SheetSection:
    section = SheetSection("Status")
    section.rows.append(SheetRow("Health", boxes=tuple(s.value for s in ch.health_states)))
    section.rows.append(SheetRow("Willpower", boxes=tuple(s.value for s in ch.willpower_states)))
    if isinstance(ch, (VampireCharacter, GhoulCharacter)):
        section.rows.append(SheetRow("Humanity", boxes=tuple(s.value for s in ch.humanity_states)))
    if isinstance(ch, VampireCharacter):
        section.rows.append(SheetRow("Hunger", dots=ch.hunger))
        section.rows.append(SheetRow(
            "Blood Potency", dots=ch.blood_potency, max_dots=MAX_BLOOD_POTENCY,
        ))
    elif isinstance(ch, MageCharacter):
        section.rows += [
            SheetRow("Arete", dots=ch.arete),
            SheetRow("Paradox", dots=ch.paradox),
            SheetRow("Hubris", boxes=tuple(s.value for s in ch.hubris_states)),
            SheetRow("Quiet", boxes=tuple(s.value for s in ch.quiet_states)),
        ]
    return section


def _powers(ch: CharacterBase) -> SheetSection | None:
    if isinstance(ch, MageCharacter):
        rated = [(name, dots) for name, dots in ch.spheres.items() if dots > 0]
        return SheetSection("Spheres", [SheetRow(n, dots=d) for n, d in rated]) if rated else None

    section = SheetSection("Disciplines")
    if isinstance(ch, VampireCharacter):
        for name, progress in sorted(ch.v5_disciplines.items()):
            section.rows.append(SheetRow(name, dots=progress.current_level))
            for level in progress.accessible_levels():
                for power in ch.get_selected_v5_powers(name, level):
                    section.rows.append(SheetRow("", f"{level}: {power.name}"))
    for name, dots in sorted(ch.disciplines.items()):
        section.rows.append(SheetRow(name, dots=dots))
    return section if section.rows else None


def _specialization_label(ch: CharacterBase, skill: str) -> str:
    specs = [s.name for s in ch.get_specializations(skill)]
    return f"{skill} ({', '.join(specs)})" if specs else skill


def sheet_sections(ch: CharacterBase) -> list[SheetSection]:
    """Everything printed on the sheet, in reading order."""
    sections = [_identity(ch)]
    for category, names in ATTRIBUTES_BY_CATEGORY.items():
        sections.append(SheetSection(
            f"{category.title()} Attributes",
            [SheetRow(name, dots=ch.get_attribute(name)) for name in names],
        ))
    for category, names in SKILLS_BY_CATEGORY.items():
        sections.append(SheetSection(
            f"{category.title()} Skills",
            [SheetRow(_specialization_label(ch, name), dots=ch.get_skill(name)) for name in names],
        ))
    sections.append(_status(ch))
    powers = _powers(ch)
    if powers is not None:
        sections.append(powers)

    backgrounds = SheetSection("Merits & Flaws", [
        SheetRow(bg.name, f"{bg.cost:+d}") for bg in (*ch.advantages, *ch.flaws)
    ])
    if backgrounds.rows:
        sections.append(backgrounds)

    story = SheetSection("Convictions & Touchstones")
    for conviction in ch.convictions:
        story.rows.extend(_text_rows("Conviction", conviction))
    for touchstone in ch.touchstones:
        story.rows.extend(_text_rows("Touchstone", touchstone))
    if story.rows:
        sections.append(story)

    sections.append(SheetSection("Experience", [
        SheetRow("Total", str(ch.experience)),
        SheetRow("Spent", str(ch.spent_experience)),
        SheetRow("Available", str(ch.available_experience)),
    ]))
    if ch.character_description:
        sections.append(SheetSection(
            "Description", _text_rows("", ch.character_description),
        ))
    return sections


# ---------------------------------------------------------------------------
# Drawing
# ---------------------------------------------------------------------------


def _draw_box(draw: ImageDraw.ImageDraw, x: int, y: int, state: str) -> None:
    x2, y2 = x + BOX_SIZE, y + BOX_SIZE
    if state == HumanityState.CHECKED.value or state == MageTraitState.CHECKED.value:
        draw.rectangle((x, y, x2, y2), outline="black", fill="black")
        return
    draw.rectangle((x, y, x2, y2), outline="black", width=2)
    if state in (HealthState.SUPERFICIAL.value, HumanityState.STAINED.value):
        draw.line((x, y2, x2, y), fill="black", width=2)
    elif state == HealthState.AGGRAVATED.value:
        draw.line((x, y2, x2, y), fill="black", width=2)
        draw.line((x, y, x2, y2), fill="black", width=2)


def _draw_row(draw, row: SheetRow, x: int, y: int, width: int, font) -> None:  # noqa: ANN001
    draw.text((x, y), row.label, fill="black", font=font)
    value_x = x + width // 2
    if row.dots is not None:
        for i in range(row.max_dots):
            left = value_x + i * (DOT_SIZE + 6)
            draw.ellipse(
                (left, y + 4, left + DOT_SIZE, y + 4 + DOT_SIZE),
                outline="black",
                fill="black" if i < row.dots else None,
                width=2,
            )
    elif row.boxes:
        for i, state in enumerate(row.boxes):
            _draw_box(draw, value_x + i * (BOX_SIZE + 4), y + 2, state)
    else:
        draw.text((value_x, y), row.text, fill="black", font=font)


def render_pages(ch: CharacterBase) -> list[Image.Image]:
    """Lay the sheet out on as many Letter pages as it needs."""
    font = ImageFont.load_default(size=FONT_SIZE)
    title_font = ImageFont.load_default(size=TITLE_FONT_SIZE)
    column_width = (PAGE_SIZE[0] - 2 * MARGIN - GUTTER) // 2
    bottom = PAGE_SIZE[1] - MARGIN

    pages: list[Image.Image] = []
    draw: ImageDraw.ImageDraw | None = None
    column, y = 2, bottom

    for section in sheet_sections(ch):
        if y + section.height > bottom:
            column += 1
            if column > 1:
                page = Image.new("RGB", PAGE_SIZE, "white")
                pages.append(page)
                draw = ImageDraw.Draw(page)
                draw.text((MARGIN, MARGIN // 3), ch.name or "Unnamed", fill="black", font=title_font)
                column = 0
            y = MARGIN
        x = MARGIN + column * (column_width + GUTTER)
        draw.text((x, y), section.title, fill="black", font=title_font)
        draw.line((x, y + TITLE_HEIGHT - 8, x + column_width, y + TITLE_HEIGHT - 8), fill="black")
        y += TITLE_HEIGHT
        for row in section.rows:
            _draw_row(draw, row, x, y, column_width, font)
            y += ROW_HEIGHT
        y += SECTION_GAP
    LOG.debug("Rendered %s onto %d page(s)", ch.id, len(pages))
    return pages


def pdf_bytes(ch: CharacterBase) -> bytes:
    pages = render_pages(ch)
    buf = io.BytesIO()
    pages[0].save(
        buf, format="PDF", save_all=True, append_images=pages[1:], resolution=float(DPI),
        title=ch.name or "Character Sheet",
    )
    return buf.getvalue()


def write_pdf(ch: CharacterBase, path: Path | str) -> Path:
    path = Path(path)
    path.write_bytes(pdf_bytes(ch))
    LOG.info("Wrote character sheet for %s to %s", ch.id, path)
    return path
