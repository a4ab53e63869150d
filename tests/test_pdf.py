"""Tests for the printable PDF sheet."""

from v5_sheets.models.character import GhoulCharacter, MageCharacter, VampireCharacter
from v5_sheets.models.disciplines import catalog_power_id
from v5_sheets.models.traits import Background, HealthState, Specialization
from v5_sheets.transfer.pdf import PAGE_SIZE, pdf_bytes, render_pages, sheet_sections, write_pdf


def _titles(ch):
    return [s.title for s in sheet_sections(ch)]


def _section(ch, title):
    return next(s for s in sheet_sections(ch) if s.title == title)


def _vampire() -> VampireCharacter:
    v = VampireCharacter(
        name="Ada",
        clan="Tremere",
        ambition="Find the cure",
        convictions=["Do no harm"],
        advantages=[Background("Allies", 3)],
        flaws=[Background("Bad Sight", -1, is_custom=True)],
        specializations=[Specialization("Medicine", "Surgery")],
        experience=12,
        spent_experience=5,
        character_description="Tired eyes, steady hands.",
    )
    v.set_skill("Medicine", 3)
    v.health_states[0] = HealthState.AGGRAVATED
    v.set_v5_discipline_level("Animalism", 1)
    v.toggle_v5_power(catalog_power_id("Animalism", 1, "Bond Famulus"), "Animalism", 1)
    return v


# --- Content ---

def test_vampire_sections():
    assert _titles(_vampire()) == [
        "Character",
        "Physical Attributes",
        "Social Attributes",
        "Mental Attributes",
        "Physical Skills",
        "Social Skills",
        "Mental Skills",
        "Status",
        "Disciplines",
        "Merits & Flaws",
        "Convictions & Touchstones",
        "Experience",
        "Description",
    ]


def test_vampire_rows():
    v = _vampire()
    identity = {r.label: r.text for r in _section(v, "Character").rows}
    assert identity["Clan"] == "Tremere"
    assert identity["Ambition"] == "Find the cure"

    skills = {r.label: r.dots for r in _section(v, "Mental Skills").rows}
    assert skills["Medicine (Surgery)"] == 3

    status = {r.label: r for r in _section(v, "Status").rows}
    assert status["Health"].boxes[0] == HealthState.AGGRAVATED.value
    assert len(status["Humanity"].boxes) == 10
    assert status["Blood Potency"].max_dots == 10

    powers = [(r.label, r.text, r.dots) for r in _section(v, "Disciplines").rows]
    assert powers == [("Animalism", "", 1), ("", "1: Bond Famulus", None)]

    merits = [(r.label, r.text) for r in _section(v, "Merits & Flaws").rows]
    assert merits == [("Allies", "+3"), ("Bad Sight", "-1")]

    experience = [r.text for r in _section(v, "Experience").rows]
    assert experience == ["12", "5", "7"]


def test_mage_sections():
    m = MageCharacter(name="Mira", arete=3)
    m.spheres["Forces"] = 2
    titles = _titles(m)
    assert "Spheres" in titles
    assert "Disciplines" not in titles
    assert "Merits & Flaws" not in titles
    assert [(r.label, r.dots) for r in _section(m, "Spheres").rows] == [("Forces", 2)]
    status = [r.label for r in _section(m, "Status").rows]
    assert status == ["Health", "Willpower", "Arete", "Paradox", "Hubris", "Quiet"]


def test_ghoul_without_powers():
    titles = _titles(GhoulCharacter(name="Renfield"))
    assert "Disciplines" not in titles
    assert "Description" not in titles


def test_long_text_wraps():
    v = VampireCharacter(desire="word " * 40)
    rows = [r for r in _section(v, "Character").rows if r.label in ("Desire", "")]
    assert len(rows) > 1


# --- Output ---

def test_pages_are_letter_sized():
    pages = render_pages(_vampire())
    assert pages
    assert all(page.size == PAGE_SIZE for page in pages)


def test_pdf_bytes():
    data = pdf_bytes(_vampire())
    assert data.startswith(b"%PDF")


def test_write_pdf(tmp_path):
    path = write_pdf(MageCharacter(name="Mira"), tmp_path / "mira.pdf")
    assert path.read_bytes().startswith(b"%PDF")
