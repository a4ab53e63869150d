"""Single-user session wrapping the character store and the active wizard.

Widgets never touch the store or the wizard directly; they call these
helpers, which turn engine ``ValueError``s into ``(ok, message)`` pairs
that can be shown in a toast. Nothing here imports GTK.
"""

from __future__ import annotations

import uuid
from pathlib import Path
from collections.abc import Callable

from v5_sheets.engine.change_log import record_changes, record_session_change
from v5_sheets.engine.creation_config import CreationConfig
from v5_sheets.engine.creation_wizard import CreationWizard
from v5_sheets.engine.sheet_editor import SheetEditor
from v5_sheets.models.character import CharacterBase, MageCharacter
from v5_sheets.models.constants import CharacterType
from v5_sheets.models.traits import ChangeLogEntry
from v5_sheets.storage.store import CharacterStore
from v5_sheets.transfer.pdf import write_pdf
from v5_sheets.transfer.qr import export_payload, import_image, import_payload

Result = tuple[bool, str | None]


class SessionManager:
    """Holds the store, the selection, and at most one creation wizard."""

    __slots__ = ("store", "config", "wizard", "selected_id")

    def __init__(self, store: CharacterStore, config: CreationConfig | None = None) -> None:
        self.store = store
        self.config = config or CreationConfig()
        self.wizard: CreationWizard | None = None
        self.selected_id: str | None = None

    # -- Selection ------------------------------------------------------------

    @property
    def selected(self) -> CharacterBase | None:
        if self.selected_id is None:
            return None
        return self.store.get(self.selected_id)

    def select(self, character_id: str | None) -> bool:
        if character_id is not None and self.store.get(character_id) is None:
            return False
        self.selected_id = character_id
        return True

    # -- Creation -------------------------------------------------------------

    def start_creation(self, character_type: CharacterType = CharacterType.VAMPIRE) -> CreationWizard:
        self.wizard = CreationWizard(character_type, self.config)
        return self.wizard

    def resume_creation(self, character_id: str) -> Result:
        ch = self.store.get(character_id)
        if ch is None:
            return False, "Character not found"
        if not ch.is_in_creation:
            return False, f"{ch.name or 'Character'} has already been created"
        self.wizard = CreationWizard.resume(ch, self.config)
        return True, None

    def _require_wizard(self) -> CreationWizard:
        if self.wizard is None:
            raise ValueError("No character is being created")
        return self.wizard

    def _save_progress(self) -> None:
        wizard = self._require_wizard()
        if self.store.get(wizard.character.id) is None:
            self.store.add_in_creation(wizard.character)
        else:
            self.store.update(wizard.character)

    def _apply(self, fn: Callable[[CreationWizard], object]) -> Result:
        try:
            fn(self._require_wizard())
        except ValueError as exc:
            return False, str(exc)
        return True, None

    def drop_attribute_value(self, attribute: str, value: int) -> Result:
        """A pool value was dropped on an attribute."""
        return self._apply(lambda w: w.assign_attribute(attribute, value))

    def drop_attribute_on_attribute(self, source: str, target: str) -> Result:
        return self._apply(lambda w: w.move_attribute(source, target))

    def return_attribute_to_pool(self, attribute: str) -> Result:
        return self._apply(lambda w: w.unassign_attribute(attribute))

    def set_skill(self, skill: str, value: int) -> Result:
        return self._apply(lambda w: w.set_skill(skill, value))

    def add_specialization(self, skill: str, text: str) -> Result:
        return self._apply(lambda w: w.add_specialization(skill, text))

    def select_type(self, character_type: CharacterType) -> Result:
        return self._apply(lambda w: w.select_type(character_type))

    def set_identity(self, name: str, chronicle: str, concept: str = "") -> Result:
        def apply(w: CreationWizard) -> None:
            w.set_name(name)
            w.set_chronicle(chronicle)
            w.set_concept(concept)
        return self._apply(apply)

    def set_clan(self, clan: str) -> Result:
        return self._apply(lambda w: w.set_clan(clan))

    def set_predator_path(self, name: str) -> Result:
        return self._apply(lambda w: w.set_predator_path(name))

    def set_power(self, name: str, level: int) -> Result:
        """Discipline dots for vampires/ghouls, sphere dots for mages."""
        def apply(w: CreationWizard) -> None:
            if isinstance(w.character, MageCharacter):
                w.set_sphere(name, level)
            else:
                w.set_discipline(name, level)
        return self._apply(apply)

    def toggle_background(self, name: str, flaw: bool) -> Result:
        def apply(w: CreationWizard) -> None:
            remove = w.remove_flaw if flaw else w.remove_advantage
            if not remove(name):
                (w.add_flaw if flaw else w.add_advantage)(name)
        return self._apply(apply)

    def add_conviction(self, text: str) -> Result:
        return self._apply(lambda w: w.add_conviction(text))

    def add_touchstone(self, text: str) -> Result:
        return self._apply(lambda w: w.add_touchstone(text))

    def set_ambition_and_desire(self, ambition: str, desire: str) -> Result:
        def apply(w: CreationWizard) -> None:
            w.set_ambition(ambition)
            w.set_desire(desire)
        return self._apply(apply)

    def wizard_next(self) -> Result:
        try:
            wizard = self._require_wizard()
        except ValueError as exc:
            return False, str(exc)
        if not wizard.next():
            errors = wizard.errors()
            if errors:
                return False, "\n".join(e.message for e in errors)
            return False, "Already at the last step"
        # Persist once the sheet has a name, so it can be resumed later.
        if wizard.character.name.strip():
            self._save_progress()
        return True, None

    def wizard_back(self) -> Result:
        try:
            wizard = self._require_wizard()
        except ValueError as exc:
            return False, str(exc)
        if not wizard.back():
            return False, "Already at the first step"
        return True, None

    def finish_creation(self) -> Result:
        try:
            wizard = self._require_wizard()
            character = wizard.finish()
        except ValueError as exc:
            return False, str(exc)
        if self.store.get(character.id) is None:
            self.store.add(character)
        else:
            self.store.update(character)
        self.wizard = None
        self.selected_id = character.id
        return True, None

    def cancel_creation(self, discard: bool = True) -> None:
        """Leave the wizard; a discarded sheet is also removed from the store."""
        if self.wizard is not None and discard:
            self.store.delete(self.wizard.character.id)
        self.wizard = None

    # -- Editing --------------------------------------------------------------

    def begin_edit(self, character_id: str) -> CharacterBase | None:
        """A detached copy to edit; commit it with ``save_edit``."""
        ch = self.store.get(character_id)
        return ch.clone() if ch is not None else None

    def edit(self, edited: CharacterBase, fn: Callable[[SheetEditor], object]) -> Result:
        """Apply one in-play change to a working copy from ``begin_edit``."""
        try:
            fn(SheetEditor(edited))
        except ValueError as exc:
            return False, str(exc)
        return True, None

    def save_edit(self, edited: CharacterBase) -> Result:
        original = self.store.get(edited.id)
        if original is None:
            return False, "Character not found"
        try:
            edited.recalculate_derived_values()
            summary = record_changes(original, edited)
            self.store.update(edited)
        except ValueError as exc:
            return False, str(exc)
        return True, summary or None

    def change_session(self, character_id: str, session: int) -> Result:
        ch = self.store.get(character_id)
        if ch is None:
            return False, "Character not found"
        try:
            changed = record_session_change(ch, session)
        except ValueError as exc:
            return False, str(exc)
        if changed:
            self.store.update(ch)
        return True, None

    def archive(self, character_id: str) -> bool:
        return self.store.archive(character_id)

    def unarchive(self, character_id: str) -> bool:
        return self.store.unarchive(character_id)

    def delete(self, character_id: str) -> bool:
        if self.selected_id == character_id:
            self.selected_id = None
        return self.store.delete(character_id)

    # -- QR transfer ----------------------------------------------------------

    def export_payload(self, character_id: str) -> str | None:
        ch = self.store.get(character_id)
        return export_payload(ch) if ch is not None else None

    def preview_import(self, text: str) -> CharacterBase | None:
        return import_payload(text)

    def preview_import_image(self, path: Path | str) -> CharacterBase | None:
        return import_image(path)

    def accept_import(self, character: CharacterBase) -> Result:
        """Store an imported sheet; an id clash gets a fresh id instead of overwriting."""
        if self.store.get(character.id) is not None:
            character.id = str(uuid.uuid4())
        character.is_archived = False
        character.change_log.append(ChangeLogEntry("Imported from QR code"))
        self.store.add(character)
        self.selected_id = character.id
        return True, None

    # -- PDF export -----------------------------------------------------------

    def export_pdf(self, character_id: str, path: Path | str) -> Result:
        ch = self.store.get(character_id)
        if ch is None:
            return False, "Character not found"
        try:
            written = write_pdf(ch, path)
        except OSError as exc:
            return False, f"Could not write {path}: {exc.strerror or exc}"
        return True, f"Saved {written.name}"
