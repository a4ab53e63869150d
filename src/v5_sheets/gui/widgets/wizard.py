"""Creation wizard panel: one page per stage with Back / Next / Finish."""

from __future__ import annotations

from typing import TYPE_CHECKING

import gi

gi.require_version("Gtk", "4.0")
gi.require_version("Adw", "1")

from gi.repository import Adw, Gtk  # noqa: E402

from v5_sheets.engine.creation_wizard import CreationStage  # noqa: E402
from v5_sheets.models.character import MageCharacter, VampireCharacter  # noqa: E402
from v5_sheets.models.constants import (  # noqa: E402
    ALL_CHARACTER_TYPES,
    ALL_SKILLS,
    CLANS,
    DISCIPLINES,
    MAGE_SPHERES,
    advantages_for,
    flaws_for,
)
from v5_sheets.models.disciplines import all_v5_discipline_names  # noqa: E402
from v5_sheets.models.predator import NONE_PATH_NAME, available_predator_paths  # noqa: E402

if TYPE_CHECKING:
    from v5_sheets.gui.session import SessionManager
    from v5_sheets.gui.window import V5SheetsWindow


class WizardPanel(Gtk.Box):
    __gtype_name__ = "WizardPanel"

    def __init__(
        self,
        session: SessionManager,
        window: V5SheetsWindow,
    ) -> None:
        super().__init__(orientation=Gtk.Orientation.VERTICAL, spacing=6, hexpand=True, vexpand=True)
        self._session = session
        self._window = window
        self._updating = False

        self._title = Gtk.Label(css_classes=["title-1"])
        self._title.set_margin_top(12)
        self.append(self._title)

        self._progress = Gtk.ProgressBar()
        self._progress.set_margin_start(24)
        self._progress.set_margin_end(24)
        self.append(self._progress)

        self._scroll = Gtk.ScrolledWindow(
            hscrollbar_policy=Gtk.PolicyType.NEVER,
            vscrollbar_policy=Gtk.PolicyType.AUTOMATIC,
            vexpand=True,
        )
        self.append(self._scroll)

        # -- Navigation -------------------------------------------------------
        nav = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=6)
        nav.set_margin_start(12)
        nav.set_margin_end(12)
        nav.set_margin_bottom(12)

        self._cancel_btn = Gtk.Button(label="Cancel")
        self._cancel_btn.add_css_class("destructive-action")
        self._cancel_btn.connect("clicked", self._on_cancel)
        nav.append(self._cancel_btn)

        spacer = Gtk.Box(hexpand=True)
        nav.append(spacer)

        self._back_btn = Gtk.Button(label="Back")
        self._back_btn.connect("clicked", self._on_back)
        nav.append(self._back_btn)

        self._next_btn = Gtk.Button(label="Next")
        self._next_btn.add_css_class("suggested-action")
        self._next_btn.connect("clicked", self._on_next)
        nav.append(self._next_btn)
        self.append(nav)

    def refresh(self) -> None:
        wizard = self._session.wizard
        if wizard is None:
            return
        self._title.set_label(wizard.stage_title())
        self._progress.set_fraction(wizard.progress)
        self._back_btn.set_sensitive(wizard.stage != wizard.stages()[0])
        self._next_btn.set_label("Finish" if wizard.is_last_stage else "Next")

        page = Adw.PreferencesPage()
        builders = {
            CreationStage.CHARACTER_TYPE: self._type_group,
            CreationStage.NAME_AND_CHRONICLE: self._identity_group,
            CreationStage.CLAN: self._clan_group,
            CreationStage.PREDATOR_PATH: self._predator_group,
            CreationStage.ATTRIBUTES: self._attributes_group,
            CreationStage.SKILLS: self._skills_group,
            CreationStage.SPECIALIZATIONS: self._specializations_group,
            CreationStage.DISCIPLINES: self._powers_group,
            CreationStage.MERITS_AND_FLAWS: self._backgrounds_group,
            CreationStage.CONVICTIONS_AND_TOUCHSTONES: self._convictions_group,
            CreationStage.AMBITION_AND_DESIRE: self._ambition_group,
        }
        for group in builders[wizard.stage]():
            page.add(group)
        self._scroll.set_child(page)

    # -- Stage pages -----------------------------------------------------------

    def _type_group(self) -> list[Adw.PreferencesGroup]:
        current = self._session.wizard.character.character_type
        group = Adw.PreferencesGroup(title="Character Type")
        first: Gtk.CheckButton | None = None
        for character_type in ALL_CHARACTER_TYPES:
            check = Gtk.CheckButton(active=character_type == current)
            if first is None:
                first = check
            else:
                check.set_group(first)
            check.connect("toggled", self._on_type_toggled, character_type)
            row = Adw.ActionRow(title=character_type.display_name, activatable_widget=check)
            row.add_prefix(check)
            group.add(row)
        return [group]

    def _identity_group(self) -> list[Adw.PreferencesGroup]:
        ch = self._session.wizard.character
        group = Adw.PreferencesGroup(title="Name & Chronicle")
        self._name_row = Adw.EntryRow(title="Name", text=ch.name)
        self._chronicle_row = Adw.EntryRow(title="Chronicle", text=ch.chronicle_name)
        self._concept_row = Adw.EntryRow(title="Concept", text=ch.concept)
        for row in (self._name_row, self._chronicle_row, self._concept_row):
            row.connect("changed", self._on_identity_changed)
            group.add(row)
        return [group]

    def _clan_group(self) -> list[Adw.PreferencesGroup]:
        ch = self._session.wizard.character
        group = Adw.PreferencesGroup(title="Clan")
        combo = Adw.ComboRow(title="Clan", model=Gtk.StringList.new(["—", *CLANS]))
        if ch.clan in CLANS:
            combo.set_selected(CLANS.index(ch.clan) + 1)
        combo.connect("notify::selected", self._on_clan_selected)
        group.add(combo)
        return [group]

    def _predator_group(self) -> list[Adw.PreferencesGroup]:
        ch = self._session.wizard.character
        paths = available_predator_paths(ch)
        names = [p.name for p in paths]
        group = Adw.PreferencesGroup(title="Predator Path")
        combo = Adw.ComboRow(title="Path", model=Gtk.StringList.new(names))
        current = ch.predator_path or NONE_PATH_NAME
        if current in names:
            combo.set_selected(names.index(current))
        combo.connect("notify::selected", self._on_predator_selected, names)
        group.add(combo)

        detail = Adw.PreferencesGroup(title="Details")
        selected = paths[names.index(current)] if current in names else None
        if selected is not None:
            detail.set_description(selected.description)
            if selected.feeding_description:
                detail.add(Adw.ActionRow(title="Feeding", subtitle=selected.feeding_description))
            for bonus in selected.bonuses:
                detail.add(Adw.ActionRow(title="Bonus", subtitle=bonus.description))
            for drawback in selected.drawbacks:
                detail.add(Adw.ActionRow(title="Drawback", subtitle=drawback))
        return [group, detail]

    def _attributes_group(self) -> list[Adw.PreferencesGroup]:
        from v5_sheets.gui.widgets.attributes import AttributePoolGroup

        return [AttributePoolGroup(
            session=self._session, window=self._window, on_changed=self._update_nav,
        )]

    def _skills_group(self) -> list[Adw.PreferencesGroup]:
        from v5_sheets.gui.widgets.skills import SkillsGroup

        return [SkillsGroup(
            session=self._session, window=self._window, on_changed=self._update_nav,
        )]

    def _specializations_group(self) -> list[Adw.PreferencesGroup]:
        wizard = self._session.wizard
        ch = wizard.character
        group = Adw.PreferencesGroup(title="Specializations")
        group.set_description(
            f"Extra specializations: {wizard.extra_specializations_used()}"
            f" of {wizard.config.extra_free_specializations}"
        )
        for skill in ALL_SKILLS:
            if ch.get_skill(skill) == 0:
                continue
            specs = ", ".join(s.name for s in ch.get_specializations(skill))
            row = Adw.EntryRow(title=f"{skill} ({specs})" if specs else skill)
            row.set_show_apply_button(True)
            row.connect("apply", self._on_specialization_apply, skill)
            group.add(row)
        return [group]

    def _powers_group(self) -> list[Adw.PreferencesGroup]:
        wizard = self._session.wizard
        ch = wizard.character
        if isinstance(ch, MageCharacter):
            names, getter = MAGE_SPHERES, lambda n: ch.spheres.get(n, 0)
        elif isinstance(ch, VampireCharacter):
            names = all_v5_discipline_names()
            getter = lambda n: ch.v5_disciplines[n].current_level if n in ch.v5_disciplines else 0  # noqa: E731
        else:
            names, getter = DISCIPLINES, lambda n: ch.disciplines.get(n, 0)

        group = Adw.PreferencesGroup(title=wizard.stage_title())
        group.set_description(
            f"{wizard.power_dots_spent()} of {wizard.power_dot_budget()} dots spent"
        )
        self._powers_header = group
        for name in names:
            adj = Gtk.Adjustment(
                value=getter(name), lower=0, upper=wizard.config.max_dots,
                step_increment=1, page_increment=1, page_size=0,
            )
            row = Adw.SpinRow(title=name, adjustment=adj)
            row.set_numeric(True)
            row.connect("notify::value", self._on_power_changed, name, getter)
            group.add(row)
        return [group]

    def _backgrounds_group(self) -> list[Adw.PreferencesGroup]:
        ch = self._session.wizard.character
        groups = []
        for title, catalog, owned, flaw in (
            ("Advantages", advantages_for(ch.character_type), ch.advantages, False),
            ("Flaws", flaws_for(ch.character_type), ch.flaws, True),
        ):
            group = Adw.PreferencesGroup(title=title)
            owned_names = {b.name for b in owned}
            for entry in catalog:
                row = Adw.SwitchRow(
                    title=entry.name,
                    subtitle=f"{entry.cost:+d}",
                    active=entry.name in owned_names,
                )
                row.connect("notify::active", self._on_background_toggled, entry.name, flaw)
                group.add(row)
            groups.append(group)
        return groups

    def _convictions_group(self) -> list[Adw.PreferencesGroup]:
        ch = self._session.wizard.character
        groups = []
        for title, items, adder in (
            ("Convictions", ch.convictions, self._session.add_conviction),
            ("Touchstones", ch.touchstones, self._session.add_touchstone),
        ):
            group = Adw.PreferencesGroup(title=title)
            for item in items:
                group.add(Adw.ActionRow(title=item))
            entry = Adw.EntryRow(title=f"Add to {title.lower()}")
            entry.set_show_apply_button(True)
            entry.connect("apply", self._on_text_apply, adder)
            group.add(entry)
            groups.append(group)
        return groups

    def _ambition_group(self) -> list[Adw.PreferencesGroup]:
        ch = self._session.wizard.character
        group = Adw.PreferencesGroup(title="Ambition & Desire")
        self._ambition_row = Adw.EntryRow(title="Ambition", text=ch.ambition)
        self._desire_row = Adw.EntryRow(title="Desire", text=ch.desire)
        for row in (self._ambition_row, self._desire_row):
            row.connect("changed", self._on_ambition_changed)
            group.add(row)
        return [group]

    # -- Handlers --------------------------------------------------------------

    def _on_type_toggled(self, check: Gtk.CheckButton, character_type) -> None:  # noqa: ANN001
        if not check.get_active():
            return
        ok, message = self._session.select_type(character_type)
        if not ok:
            self._window.show_message(message)

    def _on_identity_changed(self, _row: Adw.EntryRow) -> None:
        self._session.set_identity(
            self._name_row.get_text(),
            self._chronicle_row.get_text(),
            self._concept_row.get_text(),
        )

    def _on_clan_selected(self, combo: Adw.ComboRow, _pspec: object) -> None:
        index = combo.get_selected()
        if index == 0:
            return
        ok, message = self._session.set_clan(CLANS[index - 1])
        if not ok:
            self._window.show_message(message)

    def _on_predator_selected(self, combo: Adw.ComboRow, _pspec: object, names: list[str]) -> None:
        ok, message = self._session.set_predator_path(names[combo.get_selected()])
        if not ok:
            self._window.show_message(message)
        self.refresh()

    def _on_specialization_apply(self, row: Adw.EntryRow, skill: str) -> None:
        ok, message = self._session.add_specialization(skill, row.get_text())
        if not ok:
            self._window.show_message(message)
            return
        self.refresh()

    def _on_power_changed(self, row: Adw.SpinRow, _pspec: object, name: str, getter) -> None:  # noqa: ANN001
        if self._updating:
            return
        ok, message = self._session.set_power(name, int(row.get_value()))
        if not ok:
            self._updating = True
            row.set_value(getter(name))
            self._updating = False
            self._window.show_message(message)
            return
        wizard = self._session.wizard
        self._powers_header.set_description(
            f"{wizard.power_dots_spent()} of {wizard.power_dot_budget()} dots spent"
        )

    def _on_background_toggled(self, row: Adw.SwitchRow, _pspec: object, name: str, flaw: bool) -> None:
        if self._updating:
            return
        ok, message = self._session.toggle_background(name, flaw)
        if not ok:
            self._updating = True
            row.set_active(not row.get_active())
            self._updating = False
            self._window.show_message(message)

    def _on_text_apply(self, row: Adw.EntryRow, adder) -> None:  # noqa: ANN001
        ok, message = adder(row.get_text())
        if not ok:
            self._window.show_message(message)
            return
        self.refresh()

    def _on_ambition_changed(self, _row: Adw.EntryRow) -> None:
        self._session.set_ambition_and_desire(
            self._ambition_row.get_text(), self._desire_row.get_text(),
        )

    def _update_nav(self) -> None:
        wizard = self._session.wizard
        if wizard is not None:
            self._next_btn.set_tooltip_text(
                "\n".join(e.message for e in wizard.errors()) or None
            )

    # -- Navigation ------------------------------------------------------------

    def _on_back(self, _btn: Gtk.Button) -> None:
        ok, message = self._session.wizard_back()
        if not ok:
            self._window.show_message(message)
        self.refresh()

    def _on_next(self, _btn: Gtk.Button) -> None:
        wizard = self._session.wizard
        if wizard is None:
            return
        if wizard.is_last_stage:
            ok, message = self._session.finish_creation()
            if not ok:
                self._window.show_message(message)
                return
            self._window.show_message("Character created")
            self._window.emit("characters-changed")
            return
        ok, message = self._session.wizard_next()
        if not ok:
            self._window.show_message(message)
            return
        self._window.emit("characters-changed")

    def _on_cancel(self, _btn: Gtk.Button) -> None:
        self._session.cancel_creation(discard=True)
        self._window.emit("characters-changed")
