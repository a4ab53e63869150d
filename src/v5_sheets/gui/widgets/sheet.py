"""Sheet view/editor for a finished character.

Edits go to a detached clone; "Save" diffs the clone against the stored
sheet, logs the change summary, and writes it back. In-play rules
(damage, stains, status values, merits) run through ``SessionManager.edit``
so rejected changes come back as a toast instead of an exception.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import gi

gi.require_version("Gtk", "4.0")
gi.require_version("Adw", "1")

from gi.repository import Adw, GLib, Gtk  # noqa: E402

from v5_sheets.engine.sheet_editor import (  # noqa: E402
    HEALTH,
    WILLPOWER,
    SheetEditor,
    sort_damage,
    stain_count,
)
from v5_sheets.models.character import (  # noqa: E402
    GhoulCharacter,
    MageCharacter,
    VampireCharacter,
)
from v5_sheets.models.constants import (  # noqa: E402
    ALL_SKILLS,
    ATTRIBUTES_BY_CATEGORY,
    HUMANITY_TRACK_LENGTH,
    MAGE_SPHERES,
    MAGE_TRACK_LENGTH,
    MAX_BLOOD_POTENCY,
    MAX_GENERATION,
    MAX_HUNGER,
    MIN_GENERATION,
    SKILLS_BY_CATEGORY,
    advantages_for,
    flaws_for,
)
from v5_sheets.models.derived_stats import summarize  # noqa: E402
from v5_sheets.models.traits import HealthState, HumanityState  # noqa: E402

if TYPE_CHECKING:
    from collections.abc import Callable

    from v5_sheets.gui.session import SessionManager
    from v5_sheets.gui.window import V5SheetsWindow
    from v5_sheets.models.character import CharacterBase

_HEALTH_GLYPHS = {
    HealthState.OK: "☐",
    HealthState.SUPERFICIAL: "◩",
    HealthState.AGGRAVATED: "☒",
}
_HUMANITY_GLYPHS = {
    HumanityState.CHECKED: "■",
    HumanityState.UNCHECKED: "☐",
    HumanityState.STAINED: "◩",
}


def _spin(title: str, value: int, lower: int, upper: int) -> Adw.SpinRow:
    adj = Gtk.Adjustment(
        value=value, lower=lower, upper=upper,
        step_increment=1, page_increment=1, page_size=0,
    )
    row = Adw.SpinRow(title=title, adjustment=adj)
    row.set_numeric(True)
    row.set_wrap(False)
    return row


def _boxes(states: list, glyphs: dict) -> str:
    return " ".join(glyphs[s] for s in states) or "—"


def _flat_button(label: str, tooltip: str) -> Gtk.Button:
    btn = Gtk.Button(label=label, tooltip_text=tooltip, valign=Gtk.Align.CENTER)
    btn.add_css_class("flat")
    return btn


class SheetPanel(Gtk.ScrolledWindow):
    __gtype_name__ = "SheetPanel"

    def __init__(
        self,
        session: SessionManager,
        window: V5SheetsWindow,
    ) -> None:
        super().__init__(
            hscrollbar_policy=Gtk.PolicyType.NEVER,
            vscrollbar_policy=Gtk.PolicyType.AUTOMATIC,
            hexpand=True,
            vexpand=True,
        )
        self._session = session
        self._window = window
        self._editing: CharacterBase | None = None
        self._page: Adw.PreferencesPage | None = None
        self._updating = False
        self._humanity_row: Adw.ActionRow | None = None

    def refresh(self) -> None:
        """Start a fresh working copy of the selected sheet."""
        selected = self._session.selected
        self._editing = self._session.begin_edit(selected.id) if selected else None
        self._render()

    def _render(self) -> bool:
        scroll = self.get_vadjustment().get_value()
        self._page = Adw.PreferencesPage()
        self.set_child(self._page)
        if self._editing is None:
            return False
        ch = self._editing
        self._page.add(self._identity_group(ch))
        self._page.add(self._derived_group(ch))
        self._page.add(self._status_group(ch))
        for category, names in ATTRIBUTES_BY_CATEGORY.items():
            self._page.add(self._dots_group(
                f"{category.title()} Attributes", names, ch.get_attribute, self._on_attribute, 1,
            ))
        for category, names in SKILLS_BY_CATEGORY.items():
            self._page.add(self._dots_group(
                f"{category.title()} Skills", names, ch.get_skill, self._on_skill, 0,
            ))
        self._page.add(self._specializations_group(ch))
        if isinstance(ch, MageCharacter):
            self._page.add(self._dots_group(
                "Spheres", MAGE_SPHERES, lambda n: ch.spheres.get(n, 0), self._on_sphere, 0,
            ))
        if isinstance(ch, VampireCharacter) and ch.v5_disciplines:
            self._page.add(self._powers_group(ch))
        for group in self._backgrounds_groups(ch):
            self._page.add(group)
        for group in self._story_groups(ch):
            self._page.add(group)
        self._page.add(self._actions_group(ch))
        GLib.idle_add(self._restore_scroll, scroll)
        return False

    def _restore_scroll(self, value: float) -> bool:
        self.get_vadjustment().set_value(value)
        return False

    def _edit(self, fn: Callable[[SheetEditor], object], rerender: bool = False) -> bool:
        ok, message = self._session.edit(self._editing, fn)
        if not ok:
            self._window.show_message(message)
        elif rerender:
            GLib.idle_add(self._render)
        return ok

    # -- Groups ----------------------------------------------------------------

    def _identity_group(self, ch: CharacterBase) -> Adw.PreferencesGroup:
        group = Adw.PreferencesGroup(title=ch.name or "Unnamed")
        group.set_description(ch.character_type.display_name)
        for title, field_name in (
            ("Name", "name"), ("Chronicle", "chronicle_name"), ("Concept", "concept"),
        ):
            row = Adw.EntryRow(title=title, text=getattr(ch, field_name))
            row.connect("changed", self._on_text_changed, field_name)
            group.add(row)
        if isinstance(ch, VampireCharacter):
            for title, value in (("Clan", ch.clan), ("Predator Path", ch.predator_path or "None")):
                group.add(Adw.ActionRow(title=title, subtitle=value or "—"))
        return group

    def _derived_group(self, ch: CharacterBase) -> Adw.PreferencesGroup:
        stats = summarize(ch)
        group = Adw.PreferencesGroup(title="Derived")
        group.add(Adw.ActionRow(
            title="Merits & Flaws", subtitle=f"net {stats.net_background_cost}",
        ))
        exp = Adw.ExpanderRow(
            title="Experience", subtitle=f"{stats.available_experience} available",
        )
        total = _spin("Total", ch.experience, 0, 9999)
        spent = _spin("Spent", ch.spent_experience, 0, 9999)
        total.connect(
            "notify::value", self._on_status_spin,
            lambda e, v: e.set_experience(v, e.character.spent_experience),
            lambda c: c.experience,
        )
        spent.connect(
            "notify::value", self._on_status_spin,
            lambda e, v: e.set_experience(e.character.experience, v),
            lambda c: c.spent_experience,
        )
        exp.add_row(total)
        exp.add_row(spent)
        group.add(exp)
        return group

    def _track_row(self, title: str, track: str, states: list[HealthState]) -> Adw.ActionRow:
        row = Adw.ActionRow(title=title, subtitle=_boxes(sort_damage(states), _HEALTH_GLYPHS))
        for label, tooltip, action in (
            ("+◩", "Superficial damage", lambda e: e.damage(track, HealthState.SUPERFICIAL)),
            ("+☒", "Aggravated damage", lambda e: e.damage(track, HealthState.AGGRAVATED)),
            ("−◩", "Heal superficial", lambda e: e.heal(track, HealthState.SUPERFICIAL)),
            ("−☒", "Heal aggravated", lambda e: e.heal(track, HealthState.AGGRAVATED)),
        ):
            btn = _flat_button(label, tooltip)
            btn.connect("clicked", self._on_action_clicked, action)
            row.add_suffix(btn)
        return row

    def _status_group(self, ch: CharacterBase) -> Adw.PreferencesGroup:
        group = Adw.PreferencesGroup(title="Status")
        group.add(self._track_row(f"Health ({ch.health})", HEALTH, ch.health_states))
        group.add(self._track_row(f"Willpower ({ch.willpower})", WILLPOWER, ch.willpower_states))

        if isinstance(ch, (VampireCharacter, GhoulCharacter)):
            self._humanity_row = Adw.ActionRow(
                title="Humanity Track", subtitle=_boxes(ch.humanity_states, _HUMANITY_GLYPHS),
            )
            stain = _flat_button("+◩", "Add a stain")
            stain.connect("clicked", self._on_action_clicked, SheetEditor.add_stain)
            clear = _flat_button("Clear", "Clear all stains")
            clear.set_sensitive(stain_count(ch.humanity_states) > 0)
            clear.connect("clicked", self._on_action_clicked, SheetEditor.clear_stains)
            self._humanity_row.add_suffix(stain)
            self._humanity_row.add_suffix(clear)
            group.add(self._humanity_row)
            group.add(self._status_spin(
                "Humanity", ch.humanity, 0, HUMANITY_TRACK_LENGTH,
                SheetEditor.set_humanity, lambda c: c.humanity,
            ))

        if isinstance(ch, VampireCharacter):
            for title, value, lower, upper, setter, getter in (
                ("Hunger", ch.hunger, 0, MAX_HUNGER,
                 SheetEditor.set_hunger, lambda c: c.hunger),
                ("Blood Potency", ch.blood_potency, 0, MAX_BLOOD_POTENCY,
                 SheetEditor.set_blood_potency, lambda c: c.blood_potency),
                ("Generation", ch.generation, MIN_GENERATION, MAX_GENERATION,
                 SheetEditor.set_generation, lambda c: c.generation),
            ):
                group.add(self._status_spin(title, value, lower, upper, setter, getter))
        elif isinstance(ch, MageCharacter):
            for title, value, upper, setter, getter in (
                ("Arete", ch.arete, 5, SheetEditor.set_arete, lambda c: c.arete),
                ("Paradox", ch.paradox, 5, SheetEditor.set_paradox, lambda c: c.paradox),
                ("Hubris", ch.hubris, MAGE_TRACK_LENGTH,
                 SheetEditor.set_hubris, lambda c: c.hubris),
                ("Quiet", ch.quiet, MAGE_TRACK_LENGTH, SheetEditor.set_quiet, lambda c: c.quiet),
            ):
                group.add(self._status_spin(title, value, 0, upper, setter, getter))
        return group

    def _status_spin(self, title, value, lower, upper, setter, getter) -> Adw.SpinRow:  # noqa: ANN001
        row = _spin(title, value, lower, upper)
        row.connect("notify::value", self._on_status_spin, setter, getter)
        return row

    def _dots_group(self, title, names, getter, handler, lower) -> Adw.PreferencesGroup:  # noqa: ANN001
        group = Adw.PreferencesGroup(title=title)
        for name in names:
            row = _spin(name, getter(name), lower, 5)
            row.connect("notify::value", handler, name)
            group.add(row)
        return group

    def _specializations_group(self, ch: CharacterBase) -> Adw.PreferencesGroup:
        group = Adw.PreferencesGroup(title="Specializations")
        for spec in ch.specializations:
            row = Adw.ActionRow(title=spec.name, subtitle=spec.skill_name)
            btn = _flat_button("Remove", f"Remove {spec.name}")
            btn.connect(
                "clicked", self._on_action_clicked,
                lambda e, s=spec: e.remove_specialization(s.skill_name, s.name),
            )
            row.add_suffix(btn)
            group.add(row)

        skills = [s for s in ALL_SKILLS if ch.get_skill(s) > 0]
        if skills:
            combo = Adw.ComboRow(title="Skill", model=Gtk.StringList.new(skills))
            entry = Adw.EntryRow(title="New specialization")
            entry.set_show_apply_button(True)
            entry.connect("apply", self._on_specialization_apply, combo, skills)
            group.add(combo)
            group.add(entry)
        return group

    def _powers_group(self, ch: VampireCharacter) -> Adw.PreferencesGroup:
        group = Adw.PreferencesGroup(title="Discipline Powers")
        disciplines = {d.name: d for d in ch.all_available_v5_disciplines()}
        for name, progress in sorted(ch.v5_disciplines.items()):
            discipline = disciplines.get(name)
            if discipline is None:
                continue
            expander = Adw.ExpanderRow(title=name, subtitle=f"Level {progress.current_level}")
            for level in progress.accessible_levels():
                for power in discipline.get_powers(level):
                    row = Adw.SwitchRow(
                        title=power.name,
                        subtitle=f"Level {level}",
                        active=progress.is_power_selected(power.id, level),
                    )
                    row.connect("notify::active", self._on_power_toggled, name, level, power.id)
                    expander.add_row(row)
            group.add(expander)
        return group

    def _backgrounds_groups(self, ch: CharacterBase) -> list[Adw.PreferencesGroup]:
        groups = []
        for title, catalog, owned, flaw in (
            ("Advantages", advantages_for(ch.character_type), ch.advantages, False),
            ("Flaws", flaws_for(ch.character_type), ch.flaws, True),
        ):
            group = Adw.PreferencesGroup(title=title)
            for bg in owned:
                row = Adw.ActionRow(title=bg.name, subtitle=f"{bg.cost:+d} {bg.comment}".strip())
                btn = _flat_button("Remove", f"Remove {bg.name}")
                remove = SheetEditor.remove_flaw if flaw else SheetEditor.remove_advantage
                btn.connect("clicked", self._on_action_clicked, lambda e, n=bg.name, r=remove: r(e, n))
                row.add_suffix(btn)
                group.add(row)

            owned_names = {bg.name for bg in owned}
            choices = [entry.name for entry in catalog if entry.name not in owned_names]
            if choices:
                combo = Adw.ComboRow(title=f"Add {title[:-1].lower()}", model=Gtk.StringList.new(choices))
                add = _flat_button("Add", f"Add the selected {title[:-1].lower()}")
                add.connect("clicked", self._on_background_add, combo, choices, flaw)
                combo.add_suffix(add)
                group.add(combo)
            groups.append(group)
        return groups

    def _story_groups(self, ch: CharacterBase) -> list[Adw.PreferencesGroup]:
        groups = []
        for title, items, adder, remover in (
            ("Convictions", ch.convictions, SheetEditor.add_conviction, SheetEditor.remove_conviction),
            ("Touchstones", ch.touchstones, SheetEditor.add_touchstone, SheetEditor.remove_touchstone),
        ):
            group = Adw.PreferencesGroup(title=title)
            for item in items:
                row = Adw.ActionRow(title=item)
                btn = _flat_button("Remove", f"Remove {item}")
                btn.connect("clicked", self._on_action_clicked, lambda e, t=item, r=remover: r(e, t))
                row.add_suffix(btn)
                group.add(row)
            entry = Adw.EntryRow(title=f"Add to {title.lower()}")
            entry.set_show_apply_button(True)
            entry.connect("apply", self._on_list_apply, adder)
            group.add(entry)
            groups.append(group)

        story = Adw.PreferencesGroup(title="Background")
        for title, field_name in (
            ("Ambition", "ambition"),
            ("Desire", "desire"),
            ("Description", "character_description"),
            ("Notes", "notes"),
        ):
            row = Adw.EntryRow(title=title, text=getattr(ch, field_name))
            row.connect("changed", self._on_text_changed, field_name)
            story.add(row)
        groups.append(story)
        return groups

    def _actions_group(self, ch: CharacterBase) -> Adw.PreferencesGroup:
        group = Adw.PreferencesGroup(title="Sheet")

        session_row = _spin("Session", ch.current_session, 1, 999)
        session_row.connect("notify::value", self._on_session_changed)
        group.add(session_row)

        buttons = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=6)
        buttons.set_margin_top(12)
        for label, handler in (
            ("Save Changes", self._on_save),
            ("Export QR", self._on_export),
            ("Export PDF", self._on_export_pdf),
            ("Unarchive" if ch.is_archived else "Archive", self._on_archive),
            ("Delete", self._on_delete),
        ):
            btn = Gtk.Button(label=label)
            btn.connect("clicked", handler)
            buttons.append(btn)
        buttons.get_first_child().add_css_class("suggested-action")
        buttons.get_last_child().add_css_class("destructive-action")
        group.add(buttons)

        if ch.change_log:
            log = Adw.ExpanderRow(title="Change Log", subtitle=f"{len(ch.change_log)} entries")
            for entry in reversed(ch.change_log):
                log.add_row(Adw.ActionRow(
                    title=entry.timestamp.strftime("%Y-%m-%d %H:%M"),
                    subtitle=entry.summary.replace("\n", " · "),
                ))
            group.add(log)
        return group

    # -- Handlers --------------------------------------------------------------

    def _on_attribute(self, row: Adw.SpinRow, _pspec: object, name: str) -> None:
        self._editing.set_attribute(name, int(row.get_value()))

    def _on_skill(self, row: Adw.SpinRow, _pspec: object, name: str) -> None:
        self._editing.set_skill(name, int(row.get_value()))

    def _on_sphere(self, row: Adw.SpinRow, _pspec: object, name: str) -> None:
        self._editing.set_sphere(name, int(row.get_value()))

    def _on_text_changed(self, row: Adw.EntryRow, field_name: str) -> None:
        self._edit(lambda e: e.set_text(field_name, row.get_text()))

    def _on_status_spin(self, row: Adw.SpinRow, _pspec: object, setter, getter) -> None:  # noqa: ANN001
        if self._updating:
            return
        value = int(row.get_value())
        if not self._edit(lambda e: setter(e, value)):
            self._updating = True
            row.set_value(getter(self._editing))
            self._updating = False
        elif setter is SheetEditor.set_humanity and self._humanity_row is not None:
            self._humanity_row.set_subtitle(
                _boxes(self._editing.humanity_states, _HUMANITY_GLYPHS)
            )

    def _on_action_clicked(self, _btn: Gtk.Button, action) -> None:  # noqa: ANN001
        self._edit(action, rerender=True)

    def _on_power_toggled(
        self, row: Adw.SwitchRow, _pspec: object, name: str, level: int, power_id: str,
    ) -> None:
        if self._updating:
            return
        if not self._edit(lambda e: e.toggle_power(name, level, power_id)):
            self._updating = True
            row.set_active(not row.get_active())
            self._updating = False

    def _on_specialization_apply(self, entry: Adw.EntryRow, combo: Adw.ComboRow, skills: list[str]) -> None:
        skill = skills[combo.get_selected()]
        self._edit(lambda e: e.add_specialization(skill, entry.get_text()), rerender=True)

    def _on_background_add(
        self, _btn: Gtk.Button, combo: Adw.ComboRow, choices: list[str], flaw: bool,
    ) -> None:
        name = choices[combo.get_selected()]
        adder = SheetEditor.add_flaw if flaw else SheetEditor.add_advantage
        self._edit(lambda e: adder(e, name), rerender=True)

    def _on_list_apply(self, entry: Adw.EntryRow, adder) -> None:  # noqa: ANN001
        self._edit(lambda e: adder(e, entry.get_text()), rerender=True)

    def _on_session_changed(self, row: Adw.SpinRow, _pspec: object) -> None:
        ok, message = self._session.change_session(self._editing.id, int(row.get_value()))
        if not ok:
            self._window.show_message(message)
            return
        stored = self._session.store.get(self._editing.id)
        if stored is not None:
            # Working copy must match the stored session and log.
            self._editing.current_session = stored.current_session
            self._editing.change_log = list(stored.change_log)

    def _on_save(self, _btn: Gtk.Button) -> None:
        ok, message = self._session.save_edit(self._editing)
        self._window.show_message(message if message else "No changes")
        if ok:
            self._window.emit("characters-changed")

    def _on_export(self, _btn: Gtk.Button) -> None:
        from v5_sheets.gui.widgets.qr_dialogs import ExportDialog

        ExportDialog(session=self._session, window=self._window, character_id=self._editing.id).present()

    def _on_export_pdf(self, _btn: Gtk.Button) -> None:
        from v5_sheets.gui.widgets.pdf_dialog import save_pdf

        save_pdf(session=self._session, window=self._window, character_id=self._editing.id)

    def _on_archive(self, _btn: Gtk.Button) -> None:
        ch = self._session.selected
        if ch is None:
            return
        if ch.is_archived:
            self._session.unarchive(ch.id)
        else:
            self._session.archive(ch.id)
        self._window.emit("characters-changed")

    def _on_delete(self, _btn: Gtk.Button) -> None:
        self._session.delete(self._editing.id)
        self._window.emit("characters-changed")
