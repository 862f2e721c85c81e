from __future__ import annotations
import calendar
import html
import logging
import streamlit as st
import pandas as pd
from datetime import date, time, timedelta

from assignments import (
    STATUS_OPTIONS,
    assignment_counts,
    assignments_by_date,
    create_assignment,
    days_until_due,
    delete_assignment,
    filter_assignments,
    toggle_complete,
)
from calendar_export import timetable_to_ics
from models import (
    DAYS_OF_WEEK,
    DAY_FULL_LABELS,
    DAY_LABELS,
    AppState,
    DailyRoutine,
    StudyTimetable,
)
from notes import (
    add_note,
    create_note,
    delete_note,
    find_note,
    import_notes,
    notes_to_json,
    search_notes,
    update_note,
)
from paths import get_log_level
from pdf_export import notes_to_pdf, timetable_to_pdf
from planner import activity_minutes, create_timetable, study_minutes_by_subject
from store import LocalStore
from subjects import (
    COLOR_OPTIONS,
    add_subject,
    apply_subject_edits,
    delete_subject,
    subject_color,
    subject_names,
)
from timetables import add_slot, day_slots, delete_slot, find_timetable, update_slot

logging.basicConfig(
    level=get_log_level(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

ACTIVITIES = ["study", "break", "meal", "exercise", "free", "sleep"]
ACTIVITY_ICONS = {
    "study": "📖",
    "break": "☕",
    "meal": "🍽️",
    "sleep": "🌙",
    "free": "☀️",
    "exercise": "🏋️",
}
DEFAULT_ACTIVE_DAYS = ["monday", "tuesday", "wednesday", "thursday", "friday"]

st.set_page_config(page_title="Study Timetable", page_icon="📚", layout="wide")


def _ensure_session_state() -> LocalStore:
    if "store" not in st.session_state:
        st.session_state.store = LocalStore()
    if "state" not in st.session_state:
        st.session_state.state = st.session_state.store.load_state()
    state = st.session_state.state
    active_id = st.session_state.get("active_timetable_id")
    if active_id is None or find_timetable(state.timetables, active_id) is None:
        st.session_state.active_timetable_id = state.timetables[0].id if state.timetables else None
    return st.session_state.store


def _queue_toast(message: str) -> None:
    st.session_state.toast_message = message


def _flush_toast() -> None:
    message = st.session_state.pop("toast_message", None)
    if message:
        st.toast(message)


def _clock_value(text: str) -> time:
    hours, minutes = text.split(":")
    return time(hour=int(hours), minute=int(minutes))


def _clock_text(value: time) -> str:
    return value.strftime("%H:%M")


def _save_timetable(state: AppState, timetable: StudyTimetable) -> None:
    state.timetables = store.put_timetable(timetable)


def _render_create_form(state: AppState) -> None:
    defaults = DailyRoutine()
    names = subject_names(state.subjects)
    with st.form("create_timetable_form", clear_on_submit=False):
        name = st.text_input("Timetable name", placeholder="e.g. Weekday Schedule, Exam Prep...")
        active_days = st.multiselect(
            "Days",
            options=list(DAYS_OF_WEEK),
            default=DEFAULT_ACTIVE_DAYS,
            format_func=lambda d: DAY_FULL_LABELS[d],
        )

        st.markdown("**Daily routine**")
        c1, c2, c3 = st.columns(3)
        with c1:
            wake = st.time_input("Wake up", _clock_value(defaults.wake_up_time), step=900)
            sleep = st.time_input("Sleep", _clock_value(defaults.sleep_time), step=900)
        with c2:
            breakfast = st.time_input("Breakfast", _clock_value(defaults.breakfast_time), step=900)
            lunch = st.time_input("Lunch", _clock_value(defaults.lunch_time), step=900)
            dinner = st.time_input("Dinner", _clock_value(defaults.dinner_time), step=900)
        with c3:
            include_exercise = st.checkbox("Include exercise", value=True)
            exercise = st.time_input("Exercise", _clock_value(defaults.exercise_time), step=900)
            preferred = st.selectbox(
                "Preferred study time", ["morning", "afternoon", "evening", "night"]
            )

        hours = st.slider("Study hours per day", 0.0, 12.0, float(defaults.study_hours_per_day), 0.5)
        selected_subjects = st.multiselect("Subjects", options=names)
        submitted = st.form_submit_button("Generate timetable", type="primary")

    if not submitted:
        return
    try:
        routine = DailyRoutine(
            wake_up_time=_clock_text(wake),
            sleep_time=_clock_text(sleep),
            breakfast_time=_clock_text(breakfast),
            lunch_time=_clock_text(lunch),
            dinner_time=_clock_text(dinner),
            exercise_time=_clock_text(exercise) if include_exercise else None,
            study_hours_per_day=hours,
            preferred_study_time=preferred,
        )
        timetable = create_timetable(
            name, routine, selected_subjects, active_days, known_subjects=names
        )
    except ValueError as e:
        st.error(str(e))
        return
    _save_timetable(state, timetable)
    st.session_state.active_timetable_id = timetable.id
    _queue_toast("Weekly timetable generated!")
    st.rerun()


def _render_day_editor(state: AppState, timetable: StudyTimetable, day: str) -> None:
    slots = day_slots(timetable, day)
    names = subject_names(state.subjects)

    if slots:
        rows = [
            {
                "Select": False,
                "id": s.id,
                "Start": s.start_time,
                "End": s.end_time,
                "Activity": s.activity,
                "Subject": s.subject or "",
                "Label": s.label or "",
            }
            for s in slots
        ]
        df = pd.DataFrame(rows).set_index("id")
        edited = st.data_editor(
            df,
            hide_index=True,
            use_container_width=True,
            column_config={
                "Select": st.column_config.CheckboxColumn("Select"),
                "Start": st.column_config.TextColumn("Start", help="HH:MM"),
                "End": st.column_config.TextColumn("End", help="HH:MM"),
                "Activity": st.column_config.SelectboxColumn("Activity", options=ACTIVITIES),
                "Subject": st.column_config.SelectboxColumn("Subject", options=[""] + names),
                "Label": st.column_config.TextColumn("Label"),
            },
            key=f"slots_editor_{timetable.id}_{day}",
        )
        edited_records = edited.reset_index().to_dict("records")
    else:
        st.info("No slots for this day.")
        edited_records = []

    col_save, col_add, col_delete = st.columns(3)

    if col_save.button("Save slot changes", disabled=not slots):
        by_id = {s.id: s for s in slots}
        updated = timetable
        for row in edited_records:
            slot = by_id.get(row["id"])
            if slot is None:
                continue
            changes = {
                "start_time": str(row.get("Start") or "").strip(),
                "end_time": str(row.get("End") or "").strip(),
                "activity": row.get("Activity") or slot.activity,
                "subject": row.get("Subject") or None,
                "label": row.get("Label") or None,
            }
            if any(getattr(slot, k) != v for k, v in changes.items()):
                try:
                    updated = update_slot(updated, day, slot.id, changes)
                except ValueError as e:
                    st.error(f"{slot.start_time}-{slot.end_time}: {e}")
                    return
        _save_timetable(state, updated)
        _queue_toast("Slot updated")
        st.rerun()

    if col_add.button("Add slot"):
        _save_timetable(state, add_slot(timetable, day))
        _queue_toast("Slot added")
        st.rerun()

    if col_delete.button("Delete selected", disabled=not slots):
        selected = [row["id"] for row in edited_records if row.get("Select")]
        if not selected:
            st.warning("Select at least one slot to delete.")
        else:
            updated = timetable
            for slot_id in selected:
                updated = delete_slot(updated, day, slot_id)
            _save_timetable(state, updated)
            _queue_toast("Slot deleted")
            st.rerun()

    totals = activity_minutes(day_slots(timetable, day))
    if totals:
        st.caption(" | ".join(
            f"{ACTIVITY_ICONS.get(k, '')} {k}: {v}m" for k, v in totals.items()
        ))


def _render_week_overview(state: AppState, timetable: StudyTimetable) -> None:
    rows = []
    for day, slots in timetable.weekly_schedule.items():
        for subject, minutes in study_minutes_by_subject(slots).items():
            rows.append({"Day": DAY_LABELS[day], "Subject": subject, "Minutes": minutes})
    if not rows:
        st.info("No study sessions in this timetable.")
        return

    df = pd.DataFrame(rows)
    pivot = df.pivot_table(
        index="Subject", columns="Day", values="Minutes", aggfunc="sum", fill_value=0
    )
    ordered = [DAY_LABELS[d] for d in timetable.weekly_schedule if DAY_LABELS[d] in pivot.columns]
    pivot = pivot[ordered]
    pivot["Total"] = pivot.sum(axis=1)
    st.dataframe(pivot, use_container_width=True)

    legend = " ".join(
        f"<span style='color:{subject_color(state.subjects, s)}'>&#9679;</span> {html.escape(s)}"
        for s in timetable.subjects
    )
    st.markdown(legend, unsafe_allow_html=True)


def render_timetable(state: AppState) -> None:
    st.header("Study Timetable")
    st.caption("Create a personalized weekly study schedule")

    with st.expander("Generate timetable", expanded=not state.timetables):
        if not state.subjects:
            st.info("Add subjects first.")
        else:
            _render_create_form(state)

    if not state.timetables:
        st.info("No timetables yet.")
        return

    ids = [t.id for t in state.timetables]
    active_id = st.session_state.active_timetable_id
    chosen = st.selectbox(
        "Timetable",
        options=ids,
        index=ids.index(active_id) if active_id in ids else 0,
        format_func=lambda tid: find_timetable(state.timetables, tid).name,
    )
    if chosen != active_id:
        st.session_state.active_timetable_id = chosen
        st.rerun()
    timetable = find_timetable(state.timetables, chosen)
    st.caption(
        f"Created {timetable.created_at:%Y-%m-%d %H:%M} | "
        f"{timetable.routine.study_hours_per_day:g}h study/day | "
        f"{', '.join(timetable.subjects)}"
    )

    view = st.radio("View", ["Day", "Week"], horizontal=True)
    if view == "Day":
        days = list(timetable.weekly_schedule.keys()) or list(timetable.active_days)
        day = st.radio(
            "Day", days, horizontal=True, format_func=lambda d: DAY_FULL_LABELS[d]
        )
        _render_day_editor(state, timetable, day)
    else:
        _render_week_overview(state, timetable)

    st.divider()
    st.subheader("Exports")
    today = date.today()
    week_start = st.date_input("Week start", value=today - timedelta(days=today.weekday()))
    ics_bytes, ics_warnings = timetable_to_ics(timetable, week_start)
    st.download_button(
        "Download ICS",
        data=ics_bytes,
        file_name=f"timetable_{week_start.isoformat()}.ics",
        mime="text/calendar",
    )
    if ics_warnings:
        st.warning(" | ".join(ics_warnings))
    st.download_button(
        "Download PDF",
        data=timetable_to_pdf(timetable),
        file_name="timetable.pdf",
        mime="application/pdf",
    )

    if st.button("Delete timetable"):

        @st.dialog("Delete timetable?")
        def _confirm_delete_timetable() -> None:
            st.write(f"Delete '{timetable.name}' and all of its slots?")
            if st.button("Delete", type="primary"):
                state.timetables = store.delete_timetable(timetable.id)
                st.session_state.active_timetable_id = None
                _queue_toast("Timetable deleted")
                st.rerun()

        _confirm_delete_timetable()


def render_subjects(state: AppState) -> None:
    st.header("Subjects")

    with st.form("add_subject_form", clear_on_submit=True):
        col1, col2 = st.columns([3, 1])
        with col1:
            name = st.text_input("Name", placeholder="Geography")
        with col2:
            color_name = st.selectbox("Color", list(COLOR_OPTIONS))
        if st.form_submit_button("Add subject", type="primary"):
            try:
                state.subjects = add_subject(state.subjects, name, COLOR_OPTIONS[color_name])
            except ValueError as e:
                st.error(str(e))
            else:
                store.save_subjects(state.subjects)
                st.toast("Subject added!")

    if not state.subjects:
        st.info("No subjects yet.")
        return

    counts = assignment_counts(state.assignments)
    color_by_value = {v: k for k, v in COLOR_OPTIONS.items()}
    rows = [
        {
            "Select": False,
            "id": s.id,
            "Name": s.name,
            "Color": color_by_value.get(s.color, "Blue"),
            "Assignments": counts.get(s.name, 0),
        }
        for s in state.subjects
    ]
    df = pd.DataFrame(rows).set_index("id")
    edited = st.data_editor(
        df,
        hide_index=True,
        use_container_width=True,
        column_config={
            "Select": st.column_config.CheckboxColumn("Select"),
            "Name": st.column_config.TextColumn("Name"),
            "Color": st.column_config.SelectboxColumn("Color", options=list(COLOR_OPTIONS)),
            "Assignments": st.column_config.NumberColumn("Assignments", format="%d"),
        },
        disabled=["Assignments"],
        key="subjects_editor",
    )
    edited_records = edited.reset_index().to_dict("records")

    col_apply, col_delete = st.columns(2)
    if col_apply.button("Apply changes"):
        edits = {
            row["id"]: (
                str(row.get("Name") or ""),
                COLOR_OPTIONS.get(row.get("Color"), COLOR_OPTIONS["Blue"]),
            )
            for row in edited_records
        }
        try:
            updated = apply_subject_edits(state.subjects, edits)
        except ValueError as e:
            st.error(str(e))
            return
        state.subjects = updated
        store.save_subjects(state.subjects)
        _queue_toast("Subject updated!")
        st.rerun()

    if col_delete.button("Delete selected"):
        selected = [row["id"] for row in edited_records if row.get("Select")]
        if not selected:
            st.warning("Select at least one subject to delete.")
            return
        updated = state.subjects
        try:
            for subject_id in selected:
                updated = delete_subject(updated, subject_id, state.assignments)
        except ValueError as e:
            st.error(str(e))
            return
        state.subjects = updated
        store.save_subjects(state.subjects)
        _queue_toast("Subject deleted")
        st.rerun()


def render_assignments(state: AppState) -> None:
    st.header("Assignments")
    names = subject_names(state.subjects)

    with st.form("add_assignment_form", clear_on_submit=True):
        col1, col2, col3, col4 = st.columns([2, 2, 1, 1])
        with col1:
            title = st.text_input("Title")
        with col2:
            subject = st.selectbox("Subject", names, index=None)
        with col3:
            due = st.date_input("Due date", value=date.today())
        with col4:
            priority = st.selectbox("Priority", ["low", "medium", "high"], index=1)
        description = st.text_area("Description (optional)", height=80)
        if st.form_submit_button("Add assignment", type="primary"):
            try:
                assignment = create_assignment(title, subject, due, description, priority)
            except ValueError as e:
                st.error(str(e))
            else:
                state.assignments = state.assignments + [assignment]
                store.save_assignments(state.assignments)
                st.toast("Assignment added!")

    f1, f2 = st.columns(2)
    with f1:
        subject_filter = st.selectbox("Subject filter", ["all"] + names)
    with f2:
        status_filter = st.selectbox("Status", STATUS_OPTIONS)

    shown = filter_assignments(state.assignments, subject_filter, status_filter)
    if not shown:
        st.info("No assignments to show.")
        return

    today = date.today()
    for a in sorted(shown, key=lambda x: (x.completed, x.due_date)):
        left, mid, right = st.columns([4, 2, 1])
        with left:
            checked = st.checkbox(f"**{a.title}** · {a.subject}", value=a.completed, key=f"done_{a.id}")
            if checked != a.completed:
                state.assignments = toggle_complete(state.assignments, a.id)
                store.save_assignments(state.assignments)
                st.rerun()
            if a.description:
                st.caption(a.description)
        with mid:
            days = days_until_due(a, today)
            due_text = "Overdue" if days < 0 else ("Due today" if days == 0 else f"{days} days left")
            st.write(f"{a.priority.upper()} · {due_text}")
        with right:
            if st.button("Delete", key=f"delete_{a.id}"):
                state.assignments = delete_assignment(state.assignments, a.id)
                store.save_assignments(state.assignments)
                _queue_toast("Assignment deleted")
                st.rerun()


def _note_label(note) -> str:
    return f"{note.title} · {note.updated_at:%Y-%m-%d %H:%M}"


def render_notes(state: AppState) -> None:
    st.header("Notes")

    with st.form("add_note_form", clear_on_submit=True):
        title = st.text_input("Title")
        content = st.text_area("Content", height=120)
        if st.form_submit_button("Create note", type="primary"):
            try:
                note = create_note(title, content)
            except ValueError as e:
                st.error(str(e))
            else:
                state.notes = add_note(state.notes, note)
                store.save_notes(state.notes)
                st.session_state.active_note_id = note.id
                st.toast("Note created!")

    stamp = date.today().isoformat()
    c_json, c_pdf, c_import = st.columns(3)
    with c_json:
        st.download_button(
            "Export all as JSON",
            data=notes_to_json(state.notes).encode("utf-8"),
            file_name=f"study-notes-{stamp}.json",
            mime="application/json",
            disabled=not state.notes,
        )
    with c_pdf:
        st.download_button(
            "Export all as PDF",
            data=notes_to_pdf(state.notes, title="Study Notes") if state.notes else b"",
            file_name=f"study-notes-{stamp}.pdf",
            mime="application/pdf",
            disabled=not state.notes,
        )
    with c_import:
        uploaded = st.file_uploader("Import notes (JSON)", type=["json"], key="notes_import")
        if uploaded is not None and st.button("Import"):
            try:
                state.notes = import_notes(state.notes, uploaded.getvalue())
            except ValueError as e:
                st.error(str(e))
            else:
                store.save_notes(state.notes)
                _queue_toast("Notes imported!")
                st.rerun()

    query = st.text_input("Search notes", placeholder="Search title or content...")
    shown = search_notes(state.notes, query)
    if not shown:
        st.info("No notes found." if state.notes else "No notes yet.")
        return

    ids = [n.id for n in shown]
    active_id = st.session_state.get("active_note_id")
    index = ids.index(active_id) if active_id in ids else 0
    by_id = {n.id: n for n in shown}
    selected_id = st.selectbox(
        "Note", ids, index=index, format_func=lambda i: _note_label(by_id[i])
    )
    st.session_state.active_note_id = selected_id
    note = find_note(state.notes, selected_id)

    with st.form(f"edit_note_{note.id}"):
        new_title = st.text_input("Title", value=note.title)
        new_content = st.text_area("Content", value=note.content, height=300)
        saved = st.form_submit_button("Save note", type="primary")
    if saved:
        try:
            state.notes = update_note(state.notes, note.id, title=new_title, content=new_content)
        except ValueError as e:
            st.error(str(e))
        else:
            store.save_notes(state.notes)
            _queue_toast("Note saved!")
            st.rerun()

    st.caption(f"Created {note.created_at:%Y-%m-%d %H:%M} · updated {note.updated_at:%Y-%m-%d %H:%M}")
    col_pdf, col_delete = st.columns(2)
    with col_pdf:
        safe_name = "".join(c if c.isalnum() else "_" for c in note.title).lower()
        st.download_button(
            "Export note as PDF",
            data=notes_to_pdf([note], title=note.title),
            file_name=f"{safe_name}.pdf",
            mime="application/pdf",
        )
    with col_delete:
        if st.button("Delete note"):
            state.notes = delete_note(state.notes, note.id)
            store.save_notes(state.notes)
            st.session_state.pop("active_note_id", None)
            _queue_toast("Note deleted")
            st.rerun()


def _shift_month(first: date, step: int) -> date:
    index = first.year * 12 + first.month - 1 + step
    return date(index // 12, index % 12 + 1, 1)


def render_calendar(state: AppState) -> None:
    st.header("Calendar")
    today = date.today()
    month = st.session_state.get("calendar_month") or today.replace(day=1)

    prev_col, label_col, next_col = st.columns([1, 4, 1])
    if prev_col.button("‹ Previous"):
        st.session_state.calendar_month = _shift_month(month, -1)
        st.rerun()
    if next_col.button("Next ›"):
        st.session_state.calendar_month = _shift_month(month, 1)
        st.rerun()
    label_col.subheader(f"{calendar.month_name[month.month]} {month.year}")

    due = assignments_by_date(state.assignments, month.year, month.month)
    weekdays = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
    header = st.columns(7)
    for col, name in zip(header, weekdays):
        col.markdown(f"**{name}**")

    for week in calendar.Calendar(firstweekday=6).monthdayscalendar(month.year, month.month):
        cols = st.columns(7)
        for col, day_number in zip(cols, week):
            if not day_number:
                continue
            day = date(month.year, month.month, day_number)
            with col.container(border=True):
                marker = " (today)" if day == today else ""
                st.markdown(f"**{day_number}**{marker}")
                for a in due.get(day, []):
                    color = subject_color(state.subjects, a.subject)
                    title = f"~~{html.escape(a.title)}~~" if a.completed else html.escape(a.title)
                    st.markdown(
                        f"<span style='color:{color}'>&#9679;</span> {title}",
                        unsafe_allow_html=True,
                    )

    st.subheader("Due this month")
    if not due:
        st.info("No assignments due this month.")
        return
    for day in sorted(due):
        for a in due[day]:
            status = "done" if a.completed else a.priority
            st.write(f"{day:%a %d} · **{a.title}** · {a.subject} · {status}")


store = _ensure_session_state()
state: AppState = st.session_state.state

st.title("Study Timetable")
st.caption("Local-first study schedule generator with subjects, assignments and notes.")
_flush_toast()

with st.sidebar:
    st.header("Navigate")
    pages = ["Timetable", "Subjects", "Assignments", "Calendar", "Notes"]
    page = st.radio("Page", pages, key="nav_page", label_visibility="collapsed")
    st.caption(f"Data is stored locally in {store.data_dir}.")

if page == "Timetable":
    render_timetable(state)
elif page == "Subjects":
    render_subjects(state)
elif page == "Assignments":
    render_assignments(state)
elif page == "Calendar":
    render_calendar(state)
elif page == "Notes":
    render_notes(state)
