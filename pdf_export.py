from __future__ import annotations
from io import BytesIO
from xml.sax.saxutils import escape
from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
from typing import List
from models import DAY_FULL_LABELS, Note, StudyTimetable
from planner import weekly_study_minutes


def _slot_text(slot) -> str:
    if slot.activity == "study":
        return slot.subject or "Study"
    return slot.label or slot.activity.capitalize()


def timetable_to_pdf(timetable: StudyTimetable) -> bytes:
    buf = BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=letter,
        leftMargin=40,
        rightMargin=40,
        topMargin=40,
        bottomMargin=40,
    )
    styles = getSampleStyleSheet()
    elems = []

    routine = timetable.routine
    elems.append(Paragraph(f"Study Timetable: {escape(timetable.name)}", styles["Title"]))
    elems.append(Spacer(1, 10))
    elems.append(Paragraph(
        f"Wake: {routine.wake_up_time} | Sleep: {routine.sleep_time} "
        f"| Study: {routine.study_hours_per_day:g}h/day",
        styles["Normal"],
    ))
    elems.append(Paragraph(
        f"Breakfast: {routine.breakfast_time} | Lunch: {routine.lunch_time} "
        f"| Dinner: {routine.dinner_time} | Exercise: {routine.exercise_time or 'None'}",
        styles["Normal"],
    ))
    elems.append(Paragraph(f"Subjects: {escape(', '.join(timetable.subjects))}", styles["Normal"]))
    elems.append(Spacer(1, 12))

    totals = weekly_study_minutes(timetable)
    if totals:
        elems.append(Paragraph("Weekly study time", styles["Heading3"]))
        totals_data = [["Subject", "Minutes", "Hours"]]
        for subject, minutes in sorted(totals.items(), key=lambda x: x[1], reverse=True):
            totals_data.append([subject, str(minutes), f"{minutes / 60:.1f}"])
        totals_table = Table(totals_data, hAlign="LEFT")
        totals_table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
            ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
            ("ALIGN", (1, 1), (2, -1), "RIGHT"),
        ]))
        elems.append(totals_table)
        elems.append(Spacer(1, 12))

    for day, slots in timetable.weekly_schedule.items():
        elems.append(Paragraph(DAY_FULL_LABELS[day], styles["Heading3"]))
        table_data = [["Start", "End", "Activity", "Details"]]
        for slot in slots:
            table_data.append([
                slot.start_time,
                slot.end_time,
                slot.activity.capitalize(),
                _slot_text(slot),
            ])
        if len(table_data) == 1:
            table_data.append(["", "", "", "No slots"])

        table = Table(table_data, hAlign="LEFT", colWidths=[60, 60, 80, 260])
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
            ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
        ]))
        elems.append(table)
        elems.append(Spacer(1, 8))

    doc.build(elems)
    return buf.getvalue()


def _note_body(text: str) -> str:
    return escape(text).replace("\n", "<br/>") if text.strip() else "<i>No content</i>"


def notes_to_pdf(notes: List[Note], title: str = "Notes") -> bytes:
    """
    Render notes in the order given. Pass a single-item list to export
    one note on its own.
    """
    buf = BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=letter,
        leftMargin=40,
        rightMargin=40,
        topMargin=40,
        bottomMargin=40,
    )
    styles = getSampleStyleSheet()
    elems = [Paragraph(escape(title), styles["Title"]), Spacer(1, 10)]

    numbered = len(notes) > 1
    for i, note in enumerate(notes, start=1):
        heading = f"{i}. {note.title}" if numbered else note.title
        elems.append(Paragraph(escape(heading), styles["Heading2"]))
        elems.append(Paragraph(
            f"<i>Last updated: {note.updated_at:%Y-%m-%d %H:%M}</i>",
            styles["Normal"],
        ))
        elems.append(Spacer(1, 4))
        elems.append(Paragraph(_note_body(note.content), styles["BodyText"]))
        elems.append(Spacer(1, 12))

    if not notes:
        elems.append(Paragraph("No notes yet.", styles["Normal"]))

    doc.build(elems)
    return buf.getvalue()
