from __future__ import annotations
from datetime import date
from typing import Dict, List
from uuid import uuid4
from models import Assignment

STATUS_OPTIONS = ["all", "pending", "completed"]


def create_assignment(
    title: str,
    subject: str,
    due_date: date,
    description: str = "",
    priority: str = "medium",
) -> Assignment:
    if not title.strip() or not subject or due_date is None:
        raise ValueError("Please fill in all required fields.")
    return Assignment(
        id=str(uuid4()),
        title=title.strip(),
        subject=subject,
        due_date=due_date,
        description=description.strip(),
        priority=priority,
    )


def toggle_complete(assignments: List[Assignment], assignment_id: str) -> List[Assignment]:
    return [
        a.model_copy(update={"completed": not a.completed}) if a.id == assignment_id else a
        for a in assignments
    ]


def delete_assignment(assignments: List[Assignment], assignment_id: str) -> List[Assignment]:
    return [a for a in assignments if a.id != assignment_id]


def assignment_counts(assignments: List[Assignment]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for a in assignments:
        counts[a.subject] = counts.get(a.subject, 0) + 1
    return counts


def days_until_due(assignment: Assignment, today: date) -> int:
    return (assignment.due_date - today).days


def filter_assignments(
    assignments: List[Assignment],
    subject: str = "all",
    status: str = "all",
) -> List[Assignment]:
    out = []
    for a in assignments:
        if subject != "all" and a.subject != subject:
            continue
        if status == "completed" and not a.completed:
            continue
        if status == "pending" and a.completed:
            continue
        out.append(a)
    return out


def assignments_by_date(
    assignments: List[Assignment],
    year: int,
    month: int,
) -> Dict[date, List[Assignment]]:
    """Group the month's assignments by due date, in list order."""
    out: Dict[date, List[Assignment]] = {}
    for a in assignments:
        if a.due_date.year == year and a.due_date.month == month:
            out.setdefault(a.due_date, []).append(a)
    return out
