from __future__ import annotations
from typing import Dict, List, Optional, Tuple
from uuid import uuid4
from models import Assignment, Subject

COLOR_OPTIONS: Dict[str, str] = {
    "Blue": "#3b82f6",
    "Purple": "#a855f7",
    "Green": "#22c55e",
    "Orange": "#f97316",
    "Pink": "#ec4899",
    "Yellow": "#eab308",
    "Indigo": "#6366f1",
    "Red": "#ef4444",
    "Teal": "#14b8a6",
    "Cyan": "#06b6d4",
    "Emerald": "#10b981",
    "Rose": "#f43f5e",
}
FALLBACK_COLOR = "#6b7280"

_DEFAULTS = [
    ("Mathematics", "Blue"),
    ("Physics", "Purple"),
    ("Chemistry", "Green"),
    ("Biology", "Orange"),
    ("English", "Pink"),
    ("History", "Yellow"),
    ("Computer Science", "Indigo"),
]


def default_subjects() -> List[Subject]:
    return [
        Subject(id=str(uuid4()), name=name, color=COLOR_OPTIONS[color])
        for name, color in _DEFAULTS
    ]


def _check_name(subjects: List[Subject], name: str, exclude_id: Optional[str] = None) -> str:
    name = name.strip()
    if not name:
        raise ValueError("Please enter a subject name.")
    for s in subjects:
        if s.id != exclude_id and s.name.lower() == name.lower():
            raise ValueError("Subject already exists.")
    return name


def add_subject(subjects: List[Subject], name: str, color: str = COLOR_OPTIONS["Blue"]) -> List[Subject]:
    name = _check_name(subjects, name)
    return list(subjects) + [Subject(id=str(uuid4()), name=name, color=color)]


def update_subject(
    subjects: List[Subject],
    subject_id: str,
    name: Optional[str] = None,
    color: Optional[str] = None,
) -> List[Subject]:
    out = []
    for s in subjects:
        if s.id == subject_id:
            changes = {}
            if name is not None:
                changes["name"] = _check_name(subjects, name, exclude_id=subject_id)
            if color is not None:
                changes["color"] = color
            s = s.model_copy(update=changes)
        out.append(s)
    return out


def apply_subject_edits(
    subjects: List[Subject],
    edits: Dict[str, Tuple[str, str]],
) -> List[Subject]:
    """
    Apply {subject_id: (name, color)} edits as one batch. Names are checked
    against the final set, so two subjects can swap names.
    """
    final = []
    for s in subjects:
        if s.id in edits:
            name, color = edits[s.id]
            s = s.model_copy(update={"name": name.strip(), "color": color})
        final.append(s)

    seen = set()
    for s in final:
        if not s.name:
            raise ValueError("Please enter a subject name.")
        if s.name.lower() in seen:
            raise ValueError(f'Subject "{s.name}" already exists.')
        seen.add(s.name.lower())
    return final


def delete_subject(
    subjects: List[Subject],
    subject_id: str,
    assignments: Optional[List[Assignment]] = None,
) -> List[Subject]:
    """
    Remove a subject unless assignments still refer to it by name.
    """
    target = next((s for s in subjects if s.id == subject_id), None)
    if target is None:
        return list(subjects)

    count = sum(1 for a in assignments or [] if a.subject == target.name)
    if count:
        plural = "s" if count > 1 else ""
        raise ValueError(
            f'Cannot delete "{target.name}": {count} assignment{plural} using this subject.'
        )
    return [s for s in subjects if s.id != subject_id]


def subject_names(subjects: List[Subject]) -> List[str]:
    return [s.name for s in subjects]


def subject_color(subjects: List[Subject], name: Optional[str]) -> str:
    for s in subjects:
        if s.name == name:
            return s.color
    return FALLBACK_COLOR
