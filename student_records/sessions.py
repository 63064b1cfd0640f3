"""
Session labels and enrollment-history helpers.

A session label is "<term> <yy>" (e.g. "Fa 21"). Labels sort by year, then
by term in SESSION_TERMS order. Labels that do not follow the pattern sort
after all well-formed ones, alphabetically.
"""

import re

from .config import FIRST_SESSION_YEAR, LAST_SESSION_YEAR, SESSION_TERMS, SUMMER_TERM
from .models import Status, StatusDetails, Student

_SESSION_REGEX = re.compile(r"^([A-Za-z]+)\s*(\d{2})$")

_ACTIVE_STATUSES = {Status.NEW, Status.RET}


def session_key(session: str) -> tuple:
    """Sort key for a session label."""
    match = _SESSION_REGEX.match(session.strip())
    if match is None or match.group(1) not in SESSION_TERMS:
        return (1, 0, 0, session)
    term, year = match.groups()
    return (0, int(year), SESSION_TERMS.index(term), session)


def sort_sessions(sessions) -> list[str]:
    """Unique session labels in chronological order."""
    return sorted(set(sessions), key=session_key)


def is_summer(session: str) -> bool:
    return session.strip().startswith(SUMMER_TERM)


def session_labels(
    first_year: int = FIRST_SESSION_YEAR,
    last_year: int = LAST_SESSION_YEAR,
) -> list[str]:
    """Every well-formed session label between two calendar years."""
    return [
        f"{term} {year % 100:02d}"
        for year in range(first_year, last_year + 1)
        for term in SESSION_TERMS
    ]


def get_all_sessions(students: list[Student]) -> list[str]:
    """All sessions mentioned by any academic record, chronologically."""
    return sort_sessions(
        record.session
        for student in students
        for record in student.academic_records
        if record.session
    )


def get_sessions_without_summer(students: list[Student]) -> list[str]:
    return [s for s in get_all_sessions(students) if not is_summer(s)]


def get_all_initial_sessions(students: list[Student]) -> list[str]:
    return sort_sessions(s.initial_session for s in students if s.initial_session)


def get_current_session(students: list[Student]) -> str | None:
    """The latest session any academic record refers to, or None."""
    sessions = get_all_sessions(students)
    if not sessions:
        return None
    return sessions[-1]


def is_active(student: Student) -> bool:
    return student.status.current_status in _ACTIVE_STATUSES


def get_status_details(
    student: Student,
    sessions: list[str],
) -> tuple[StatusDetails, int]:
    """Classify a student's enrollment history.

    Parameters
    ----------
    student : The student to classify.
    sessions : Chronological non-summer session labels for the whole
               collection (see get_sessions_without_summer).

    Returns
    -------
    (status_details, sessions_attended), where sessions_attended counts the
    distinct sessions from `sessions` the student has a record for.

    Logic
    -----
    - WD: NEWWD if at most one session attended, else RETWD
    - at most one session attended: SES1
    - attended sessions contiguous in `sessions`: SE
    - otherwise: SKIP
    """
    position = {session: i for i, session in enumerate(sessions)}
    attended = sorted({
        position[record.session]
        for record in student.academic_records
        if record.session in position
    })
    sessions_attended = len(attended)

    if student.status.current_status == Status.WD:
        if sessions_attended <= 1:
            return StatusDetails.NEWWD, sessions_attended
        return StatusDetails.RETWD, sessions_attended

    if sessions_attended <= 1:
        return StatusDetails.SES1, sessions_attended

    if attended[-1] - attended[0] + 1 == sessions_attended:
        return StatusDetails.SE, sessions_attended
    return StatusDetails.SKIP, sessions_attended
