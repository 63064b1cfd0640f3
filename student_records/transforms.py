"""
Data transforms: flatten Student records into pandas frames for counting.

build_student_frame gives one row per student, build_academic_record_frame
one row per academic record. Both return the full column schema even for
an empty collection, so downstream grouping never has to special-case it.
"""

import logging

import pandas as pd

from .models import UNKNOWN_AGE, Student

logger = logging.getLogger(__name__)

STUDENT_COLUMNS = [
    "ep_id",
    "gender",
    "nationality",
    "age",
    "current_level",
    "initial_session",
    "current_status",
    "dropped_out_reason",
    "placement_level",
    "invite_tag",
    "no_contact_list",
    "is_teacher",
    "is_english_teacher",
    "illiterate_ar",
    "illiterate_eng",
    "pending",
    "academic_record_count",
]

ACADEMIC_RECORD_COLUMNS = [
    "ep_id",
    "session",
    "level",
    "result",
    "percentage",
    "attendance",
]


def _numeric_age(age) -> float | None:
    """Age as a number, None for the Unknown sentinel or zero."""
    if age == UNKNOWN_AGE or age is None:
        return None
    try:
        value = float(age)
    except (TypeError, ValueError):
        return None
    return value if value else None


def build_student_frame(students: list[Student]) -> pd.DataFrame:
    """One row per student with the fields the statistics group on.

    Enum members are stored by value; optional boolean flags are stored as
    plain True/False.
    """
    rows = []
    for student in students:
        status = student.status
        rows.append({
            "ep_id": student.ep_id,
            "gender": student.gender,
            "nationality": student.nationality.value,
            "age": _numeric_age(student.age),
            "current_level": student.current_level,
            "initial_session": student.initial_session,
            "current_status": status.current_status.value,
            "dropped_out_reason": (
                status.dropped_out_reason.value if status.dropped_out_reason else None
            ),
            "placement_level": student.placement.orig_placement_data.level,
            "invite_tag": bool(status.invite_tag),
            "no_contact_list": bool(status.no_contact_list),
            "is_teacher": bool(student.work.is_teacher),
            "is_english_teacher": bool(student.work.is_english_teacher),
            "illiterate_ar": bool(student.literacy.illiterate_ar),
            "illiterate_eng": bool(student.literacy.illiterate_eng),
            "pending": bool(student.placement.pending),
            "academic_record_count": len(student.academic_records),
        })

    df = pd.DataFrame(rows, columns=STUDENT_COLUMNS)
    df["age"] = pd.to_numeric(df["age"], errors="coerce")
    logger.debug("Built student frame with %d rows", len(df))
    return df


def build_academic_record_frame(students: list[Student]) -> pd.DataFrame:
    """One row per academic record, tagged with the owning student's ep_id."""
    rows = []
    for student in students:
        for record in student.academic_records:
            final_result = record.final_result
            rows.append({
                "ep_id": student.ep_id,
                "session": record.session,
                "level": record.level,
                "result": final_result.result.value if final_result else None,
                "percentage": final_result.percentage if final_result else None,
                "attendance": record.attendance,
            })

    df = pd.DataFrame(rows, columns=ACADEMIC_RECORD_COLUMNS)
    logger.debug("Built academic record frame with %d rows", len(df))
    return df
