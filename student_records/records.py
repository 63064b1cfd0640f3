"""
Record-level operations outside the spreadsheet importer: phone list
upkeep, withdrawal, new-student form merge, and the plain-document form
handed to the document store (keyed by str(ep_id)).
"""

import logging
from dataclasses import asdict
from enum import Enum
from typing import Any

from .models import (
    AcademicRecord,
    ClassList,
    Correspondence,
    DroppedOutReason,
    FinalResult,
    Grade,
    Literacy,
    Nationality,
    OriginalPlacement,
    PhoneNumber,
    Placement,
    Status,
    Student,
    StudentName,
    StudentStatus,
    StudentWork,
    WhatsappInfo,
)

logger = logging.getLogger(__name__)


class DuplicateEpIdError(ValueError):
    """Two students in one collection share an ep_id."""


# ---------------------------------------------------------------------------
# Phone numbers
# ---------------------------------------------------------------------------

def set_primary_phone(student: Student, number: int) -> int:
    """Point primary_phone at `number`, appending it if not yet listed.

    Returns the new primary_phone index.
    """
    numbers = student.phone.phone_numbers
    for index, phone_number in enumerate(numbers):
        if phone_number.number == number:
            student.phone.primary_phone = index
            return index

    numbers.append(PhoneNumber(number=number))
    student.phone.primary_phone = len(numbers) - 1
    return student.phone.primary_phone


def remove_phone_number(student: Student, index: int) -> PhoneNumber:
    """Remove a phone number, keeping primary_phone a valid index.

    If the primary number itself is removed, the first remaining number
    becomes primary (or -1 when the list is now empty).
    """
    numbers = student.phone.phone_numbers
    removed = numbers.pop(index)
    primary = student.phone.primary_phone

    if primary == index:
        student.phone.primary_phone = 0 if numbers else -1
    elif primary > index:
        student.phone.primary_phone = primary - 1

    return removed


def get_primary_phone(student: Student) -> PhoneNumber | None:
    primary = student.phone.primary_phone
    if 0 <= primary < len(student.phone.phone_numbers):
        return student.phone.phone_numbers[primary]
    return None


# ---------------------------------------------------------------------------
# Form actions
# ---------------------------------------------------------------------------

def withdraw_student(
    student: Student,
    withdraw_date: str,
    dropped_out_reason: DroppedOutReason | None = None,
    invite_tag: bool = False,
    no_contact_list: bool = False,
) -> Student:
    """Mark a student as withdrawn.

    The most recent academic record, if any, gets a WD result; an existing
    grade keeps its percentage and notes.
    """
    status = student.status
    status.invite_tag = invite_tag
    status.no_contact_list = no_contact_list
    status.withdraw_date = withdraw_date
    if dropped_out_reason is not None:
        status.dropped_out_reason = dropped_out_reason
    status.current_status = Status.WD

    if student.academic_records:
        last_record = student.academic_records[-1]
        if last_record.final_result is None:
            last_record.final_result = Grade(result=FinalResult.WD)
        else:
            last_record.final_result.result = FinalResult.WD

    logger.info("Withdrew student %s on %s", student.ep_id, withdraw_date)
    return student


def prepare_new_student(student: Student) -> Student:
    """Seed a NEW student with no history with a record for their initial session."""
    if not student.academic_records and student.status.current_status == Status.NEW:
        student.academic_records = [
            AcademicRecord(session=student.initial_session, level=student.current_level)
        ]
    return student


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

def document_id(student: Student) -> str:
    return str(student.ep_id)


def _plain(obj: Any) -> Any:
    """Drop None values and replace enum members with their values."""
    if isinstance(obj, dict):
        return {k: _plain(v) for k, v in obj.items() if v is not None}
    if isinstance(obj, list):
        return [_plain(v) for v in obj]
    if isinstance(obj, Enum):
        return obj.value
    return obj


def to_document(student: Student) -> dict:
    """Plain nested dict for the document store, with None values removed."""
    return _plain(asdict(student))


def _grade_from_document(doc: dict | None) -> Grade | None:
    if not doc:
        return None
    return Grade(
        result=FinalResult(doc["result"]),
        percentage=doc.get("percentage"),
        notes=doc.get("notes"),
    )


def _academic_record_from_document(doc: dict) -> AcademicRecord:
    fields = dict(doc)
    for name in ("final_result", "exit_writing_exam", "exit_speaking_exam"):
        fields[name] = _grade_from_document(fields.get(name))
    return AcademicRecord(**fields)


def from_document(doc: dict) -> Student:
    """Rebuild a Student from to_document() output."""
    status = dict(doc.get("status", {}))
    if "current_status" in status:
        status["current_status"] = Status(status["current_status"])
    if status.get("dropped_out_reason") is not None:
        status["dropped_out_reason"] = DroppedOutReason(status["dropped_out_reason"])

    placement = dict(doc.get("placement", {}))
    placement["orig_placement_data"] = OriginalPlacement(
        **placement.get("orig_placement_data", {})
    )

    phone = dict(doc.get("phone", {}))
    phone["phone_numbers"] = [PhoneNumber(**p) for p in phone.get("phone_numbers", [])]

    return Student(
        ep_id=int(doc.get("ep_id", 0)),
        name=StudentName(**doc.get("name", {})),
        gender=doc.get("gender", "M"),
        nationality=Nationality(doc.get("nationality", Nationality.UNKNWN.value)),
        age=doc.get("age", "Unknown"),
        current_level=doc.get("current_level", "PL1"),
        initial_session=doc.get("initial_session", ""),
        status=StudentStatus(**status),
        placement=Placement(**placement),
        work=StudentWork(**doc.get("work", {})),
        literacy=Literacy(**doc.get("literacy", {})),
        phone=WhatsappInfo(**phone),
        class_list=ClassList(**doc.get("class_list", {})),
        correspondence=[Correspondence(**c) for c in doc.get("correspondence", [])],
        academic_records=[
            _academic_record_from_document(r) for r in doc.get("academic_records", [])
        ],
        certificate_requests=doc.get("certificate_requests"),
        zoom=doc.get("zoom"),
    )


def index_by_ep_id(students: list[Student]) -> dict[str, Student]:
    """Map document id -> student, rejecting duplicate ep_ids."""
    index: dict[str, Student] = {}
    for student in students:
        key = document_id(student)
        if key in index:
            raise DuplicateEpIdError(f"Duplicate ep_id {key}")
        index[key] = student
    return index
