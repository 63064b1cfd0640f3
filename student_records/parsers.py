"""
Field parser registry: spreadsheet cell -> Student mutation.

Every recognised column header maps to a ColumnParser wrapping a function
`(key, value, student) -> None` that applies one cell to the student being
built. Parsing is failure-silent: a cell that cannot be applied leaves the
student untouched. Parsers signal such cells by raising UnparseableCell,
which the row loop turns into a ParseDiagnostic instead of an error.

Cells of a row are applied in a declared order, not sheet order alone:

- scalar columns first (sheet order), the primary-phone column after
  every phone column,
- then each academic-record slot in turn, session column first, so that
  level/result/grade/attendance columns always find their record as the
  last one appended.

Unknown enum text is handled uniformly: the field keeps its previous value
and a diagnostic is recorded.
"""

import logging
import math
import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .config import (
    CLASS_LIST_NOT_SENT_VALUES,
    GENDERED_LEVELS,
    GRADUATE_LEVEL,
    HEADER_AGE,
    HEADER_ARABIC_NAME,
    HEADER_ATTENDANCE,
    HEADER_AUDIT,
    HEADER_CERT_REQUESTS,
    HEADER_CLASS_LIST_SENT,
    HEADER_CLASS_LIST_SENT_DATE,
    HEADER_CORRESPONDENCE,
    HEADER_CURRENT_LEVEL,
    HEADER_CURRENT_STATUS,
    HEADER_ENGLISH_NAME,
    HEADER_ENGLISH_TEACHER,
    HEADER_ENGLISH_TEACHER_LOCATION,
    HEADER_EP_ID,
    HEADER_EXIT_SPEAKING_EXAM,
    HEADER_EXIT_WRITING_EXAM,
    HEADER_FINAL_GRADE,
    HEADER_FINAL_GRADE_SENT,
    HEADER_ILLITERATE_ARABIC,
    HEADER_ILLITERATE_ENGLISH,
    HEADER_INVITE_TAG,
    HEADER_LEVEL,
    HEADER_LEVEL_AUDITED,
    HEADER_LEVEL_REEVAL_DATE,
    HEADER_LITERACY_TUTOR,
    HEADER_LOOKING_FOR_JOB,
    HEADER_MALE,
    HEADER_NCL,
    HEADER_NO_ANSWER_CLASS_SCHEDULE,
    HEADER_OCCUPATION,
    HEADER_ORIG_PLACEMENT_ADJUSTMENT,
    HEADER_ORIG_PLACEMENT_LEVEL,
    HEADER_ORIG_PLACEMENT_SPEAKING,
    HEADER_ORIG_PLACEMENT_WRITING,
    HEADER_PENDING,
    HEADER_PHONE,
    HEADER_PHOTO_CONTACT,
    HEADER_PLACEMENT,
    HEADER_PLACEMENT_CONF_DATE,
    HEADER_REACTIVATED_DATE,
    HEADER_RESULTS,
    HEADER_SECTIONS_OFFERED,
    HEADER_SESSION,
    HEADER_TEACHER,
    HEADER_TEACHER_COMMENTS,
    HEADER_TEACHING_SUBJECT_AREAS,
    HEADER_WA_BROADCAST_SAR,
    HEADER_WA_PRIMARY_PHONE,
    HEADER_WA_STATUS,
    HEADER_WITHDRAW_DATE,
    HEADER_ZOOM_TUTOR,
    LEVELS,
    LEVELS_PLUS,
    MAX_ACADEMIC_RECORDS,
    MAX_PHONE_NUMBERS,
    NATIONALITY_HEADERS,
    WA_BROADCAST_GROUP_HEADERS,
)
from .loaders.utils import (
    DATE_REGEX,
    HEADER_SEPARATOR_REGEX,
    cell_text,
    expand,
    generate_keys,
    is_checked,
    parse_date,
    safe_float,
    split_and_trim,
)
from .models import (
    UNKNOWN_AGE,
    AcademicRecord,
    Correspondence,
    DroppedOutReason,
    FinalResult,
    Grade,
    Nationality,
    PhoneNumber,
    Status,
    Student,
)
from .records import set_primary_phone
from .sessions import session_key, session_labels

logger = logging.getLogger(__name__)

PHONE_REGEX = re.compile(r"\d{9,10}")
PERCENT_REGEX = re.compile(r"\d{1,3}")
RESULT_REGEX = re.compile(r"P|F|WD")
EXAM_RESULT_REGEX = re.compile(r"P|F")
_NOTES_PUNCTUATION_REGEX = re.compile(r"[()%]")
_INSIDE_PAREN_REGEX = re.compile(r"\(([^)]+)\)")

_ACADEMIC_LEVELS = set(GENDERED_LEVELS) | set(LEVELS) | {GRADUATE_LEVEL}


class UnparseableCell(ValueError):
    """A non-empty cell whose value could not be applied to the record."""


class Operation(str, Enum):
    ASSIGN = "assign"
    CONDITIONAL = "conditional"
    ENUM_LOOKUP = "enum_lookup"
    APPEND = "append"
    LAST_RECORD = "last_record"


ParserFn = Callable[[str, str, Student], None]


@dataclass(frozen=True)
class ColumnParser:
    """Registry entry for one spreadsheet header.

    slot  : -1 for scalar columns, otherwise the academic-record group index
    order : application order within a slot
    """

    operation: Operation
    fn: ParserFn
    order: int = 0
    slot: int = -1


@dataclass
class ParseDiagnostic:
    row: int
    column: str
    value: str
    reason: str


@dataclass
class ImportResult:
    students: list[Student] = field(default_factory=list)
    diagnostics: list[ParseDiagnostic] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Cell helpers
# ---------------------------------------------------------------------------

def _date_or_raise(value: str) -> str | None:
    """Parsed date, None for an empty cell, UnparseableCell otherwise."""
    if not value:
        return None
    date = parse_date(value)
    if date is None:
        raise UnparseableCell(f"not a date: '{value}'")
    return date


def _last_record(student: Student) -> AcademicRecord:
    if not student.academic_records:
        raise UnparseableCell("no academic record to attach to")
    return student.academic_records[-1]


def _level_or_raise(value: str, allowed: set[str] | list[str]) -> str:
    if value not in allowed:
        raise UnparseableCell(f"unknown level '{value}'")
    return value


def _percentage(value: str) -> int | None:
    """First 1-3 digit run in the text; best effort, notes with numbers confuse it."""
    match = PERCENT_REGEX.search(value)
    return int(match.group(0)) if match else None


def _grade_notes(value: str, strip_result: bool = False) -> str:
    notes = PERCENT_REGEX.sub("", value, count=1)
    notes = _NOTES_PUNCTUATION_REGEX.sub("", notes)
    if strip_result:
        notes = EXAM_RESULT_REGEX.sub("", notes, count=1)
    return notes.strip()


def _parse_exam_grade(value: str) -> Grade:
    """Exit exam cell such as "P 85%" or "F (62%) retake"."""
    match = EXAM_RESULT_REGEX.search(value)
    if match is None:
        raise UnparseableCell(f"no P/F result in '{value}'")
    grade = Grade(result=FinalResult(match.group(0)))
    grade.percentage = _percentage(value)
    notes = _grade_notes(value, strip_result=True)
    if notes:
        grade.notes = notes
    return grade


# ---------------------------------------------------------------------------
# Name, identity, demographics
# ---------------------------------------------------------------------------

def parse_english_name(key: str, value: str, student: Student) -> None:
    student.name.english = value


def parse_arabic_name(key: str, value: str, student: Student) -> None:
    if value:
        student.name.arabic = value


def parse_id(key: str, value: str, student: Student) -> None:
    if not value:
        return
    number = safe_float(value)
    if number is None or not number.is_integer():
        raise UnparseableCell(f"not an ID number: '{value}'")
    student.ep_id = int(number)


def parse_gender(key: str, value: str, student: Student) -> None:
    student.gender = "M" if is_checked(value) else "F"


def parse_age(key: str, value: str, student: Student) -> None:
    if not value:
        return
    if value == UNKNOWN_AGE:
        student.age = UNKNOWN_AGE
        return
    age = safe_float(value)
    if age is None or not math.isfinite(age):
        raise UnparseableCell(f"not an age: '{value}'")
    student.age = int(age) if age.is_integer() else age


def parse_nationality(key: str, value: str, student: Student) -> None:
    if not is_checked(value):
        return
    code = re.sub(r"\s", "", key.replace("-", "", 1))
    try:
        student.nationality = Nationality(code)
    except ValueError:
        raise UnparseableCell(f"unknown nationality '{key}'") from None


def parse_initial_session(key: str, value: str, student: Student) -> None:
    if is_checked(value):
        student.initial_session = key


def parse_current_level(key: str, value: str, student: Student) -> None:
    if value:
        student.current_level = _level_or_raise(value, _ACADEMIC_LEVELS)


def parse_current_status(key: str, value: str, student: Student) -> None:
    if not value:
        return
    try:
        student.status.current_status = Status[value]
    except KeyError:
        raise UnparseableCell(f"unknown status '{value}'") from None


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------

def parse_invite_tag(key: str, value: str, student: Student) -> None:
    student.status.invite_tag = bool(value)


def parse_ncl(key: str, value: str, student: Student) -> None:
    student.status.no_contact_list = bool(value)


def parse_audit(key: str, value: str, student: Student) -> None:
    if is_checked(value):
        student.status.audit = True


def parse_final_grade_sent_date(key: str, value: str, student: Student) -> None:
    date = _date_or_raise(value)
    if date:
        student.status.final_grade_sent_date = date


def parse_level_reeval_date(key: str, value: str, student: Student) -> None:
    date = _date_or_raise(value)
    if date:
        student.status.level_reeval_date = date


def parse_reactivated_date(key: str, value: str, student: Student) -> None:
    date = _date_or_raise(value)
    if date:
        student.status.reactivated_date = date


def parse_withdraw_date(key: str, value: str, student: Student) -> None:
    date = _date_or_raise(value)
    if date:
        student.status.withdraw_date = date


def parse_dropout_reason(key: str, value: str, student: Student) -> None:
    if not is_checked(value):
        return
    try:
        student.status.dropped_out_reason = DroppedOutReason(key)
    except ValueError:
        raise UnparseableCell(f"unknown dropout reason '{key}'") from None


# ---------------------------------------------------------------------------
# Placement and class list
# ---------------------------------------------------------------------------

def parse_sections_offered(key: str, value: str, student: Student) -> None:
    if value:
        student.placement.sections_offered = value


def parse_photo_contact(key: str, value: str, student: Student) -> None:
    if value:
        student.placement.photo_contact = value


def parse_placement(key: str, value: str, student: Student) -> None:
    if value:
        student.placement.placement = value


def parse_placement_conf_date(key: str, value: str, student: Student) -> None:
    date = _date_or_raise(value)
    if date:
        student.placement.conf_date = date


def parse_pending_placement(key: str, value: str, student: Student) -> None:
    if is_checked(value):
        student.placement.pending = True


def parse_no_answer_class_schedule(key: str, value: str, student: Student) -> None:
    date = _date_or_raise(value)
    if date:
        student.placement.no_answer_class_schedule_date = date


def parse_orig_placement_writing(key: str, value: str, student: Student) -> None:
    if value:
        student.placement.orig_placement_data.writing = _level_or_raise(value, LEVELS_PLUS)


def parse_orig_placement_speaking(key: str, value: str, student: Student) -> None:
    if value:
        student.placement.orig_placement_data.speaking = _level_or_raise(value, LEVELS_PLUS)


def parse_orig_placement_level(key: str, value: str, student: Student) -> None:
    if value:
        student.placement.orig_placement_data.level = _level_or_raise(value, LEVELS)


def parse_orig_placement_adjustment(key: str, value: str, student: Student) -> None:
    if value:
        student.placement.orig_placement_data.adjustment = value


def parse_class_list_sent(key: str, value: str, student: Student) -> None:
    student.class_list.class_list_sent = value not in CLASS_LIST_NOT_SENT_VALUES
    if value:
        student.class_list.class_list_sent_notes = value


def parse_class_list_sent_date(key: str, value: str, student: Student) -> None:
    date = _date_or_raise(value)
    if date:
        student.class_list.class_list_sent_date = date


def parse_correspondence(key: str, value: str, student: Student) -> None:
    """Pair each date in the cell with the note text that follows it.

    "10/4/21: called, no answer 10/6/21: texted" gives two entries. Dates
    and notes are zipped positionally, so a surplus date or note on either
    side is dropped.
    """
    if not value:
        return
    dates = DATE_REGEX.findall(value)
    notes = [note for note in split_and_trim(value.replace(":", ""), DATE_REGEX) if note]
    for raw_date, note in zip(dates, notes):
        date = parse_date(raw_date)
        if date is not None:
            student.correspondence.append(Correspondence(date=date, notes=note))


# ---------------------------------------------------------------------------
# Work, literacy, misc
# ---------------------------------------------------------------------------

def parse_occupation(key: str, value: str, student: Student) -> None:
    if value:
        student.work.occupation = value


def parse_looking_for_job(key: str, value: str, student: Student) -> None:
    if value:
        student.work.looking_for_job = value


def parse_teacher(key: str, value: str, student: Student) -> None:
    if is_checked(value):
        student.work.is_teacher = True


def parse_teaching_subject_areas(key: str, value: str, student: Student) -> None:
    if value:
        student.work.teaching_subject_areas = value


def parse_english_teacher(key: str, value: str, student: Student) -> None:
    if is_checked(value):
        student.work.is_english_teacher = True


def parse_english_teacher_location(key: str, value: str, student: Student) -> None:
    if value:
        student.work.english_teacher_location = value


def parse_arabic_literacy(key: str, value: str, student: Student) -> None:
    if is_checked(value):
        student.literacy.illiterate_ar = True


def parse_english_literacy(key: str, value: str, student: Student) -> None:
    if is_checked(value):
        student.literacy.illiterate_eng = True


def parse_literacy_tutor(key: str, value: str, student: Student) -> None:
    if value:
        student.literacy.tutor_and_date = value


def parse_zoom_tutor(key: str, value: str, student: Student) -> None:
    if value:
        student.zoom = value


def parse_cert_requests(key: str, value: str, student: Student) -> None:
    if value:
        student.certificate_requests = value


# ---------------------------------------------------------------------------
# Phone and WhatsApp
# ---------------------------------------------------------------------------

def parse_wa_status(key: str, value: str, student: Student) -> None:
    if value:
        lower_value = value.lower()
        student.phone.has_whatsapp = "has whatsapp" in lower_value or "has wa" in lower_value
        student.phone.whatsapp_notes = value


def parse_phone(key: str, value: str, student: Student) -> None:
    """Append the first 9-10 digit number in the cell; "(...)" text becomes its note."""
    if not value:
        return
    match = PHONE_REGEX.search(value.replace(" ", ""))
    if match is None:
        if value == "has whatsapp":
            parse_wa_status(key, value, student)
            return
        raise UnparseableCell(f"no phone number in '{value}'")

    phone_number = PhoneNumber(number=int(match.group(0)))
    notes_match = _INSIDE_PAREN_REGEX.search(value)
    if notes_match:
        phone_number.notes = notes_match.group(1)
    student.phone.phone_numbers.append(phone_number)


def parse_wa_primary_phone(key: str, value: str, student: Student) -> None:
    if not value:
        return
    match = PHONE_REGEX.search(value.replace(" ", ""))
    if match is None:
        raise UnparseableCell(f"no phone number in '{value}'")
    set_primary_phone(student, int(match.group(0)))


def parse_wa_broadcast_sar(key: str, value: str, student: Student) -> None:
    if value:
        student.phone.wa_broadcast_sar = value


def parse_wa_broadcasts(key: str, value: str, student: Student) -> None:
    if is_checked(value):
        student.phone.other_wa_broadcast_groups.append(key)


# ---------------------------------------------------------------------------
# Academic records: each column after Session applies to the last record
# ---------------------------------------------------------------------------

def parse_academic_record_session(key: str, value: str, student: Student) -> None:
    if not value:
        return
    if session_key(value)[0] != 0:
        logger.warning("Unrecognised session label '%s' for student %s", value, student.ep_id)
    student.academic_records.append(AcademicRecord(session=value))


def parse_academic_record_level(key: str, value: str, student: Student) -> None:
    if value:
        _last_record(student).level = _level_or_raise(value, _ACADEMIC_LEVELS)


def parse_academic_record_result(key: str, value: str, student: Student) -> None:
    if not is_checked(value):
        return
    match = RESULT_REGEX.search(key)
    if match is None:
        raise UnparseableCell(f"no result in column '{key}'")
    _last_record(student).final_result = Grade(result=FinalResult(match.group(0)))


def parse_academic_record_final_grade(key: str, value: str, student: Student) -> None:
    """Percentage and notes for the result set by the P/F/WD columns."""
    if not value:
        return
    final_result = _last_record(student).final_result
    if final_result is None:
        raise UnparseableCell("final grade without a P/F/WD result")
    percentage = _percentage(value)
    if percentage is not None:
        final_result.percentage = percentage
    notes = _grade_notes(value)
    if notes:
        final_result.notes = notes


def parse_academic_record_exit_writing_exam(key: str, value: str, student: Student) -> None:
    if value:
        record = _last_record(student)
        record.exit_writing_exam = _parse_exam_grade(value)


def parse_academic_record_exit_speaking_exam(key: str, value: str, student: Student) -> None:
    if value:
        record = _last_record(student)
        record.exit_speaking_exam = _parse_exam_grade(value)


def parse_academic_record_audit(key: str, value: str, student: Student) -> None:
    if value:
        _last_record(student).level_audited = _level_or_raise(value, _ACADEMIC_LEVELS)


def parse_academic_record_attendance(key: str, value: str, student: Student) -> None:
    if not value:
        return
    record = _last_record(student)
    attendance = _percentage(value)
    if attendance is None:
        raise UnparseableCell(f"no attendance figure in '{value}'")
    record.attendance = attendance


def parse_academic_record_teacher_comments(key: str, value: str, student: Student) -> None:
    if value:
        _last_record(student).comments = value


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

# Columns of one academic-record group, in application order
_ACADEMIC_RECORD_COLUMNS: list[tuple[list[str], ParserFn, Operation]] = [
    ([HEADER_SESSION], parse_academic_record_session, Operation.APPEND),
    ([HEADER_LEVEL], parse_academic_record_level, Operation.LAST_RECORD),
    (HEADER_RESULTS, parse_academic_record_result, Operation.LAST_RECORD),
    ([HEADER_FINAL_GRADE], parse_academic_record_final_grade, Operation.LAST_RECORD),
    ([HEADER_EXIT_WRITING_EXAM], parse_academic_record_exit_writing_exam, Operation.LAST_RECORD),
    ([HEADER_EXIT_SPEAKING_EXAM], parse_academic_record_exit_speaking_exam, Operation.LAST_RECORD),
    ([HEADER_LEVEL_AUDITED], parse_academic_record_audit, Operation.LAST_RECORD),
    ([HEADER_ATTENDANCE], parse_academic_record_attendance, Operation.LAST_RECORD),
    ([HEADER_TEACHER_COMMENTS], parse_academic_record_teacher_comments, Operation.LAST_RECORD),
]


def build_registry(
    max_academic_records: int = MAX_ACADEMIC_RECORDS,
    max_phone_numbers: int = MAX_PHONE_NUMBERS,
) -> dict[str, ColumnParser]:
    """Header -> ColumnParser for every recognised spreadsheet column."""
    assign = Operation.ASSIGN
    conditional = Operation.CONDITIONAL
    enum_lookup = Operation.ENUM_LOOKUP
    append = Operation.APPEND

    scalar_fields = {
        HEADER_ENGLISH_NAME: ColumnParser(assign, parse_english_name),
        HEADER_ARABIC_NAME: ColumnParser(conditional, parse_arabic_name),
        HEADER_EP_ID: ColumnParser(assign, parse_id),
        HEADER_MALE: ColumnParser(conditional, parse_gender),
        HEADER_AGE: ColumnParser(conditional, parse_age),
        ",".join(NATIONALITY_HEADERS): ColumnParser(enum_lookup, parse_nationality),
        ",".join(session_labels()): ColumnParser(conditional, parse_initial_session),
        HEADER_CURRENT_LEVEL: ColumnParser(enum_lookup, parse_current_level),
        HEADER_CURRENT_STATUS: ColumnParser(enum_lookup, parse_current_status),
        HEADER_INVITE_TAG: ColumnParser(conditional, parse_invite_tag),
        HEADER_NCL: ColumnParser(conditional, parse_ncl),
        HEADER_AUDIT: ColumnParser(conditional, parse_audit),
        HEADER_FINAL_GRADE_SENT: ColumnParser(conditional, parse_final_grade_sent_date),
        HEADER_LEVEL_REEVAL_DATE: ColumnParser(conditional, parse_level_reeval_date),
        HEADER_REACTIVATED_DATE: ColumnParser(conditional, parse_reactivated_date),
        HEADER_WITHDRAW_DATE: ColumnParser(conditional, parse_withdraw_date),
        ",".join(r.value for r in DroppedOutReason): ColumnParser(enum_lookup, parse_dropout_reason),
        HEADER_SECTIONS_OFFERED: ColumnParser(conditional, parse_sections_offered),
        HEADER_PHOTO_CONTACT: ColumnParser(conditional, parse_photo_contact),
        HEADER_PLACEMENT: ColumnParser(conditional, parse_placement),
        HEADER_PLACEMENT_CONF_DATE: ColumnParser(conditional, parse_placement_conf_date),
        HEADER_PENDING: ColumnParser(conditional, parse_pending_placement),
        HEADER_NO_ANSWER_CLASS_SCHEDULE: ColumnParser(conditional, parse_no_answer_class_schedule),
        HEADER_ORIG_PLACEMENT_WRITING: ColumnParser(enum_lookup, parse_orig_placement_writing),
        HEADER_ORIG_PLACEMENT_SPEAKING: ColumnParser(enum_lookup, parse_orig_placement_speaking),
        HEADER_ORIG_PLACEMENT_LEVEL: ColumnParser(enum_lookup, parse_orig_placement_level),
        HEADER_ORIG_PLACEMENT_ADJUSTMENT: ColumnParser(conditional, parse_orig_placement_adjustment),
        HEADER_CLASS_LIST_SENT: ColumnParser(assign, parse_class_list_sent),
        HEADER_CLASS_LIST_SENT_DATE: ColumnParser(conditional, parse_class_list_sent_date),
        HEADER_CORRESPONDENCE: ColumnParser(append, parse_correspondence),
        HEADER_OCCUPATION: ColumnParser(conditional, parse_occupation),
        HEADER_LOOKING_FOR_JOB: ColumnParser(conditional, parse_looking_for_job),
        HEADER_TEACHER: ColumnParser(conditional, parse_teacher),
        HEADER_TEACHING_SUBJECT_AREAS: ColumnParser(conditional, parse_teaching_subject_areas),
        HEADER_ENGLISH_TEACHER: ColumnParser(conditional, parse_english_teacher),
        HEADER_ENGLISH_TEACHER_LOCATION: ColumnParser(conditional, parse_english_teacher_location),
        HEADER_ILLITERATE_ARABIC: ColumnParser(conditional, parse_arabic_literacy),
        HEADER_ILLITERATE_ENGLISH: ColumnParser(conditional, parse_english_literacy),
        HEADER_LITERACY_TUTOR: ColumnParser(conditional, parse_literacy_tutor),
        HEADER_ZOOM_TUTOR: ColumnParser(conditional, parse_zoom_tutor),
        HEADER_CERT_REQUESTS: ColumnParser(conditional, parse_cert_requests),
        HEADER_WA_STATUS: ColumnParser(conditional, parse_wa_status),
        generate_keys(HEADER_PHONE, max_phone_numbers): ColumnParser(append, parse_phone),
        # after every Phone column, so the number is matched rather than duplicated
        HEADER_WA_PRIMARY_PHONE: ColumnParser(conditional, parse_wa_primary_phone, order=1),
        HEADER_WA_BROADCAST_SAR: ColumnParser(conditional, parse_wa_broadcast_sar),
        ",".join(WA_BROADCAST_GROUP_HEADERS): ColumnParser(append, parse_wa_broadcasts),
    }
    registry = expand(scalar_fields)

    for order, (headers, fn, operation) in enumerate(_ACADEMIC_RECORD_COLUMNS):
        for header in headers:
            keys = generate_keys(header, max_academic_records).split(",")
            for slot, key in enumerate(keys):
                registry[key] = ColumnParser(operation, fn, order=order, slot=slot)

    return registry


REGISTRY: dict[str, ColumnParser] = build_registry()


# ---------------------------------------------------------------------------
# Row parsing
# ---------------------------------------------------------------------------

def expand_row(row: Mapping[str, Any] | Iterable[tuple[str, Any]]) -> list[tuple[str, str]]:
    """(header, text) pairs, one per header named in a shared-header cell.

    A header "A, B" or "A/B" yields both ("A", value) and ("B", value).
    """
    items = row.items() if isinstance(row, Mapping) else row
    pairs: list[tuple[str, str]] = []
    for header, raw in items:
        value = raw if isinstance(raw, str) else cell_text(raw)
        for subkey in HEADER_SEPARATOR_REGEX.split(str(header).strip()):
            if subkey:
                pairs.append((subkey, value.strip()))
    return pairs


def parse_row(
    row: Mapping[str, Any] | Iterable[tuple[str, Any]],
    registry: dict[str, ColumnParser] | None = None,
    row_index: int = 0,
) -> tuple[Student, list[ParseDiagnostic]]:
    """Build one Student from one spreadsheet row.

    Unrecognised headers are ignored. Returns the student and the cells
    that could not be applied.
    """
    registry = REGISTRY if registry is None else registry
    student = Student()
    diagnostics: list[ParseDiagnostic] = []

    # A group header repeated in the sheet ("Session", "Level", "Session", ...)
    # moves to the next slot on each repeat.
    seen: dict[str, int] = {}
    cells = []
    for header, value in expand_row(row):
        parser = registry.get(header)
        if parser is None:
            continue
        slot = parser.slot
        if slot >= 0:
            slot += seen.get(header, 0)
            seen[header] = seen.get(header, 0) + 1
        cells.append((slot, parser.order, header, value, parser))
    # stable sort keeps sheet order among equal (slot, order)
    cells.sort(key=lambda cell: (cell[0], cell[1]))

    for _, _, header, value, parser in cells:
        try:
            parser.fn(header, value, student)
        except UnparseableCell as exc:
            diagnostics.append(ParseDiagnostic(row_index, header, value, str(exc)))
            logger.debug("Row %d, column '%s': %s", row_index, header, exc)

    return student, diagnostics


def parse_rows(
    rows: Iterable[Mapping[str, Any] | Iterable[tuple[str, Any]]],
    registry: dict[str, ColumnParser] | None = None,
) -> ImportResult:
    """Parse every row; one Student per row, diagnostics collected alongside."""
    result = ImportResult()
    for row_index, row in enumerate(rows):
        student, diagnostics = parse_row(row, registry, row_index)
        result.students.append(student)
        result.diagnostics.extend(diagnostics)

    if result.diagnostics:
        logger.warning(
            "Skipped %d unparseable cells across %d rows",
            len(result.diagnostics), len(result.students),
        )
    logger.info("Parsed %d students", len(result.students))
    return result
