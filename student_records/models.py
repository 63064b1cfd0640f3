"""
Domain model: enums and dataclasses for student records.

A Student is a tabular-origin document keyed by ep_id. Defaults mirror a
freshly created record from the add-student form, so a parser can start
from Student() and fill in whatever the spreadsheet row provides.
"""

from dataclasses import dataclass, field
from enum import Enum


class Status(str, Enum):
    NEW = "NEW"
    RET = "RET"
    WD = "WD"
    NCL = "NCL"


class FinalResult(str, Enum):
    P = "P"
    F = "F"
    WD = "WD"


class Nationality(str, Enum):
    JDN = "JDN"
    SYR = "SYR"
    IRQ = "IRQ"
    EGY = "EGY"
    INDNES = "INDNES"
    YEM = "YEM"
    CEAFRRE = "CEAFRRE"
    CHI = "CHI"
    KOR = "KOR"
    UNKNWN = "UNKNWN"


class DroppedOutReason(str, Enum):
    COVID = "COVID-19 Pandemic Related"
    FMEF = "Family Member or Employer Forbid Further Study"
    FTCLE = "Failed to Thrive in Clsrm Env"
    GRAD = "Graduated from L5"
    IP = "Illness or Pregnancy"
    JOB = "Got a Job"
    LCC = "Lack of Child-Care"
    LCM = "Lack of Commitment or Motivation"
    LFS = "Lack of Familial Support"
    LLMS = "Lack of Life Mgm Skills"
    LT = "Lack of Transport"
    MOVE = "Moved"
    TC = "Time Conflict"
    UNK = "Unknown"
    VP = "Vision Problems"


class StatusDetails(str, Enum):
    """Enrollment-history classification used by the statistics dashboard."""

    SE = "Attended Previous Session(s) & Still Enrolled"
    SKIP = "Attended a Session, Skipped a Session, & Returned"
    SES1 = "Still in 1st Session"
    NEWWD = "New Student Withdrew"
    RETWD = "Returning Student Withdrew"


class WaitlistOutcome(str, Enum):
    ACCEPTED = "Accepted"
    DECLINED = "Declined"
    NO_ANSWER = "No Answer"
    REFERRED = "Referred"


Age = int | float | str
UNKNOWN_AGE = "Unknown"


@dataclass
class Grade:
    result: FinalResult
    percentage: int | None = None
    notes: str | None = None


@dataclass
class AcademicRecord:
    """One session attended: level, grades, attendance and comments."""

    session: str
    level: str | None = None
    level_audited: str | None = None
    final_result: Grade | None = None
    exit_writing_exam: Grade | None = None
    exit_speaking_exam: Grade | None = None
    attendance: int | None = None
    comments: str | None = None
    elective_class: str | None = None


@dataclass
class StudentName:
    english: str = ""
    arabic: str = "N/A"


@dataclass
class PhoneNumber:
    number: int
    notes: str | None = None


@dataclass
class WhatsappInfo:
    has_whatsapp: bool = True
    phone_numbers: list[PhoneNumber] = field(default_factory=list)
    # index into phone_numbers, -1 when unset
    primary_phone: int = -1
    other_wa_broadcast_groups: list[str] = field(default_factory=list)
    wa_broadcast_sar: str | None = None
    whatsapp_notes: str | None = None


@dataclass
class StudentStatus:
    current_status: Status = Status.NEW
    invite_tag: bool = False
    no_contact_list: bool = False
    audit: bool | None = None
    dropped_out_reason: DroppedOutReason | None = None
    final_grade_sent_date: str | None = None
    level_reeval_date: str | None = None
    reactivated_date: str | None = None
    withdraw_date: str | None = None


@dataclass
class OriginalPlacement:
    level: str = "PL1"
    speaking: str = "PL1"
    writing: str = "PL1"
    adjustment: str | None = None


@dataclass
class Placement:
    orig_placement_data: OriginalPlacement = field(default_factory=OriginalPlacement)
    conf_date: str | None = None
    no_answer_class_schedule_date: str | None = None
    pending: bool | None = None
    photo_contact: str | None = None
    placement: str | None = None
    sections_offered: str | None = None


@dataclass
class StudentWork:
    occupation: str = "Unknown"
    english_teacher_location: str | None = None
    is_english_teacher: bool | None = None
    is_teacher: bool | None = None
    looking_for_job: str | None = None
    teaching_subject_areas: str | None = None


@dataclass
class Literacy:
    illiterate_ar: bool | None = None
    illiterate_eng: bool | None = None
    tutor_and_date: str | None = None


@dataclass
class ClassList:
    class_list_sent: bool | None = None
    class_list_sent_date: str | None = None
    class_list_sent_notes: str | None = None


@dataclass
class Correspondence:
    date: str
    notes: str


@dataclass
class Student:
    ep_id: int = 0
    name: StudentName = field(default_factory=StudentName)
    gender: str = "M"
    nationality: Nationality = Nationality.UNKNWN
    age: Age = UNKNOWN_AGE
    current_level: str = "PL1"
    initial_session: str = ""
    status: StudentStatus = field(default_factory=StudentStatus)
    placement: Placement = field(default_factory=Placement)
    work: StudentWork = field(default_factory=StudentWork)
    literacy: Literacy = field(default_factory=Literacy)
    phone: WhatsappInfo = field(default_factory=WhatsappInfo)
    class_list: ClassList = field(default_factory=ClassList)
    correspondence: list[Correspondence] = field(default_factory=list)
    academic_records: list[AcademicRecord] = field(default_factory=list)
    certificate_requests: str | None = None
    zoom: str | None = None


@dataclass
class WaitingListEntry:
    name: str
    phone_numbers: list[PhoneNumber] = field(default_factory=list)
    referral: str = ""
    outcome: WaitlistOutcome | None = None
