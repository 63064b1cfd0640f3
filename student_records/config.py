"""
Configuration: file paths, closed vocabularies, spreadsheet header names.

The header constants here are the column titles of the enrollment
spreadsheet. parsers.build_registry() binds each one to a field parser;
to support a new column, add its title here and register a parser for it.
"""

from pathlib import Path

# ---------------------------------------------------------------------------
# File paths: adjust these if source files move
# ---------------------------------------------------------------------------
DATA_DIR = Path(__file__).resolve().parent.parent

STUDENT_SPREADSHEET_FILE = DATA_DIR / "students.xlsx"
STUDENT_SHEET_NAME = "Students"
WAITING_LIST_SHEET_NAME = "Waiting List"

# ---------------------------------------------------------------------------
# Program identity
# ---------------------------------------------------------------------------
PROGRAM_NAME = "English Program Student Database"

# ---------------------------------------------------------------------------
# Levels and sessions
# ---------------------------------------------------------------------------
LEVELS: list[str] = ["PL1", "L1", "L2", "L3", "L4", "L5"]

GENDERED_LEVELS: list[str] = [
    "PL1-M",
    "PL1-W",
    "L1-M",
    "L1-W",
    "L2-M",
    "L2-W",
    "L3",
    "L4",
    "L5",
]

GRADUATE_LEVEL = "L5 GRAD"

# Gender-split buckets and the merged level each one rolls up into.
# Levels not listed here pass through unchanged.
LEVEL_MERGE_MAP: dict[str, str] = {
    "PL1-M": "PL1",
    "PL1-W": "PL1",
    "L1-M": "L1",
    "L1-W": "L1",
    "L2-M": "L2",
    "L2-W": "L2",
}

# Placement sub-scores may carry a +/- modifier
LEVELS_PLUS: list[str] = [
    "PL1", "PL1+",
    "L1-", "L1", "L1+",
    "L2-", "L2", "L2+",
    "L3-", "L3", "L3+",
    "L4-", "L4", "L4+",
    "L5-", "L5",
    "Exempt",
]

# Session labels look like "Fa 21": term abbreviation then two-digit year.
# Terms are listed in calendar order within a year.
SESSION_TERMS: list[str] = ["Sp", "Su", "Fa"]
SUMMER_TERM = "Su"
FIRST_SESSION_YEAR = 2016
LAST_SESSION_YEAR = 2030

# Repeating column groups in the spreadsheet
MAX_ACADEMIC_RECORDS = 12
MAX_PHONE_NUMBERS = 4

# ---------------------------------------------------------------------------
# Spreadsheet headers
# ---------------------------------------------------------------------------
HEADER_ENGLISH_NAME = "Name"
HEADER_ARABIC_NAME = "Arabic Name"
HEADER_EP_ID = "ID"
HEADER_WA_PRIMARY_PHONE = "Primary Phone"
HEADER_INVITE_TAG = "Invite"
HEADER_NCL = "NCL"
HEADER_CURRENT_LEVEL = "Current Level"
HEADER_AUDIT = "Audit"
HEADER_FINAL_GRADE_SENT = "FGR Sent"
HEADER_LEVEL_REEVAL_DATE = "Level Reeval Date"
HEADER_SECTIONS_OFFERED = "Sections Offered"
HEADER_REACTIVATED_DATE = "Reactivated Date"
HEADER_WITHDRAW_DATE = "Withdraw Date"
HEADER_CURRENT_STATUS = "Status"
HEADER_PHOTO_CONTACT = "Photo Contact"
HEADER_PLACEMENT = "Placement"
HEADER_PLACEMENT_CONF_DATE = "Placement Confirmed"
HEADER_PENDING = "Pending"
HEADER_NO_ANSWER_CLASS_SCHEDULE = "NA Class Schedule"
HEADER_CORRESPONDENCE = "Correspondence"
HEADER_CLASS_LIST_SENT = "Class List Sent"
HEADER_CLASS_LIST_SENT_DATE = "Class List Sent Date"
HEADER_MALE = "Male"
HEADER_AGE = "Age"
HEADER_OCCUPATION = "Occupation"
HEADER_LOOKING_FOR_JOB = "Looking for Job"
HEADER_TEACHER = "Teacher"
HEADER_TEACHING_SUBJECT_AREAS = "Teaching Subject Areas"
HEADER_ENGLISH_TEACHER = "English Teacher"
HEADER_ENGLISH_TEACHER_LOCATION = "English Teacher Location"
HEADER_WA_STATUS = "WA Status"
HEADER_PHONE = "Phone"
HEADER_WA_BROADCAST_SAR = "WA Broadcast SAR"
HEADER_ILLITERATE_ARABIC = "Illiterate Arabic"
HEADER_ILLITERATE_ENGLISH = "Illiterate English"
HEADER_LITERACY_TUTOR = "Literacy Tutor"
HEADER_ZOOM_TUTOR = "Zoom"
HEADER_CERT_REQUESTS = "Certificate Requests"
HEADER_ORIG_PLACEMENT_WRITING = "Orig Writing"
HEADER_ORIG_PLACEMENT_SPEAKING = "Orig Speaking"
HEADER_ORIG_PLACEMENT_LEVEL = "Orig Level"
HEADER_ORIG_PLACEMENT_ADJUSTMENT = "Orig Adjustment"

# Academic record column group, repeated MAX_ACADEMIC_RECORDS times
HEADER_SESSION = "Session"
HEADER_LEVEL = "Level"
HEADER_RESULTS = ["P", "F", "WD"]
HEADER_FINAL_GRADE = "Final Grade"
HEADER_EXIT_WRITING_EXAM = "Exit Writing"
HEADER_EXIT_SPEAKING_EXAM = "Exit Speaking"
HEADER_LEVEL_AUDITED = "Level Audited"
HEADER_ATTENDANCE = "Attendance"
HEADER_TEACHER_COMMENTS = "Teacher Comments"

# Waiting list sheet
WAITING_LIST_HEADER_NAME = "Name"
WAITING_LIST_HEADER_PHONE = "Phone"
WAITING_LIST_HEADER_REFERRAL = "Referral"
WAITING_LIST_HEADER_OUTCOME = "Outcome"

# Checkbox columns named after a nationality code
NATIONALITY_HEADERS: list[str] = [
    "JDN", "SYR", "IRQ", "EGY", "INDNES", "YEM", "CEAFR-RE", "CHI", "KOR", "UNKNWN",
]

# Checkbox columns named after a WhatsApp broadcast group
WA_BROADCAST_GROUP_HEADERS: list[str] = [
    "Men's Group",
    "Women's Group",
    "Literacy Group",
    "Alumni Group",
]

# Cell values that mean "class list not actually sent"
CLASS_LIST_NOT_SENT_VALUES = {"N/A", "NA", "No WA", ""}

# Checkbox columns use "1" for checked
CHECKED = 1
