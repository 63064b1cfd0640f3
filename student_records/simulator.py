"""
Simulated data generator for the student records pipeline.

Produces spreadsheet-shaped rows, (header, text) pairs with the academic
record column group repeated per session, so the generated data goes
through the same parser registry as a real workbook. All names and numbers
are synthetic.
"""

import numpy as np

from .config import (
    HEADER_AGE,
    HEADER_ARABIC_NAME,
    HEADER_ATTENDANCE,
    HEADER_CORRESPONDENCE,
    HEADER_CURRENT_LEVEL,
    HEADER_CURRENT_STATUS,
    HEADER_ENGLISH_NAME,
    HEADER_ENGLISH_TEACHER,
    HEADER_EP_ID,
    HEADER_FINAL_GRADE,
    HEADER_ILLITERATE_ARABIC,
    HEADER_INVITE_TAG,
    HEADER_LEVEL,
    HEADER_MALE,
    HEADER_NCL,
    HEADER_ORIG_PLACEMENT_LEVEL,
    HEADER_PENDING,
    HEADER_PHONE,
    HEADER_RESULTS,
    HEADER_SESSION,
    HEADER_TEACHER,
    HEADER_WA_PRIMARY_PHONE,
    HEADER_WITHDRAW_DATE,
    NATIONALITY_HEADERS,
)
from .models import DroppedOutReason, PhoneNumber, WaitingListEntry, WaitlistOutcome

# Seed for reproducibility
_RNG = np.random.default_rng(42)

# ---------------------------------------------------------------------------
# Typical program parameters
# ---------------------------------------------------------------------------
DEFAULT_SESSIONS = ["Fa 22", "Sp 23", "Fa 23", "Sp 24", "Fa 24"]

_FIRST_NAMES = [
    "Ahmad", "Fatima", "Omar", "Layla", "Yusuf", "Mariam", "Khalid", "Huda",
    "Samir", "Noor", "Tariq", "Rania", "Hassan", "Amal", "Ibrahim", "Salma",
]
_LAST_NAMES = [
    "Haddad", "Khoury", "Nasser", "Saleh", "Mansour", "Darwish", "Qasem", "Aziz",
]
_ARABIC_NAMES = ["أحمد", "فاطمة", "عمر", "ليلى", "يوسف", "مريم", "خالد", "هدى"]

# Relative frequency of each nationality column
_NATIONALITY_WEIGHTS = [0.30, 0.35, 0.12, 0.05, 0.03, 0.05, 0.02, 0.03, 0.02, 0.03]

# Merged level -> gender-split bucket (levels above L2 are mixed)
_LEVEL_LADDER = ["PL1", "L1", "L2", "L3", "L4", "L5"]
_SPLIT_LEVELS = {"PL1", "L1", "L2"}

_PASS_PROBABILITY = 0.8
_RETURN_PROBABILITY = 0.75


def _gendered(level: str, male: bool) -> str:
    if level in _SPLIT_LEVELS:
        return f"{level}-{'M' if male else 'W'}"
    return level


def _phone() -> int:
    return int(f"79{_RNG.integers(1_000_000, 9_999_999)}")


def generate_student_rows(
    n_students: int = 60,
    sessions: list[str] | None = None,
    first_ep_id: int = 1000,
) -> list[list[tuple[str, str]]]:
    """Generate simulated Students-sheet rows.

    Each student starts in a random session, attends consecutive sessions
    until they fail to return, and is NEW, RET or WD accordingly. The last
    session is the current one, so its records carry no result yet.
    """
    sessions = sessions or DEFAULT_SESSIONS
    current_index = len(sessions) - 1
    reasons = list(DroppedOutReason)
    rows = []

    for i in range(n_students):
        male = bool(_RNG.random() < 0.5)
        start = int(_RNG.integers(0, len(sessions)))
        level_index = int(_RNG.integers(0, 3))
        placement_level = _LEVEL_LADDER[level_index]
        first_name = _FIRST_NAMES[int(_RNG.integers(0, len(_FIRST_NAMES)))]
        last_name = _LAST_NAMES[int(_RNG.integers(0, len(_LAST_NAMES)))]
        nationality = NATIONALITY_HEADERS[
            int(_RNG.choice(len(NATIONALITY_HEADERS), p=_NATIONALITY_WEIGHTS))
        ]
        phone = _phone()

        row = [
            (HEADER_EP_ID, str(first_ep_id + i)),
            (HEADER_ENGLISH_NAME, f"{first_name} {last_name}"),
            (HEADER_ARABIC_NAME, _ARABIC_NAMES[int(_RNG.integers(0, len(_ARABIC_NAMES)))]),
            (HEADER_MALE, "1" if male else ""),
            (HEADER_AGE, str(int(_RNG.integers(18, 60))) if _RNG.random() < 0.9 else ""),
            (nationality, "1"),
            (sessions[start], "1"),
            (HEADER_ORIG_PLACEMENT_LEVEL, placement_level),
            (f"{HEADER_PHONE}0", f"0{phone}"),
            (HEADER_WA_PRIMARY_PHONE, f"0{phone}"),
            (HEADER_TEACHER, "1" if _RNG.random() < 0.1 else ""),
            (HEADER_ENGLISH_TEACHER, "1" if _RNG.random() < 0.03 else ""),
            (HEADER_ILLITERATE_ARABIC, "1" if _RNG.random() < 0.05 else ""),
            (HEADER_CORRESPONDENCE, "9/1/22: called about placement"),
        ]

        # Academic history
        withdrew = False
        index = start
        history = []
        while index <= current_index:
            level = _gendered(_LEVEL_LADDER[level_index], male)
            result, grade = "", ""
            if index < current_index:
                passed = _RNG.random() < _PASS_PROBABILITY
                result = "P" if passed else "F"
                low, high = (70, 100) if passed else (40, 70)
                grade = f"{int(_RNG.integers(low, high))}%"
                if passed and level_index < len(_LEVEL_LADDER) - 1:
                    level_index += 1

            # every group carries the full column set, as in the workbook
            history.extend([
                (HEADER_SESSION, sessions[index]),
                (HEADER_LEVEL, level),
                *((header, "1" if header == result else "") for header in HEADER_RESULTS),
                (HEADER_FINAL_GRADE, grade),
                (HEADER_ATTENDANCE, f"{int(_RNG.integers(50, 101))}%"),
            ])

            if index < current_index and _RNG.random() > _RETURN_PROBABILITY:
                withdrew = True
                break
            index += 1

        if withdrew:
            status = "WD"
            reason = reasons[int(_RNG.integers(0, len(reasons)))]
            row.append((reason.value, "1"))
            row.append((HEADER_WITHDRAW_DATE, "1/15/24"))
        elif start == current_index:
            status = "NEW"
        else:
            status = "RET"

        row.extend([
            (HEADER_CURRENT_STATUS, status),
            (HEADER_CURRENT_LEVEL, _gendered(_LEVEL_LADDER[level_index], male)),
            (HEADER_INVITE_TAG, "1" if status != "WD" else ""),
            (HEADER_NCL, "1" if withdrew and _RNG.random() < 0.3 else ""),
            (HEADER_PENDING, "1" if status == "NEW" and _RNG.random() < 0.2 else ""),
        ])
        row.extend(history)
        rows.append(row)

    return rows


def generate_waiting_list(n_entries: int = 15) -> list[WaitingListEntry]:
    """Generate simulated waiting list entries; about a third still pending."""
    outcomes = list(WaitlistOutcome)
    entries = []
    for _ in range(n_entries):
        first_name = _FIRST_NAMES[int(_RNG.integers(0, len(_FIRST_NAMES)))]
        last_name = _LAST_NAMES[int(_RNG.integers(0, len(_LAST_NAMES)))]
        outcome = None
        if _RNG.random() > 0.33:
            outcome = outcomes[int(_RNG.integers(0, len(outcomes)))]
        entries.append(WaitingListEntry(
            name=f"{first_name} {last_name}",
            phone_numbers=[PhoneNumber(number=_phone())],
            referral="Community center" if _RNG.random() < 0.5 else "Friend",
            outcome=outcome,
        ))
    return entries
