"""
Statistics aggregation: pure functions with no side effects.

compute_statistics() turns a snapshot of the student collection (and the
waiting list) into the flat bundle of counts and rates the dashboard
renders. Every count mapping is emitted in a canonical key order, so equal
inputs always give equal outputs regardless of collection order.
"""

import logging
from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

import pandas as pd

from .config import GENDERED_LEVELS, GRADUATE_LEVEL, LEVEL_MERGE_MAP, LEVELS
from .models import (
    DroppedOutReason,
    FinalResult,
    Nationality,
    Status,
    StatusDetails,
    Student,
    WaitingListEntry,
    WaitlistOutcome,
)
from .sessions import (
    get_current_session,
    get_sessions_without_summer,
    get_status_details,
    is_active,
    sort_sessions,
)
from .transforms import build_academic_record_frame, build_student_frame

logger = logging.getLogger(__name__)

MERGED_LEVEL_KEYS = LEVELS + [GRADUATE_LEVEL]
SPLIT_LEVEL_KEYS = GENDERED_LEVELS + [GRADUATE_LEVEL]
RESULT_KEYS = [r.value for r in FinalResult]
REGISTRATION_STATUS_KEYS = [Status.NEW.value, Status.RET.value]


# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------

def _sort_key(key) -> tuple:
    # numbers before text, each in natural order
    if isinstance(key, (int, float)):
        return (0, key, "")
    return (1, 0, str(key))


def _ordered(counts: dict, order: Iterable | None = None) -> dict:
    """Re-key a count mapping: keys in `order` first, the rest sorted."""
    order = list(order or [])
    head = [k for k in order if k in counts]
    tail = sorted((k for k in counts if k not in order), key=_sort_key)
    return {k: counts[k] for k in head + tail}


def count_by(values: pd.Series | Iterable, order: Iterable | None = None) -> dict:
    """Count occurrences of each value, ignoring None/NaN and empty strings."""
    series = pd.Series(list(values), dtype=object).dropna()
    series = series[series != ""]
    counts = {k: int(v) for k, v in series.value_counts().items()}
    return _ordered(counts, order)


def seeded_counts(counts: dict, keys: Iterable) -> dict:
    """Counts with every key in `keys` present (zero if absent)."""
    keys = list(keys)
    seeded = {k: 0 for k in keys}
    seeded.update(counts)
    return _ordered(seeded, keys)


def merge_level_counts(gendered_counts: dict) -> dict:
    """Merge gender-split level buckets (PL1-M + PL1-W -> PL1, ...).

    Buckets named in LEVEL_MERGE_MAP are summed into their merged level and
    do not appear in the result; every other level passes through. All
    merged levels are present, zero if nothing rolled up into them.
    """
    merged: dict = {}
    for level, count in gendered_counts.items():
        target = LEVEL_MERGE_MAP.get(level, level)
        merged[target] = merged.get(target, 0) + count
    return seeded_counts(merged, MERGED_LEVEL_KEYS)


def split_level_counts(gendered_counts: dict) -> dict:
    """Gender-split view: every split level present, zero if absent."""
    return seeded_counts(gendered_counts, SPLIT_LEVEL_KEYS)


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going up (12.5 -> 13), unlike round()'s half-to-even."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def registration_rate(registered: int, invited: int) -> int:
    """Registered / invited as a whole percentage, halves rounded up.

    0 when nobody was invited.
    """
    if not invited:
        return 0
    percent = Decimal(registered * 100) / Decimal(invited)
    return int(percent.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def average_age(ages: pd.Series) -> float:
    """Mean over numeric ages only; 0.0 when no student has a usable age."""
    ages = pd.to_numeric(ages, errors="coerce").dropna()
    ages = ages[ages > 0]
    if ages.empty:
        return 0.0
    return float(ages.sum() / len(ages))


def get_result_counts_by_level(records: pd.DataFrame) -> dict:
    """P/F/WD counts per level, zero-filled for every known level and result."""
    table = {level: {r: 0 for r in RESULT_KEYS} for level in SPLIT_LEVEL_KEYS}

    graded = records.dropna(subset=["level", "result"])
    if not graded.empty:
        crosstab = pd.crosstab(graded["level"], graded["result"])
        for level, row in crosstab.iterrows():
            bucket = table.setdefault(level, {r: 0 for r in RESULT_KEYS})
            for result, count in row.items():
                bucket[result] = int(count)

    return _ordered(table, SPLIT_LEVEL_KEYS)


def get_placement_registration_counts(
    students: list[Student],
    sessions: list[str],
) -> list[dict]:
    """Invitation vs registration per session, split NEW / RET.

    For each non-summer session, students whose initial session it is are
    invited as NEW; students with a record in the preceding session are
    invited as RET. A student registered if they have a record for it.
    """
    results = []
    for i, session in enumerate(sessions):
        previous = sessions[i - 1] if i > 0 else None
        invite_counts = {k: 0 for k in REGISTRATION_STATUS_KEYS}
        registration_counts = {k: 0 for k in REGISTRATION_STATUS_KEYS}

        for student in students:
            attended = {record.session for record in student.academic_records}
            if student.initial_session == session:
                key = Status.NEW.value
            elif previous is not None and previous in attended:
                key = Status.RET.value
            else:
                continue
            invite_counts[key] += 1
            if session in attended:
                registration_counts[key] += 1

        results.append({
            "session": session,
            "invite_counts": invite_counts,
            "registration_counts": registration_counts,
            "registration_rates": {
                k: registration_rate(registration_counts[k], invite_counts[k])
                for k in REGISTRATION_STATUS_KEYS
            },
        })

    return results


def _status_details_columns(students: list[Student], sessions: list[str]) -> pd.DataFrame:
    details = [get_status_details(student, sessions) for student in students]
    return pd.DataFrame(
        {
            "status_details": [d[0].value for d in details],
            "sessions_attended": [d[1] for d in details],
        },
        columns=["status_details", "sessions_attended"],
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def compute_statistics(
    students: list[Student],
    waiting_list: Iterable[WaitingListEntry] = (),
) -> dict:
    """Compute every dashboard statistic from one collection snapshot.

    Parameters
    ----------
    students : Full student collection.
    waiting_list : Waiting list entries (optional).

    Returns
    -------
    Flat dict. Count mappings are keyed by enum value / level / session;
    "active_*" variants count only active students enrolled in the current
    session.
    """
    current_session = get_current_session(students)
    sessions = get_sessions_without_summer(students)

    df = build_student_frame(students)
    records = build_academic_record_frame(students)
    details = _status_details_columns(students, sessions)
    df = pd.concat([df, details], axis=1)

    enrolled_now = [
        is_active(s) and any(r.session == current_session for r in s.academic_records)
        for s in students
    ]
    active = df[pd.Series(enrolled_now, index=df.index, dtype=bool)]

    nationality_order = [n.value for n in Nationality]
    status_order = [s.value for s in Status]
    details_order = [d.value for d in StatusDetails]

    active_years = [f"20{s[-2:]}" for s in active["initial_session"] if s]

    gendered_level_counts = count_by(df["current_level"])
    active_gendered_level_counts = count_by(active["current_level"])

    current_records = records[records["session"] == current_session]

    waiting_list = list(waiting_list)
    outcomes = [e.outcome.value for e in waiting_list if e.outcome is not None]

    statistics = {
        "current_session": current_session,
        "sessions": sessions,
        "active_gender_counts": count_by(active["gender"], ["M", "F"]),
        "active_initial_year_counts": count_by(active_years),
        "active_level_counts": merge_level_counts(active_gendered_level_counts),
        "active_gendered_level_counts": split_level_counts(active_gendered_level_counts),
        "active_nationality_counts": count_by(active["nationality"], nationality_order),
        "active_sessions_attended_counts": count_by(active["sessions_attended"]),
        "active_status_counts": count_by(active["current_status"], status_order),
        "active_status_details_counts": count_by(active["status_details"], details_order),
        "average_age": average_age(df["age"]),
        "dropped_out_reason_counts": count_by(
            df["dropped_out_reason"], [r.value for r in DroppedOutReason]
        ),
        "gender_counts": count_by(df["gender"], ["M", "F"]),
        "level_counts": merge_level_counts(gendered_level_counts),
        "gendered_level_counts": split_level_counts(gendered_level_counts),
        "nationality_counts": count_by(df["nationality"], nationality_order),
        "overall_result_counts": seeded_counts(count_by(records["result"]), RESULT_KEYS),
        "overall_result_counts_by_level": get_result_counts_by_level(records),
        "placement_level_counts": count_by(df["placement_level"], LEVELS),
        "placement_registration_counts": get_placement_registration_counts(students, sessions),
        "session_counts": _ordered(count_by(df["initial_session"]), sort_sessions(df["initial_session"])),
        "sessions_attended_counts": count_by(df["sessions_attended"]),
        "status_counts": count_by(df["current_status"], status_order),
        "status_details_counts": count_by(df["status_details"], details_order),
        "total_active": len(active),
        "total_eligible": int(df["invite_tag"].sum()),
        "total_english_teachers": int(df["is_english_teacher"].sum()),
        "total_enrollment": int(current_records["result"].isna().sum()),
        "total_illiterate_arabic": int(df["illiterate_ar"].sum()),
        "total_illiterate_english": int(df["illiterate_eng"].sum()),
        "total_ncl": int(df["no_contact_list"].sum()),
        "total_new_next_session": int(
            ((df["current_status"] == Status.NEW.value) & (df["academic_record_count"] == 0)).sum()
        ),
        "total_pending": int(df["pending"].sum()),
        "total_registered": len(df),
        "total_teachers": int(df["is_teacher"].sum()),
        "waiting_list_outcome_counts": count_by(outcomes, [o.value for o in WaitlistOutcome]),
        "total_waiting_list_pending": sum(1 for e in waiting_list if e.outcome is None),
    }

    logger.info(
        "Computed statistics for %d students (%d active, current session %s)",
        len(df), len(active), current_session,
    )
    return statistics
