"""
Dashboard-ready output functions.

These are the entry points a front end calls. Each returns plain dicts or
DataFrames suitable for rendering number boxes, charts and tables; chart
drawing itself happens elsewhere.
"""

import logging

import pandas as pd

from .config import PROGRAM_NAME
from .models import FinalResult, Student, WaitingListEntry
from .statistics import compute_statistics, round_half_up

logger = logging.getLogger(__name__)

REGISTRATION_RATE_COLUMNS = ["session", "status", "registered", "invited", "rate", "label"]
RESULT_RATE_COLUMNS = ["level", "total", "pass_pct", "fail_pct", "withdraw_pct"]

# Number boxes on the overview, in display order
_OVERVIEW_CARDS = [
    ("total_registered", "Total Registered"),
    ("total_active", "Active Students"),
    ("total_enrollment", "Current Enrollment"),
    ("total_new_next_session", "New Next Session"),
    ("total_pending", "Pending Placement"),
    ("total_eligible", "Invite Eligible"),
    ("total_ncl", "No Contact List"),
    ("total_teachers", "Teachers"),
    ("total_english_teachers", "English Teachers"),
    ("total_illiterate_arabic", "Illiterate in Arabic"),
    ("total_illiterate_english", "Illiterate in English"),
    ("total_waiting_list_pending", "Waiting List Pending"),
    ("average_age", "Average Age"),
]


def get_statistics_overview(
    students: list[Student],
    waiting_list: list[WaitingListEntry] | None = None,
) -> dict:
    """Single entry point a dashboard would call to populate its number boxes.

    Parameters
    ----------
    students : Full student collection.
    waiting_list : Waiting list entries, if loaded.

    Returns
    -------
    dict with keys:
        program         : str
        current_session : str | None
        cards           : list of {"key", "label", "value"}
        statistics      : the full compute_statistics() bundle
    """
    statistics = compute_statistics(students, waiting_list or [])

    cards = []
    for key, label in _OVERVIEW_CARDS:
        value = statistics[key]
        if key == "average_age":
            value = round_half_up(value, 1)
        cards.append({"key": key, "label": label, "value": value})

    return {
        "program": PROGRAM_NAME,
        "current_session": statistics["current_session"],
        "cards": cards,
        "statistics": statistics,
    }


def get_level_views(statistics: dict) -> dict:
    """Merged and gender-split level counts, for all and for active students."""
    return {
        "merged": statistics["level_counts"],
        "split": statistics["gendered_level_counts"],
        "active_merged": statistics["active_level_counts"],
        "active_split": statistics["active_gendered_level_counts"],
    }


def format_registration_label(status: str, registered: int, invited: int, rate: int) -> str:
    """e.g. "NEW: 3 of 4 (75%)"."""
    return f"{status}: {registered} of {invited} ({rate}%)"


def get_registration_rate_rows(statistics: dict) -> pd.DataFrame:
    """One row per (session, status) from placement_registration_counts.

    Returns
    -------
    DataFrame with columns:
        session, status, registered, invited, rate, label
    """
    rows = []
    for entry in statistics["placement_registration_counts"]:
        for status, invited in entry["invite_counts"].items():
            registered = entry["registration_counts"].get(status, 0)
            rate = entry["registration_rates"].get(status, 0)
            rows.append({
                "session": entry["session"],
                "status": status,
                "registered": registered,
                "invited": invited,
                "rate": rate,
                "label": format_registration_label(status, registered, invited, rate),
            })

    if not rows:
        logger.warning("No sessions to report registration rates for")
    return pd.DataFrame(rows, columns=REGISTRATION_RATE_COLUMNS)


def get_result_rate_rows(statistics: dict) -> pd.DataFrame:
    """Pass / fail / withdraw percentages per level.

    Levels with no graded records report 0 for every percentage.

    Returns
    -------
    DataFrame with columns:
        level, total, pass_pct, fail_pct, withdraw_pct
    """
    counts = pd.DataFrame.from_dict(
        statistics["overall_result_counts_by_level"], orient="index"
    )
    if counts.empty:
        return pd.DataFrame(columns=RESULT_RATE_COLUMNS)

    counts = counts.reindex(columns=[r.value for r in FinalResult], fill_value=0)
    total = counts.sum(axis=1)
    safe_total = total.where(total > 0)

    def percent(result: FinalResult) -> pd.Series:
        share = (counts[result.value] / safe_total * 100).fillna(0)
        return share.map(lambda v: round_half_up(v, 1))

    df = pd.DataFrame({
        "level": counts.index,
        "total": total.astype(int).values,
        "pass_pct": percent(FinalResult.P).values,
        "fail_pct": percent(FinalResult.F).values,
        "withdraw_pct": percent(FinalResult.WD).values,
    })
    return df.reset_index(drop=True)
