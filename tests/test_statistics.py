import pandas as pd
import pytest

from student_records.models import (
    DroppedOutReason,
    FinalResult,
    Status,
    StudentStatus,
    WaitingListEntry,
    WaitlistOutcome,
)
from student_records.statistics import (
    average_age,
    compute_statistics,
    count_by,
    get_placement_registration_counts,
    merge_level_counts,
    registration_rate,
    round_half_up,
)


@pytest.fixture
def students(make_student):
    """Two non-summer sessions; Sp 22 is current.

    1: Fa 21 + Sp 22, returning
    2: Fa 21 only, withdrew
    3: new in Sp 22
    4: new for Sp 22, never enrolled
    """
    return [
        make_student(1, "Fa 21", ("Fa 21", "Sp 22"), Status.RET,
                     results={"Fa 21": FinalResult.P}, gender="F", age=20),
        make_student(2, "Fa 21", ("Fa 21",), Status.WD,
                     results={"Fa 21": FinalResult.WD}, age="Unknown"),
        make_student(3, "Sp 22", ("Sp 22",), Status.NEW, age=30, current_level="L3"),
        make_student(4, "Sp 22", (), Status.NEW),
    ]


def test_merge_level_counts():
    merged = merge_level_counts({"PL1-M": 2, "PL1-W": 3, "L3": 5})
    assert merged["PL1"] == 5
    assert merged["L3"] == 5
    assert merged["L1"] == 0
    assert "PL1-M" not in merged
    assert "PL1-W" not in merged


def test_registration_rate_zero_invited():
    assert registration_rate(0, 0) == 0
    assert registration_rate(3, 4) == 75


def test_average_age_skips_unknown():
    assert average_age(pd.Series([20, "Unknown", 30])) == 25
    assert average_age(pd.Series([], dtype=float)) == 0.0


def test_count_by_omits_empty_and_orders_keys():
    counts = count_by(["b", None, "a", "", "b"], order=["b"])
    assert list(counts.items()) == [("b", 2), ("a", 1)]


def test_count_by_sorts_numbers_numerically():
    assert list(count_by([10, 2, 2])) == [2, 10]


def test_placement_registration_counts(students):
    counts = get_placement_registration_counts(students, ["Fa 21", "Sp 22"])
    fall, spring = counts

    assert fall["session"] == "Fa 21"
    assert fall["invite_counts"] == {"NEW": 2, "RET": 0}
    assert fall["registration_counts"] == {"NEW": 2, "RET": 0}
    assert fall["registration_rates"] == {"NEW": 100, "RET": 0}

    assert spring["invite_counts"] == {"NEW": 2, "RET": 2}
    assert spring["registration_counts"] == {"NEW": 1, "RET": 1}
    assert spring["registration_rates"] == {"NEW": 50, "RET": 50}


def test_compute_statistics_totals(students):
    stats = compute_statistics(students)

    assert stats["current_session"] == "Sp 22"
    assert stats["sessions"] == ["Fa 21", "Sp 22"]
    assert stats["total_registered"] == 4
    assert stats["total_active"] == 2
    assert stats["total_enrollment"] == 2
    assert stats["total_new_next_session"] == 1
    assert stats["average_age"] == 25
    assert stats["status_counts"] == {"NEW": 2, "RET": 1, "WD": 1}
    assert stats["active_status_counts"] == {"NEW": 1, "RET": 1}
    assert stats["gender_counts"] == {"M": 3, "F": 1}
    assert stats["session_counts"] == {"Fa 21": 2, "Sp 22": 2}
    assert stats["active_initial_year_counts"] == {"2021": 1, "2022": 1}


def test_compute_statistics_levels(students):
    stats = compute_statistics(students)
    assert stats["level_counts"]["PL1"] == 3
    assert stats["level_counts"]["L3"] == 1
    assert stats["gendered_level_counts"]["L3"] == 1
    assert stats["active_level_counts"]["L3"] == 1
    assert "PL1" not in stats["gendered_level_counts"]


def test_compute_statistics_status_details(students):
    stats = compute_statistics(students)
    assert stats["status_details_counts"] == {
        "Attended Previous Session(s) & Still Enrolled": 1,
        "Still in 1st Session": 2,
        "New Student Withdrew": 1,
    }
    assert stats["sessions_attended_counts"] == {0: 1, 1: 2, 2: 1}


def test_result_counts(students):
    stats = compute_statistics(students)
    assert stats["overall_result_counts"] == {"P": 1, "F": 0, "WD": 1}

    by_level = stats["overall_result_counts_by_level"]
    assert by_level["PL1-M"] == {"P": 1, "F": 0, "WD": 1}
    assert by_level["L5 GRAD"] == {"P": 0, "F": 0, "WD": 0}


def test_dropped_out_reasons_omit_unset(make_student):
    withdrawn = make_student(1, "Fa 21", ("Fa 21",), Status.WD)
    withdrawn.status = StudentStatus(
        current_status=Status.WD, dropped_out_reason=DroppedOutReason.LCC
    )
    stats = compute_statistics([withdrawn, make_student(2, "Fa 21", ("Fa 21",))])
    assert stats["dropped_out_reason_counts"] == {"Lack of Child-Care": 1}


def test_waiting_list_counts(students):
    waiting_list = [
        WaitingListEntry(name="A", outcome=WaitlistOutcome.ACCEPTED),
        WaitingListEntry(name="B", outcome=WaitlistOutcome.ACCEPTED),
        WaitingListEntry(name="C"),
    ]
    stats = compute_statistics(students, waiting_list)
    assert stats["waiting_list_outcome_counts"] == {"Accepted": 2}
    assert stats["total_waiting_list_pending"] == 1


def test_empty_collection():
    stats = compute_statistics([])
    assert stats["current_session"] is None
    assert stats["total_registered"] == 0
    assert stats["average_age"] == 0.0
    assert stats["placement_registration_counts"] == []
    assert set(stats["level_counts"].values()) == {0}


def test_statistics_are_deterministic(students):
    first = compute_statistics(students)
    second = compute_statistics(list(reversed(students)))
    assert first == second
    assert list(first["nationality_counts"]) == list(second["nationality_counts"])


def test_registration_rate_rounds_halves_up():
    assert registration_rate(1, 8) == 13
    assert registration_rate(5, 8) == 63
    assert registration_rate(1, 3) == 33


def test_round_half_up():
    assert round_half_up(12.5) == 13
    assert round_half_up(0.25, 1) == 0.3
    assert round_half_up(6.25, 1) == 6.3
    assert round_half_up(6.24, 1) == 6.2
