from student_records.models import (
    DroppedOutReason,
    FinalResult,
    Nationality,
    Status,
    Student,
)
from student_records.parsers import (
    REGISTRY,
    Operation,
    build_registry,
    expand_row,
    parse_correspondence,
    parse_row,
    parse_rows,
)


def test_unrecognised_header_is_ignored():
    student, diagnostics = parse_row([("Favourite Colour", "blue")])
    assert student == Student()
    assert diagnostics == []


def test_ep_id_parsed_as_integer():
    student, _ = parse_row({"ID": "1024"})
    assert student.ep_id == 1024


def test_bad_ep_id_is_reported_not_raised():
    student, diagnostics = parse_row([("ID", "abc")], row_index=7)
    assert student.ep_id == 0
    assert len(diagnostics) == 1
    assert diagnostics[0].row == 7
    assert diagnostics[0].column == "ID"
    assert diagnostics[0].value == "abc"


def test_correspondence_pairs_dates_with_notes():
    student = Student()
    parse_correspondence("Correspondence", "10/4/21: called 10/6/21: texted", student)
    assert [(c.date, c.notes) for c in student.correspondence] == [
        ("10/4/2021", "called"),
        ("10/6/2021", "texted"),
    ]


def test_correspondence_surplus_date_dropped():
    student = Student()
    parse_correspondence("Correspondence", "10/4/21: called 10/6/21: texted 10/8/21", student)
    assert len(student.correspondence) == 2


def test_demographic_columns():
    student, diagnostics = parse_row([
        ("Name", "Layla Haddad"),
        ("Arabic Name", "ليلى"),
        ("Male", ""),
        ("Age", "34"),
        ("CEAFR-RE", "1"),
        ("Fa 21", "1"),
        ("Current Level", "L2-W"),
    ])
    assert diagnostics == []
    assert student.name.english == "Layla Haddad"
    assert student.name.arabic == "ليلى"
    assert student.gender == "F"
    assert student.age == 34
    assert student.nationality == Nationality.CEAFRRE
    assert student.initial_session == "Fa 21"
    assert student.current_level == "L2-W"


def test_unknown_age_sentinel_is_accepted():
    student, diagnostics = parse_row([("Age", "Unknown")])
    assert student.age == "Unknown"
    assert diagnostics == []


def test_fractional_age_is_kept():
    student, diagnostics = parse_row([("Age", "25.7")])
    assert student.age == 25.7
    assert diagnostics == []


def test_non_numeric_age_keeps_unknown():
    student, diagnostics = parse_row([("Age", "thirty")])
    assert student.age == "Unknown"
    assert len(diagnostics) == 1


def test_unknown_enum_text_keeps_prior_value():
    student, diagnostics = parse_row([("Status", "MAYBE"), ("Current Level", "L9")])
    assert student.status.current_status == Status.NEW
    assert student.current_level == "PL1"
    assert [d.column for d in diagnostics] == ["Status", "Current Level"]


def test_status_and_withdrawal_columns():
    student, diagnostics = parse_row([
        ("Status", "WD"),
        ("Withdraw Date", "10/4/21"),
        ("Lack of Child-Care", "1"),
        ("Moved", ""),
        ("Invite", "1"),
        ("NCL", ""),
    ])
    assert diagnostics == []
    assert student.status.current_status == Status.WD
    assert student.status.withdraw_date == "10/4/2021"
    assert student.status.dropped_out_reason == DroppedOutReason.LCC
    assert student.status.invite_tag is True
    assert student.status.no_contact_list is False


def test_bad_date_is_reported():
    student, diagnostics = parse_row([("Withdraw Date", "soon")])
    assert student.status.withdraw_date is None
    assert diagnostics[0].column == "Withdraw Date"


def test_phone_columns_and_primary_phone():
    student, diagnostics = parse_row([
        ("Primary Phone", "0797654321"),
        ("Phone0", "079 123 4567 (home)"),
        ("Phone1", "0797654321"),
    ])
    assert diagnostics == []
    numbers = student.phone.phone_numbers
    assert [p.number for p in numbers] == [791234567, 797654321]
    assert numbers[0].notes == "home"
    assert student.phone.primary_phone == 1


def test_primary_phone_not_listed_is_appended():
    student, _ = parse_row([("Primary Phone", "0791112223")])
    assert [p.number for p in student.phone.phone_numbers] == [791112223]
    assert student.phone.primary_phone == 0


def test_shared_header_cell_applies_to_each_header():
    student, _ = parse_row([("Men's Group, Women's Group", "1")])
    assert student.phone.other_wa_broadcast_groups == ["Men's Group", "Women's Group"]


def test_repeated_academic_record_groups():
    row = [
        ("ID", "7"),
        ("Session", "Fa 21"), ("Level", "L1-M"),
        ("P", "1"), ("F", ""), ("WD", ""),
        ("Final Grade", "85%"), ("Attendance", "92%"),
        ("Session", "Sp 22"), ("Level", "L2-M"),
        ("P", ""), ("F", "1"), ("WD", ""),
        ("Final Grade", "60% retake"), ("Attendance", "70%"),
    ]
    student, diagnostics = parse_row(row)
    assert diagnostics == []

    first, second = student.academic_records
    assert (first.session, first.level, first.attendance) == ("Fa 21", "L1-M", 92)
    assert first.final_result.result == FinalResult.P
    assert first.final_result.percentage == 85
    assert first.final_result.notes is None

    assert (second.session, second.level, second.attendance) == ("Sp 22", "L2-M", 70)
    assert second.final_result.result == FinalResult.F
    assert second.final_result.percentage == 60
    assert second.final_result.notes == "retake"


def test_numbered_group_headers_apply_in_slot_order():
    # sheet order puts every Level column after every Session column
    row = [
        ("Session0", "Fa 21"),
        ("Session1", "Sp 22"),
        ("Level0", "L1-W"),
        ("Level1", "L2-W"),
    ]
    student, diagnostics = parse_row(row)
    assert diagnostics == []
    assert [(r.session, r.level) for r in student.academic_records] == [
        ("Fa 21", "L1-W"),
        ("Sp 22", "L2-W"),
    ]


def test_exit_exam_grades():
    student, diagnostics = parse_row([
        ("Session", "Fa 21"),
        ("Exit Writing", "P 85%"),
        ("Exit Speaking", "F (62%) retake"),
    ])
    assert diagnostics == []
    record = student.academic_records[0]
    assert record.exit_writing_exam.result == FinalResult.P
    assert record.exit_writing_exam.percentage == 85
    assert record.exit_speaking_exam.result == FinalResult.F
    assert record.exit_speaking_exam.percentage == 62
    assert record.exit_speaking_exam.notes == "retake"


def test_record_column_without_session_is_reported():
    student, diagnostics = parse_row([("Level", "L1-M")])
    assert student.academic_records == []
    assert len(diagnostics) == 1


def test_final_grade_without_result_is_reported():
    student, diagnostics = parse_row([("Session", "Fa 21"), ("Final Grade", "85%")])
    assert student.academic_records[0].final_result is None
    assert diagnostics[0].column == "Final Grade"


def test_parse_rows_builds_one_student_per_row():
    result = parse_rows([
        [("ID", "1"), ("Name", "A")],
        [("ID", "2"), ("Name", "B"), ("Age", "?")],
    ])
    assert [s.ep_id for s in result.students] == [1, 2]
    assert len(result.diagnostics) == 1
    assert result.diagnostics[0].row == 1


def test_rows_do_not_share_state():
    result = parse_rows([
        [("Phone0", "0791234567")],
        [("Name", "B")],
    ])
    assert result.students[1].phone.phone_numbers == []


def test_expand_row_splits_shared_headers():
    assert expand_row({"A/B": 1, "C": "x "}) == [("A", "1"), ("B", "1"), ("C", "x")]


def test_registry_layout():
    assert REGISTRY["Session"].slot == 0
    assert REGISTRY["Session11"].slot == 12
    assert REGISTRY["Session"].operation == Operation.APPEND
    assert REGISTRY["Level"].operation == Operation.LAST_RECORD
    assert REGISTRY["Level"].order > REGISTRY["Session"].order
    assert REGISTRY["Primary Phone"].order > REGISTRY["Phone0"].order
    assert REGISTRY["Primary Phone"].slot == -1
    assert "Phone3" in REGISTRY
    assert "Phone4" not in REGISTRY


def test_build_registry_group_sizes():
    registry = build_registry(max_academic_records=2, max_phone_numbers=1)
    assert "Session1" in registry
    assert "Session2" not in registry
    assert "Phone0" in registry
    assert "Phone1" not in registry


def test_unrecognised_header_matches_row_without_it():
    row = [("ID", "5"), ("Name", "Omar"), ("Shoe Size", "44"), ("Status", "RET")]
    with_extra, _ = parse_row(row)
    without_extra, _ = parse_row([cell for cell in row if cell[0] != "Shoe Size"])
    assert with_extra == without_extra
