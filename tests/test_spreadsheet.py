import openpyxl
import pytest

from student_records.loaders import load_student_rows, load_waiting_list
from student_records.models import WaitlistOutcome
from student_records.parsers import parse_rows


@pytest.fixture
def workbook(tmp_path):
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Students"
    ws.append(["Student Database"])
    ws.append(["ID", "Name", "Status", "Session", "Level", "P", "F", "WD",
               "Session", "Level", "P", "F", "WD", None])
    ws.append([1024, "Layla Haddad", "RET", "Fa 21", "L1-W", 1, None, None,
               "Sp 22", "L2-W", None, None, None, "stray"])
    ws.append([None, None, None])

    wl = wb.create_sheet("Waiting List")
    wl.append(["Name", "Phone", "Referral", "Outcome"])
    wl.append(["Amal Saleh", "0791234567, 0797654321", "Friend", "Accepted"])
    wl.append(["Noor Aziz", 791112223, None, None])
    wl.append(["Huda Nasser", None, None, "Maybe"])

    path = tmp_path / "students.xlsx"
    wb.save(path)
    return path


def test_load_student_rows(workbook):
    rows = load_student_rows(str(workbook))
    assert len(rows) == 1

    row = rows[0]
    assert row[0] == ("ID", "1024")
    assert row[5] == ("P", "1")
    assert all(header for header, _ in row)
    assert [h for h, _ in row].count("Session") == 2


def test_workbook_rows_parse_into_students(workbook):
    result = parse_rows(load_student_rows(str(workbook)))
    student = result.students[0]

    assert result.diagnostics == []
    assert student.ep_id == 1024
    assert student.name.english == "Layla Haddad"
    assert [(r.session, r.level) for r in student.academic_records] == [
        ("Fa 21", "L1-W"),
        ("Sp 22", "L2-W"),
    ]
    assert student.academic_records[0].final_result.result.value == "P"
    assert student.academic_records[1].final_result is None


def test_load_waiting_list(workbook):
    entries = load_waiting_list(str(workbook))
    assert [e.name for e in entries] == ["Amal Saleh", "Noor Aziz", "Huda Nasser"]

    amal, noor, huda = entries
    assert [p.number for p in amal.phone_numbers] == [791234567, 797654321]
    assert amal.outcome == WaitlistOutcome.ACCEPTED
    assert [p.number for p in noor.phone_numbers] == [791112223]
    assert noor.referral == ""
    assert huda.outcome is None


def test_missing_sheet_falls_back_to_first(workbook):
    rows = load_student_rows(str(workbook), sheet_name="Roster")
    assert len(rows) == 1


def test_missing_workbook_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_student_rows(str(tmp_path / "missing.xlsx"))
