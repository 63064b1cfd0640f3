import pytest

from student_records.models import (
    Correspondence,
    DroppedOutReason,
    FinalResult,
    Grade,
    PhoneNumber,
    Status,
)
from student_records.records import (
    DuplicateEpIdError,
    document_id,
    from_document,
    get_primary_phone,
    index_by_ep_id,
    prepare_new_student,
    remove_phone_number,
    set_primary_phone,
    to_document,
    withdraw_student,
)


@pytest.fixture
def student_with_phones(make_student):
    student = make_student(1)
    student.phone.phone_numbers = [
        PhoneNumber(number=791111111),
        PhoneNumber(number=792222222),
        PhoneNumber(number=793333333),
    ]
    student.phone.primary_phone = 1
    return student


def test_set_primary_phone_existing(student_with_phones):
    assert set_primary_phone(student_with_phones, 793333333) == 2
    assert len(student_with_phones.phone.phone_numbers) == 3


def test_set_primary_phone_appends(student_with_phones):
    assert set_primary_phone(student_with_phones, 794444444) == 3
    assert get_primary_phone(student_with_phones).number == 794444444


def test_remove_phone_before_primary_shifts_index(student_with_phones):
    remove_phone_number(student_with_phones, 0)
    assert get_primary_phone(student_with_phones).number == 792222222


def test_remove_primary_phone_falls_back_to_first(student_with_phones):
    remove_phone_number(student_with_phones, 1)
    assert student_with_phones.phone.primary_phone == 0


def test_remove_last_phone_clears_primary(make_student):
    student = make_student(1)
    set_primary_phone(student, 791111111)
    remove_phone_number(student, 0)
    assert student.phone.primary_phone == -1
    assert get_primary_phone(student) is None


def test_withdraw_student(make_student):
    student = make_student(1, "Fa 21", ("Fa 21", "Sp 22"), Status.RET,
                           results={"Fa 21": FinalResult.P})
    withdraw_student(student, "1/15/2022", DroppedOutReason.MOVE, no_contact_list=True)

    assert student.status.current_status == Status.WD
    assert student.status.withdraw_date == "1/15/2022"
    assert student.status.dropped_out_reason == DroppedOutReason.MOVE
    assert student.status.no_contact_list is True
    assert student.academic_records[-1].final_result.result == FinalResult.WD
    assert student.academic_records[0].final_result.result == FinalResult.P


def test_prepare_new_student(make_student):
    student = make_student(1, "Fa 22", current_level="L1-W")
    prepare_new_student(student)
    assert len(student.academic_records) == 1
    assert student.academic_records[0].session == "Fa 22"
    assert student.academic_records[0].level == "L1-W"


def test_prepare_new_student_keeps_history(make_student):
    student = make_student(1, "Fa 21", ("Fa 21",), Status.RET)
    prepare_new_student(student)
    assert len(student.academic_records) == 1


def test_to_document_is_plain(make_student):
    student = make_student(1024, "Fa 21", ("Fa 21",), results={"Fa 21": FinalResult.P})
    doc = to_document(student)

    assert document_id(student) == "1024"
    assert doc["status"]["current_status"] == "NEW"
    assert doc["nationality"] == "UNKNWN"
    assert doc["academic_records"][0]["final_result"] == {"result": "P"}
    assert "withdraw_date" not in doc["status"]


def test_from_document_rebuilds_student(make_student):
    student = make_student(7, "Fa 21", ("Fa 21",), Status.WD, results={"Fa 21": FinalResult.F})
    student.status.dropped_out_reason = DroppedOutReason.JOB
    student.academic_records[0].exit_writing_exam = Grade(FinalResult.P, 80, "late")
    student.correspondence.append(Correspondence(date="10/4/2021", notes="called"))
    set_primary_phone(student, 791234567)

    assert from_document(to_document(student)) == student


def test_index_by_ep_id_rejects_duplicates(make_student):
    index = index_by_ep_id([make_student(1), make_student(2)])
    assert sorted(index) == ["1", "2"]
    with pytest.raises(DuplicateEpIdError):
        index_by_ep_id([make_student(1), make_student(1)])
