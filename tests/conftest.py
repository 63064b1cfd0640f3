import pytest

from student_records.models import (
    AcademicRecord,
    FinalResult,
    Grade,
    Status,
    Student,
    StudentName,
    StudentStatus,
)


@pytest.fixture
def make_student():
    """Factory for students with a record per listed session."""

    def _make(
        ep_id: int,
        initial_session: str = "",
        sessions: tuple[str, ...] = (),
        status: Status = Status.NEW,
        results: dict[str, FinalResult] | None = None,
        **kwargs,
    ) -> Student:
        results = results or {}
        name = kwargs.pop("name", StudentName(english=f"Student {ep_id}"))
        kwargs.setdefault("current_level", "PL1-M")
        records = [
            AcademicRecord(
                session=session,
                level=kwargs["current_level"],
                final_result=Grade(result=results[session]) if session in results else None,
            )
            for session in sessions
        ]
        return Student(
            ep_id=ep_id,
            name=name,
            initial_session=initial_session,
            status=StudentStatus(current_status=status),
            academic_records=records,
            **kwargs,
        )

    return _make
