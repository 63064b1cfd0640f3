"""
Free-text search over students and the waiting list, plus paging.
"""

import re

from .models import PhoneNumber, Student, WaitingListEntry


def _phone_matches(phone_numbers: list[PhoneNumber], text: str) -> bool:
    """Any number that starts or ends with the search text."""
    for phone_number in phone_numbers:
        digits = str(phone_number.number)
        if digits.startswith(text) or digits.endswith(text):
            return True
    return False


def search_students(students: list[Student], text: str) -> list[Student]:
    """Students matching the search text; empty text matches everyone.

    Matches
    -------
    - English name starting with the text (case-insensitive)
    - Arabic name containing the text
    - ep_id equal to the text
    - a phone number starting or ending with the text
    """
    text = text.strip()
    if not text:
        return list(students)

    prefix = re.compile(re.escape(text.lower()))
    return [
        s for s in students
        if prefix.match(s.name.english.lower())
        or text in s.name.arabic
        or str(s.ep_id) == text
        or _phone_matches(s.phone.phone_numbers, text)
    ]


def search_waiting_list(entries: list[WaitingListEntry], text: str) -> list[WaitingListEntry]:
    """Waiting list entries matching the search text, sorted by name."""
    text = text.strip()
    lower_text = text.lower()
    matches = [
        e for e in entries
        if not text
        or lower_text in e.name.lower()
        or lower_text in e.referral.lower()
        or _phone_matches(e.phone_numbers, text)
    ]
    return sorted(matches, key=lambda e: e.name.lower())


def get_student_page(students: list[Student], page: int, rows_per_page: int) -> list[Student]:
    """Zero-based page of students; pages past the end are empty."""
    if page < 0 or rows_per_page <= 0:
        raise ValueError(f"Invalid page {page} / rows per page {rows_per_page}")
    start = page * rows_per_page
    return students[start:start + rows_per_page]
