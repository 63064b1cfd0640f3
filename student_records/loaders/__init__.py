"""Data ingestion loaders for the enrollment workbook."""

from .spreadsheet import load_student_rows, load_waiting_list

__all__ = [
    "load_student_rows",
    "load_waiting_list",
]
