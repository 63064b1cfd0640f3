"""
Loaders for the enrollment workbook.

Students sheet: one row per student under a single header row. Repeating
column groups (Session, Level, P/F/WD, ...) may reuse the same header text
several times, so rows are returned as ordered (header, text) pairs rather
than dicts.

Waiting List sheet: Name, Phone, Referral, Outcome.
"""

import logging

import openpyxl

from ..config import (
    HEADER_CURRENT_STATUS,
    HEADER_ENGLISH_NAME,
    HEADER_EP_ID,
    STUDENT_SHEET_NAME,
    WAITING_LIST_HEADER_NAME,
    WAITING_LIST_HEADER_OUTCOME,
    WAITING_LIST_HEADER_PHONE,
    WAITING_LIST_HEADER_REFERRAL,
    WAITING_LIST_SHEET_NAME,
)
from ..models import PhoneNumber, WaitingListEntry, WaitlistOutcome
from .utils import cell_text, find_header_row

logger = logging.getLogger(__name__)

Row = list[tuple[str, str]]

_STUDENT_SIGNATURE = {HEADER_EP_ID, HEADER_ENGLISH_NAME, HEADER_CURRENT_STATUS}
_WAITING_LIST_SIGNATURE = {
    WAITING_LIST_HEADER_NAME,
    WAITING_LIST_HEADER_PHONE,
    WAITING_LIST_HEADER_REFERRAL,
    WAITING_LIST_HEADER_OUTCOME,
}


def _open_sheet(path: str, sheet_name: str):
    try:
        wb = openpyxl.load_workbook(path, data_only=True)
    except Exception:
        logger.exception("Failed to open workbook: %s", path)
        raise

    if sheet_name not in wb.sheetnames:
        logger.warning("Sheet '%s' not found, using '%s'", sheet_name, wb.sheetnames[0])
        sheet_name = wb.sheetnames[0]

    return wb, wb[sheet_name]


def _read_table(ws, signature: set[str]) -> tuple[list[str], list[tuple]]:
    """Header texts and raw value tuples below the detected header row."""
    header_row = find_header_row(ws, signature)
    if header_row is None:
        logger.warning("No header row found; assuming row 1")
        header_row = 1

    rows = ws.iter_rows(min_row=header_row, values_only=True)
    headers = [cell_text(h) for h in next(rows, ())]
    return headers, list(rows)


def load_student_rows(path: str, sheet_name: str = STUDENT_SHEET_NAME) -> list[Row]:
    """Load the Students sheet as rows of (header, cell text) pairs.

    Assumptions
    -----------
    - The header row is within the first 20 rows and contains at least two
      of ID / Name / Status.
    - Columns with a blank header are ignored.
    - Rows whose ID cell is blank are trailing/spacer rows and are dropped.
    """
    wb, ws = _open_sheet(path, sheet_name)
    headers, raw_rows = _read_table(ws, _STUDENT_SIGNATURE)
    wb.close()

    if HEADER_EP_ID not in headers:
        logger.warning("No '%s' column in %s; no rows loaded", HEADER_EP_ID, path)
        return []
    id_col = headers.index(HEADER_EP_ID)

    rows: list[Row] = []
    for raw in raw_rows:
        if id_col >= len(raw) or raw[id_col] is None or not cell_text(raw[id_col]):
            continue
        rows.append([
            (header, cell_text(value))
            for header, value in zip(headers, raw)
            if header
        ])

    logger.info("Loaded %d student rows from %s [%s]", len(rows), path, sheet_name)
    return rows


def load_waiting_list(path: str, sheet_name: str = WAITING_LIST_SHEET_NAME) -> list[WaitingListEntry]:
    """Load the Waiting List sheet.

    Unknown outcome text is logged and treated as no outcome yet.
    """
    wb, ws = _open_sheet(path, sheet_name)
    headers, raw_rows = _read_table(ws, _WAITING_LIST_SIGNATURE)
    wb.close()

    entries = []
    for raw in raw_rows:
        record = dict(zip(headers, (cell_text(v) for v in raw)))
        name = record.get(WAITING_LIST_HEADER_NAME, "")
        if not name:
            continue

        phone_numbers = []
        for piece in record.get(WAITING_LIST_HEADER_PHONE, "").replace(" ", "").split(","):
            if piece.isdigit():
                phone_numbers.append(PhoneNumber(number=int(piece)))

        outcome = None
        outcome_text = record.get(WAITING_LIST_HEADER_OUTCOME, "")
        if outcome_text:
            try:
                outcome = WaitlistOutcome(outcome_text)
            except ValueError:
                logger.warning("Unknown waiting list outcome '%s' for %s", outcome_text, name)

        entries.append(WaitingListEntry(
            name=name,
            phone_numbers=phone_numbers,
            referral=record.get(WAITING_LIST_HEADER_REFERRAL, ""),
            outcome=outcome,
        ))

    logger.info("Loaded %d waiting list entries from %s", len(entries), path)
    return entries
