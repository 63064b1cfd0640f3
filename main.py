"""
Student Records: end-to-end import and statistics pipeline.

Runs the full pipeline from the enrollment workbook (or simulated rows when
no workbook is present) to dashboard-ready outputs and prints smoke-test
summaries.

Usage:
    python main.py [path/to/students.xlsx]
"""

import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent))

from student_records.config import PROGRAM_NAME, STUDENT_SPREADSHEET_FILE
from student_records.loaders import load_student_rows, load_waiting_list
from student_records.parsers import parse_rows
from student_records.records import index_by_ep_id
from student_records.simulator import generate_student_rows, generate_waiting_list
from student_records.transforms import build_academic_record_frame, build_student_frame
from student_records.dashboard import (
    get_level_views,
    get_registration_rate_rows,
    get_result_rate_rows,
    get_statistics_overview,
)

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def main() -> None:
    """Run the full pipeline and print smoke-test outputs."""

    print("=" * 70)
    print(f"  {PROGRAM_NAME.upper()}")
    print("  Import & Statistics Pipeline Smoke Test")
    print("=" * 70)
    print()

    # ------------------------------------------------------------------
    # 1. Load source data
    # ------------------------------------------------------------------
    print("[ 1 ] LOADING SOURCE DATA")
    print("-" * 40)

    workbook = Path(sys.argv[1]) if len(sys.argv) > 1 else STUDENT_SPREADSHEET_FILE
    if workbook.exists():
        rows = load_student_rows(str(workbook))
        waiting_list = []
        try:
            waiting_list = load_waiting_list(str(workbook))
        except Exception as e:
            logger.warning("Could not load waiting list: %s", e)
        print(f"\nWorkbook {workbook.name}: {len(rows)} student rows loaded")
    else:
        logger.info("No workbook at %s, using simulated data", workbook)
        rows = generate_student_rows()
        waiting_list = generate_waiting_list()
        print(f"\nSimulated data: {len(rows)} student rows generated")
    print(f"Waiting list: {len(waiting_list)} entries")

    # ------------------------------------------------------------------
    # 2. Parse rows into students
    # ------------------------------------------------------------------
    print("\n")
    print("[ 2 ] PARSING ROWS")
    print("-" * 40)

    result = parse_rows(rows)
    students = result.students
    print(f"\nStudents parsed: {len(students)}")
    print(f"Skipped cells:   {len(result.diagnostics)}")
    for diagnostic in result.diagnostics[:10]:
        print(f"  row {diagnostic.row:4d} | {diagnostic.column:20s} | {diagnostic.reason}")

    student_frame = build_student_frame(students)
    record_frame = build_academic_record_frame(students)
    print(f"\nstudent frame: {len(student_frame)} rows")
    print(student_frame[["ep_id", "gender", "current_level", "current_status"]].head(10).to_string(index=False))
    print(f"\nacademic record frame: {len(record_frame)} rows")
    print(record_frame.head(10).to_string(index=False))

    # ------------------------------------------------------------------
    # 3. Dashboard outputs
    # ------------------------------------------------------------------
    print("\n")
    print("[ 3 ] DASHBOARD OUTPUTS")
    print("-" * 40)

    overview = get_statistics_overview(students, waiting_list)
    statistics = overview["statistics"]
    print(f"\nCurrent session: {overview['current_session']}")
    for card in overview["cards"]:
        print(f"  {card['label']:22s} | {card['value']}")

    levels = get_level_views(statistics)
    print("\nLevels (merged):", levels["merged"])
    print("Levels (split): ", levels["split"])

    print("\nRegistration rates:")
    registration = get_registration_rate_rows(statistics)
    if not registration.empty:
        print(registration[["session", "label"]].to_string(index=False))

    print("\nResult rates by level:")
    print(get_result_rate_rows(statistics).to_string(index=False))

    # ------------------------------------------------------------------
    # 4. Acceptance checks
    # ------------------------------------------------------------------
    print("\n")
    print("[ 4 ] ACCEPTANCE CHECKS")
    print("-" * 40)

    # Check 1: one student per row
    check1 = len(students) == len(rows)
    print(f"\n  [{'PASS' if check1 else 'FAIL'}] {len(students)} students from {len(rows)} rows")

    # Check 2: ep_ids unique
    try:
        index_by_ep_id(students)
        check2 = True
    except ValueError as e:
        logger.warning("%s", e)
        check2 = False
    print(f"  [{'PASS' if check2 else 'FAIL'}] ep_ids are unique")

    # Check 3: merged levels account for every student
    check3 = sum(levels["merged"].values()) == len(students)
    print(f"  [{'PASS' if check3 else 'FAIL'}] Merged level counts sum to {sum(levels['merged'].values())}")

    # Check 4: statistics are deterministic
    check4 = get_statistics_overview(students, waiting_list)["statistics"] == statistics
    print(f"  [{'PASS' if check4 else 'FAIL'}] Statistics identical on a second run")

    print("\n" + "=" * 70)
    print("  Pipeline complete.")
    print("=" * 70)


if __name__ == "__main__":
    main()
