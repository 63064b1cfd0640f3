"""
Student Records: spreadsheet import and dashboard statistics

Backend for an English program's student database: turns the enrollment
workbook into Student records and the records into dashboard-ready counts.

To import a workbook:
    loaders.load_student_rows(path) reads the Students sheet as (header,
    text) rows; parsers.parse_rows(rows) builds one Student per row and
    collects a ParseDiagnostic for every cell it had to skip.

To connect a front end:
    Call dashboard.get_statistics_overview(students, waiting_list) for the
    number boxes, then get_level_views / get_registration_rate_rows /
    get_result_rate_rows on its "statistics" bundle for charts and tables.

To add a new spreadsheet column:
    Add its header text to config, write a parse_* function in parsers and
    register it in parsers.build_registry with the operation it performs.
"""
