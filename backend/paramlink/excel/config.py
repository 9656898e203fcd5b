"""Workbook layout constants shared by export and import.

Category sheets: row 1 = headers, row 2+ = one element per row,
column A = Element ID, column B+ = one parameter per column.

Schedule sheets: row 1 = title, row 2 = column headings (optional),
body rows follow, then the summary block (optional).
"""

from typing import Final


# First sheet of every exported workbook
LEGEND_SHEET_NAME: Final[str] = "Color Legend"

# Excel rejects longer sheet names
MAX_SHEET_NAME_LENGTH: Final[int] = 31

# Category sheet layout (1-indexed)
ELEMENT_ID_HEADER: Final[str] = "Element ID"
KEY_COL: Final[int] = 1
FIRST_PARAM_COL: Final[int] = 2
HEADER_ROW: Final[int] = 1
DATA_START_ROW: Final[int] = 2
HEADER_ROW_HEIGHT: Final[int] = 45

# Schedule sheet layout
SCHEDULE_TITLE_ROW: Final[int] = 1

# Decoration fills (RGB hex, no leading '#')
HEADER_FILL: Final[str] = "FFC729"
SUMMARY_FILL: Final[str] = "E0E0E0"
KEY_FILL: Final[str] = "D3D3D3"
LEGEND_HEADER_FILL: Final[str] = "D3D3D3"

# Parameter names whose cells are always read-only
IDENTITY_PARAMETERS: Final[frozenset[str]] = frozenset(
    {"Family", "Family and Type", "Type"}
)

# Dropped from the available-parameter list
HIDDEN_PARAMETERS: Final[frozenset[str]] = frozenset(
    {"Type Name", "Family Name", "Category", "Type Id"}
)

# Elements sampled per category when listing available parameters
PARAMETER_SAMPLE_SIZE: Final[int] = 10

# Error report workbook
ERROR_REPORT_SHEET: Final[str] = "Import Errors"
ERROR_REPORT_HEADERS: Final[tuple[str, str]] = ("Element ID", "Description")

# Host transaction names
CATEGORY_IMPORT_TRANSACTION: Final[str] = "Import Parameters from Excel"
SCHEDULE_IMPORT_TRANSACTION: Final[str] = "Import Schedules from Excel"


def truncate_sheet_name(name: str) -> str:
    """Limit a sheet name to Excel's 31-character maximum."""
    return name[:MAX_SHEET_NAME_LENGTH]


def sheet_name_matches(sheet_name: str, source_name: str) -> bool:
    """True if a sheet was exported from the given category or schedule."""
    return sheet_name == source_name or sheet_name == truncate_sheet_name(source_name)
