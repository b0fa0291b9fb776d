"""CSV export, template and import parsing for file attributes.

Export writes every cell double-quoted with embedded quotes doubled. Import
expects a two-column ``File Name, Attributes`` sheet (the template layout);
an export has to be cut down to those two columns before it can be fed back.

Import parsing is fail-fast: the first header, JSON or schema problem raises
and nothing is returned, so no remote update ever starts from a half-valid
sheet.
"""
import json
import re
from datetime import date, datetime, timezone
from typing import Any, Iterable, List, Optional, Sequence

from app.vector_stores.schemas import AttributeSet, FileRecord

from .errors import (
    InvalidFormatError,
    InvalidJSONError,
    NoValidRowsError,
    SchemaViolationError,
)
from .schemas import ImportRow

EXPORT_HEADERS = [
    "File Name",
    "File ID",
    "Size (bytes)",
    "Created At",
    "Purpose",
    "Vector Store ID",
    "Attributes",
]

TEMPLATE_FILENAME = "metadata_template.csv"
CSV_MEDIA_TYPE = "text/csv; charset=utf-8"

REQUIRED_FIELDS = (
    "title",
    "documentCategory",
    "documentType",
    "year",
    "version",
    "referenceCode",
    "status",
    "jurisdiction",
)
VALID_STATUSES = ("active", "draft", "superseded", "withdrawn", "legacy")

INSTRUCTIONS_MARKER = "Instructions:"

_TEMPLATE_ROWS = [
    ["File Name", "Attributes"],
    [
        "AS_3740-2.pdf",
        '{"title":"australian_standard_waterproofing_of_domestic_wet_areas",'
        '"documentCategory":"technical_standards","documentType":"australian_standards",'
        '"year":2021,"version":"","referenceCode":"as_3740_2021","status":"active",'
        '"jurisdiction":"aus"}',
    ],
    [
        "AS_1428.1.pdf",
        '{"title":"australian_standard_design_for_access_mobility",'
        '"documentCategory":"technical_standards","documentType":"australian_standards",'
        '"year":2023,"version":"","referenceCode":"as_1428.1_2023","status":"superseded",'
        '"jurisdiction":"aus"}',
    ],
    ["", ""],
    [INSTRUCTIONS_MARKER, ""],
    ["1. File Name must match exactly with the file in the database", ""],
    ["2. Attributes must be valid JSON with the following fields:", ""],
    ["   - title: descriptive name of the document", ""],
    ["   - documentCategory: e.g., technical_standards", ""],
    ["   - documentType: e.g., australian_standards", ""],
    ["   - year: publication year", ""],
    ["   - version: version number if applicable", ""],
    ["   - referenceCode: standard reference code", ""],
    ["   - status: must be one of: " + ", ".join(VALID_STATUSES), ""],
    ["   - jurisdiction: e.g., aus", ""],
    ["3. Maximum 16 attribute keys allowed", ""],
    ["4. Attribute keys cannot be longer than 256 characters", ""],
    ["5. Do not modify the column headers", ""],
    ["6. Remove example rows before uploading", ""],
]

_LINE_BREAK = re.compile(r"\r?\n")
_OUTER_QUOTES = re.compile(r'^"|"$')


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

def _quote(cell: Any) -> str:
    return '"' + str(cell).replace('"', '""') + '"'


def _render(rows: Iterable[Sequence[Any]]) -> str:
    return "\n".join(",".join(_quote(cell) for cell in row) for row in rows)


def format_timestamp(created_at: Optional[int]) -> str:
    """Render epoch seconds as UTC ISO-8601 with milliseconds, e.g. ``2024-05-01T12:00:00.000Z``."""
    if created_at is None:
        return ""
    moment = datetime.fromtimestamp(created_at, tz=timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S") + f".{moment.microsecond // 1000:03d}Z"


def export_files_csv(files: Iterable[FileRecord]) -> str:
    """Serialize file records to the seven-column export sheet."""
    rows: List[List[Any]] = [EXPORT_HEADERS]
    for record in files:
        rows.append([
            record.display_name,
            record.id,
            "" if record.bytes is None else record.bytes,
            format_timestamp(record.created_at),
            record.purpose or "",
            record.vector_store_id,
            json.dumps(record.attributes, separators=(",", ":"), ensure_ascii=False),
        ])
    return _render(rows)


def export_filename(today: Optional[date] = None) -> str:
    today = today or datetime.now(timezone.utc).date()
    return f"files_export_{today.isoformat()}.csv"


def template_csv() -> str:
    """Return the instructional two-column import template."""
    return _render(_TEMPLATE_ROWS)


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------

def parse_csv_line(line: str) -> List[str]:
    """Split one CSV line into trimmed cells.

    Commas inside double quotes do not split, and a doubled quote inside a
    quoted section yields a literal quote::

        >>> parse_csv_line('"a,b","c"')
        ['a,b', 'c']
        >>> parse_csv_line('"a""b"')
        ['a"b']
    """
    cells: List[str] = []
    cell: List[str] = []
    in_quotes = False
    i = 0
    while i < len(line):
        char = line[i]
        if char == '"':
            if in_quotes and i + 1 < len(line) and line[i + 1] == '"':
                cell.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            cells.append("".join(cell).strip())
            cell = []
        else:
            cell.append(char)
        i += 1
    cells.append("".join(cell).strip())
    return cells


def _strip_outer_quotes(value: str) -> str:
    return _OUTER_QUOTES.sub("", value).strip()


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Unexpected token {name}")


def _decode_attributes(raw: str, file_name: str) -> Any:
    cleaned = _strip_outer_quotes(raw)
    cleaned = cleaned.replace('\\"', '"')
    cleaned = _OUTER_QUOTES.sub("", cleaned)
    cleaned = cleaned.replace("\\", "").strip()
    try:
        return json.loads(cleaned, parse_constant=_reject_constant)
    except ValueError as exc:
        raise InvalidJSONError(
            f'Invalid JSON in attributes for file "{file_name}": {exc}'
        ) from exc


def validate_metadata(attributes: Any, file_name: str) -> None:
    """Check a row's attributes against the document metadata schema.

    Raises:
        SchemaViolationError: If the value is not an object, a required field
            is missing, ``year`` is not a number or ``status`` is not one of
            the allowed values.
    """
    if not isinstance(attributes, dict):
        raise SchemaViolationError(f'File "{file_name}": attributes must be a JSON object')

    missing = [field for field in REQUIRED_FIELDS if field not in attributes]
    if missing:
        raise SchemaViolationError(
            f'File "{file_name}" is missing required fields: {", ".join(missing)}'
        )

    year = attributes["year"]
    if isinstance(year, bool) or not isinstance(year, (int, float)):
        raise SchemaViolationError(f'File "{file_name}": year must be a number')

    if attributes["status"] not in VALID_STATUSES:
        raise SchemaViolationError(
            f'File "{file_name}": status must be one of: {", ".join(VALID_STATUSES)}'
        )


def _check_header(line: str) -> None:
    headers = parse_csv_line(line)
    if (
        len(headers) < 2
        or headers[0].lower() != "file name"
        or "attributes" not in headers[1].lower()
    ):
        raise InvalidFormatError("Invalid CSV format. Required columns: File Name, Attributes")


def parse_import_csv(text: str) -> List[ImportRow]:
    """Parse an attribute import sheet into validated rows.

    Blank lines are dropped, rows with fewer than two cells or an empty file
    name are skipped. An ``Instructions:`` line is skipped, and so are the
    attribute-less instruction lines that follow it up to the next data row.

    Raises:
        InvalidFormatError: If the header is not ``File Name, Attributes``.
        InvalidJSONError: If any attributes cell is not valid JSON.
        SchemaViolationError: If any row fails validate_metadata().
        NoValidRowsError: If no data rows remain.
    """
    if text.startswith("\ufeff"):
        text = text[1:]
    lines = [line for line in _LINE_BREAK.split(text) if line.strip()]
    if not lines:
        raise InvalidFormatError("Invalid CSV format. Required columns: File Name, Attributes")
    _check_header(lines[0])

    rows: List[ImportRow] = []
    in_instructions = False
    for line in lines[1:]:
        if line.startswith(INSTRUCTIONS_MARKER):
            in_instructions = True
            continue
        cells = parse_csv_line(line)
        if len(cells) < 2:
            continue
        file_name = _strip_outer_quotes(cells[0])
        if file_name.startswith(INSTRUCTIONS_MARKER):
            in_instructions = True
            continue
        # Instruction text lines carry no attributes; the next real row ends the block.
        if in_instructions and not _strip_outer_quotes(cells[1]):
            continue
        in_instructions = False
        if not file_name:
            continue

        attributes: AttributeSet = _decode_attributes(cells[1], file_name)
        validate_metadata(attributes, file_name)
        rows.append(ImportRow(file_name=file_name, attributes=attributes))

    if not rows:
        raise NoValidRowsError("No valid data rows found in the CSV file")
    return rows
