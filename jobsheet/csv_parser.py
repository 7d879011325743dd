"""CSV parsing for spreadsheet exports.

Spreadsheet exports are not always well-formed CSV: quoted cells may contain
commas, newlines and doubled quotes, and stray quotes show up in hand-edited
sheets. The tokenizer below accepts all of it without raising.
"""
from typing import List, Dict
import logging

logger = logging.getLogger(__name__)

BOM = "\ufeff"


def strip_bom(text: str) -> str:
    """Remove a leading byte-order mark, if present."""
    if text.startswith(BOM):
        return text[1:]
    return text


def tokenize(text: str) -> List[List[str]]:
    """Split CSV text into records of raw (untrimmed) fields.

    Args:
        text: Raw CSV text

    Returns:
        List of records, each a list of field strings
    """
    text = text.replace("\r\n", "\n").strip()

    records: List[List[str]] = []
    record: List[str] = []
    field: List[str] = []
    in_quotes = False
    i = 0
    length = len(text)

    while i < length:
        char = text[i]
        if in_quotes:
            if char == '"' and i + 1 < length and text[i + 1] == '"':
                field.append('"')
                i += 1
            elif char == '"':
                in_quotes = False
            else:
                field.append(char)
        else:
            if char == '"':
                in_quotes = True
            elif char == ",":
                record.append("".join(field))
                field = []
            elif char == "\n":
                record.append("".join(field))
                records.append(record)
                record = []
                field = []
            else:
                field.append(char)
        i += 1

    record.append("".join(field))
    records.append(record)
    return records


def _is_blank(record: List[str]) -> bool:
    return len(record) == 1 and not record[0].strip()


def parse_csv(text: str) -> List[Dict[str, str]]:
    """Parse CSV text into a list of row mappings.

    The first non-blank record is the header row. Header names are trimmed and
    lower-cased so lookups are insensitive to case and padding. Short rows are
    padded with empty strings; surplus fields are ignored.

    Args:
        text: CSV text with any byte-order mark already removed

    Returns:
        List of dicts mapping lower-cased header to trimmed value. Empty when
        the text holds no data rows.
    """
    records = [record for record in tokenize(text) if not _is_blank(record)]
    if len(records) < 2:
        logger.debug(f"CSV contains {len(records)} non-blank records, no data rows")
        return []

    headers = [header.strip().lower() for header in records[0]]
    rows = []
    for record in records[1:]:
        row = {}
        for index, header in enumerate(headers):
            row[header] = record[index].strip() if index < len(record) else ""
        rows.append(row)

    logger.debug(f"Parsed {len(rows)} CSV rows with {len(headers)} columns")
    return rows
