"""Date and name normalization helpers shared by login, contracts and the sync pipeline."""

import re
from datetime import date, datetime, timezone

__all__ = [
    "normalize_date_of_birth",
    "utc_now",
    "utc_today_iso",
    "format_ymd_for_file",
    "sanitize_drive_name",
    "make_contract_pdf_filename",
    "parse_sheet_row",
]

_ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_COMPACT_DATE_RE = re.compile(r"^(\d{4})(\d{2})(\d{2})$")
_SHORT_DATE_RE = re.compile(r"^(\d{2})(\d{2})(\d{2})$")

# Two-digit years at or above this pivot are 19xx, below it 20xx.
_CENTURY_PIVOT = 30

# Path separators, wildcards, quotes, angle brackets, pipe, '#', whitespace, control chars.
_DRIVE_UNSAFE_RE = re.compile(r'[\\/:*?"<>|#\s\x00-\x1f\x7f]')

_SHEET_ROW_RE = re.compile(r"!\$?[A-Z]+\$?(\d+)")


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

def _calendar_date(year: int, month: int, day: int) -> str | None:
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def normalize_date_of_birth(raw: str | None) -> str | None:
    """Normalize ``YYYY-MM-DD``, ``YYYYMMDD`` or ``YYMMDD`` to ``YYYY-MM-DD``.

    Returns ``None`` for anything that is not one of those shapes or is not a
    real calendar date (e.g. ``20230230``).
    """
    if raw is None:
        return None
    value = str(raw).strip()

    m = _ISO_DATE_RE.match(value) or _COMPACT_DATE_RE.match(value)
    if m:
        return _calendar_date(int(m.group(1)), int(m.group(2)), int(m.group(3)))

    m = _SHORT_DATE_RE.match(value)
    if m:
        yy = int(m.group(1))
        year = 1900 + yy if yy >= _CENTURY_PIVOT else 2000 + yy
        return _calendar_date(year, int(m.group(2)), int(m.group(3)))

    return None


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_today_iso() -> str:
    return utc_now().date().isoformat()


def format_ymd_for_file(value: object = None) -> str:
    """Return ``YYYYMMDD`` for *value*, or for today (UTC) when it is absent/malformed."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.strftime("%Y%m%d")
    if isinstance(value, date):
        return value.strftime("%Y%m%d")
    if isinstance(value, str):
        m = re.match(r"^(\d{4})-(\d{2})-(\d{2})", value.strip())
        if m and _calendar_date(int(m.group(1)), int(m.group(2)), int(m.group(3))):
            return f"{m.group(1)}{m.group(2)}{m.group(3)}"
    return utc_now().strftime("%Y%m%d")


# ---------------------------------------------------------------------------
# Names
# ---------------------------------------------------------------------------

def sanitize_drive_name(value: object) -> str:
    """Make *value* safe as a Drive file/folder name; ``'unknown'`` if nothing is left."""
    text = "" if value is None else str(value).strip()
    return _DRIVE_UNSAFE_RE.sub("_", text) or "unknown"


def make_contract_pdf_filename(customer_name: object, created_at: object = None) -> str:
    """``{sanitized customer name}-{YYYYMMDD}.pdf``"""
    return f"{sanitize_drive_name(customer_name or 'unknown')}-{format_ymd_for_file(created_at)}.pdf"


def parse_sheet_row(updated_range: str | None) -> str | None:
    """Extract the row number from A1 notation, e.g. ``Sheet1!A5:H5`` → ``'5'``."""
    if not updated_range:
        return None
    m = _SHEET_ROW_RE.search(updated_range)
    return m.group(1) if m else None
