"""Placeholder map builder: contract fields rendered as template text.

Templates reference fields as ``{{key}}``. Only the keys in
:data:`PLACEHOLDER_KEYS` are substitutable.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime, timezone
from typing import Any

AGREED = "동의"
NOT_AGREED = "미동의"

CONTRACT_PLACEHOLDER_KEYS: tuple[str, ...] = (
    "employee_name",
    "contract_type",
    "customer_name",
    "victim_or_insured",
    "beneficiary_name",
    "customer_gender",
    "customer_phone",
    "customer_dob",
    "customer_address",
    "relation_to_party",
    "accident_date",
    "accident_location",
    "accident_summary",
    "upfront_fee_ten_thousand",
    "admin_fee_percent",
    "adjuster_fee_percent",
    "fee_notes",
    "content",
    "consent_personal_info",
    "consent_required_terms",
    "delegation_auto_insurance",
    "delegation_personal_insurance",
    "delegation_workers_comp",
    "delegation_disability_pension",
    "delegation_employer_liability",
    "delegation_school_safety",
    "delegation_other",
    "delegation_other_text",
)

NOW_DATE_KEY = "now_date"

PLACEHOLDER_KEYS: tuple[str, ...] = CONTRACT_PLACEHOLDER_KEYS + (NOW_DATE_KEY,)


def to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return AGREED if value else NOT_AGREED
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    try:
        return str(value)
    except Exception:  # noqa: BLE001; the map must never fail on odd values
        return ""


def _field(contract: Any, key: str) -> Any:
    if isinstance(contract, Mapping):
        return contract.get(key)
    return getattr(contract, key, None)


def build_placeholder_map(contract: Any, now: datetime | None = None) -> dict[str, str]:
    """Return ``{key: text}`` for every placeholder key; *contract* may be an ORM row or a dict."""
    mapping = {key: to_text(_field(contract, key)) for key in CONTRACT_PLACEHOLDER_KEYS}
    mapping[NOW_DATE_KEY] = (now or datetime.now(timezone.utc)).astimezone(timezone.utc).date().isoformat()
    return mapping
