"""Contract Pydantic schemas (request DTOs and response models)."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import Field, field_validator

from contractdesk.core.normalize import normalize_date_of_birth
from contractdesk.schemas.common import RecordModel


def _normalize_optional_date(value):
    if value is None or isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    normalized = normalize_date_of_birth(text)
    if normalized is None:
        raise ValueError("must be YYYY-MM-DD, YYYYMMDD or YYMMDD")
    return normalized


class _ContractFields(RecordModel):
    contract_type: str | None = None
    victim_or_insured: str | None = None
    beneficiary_name: str | None = None
    customer_gender: str | None = None
    customer_phone: str | None = None
    customer_dob: date | None = None
    customer_address: str | None = None
    relation_to_party: str | None = None
    accident_date: date | None = None
    accident_location: str | None = None
    accident_summary: str | None = None
    delegation_other_text: str | None = None
    upfront_fee_ten_thousand: int | None = Field(default=None, ge=0)
    admin_fee_percent: Decimal | None = Field(default=None, ge=0, le=100, decimal_places=2)
    adjuster_fee_percent: Decimal | None = Field(default=None, ge=0, le=100, decimal_places=2)
    fee_notes: str | None = None
    content: str | None = None
    signature_data_url: str | None = None

    @field_validator("customer_dob", "accident_date", mode="before")
    @classmethod
    def _dates(cls, value):
        return _normalize_optional_date(value)

    @field_validator("contract_type", "customer_phone", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value


class ContractCreate(_ContractFields):
    customer_name: str = Field(min_length=1)
    employee_name: str | None = None
    delegation_auto_insurance: bool = False
    delegation_personal_insurance: bool = False
    delegation_workers_comp: bool = False
    delegation_disability_pension: bool = False
    delegation_employer_liability: bool = False
    delegation_school_safety: bool = False
    delegation_other: bool = False
    consent_personal_info: bool = False
    consent_required_terms: bool = False
    confirmed: bool = False


class ContractUpdate(_ContractFields):
    customer_name: str | None = Field(default=None, min_length=1)
    employee_name: str | None = None
    delegation_auto_insurance: bool | None = None
    delegation_personal_insurance: bool | None = None
    delegation_workers_comp: bool | None = None
    delegation_disability_pension: bool | None = None
    delegation_employer_liability: bool | None = None
    delegation_school_safety: bool | None = None
    delegation_other: bool | None = None
    consent_personal_info: bool | None = None
    consent_required_terms: bool | None = None
    confirmed: bool | None = None


class ContractOut(_ContractFields):
    id: str
    created_by: str
    employee_name: str
    customer_name: str
    delegation_auto_insurance: bool
    delegation_personal_insurance: bool
    delegation_workers_comp: bool
    delegation_disability_pension: bool
    delegation_employer_liability: bool
    delegation_school_safety: bool
    delegation_other: bool
    consent_personal_info: bool
    consent_required_terms: bool
    confirmed: bool
    drive_file_id: str | None = None
    sheet_row_id: str | None = None
    created_at: datetime
    updated_at: datetime
