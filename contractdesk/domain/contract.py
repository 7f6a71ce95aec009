"""SQLAlchemy ORM model for insurance-claim contracts."""

from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, Date, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from contractdesk.db.base import Base
from contractdesk.domain.mixins import TimestampMixin

DELEGATION_FIELDS = (
    "delegation_auto_insurance",
    "delegation_personal_insurance",
    "delegation_workers_comp",
    "delegation_disability_pension",
    "delegation_employer_liability",
    "delegation_school_safety",
    "delegation_other",
)


class Contract(Base, TimestampMixin):
    __tablename__ = "contracts"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    # Owner: set once from the authenticated caller, never updated
    created_by: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    employee_name: Mapped[str] = mapped_column(String(100), nullable=False)
    contract_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Customer
    customer_name: Mapped[str] = mapped_column(String(100), nullable=False)
    victim_or_insured: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    beneficiary_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    customer_gender: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    customer_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    customer_dob: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    customer_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    relation_to_party: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Accident
    accident_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    accident_location: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    accident_summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Delegated claim areas
    delegation_auto_insurance: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    delegation_personal_insurance: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    delegation_workers_comp: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    delegation_disability_pension: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    delegation_employer_liability: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    delegation_school_safety: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    delegation_other: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    delegation_other_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Fees
    upfront_fee_ten_thousand: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    admin_fee_percent: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2), nullable=True)
    adjuster_fee_percent: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2), nullable=True)
    fee_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    consent_personal_info: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    consent_required_terms: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    signature_data_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    confirmed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Written back by the Google sync
    drive_file_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    sheet_row_id: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
