"""Commission models — salary range, commission spec, policy, legacy view.

All monetary values and percentages use Decimal. No floats in finance.

Job records reach us in three shapes: the canonical nested ``commission``
object, the older flat ``commissionPercentage`` / ``commissionAmount``
fields, or both at once. RecordShape names the shape explicitly;
CommissionEngine.normalize is the only place that collapses it into a
CommissionSpec.

Invariants held by every CommissionSpec the engine returns:
- recruiter_percentage <= original_percentage
- platform_fee_percentage == original_percentage - recruiter_percentage >= 0
- reduction_percentage within the caller's policy bounds (unless set
  through the direct recruiter-percentage control path)
- fixed: original_amount == fixed_amount, percentage fields are zero
- platform_fee_amount == original_amount - recruiter_amount >= 0
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional

from hirefee.numeric import HUNDRED, ZERO, non_negative


# Keys of the canonical nested commission object
CANONICAL_KEY = "commission"
# Flat fields predating the nested object
LEGACY_KEYS = ("commissionPercentage", "commissionAmount", "fixedCommissionAmount")


class CommissionType(str, enum.Enum):
    """How the company expresses its recruitment fee."""
    PERCENTAGE = "percentage"
    FIXED = "fixed"

    @classmethod
    def parse(cls, value: Any) -> CommissionType:
        """Parse a stored type value. Unknown or missing → PERCENTAGE."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.PERCENTAGE


class RecordShape(str, enum.Enum):
    """Which commission representation a raw job record carries."""
    CANONICAL = "canonical"
    LEGACY = "legacy"
    BOTH = "both"
    EMPTY = "empty"


def classify_record(raw: Any) -> RecordShape:
    """Classify a raw job record by the commission fields it exposes."""
    if not isinstance(raw, Mapping):
        return RecordShape.EMPTY
    has_canonical = isinstance(raw.get(CANONICAL_KEY), Mapping)
    has_legacy = any(raw.get(key) is not None for key in LEGACY_KEYS)
    if has_canonical and has_legacy:
        return RecordShape.BOTH
    if has_canonical:
        return RecordShape.CANONICAL
    if has_legacy:
        return RecordShape.LEGACY
    return RecordShape.EMPTY


@dataclass(frozen=True)
class SalaryRange:
    """Salary range of a job. Owned by the job record, read-only here."""
    min: Decimal = ZERO
    max: Decimal = ZERO
    currency: str = "USD"

    @staticmethod
    def from_raw(raw: Any) -> SalaryRange:
        """Build from a stored ``salary`` object, coercing bad numbers to 0."""
        if not isinstance(raw, Mapping):
            return SalaryRange()
        low = non_negative(raw.get("min"))
        high = max(low, non_negative(raw.get("max")))
        currency = raw.get("currency")
        if not isinstance(currency, str) or not currency.strip():
            currency = "USD"
        return SalaryRange(min=low, max=high, currency=currency.strip())


@dataclass(frozen=True)
class CommissionPolicy:
    """Deployment-level commission bounds for one caller role.

    Defaults are the admin-side values. Company-side callers have been
    configured with a 50% default reduction; see config/.
    """
    default_reduction_percentage: Decimal = Decimal("40")
    min_reduction_percentage: Decimal = Decimal("0")
    max_reduction_percentage: Decimal = Decimal("80")
    min_commission_percentage: Decimal = Decimal("1")
    max_commission_percentage: Decimal = Decimal("50")

    @classmethod
    def defaults(cls) -> CommissionPolicy:
        return cls()

    def validate(self) -> list[str]:
        """Return a list of violated bounds. Empty means valid."""
        errors: list[str] = []
        if not ZERO <= self.min_reduction_percentage <= self.max_reduction_percentage <= HUNDRED:
            errors.append(
                "reduction bounds must satisfy 0 <= min_reduction_percentage "
                "<= max_reduction_percentage <= 100"
            )
        if not (
            self.min_reduction_percentage
            <= self.default_reduction_percentage
            <= self.max_reduction_percentage
        ):
            errors.append(
                "default_reduction_percentage must lie within the reduction bounds"
            )
        if not ZERO <= self.min_commission_percentage <= self.max_commission_percentage <= HUNDRED:
            errors.append(
                "commission bounds must satisfy 0 <= min_commission_percentage "
                "<= max_commission_percentage <= 100"
            )
        return errors


@dataclass(frozen=True)
class LegacyFields:
    """Flat projection understood by records predating the commission object."""
    commission_percentage: Decimal
    commission_amount: Decimal

    def to_dict(self) -> Dict[str, Decimal]:
        return {
            "commissionPercentage": self.commission_percentage,
            "commissionAmount": self.commission_amount,
        }


@dataclass(frozen=True)
class CommissionSpec:
    """Canonical commission breakdown for a single job.

    Constructed fresh on every load or edit, never persisted by the
    engine. Callers must replace their reference with each returned
    spec rather than mutating one.

    reference_salary is the salary maximum the percentage amounts were
    computed against, or None when the record carried no salary.
    """
    type: CommissionType = CommissionType.PERCENTAGE
    original_percentage: Decimal = ZERO
    reduction_percentage: Decimal = ZERO
    recruiter_percentage: Decimal = ZERO
    platform_fee_percentage: Decimal = ZERO
    fixed_amount: Decimal = ZERO
    original_amount: Decimal = ZERO
    recruiter_amount: Decimal = ZERO
    platform_fee_amount: Decimal = ZERO
    reference_salary: Optional[Decimal] = None

    @property
    def is_fixed(self) -> bool:
        return self.type is CommissionType.FIXED

    def to_dict(self) -> Dict[str, Any]:
        """Serialize as the persisted ``commission`` object."""
        return {
            "type": self.type.value,
            "originalPercentage": self.original_percentage,
            "reductionPercentage": self.reduction_percentage,
            "recruiterPercentage": self.recruiter_percentage,
            "platformFeePercentage": self.platform_fee_percentage,
            "fixedAmount": self.fixed_amount,
            "originalAmount": self.original_amount,
            "recruiterAmount": self.recruiter_amount,
            "platformFeeAmount": self.platform_fee_amount,
        }
