"""Role projections and display text for job commission data.

Read-only consumers (job lists, recruiter job pages) never call the
engine's edit operations. They normalize a record and read the derived
figures. Recruiters see only their own share: the company's fee, the
reduction and the platform fee are stripped from their view.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict

from hirefee.compensation.engine import CommissionEngine
from hirefee.models.commission import (
    CANONICAL_KEY,
    CommissionSpec,
    CommissionType,
    SalaryRange,
)
from hirefee.numeric import ZERO, percent_of


class Role(str, enum.Enum):
    """Caller roles that read or edit job commission data."""
    ADMIN = "admin"
    INTERNAL = "internal"
    COMPANY = "company"
    RECRUITER = "recruiter"


def project_for_role(
    engine: CommissionEngine,
    raw_job: Any,
    role: Role | str,
) -> Dict[str, Any]:
    """Return a copy of the job record with commission data for a role.

    Raises:
        ValueError: If role is not a known Role.
    """
    role = Role(role)
    job: Dict[str, Any] = dict(raw_job) if isinstance(raw_job, Mapping) else {}
    spec = engine.normalize(job)

    if role is Role.RECRUITER:
        return _recruiter_view(job, spec)

    job[CANONICAL_KEY] = spec.to_dict()
    job.update(engine.to_legacy_fields(spec).to_dict())
    job["fixedCommissionAmount"] = spec.fixed_amount
    return job


def _recruiter_view(job: Dict[str, Any], spec: CommissionSpec) -> Dict[str, Any]:
    if spec.is_fixed:
        job[CANONICAL_KEY] = {
            "type": spec.type.value,
            "recruiterAmount": spec.recruiter_amount,
        }
        job["commissionPercentage"] = ZERO
        job["commissionAmount"] = ZERO
        job["fixedCommissionAmount"] = spec.recruiter_amount
        return job

    job[CANONICAL_KEY] = {
        "type": spec.type.value,
        "recruiterPercentage": spec.recruiter_percentage,
        "recruiterAmount": spec.recruiter_amount,
    }
    job["commissionPercentage"] = spec.recruiter_percentage
    job["commissionAmount"] = spec.recruiter_amount
    job["fixedCommissionAmount"] = ZERO
    return job


def _whole(amount: Decimal) -> str:
    try:
        return f"{amount.quantize(Decimal('1'), rounding=ROUND_HALF_UP):,f}"
    except InvalidOperation:
        # Too many digits for the context precision; show it unrounded
        return f"{amount:,f}"


def format_commission(spec: CommissionSpec, salary: SalaryRange) -> str:
    """Recruiter-facing commission text.

    Fixed jobs show the recruiter amount ("USD 2,500"). Percentage jobs
    show the payout across the salary range ("USD 12,000 - 15,000").
    """
    if spec.is_fixed:
        return f"{salary.currency} {_whole(spec.recruiter_amount)}"
    low = percent_of(salary.min, spec.recruiter_percentage)
    high = percent_of(salary.max, spec.recruiter_percentage)
    return f"{salary.currency} {_whole(low)} - {_whole(high)}"


def commission_type_label(raw_job: Any) -> str:
    """Badge text for job lists: Legacy, Fixed or Percentage."""
    if not isinstance(raw_job, Mapping):
        return "Legacy"
    commission = raw_job.get(CANONICAL_KEY)
    if not isinstance(commission, Mapping):
        return "Legacy"
    if CommissionType.parse(commission.get("type")) is CommissionType.FIXED:
        return "Fixed"
    return "Percentage"
