"""Compensation subsystem — commission engine and read-only views."""

from hirefee.compensation.engine import CommissionEngine
from hirefee.compensation.views import (
    Role,
    commission_type_label,
    format_commission,
    project_for_role,
)

__all__ = [
    "CommissionEngine",
    "Role",
    "commission_type_label",
    "format_commission",
    "project_for_role",
]
