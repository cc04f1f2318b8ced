"""Core data models for hirefee."""

from hirefee.models.commission import (
    CommissionPolicy,
    CommissionSpec,
    CommissionType,
    LegacyFields,
    RecordShape,
    SalaryRange,
    classify_record,
)

__all__ = [
    "CommissionPolicy",
    "CommissionSpec",
    "CommissionType",
    "LegacyFields",
    "RecordShape",
    "SalaryRange",
    "classify_record",
]
