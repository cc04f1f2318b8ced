"""Tests for role projections and recruiter-facing commission text."""

import pytest
from dataclasses import replace
from decimal import Decimal
from pathlib import Path

from hirefee.compensation.engine import CommissionEngine
from hirefee.compensation.views import (
    Role,
    commission_type_label,
    format_commission,
    project_for_role,
)
from hirefee.models.commission import SalaryRange
from hirefee.policy.resolver import PolicyResolver


CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"


@pytest.fixture
def engine() -> CommissionEngine:
    resolver = PolicyResolver.from_config_dir(CONFIG_DIR)
    return CommissionEngine(resolver.commission_policy("recruiter"))


def _percentage_job() -> dict:
    return {
        "_id": "job-1",
        "title": "Data Engineer",
        "salary": {"min": 80000, "max": 100000, "currency": "USD"},
        "commission": {
            "type": "percentage",
            "originalPercentage": 20,
            "reductionPercentage": 40,
        },
        "commissionPercentage": 20,
        "commissionAmount": 20000,
    }


def _fixed_job() -> dict:
    return {
        "_id": "job-2",
        "salary": {"min": 40000, "max": 50000, "currency": "EUR"},
        "commission": {"type": "fixed", "fixedAmount": 5000, "reductionPercentage": 50},
    }


class TestRole:
    def test_all_roles_exist(self) -> None:
        assert {r.value for r in Role} == {"admin", "internal", "company", "recruiter"}

    def test_unknown_role_rejected(self, engine: CommissionEngine) -> None:
        with pytest.raises(ValueError):
            project_for_role(engine, _percentage_job(), "auditor")


class TestRecruiterView:
    def test_percentage_shows_recruiter_share(self, engine: CommissionEngine) -> None:
        view = project_for_role(engine, _percentage_job(), Role.RECRUITER)
        assert view["commissionPercentage"] == Decimal("12")
        assert view["commissionAmount"] == Decimal("12000")
        assert view["fixedCommissionAmount"] == Decimal("0")
        assert view["commission"] == {
            "type": "percentage",
            "recruiterPercentage": Decimal("12"),
            "recruiterAmount": Decimal("12000"),
        }

    def test_company_figures_hidden(self, engine: CommissionEngine) -> None:
        view = project_for_role(engine, _percentage_job(), "recruiter")
        for key in ("originalPercentage", "originalAmount", "reductionPercentage",
                    "platformFeePercentage", "platformFeeAmount"):
            assert key not in view["commission"]

    def test_fixed_shows_recruiter_amount(self, engine: CommissionEngine) -> None:
        view = project_for_role(engine, _fixed_job(), Role.RECRUITER)
        assert view["fixedCommissionAmount"] == Decimal("2500")
        assert view["commissionPercentage"] == Decimal("0")
        assert view["commissionAmount"] == Decimal("0")
        assert view["commission"] == {"type": "fixed", "recruiterAmount": Decimal("2500")}

    def test_other_fields_untouched(self, engine: CommissionEngine) -> None:
        job = _percentage_job()
        view = project_for_role(engine, job, Role.RECRUITER)
        assert view["_id"] == "job-1"
        assert view["title"] == "Data Engineer"
        # Input record is not modified
        assert job["commissionPercentage"] == 20
        assert job["commission"]["originalPercentage"] == 20


class TestStaffView:
    def test_admin_sees_full_breakdown(self, engine: CommissionEngine) -> None:
        view = project_for_role(engine, _percentage_job(), Role.ADMIN)
        assert view["commission"]["originalPercentage"] == Decimal("20")
        assert view["commission"]["platformFeePercentage"] == Decimal("8")
        assert view["commissionPercentage"] == Decimal("20")
        assert view["commissionAmount"] == Decimal("20000")
        assert view["fixedCommissionAmount"] == Decimal("0")

    def test_legacy_record_gains_canonical_object(self, engine: CommissionEngine) -> None:
        view = project_for_role(engine, {"commissionPercentage": 15, "commissionAmount": 7500},
                                Role.COMPANY)
        assert view["commission"]["type"] == "percentage"
        assert view["commission"]["originalAmount"] == Decimal("7500")

    def test_fixed_amount_surface(self, engine: CommissionEngine) -> None:
        view = project_for_role(engine, _fixed_job(), Role.INTERNAL)
        assert view["fixedCommissionAmount"] == Decimal("5000")
        assert view["commissionAmount"] == Decimal("5000")


class TestFormatCommission:
    def test_percentage_range(self, engine: CommissionEngine) -> None:
        job = _percentage_job()
        spec = engine.normalize(job)
        text = format_commission(spec, SalaryRange.from_raw(job["salary"]))
        assert text == "USD 9,600 - 12,000"

    def test_fixed_amount(self, engine: CommissionEngine) -> None:
        job = _fixed_job()
        spec = engine.normalize(job)
        assert format_commission(spec, SalaryRange.from_raw(job["salary"])) == "EUR 2,500"

    def test_rounds_to_whole_units(self, engine: CommissionEngine) -> None:
        spec = engine.normalize({
            "salary": {"min": 1001, "max": 1001, "currency": "USD"},
            "commission": {"originalPercentage": "12.5", "reductionPercentage": 0},
        })
        # 1001 × 12.5% = 125.125
        assert format_commission(spec, SalaryRange.from_raw({"min": 1001, "max": 1001})) == (
            "USD 125 - 125"
        )

    def test_empty_salary(self, engine: CommissionEngine) -> None:
        spec = engine.normalize({"commissionPercentage": 10})
        assert format_commission(spec, SalaryRange()) == "USD 0 - 0"

    def test_extreme_salary_reads_as_empty(self, engine: CommissionEngine) -> None:
        raw_salary = {"min": "1e400", "max": "9e999999", "currency": "USD"}
        spec = engine.normalize({
            "salary": raw_salary,
            "commission": {"originalPercentage": 20, "reductionPercentage": 40},
        })
        assert format_commission(spec, SalaryRange.from_raw(raw_salary)) == "USD 0 - 0"

    def test_oversized_amount_does_not_raise(self, engine: CommissionEngine) -> None:
        spec = engine.normalize(_fixed_job())
        spec = replace(spec, recruiter_amount=Decimal("1E+30"))
        text = format_commission(spec, SalaryRange())
        assert text.startswith("USD 1,000,000")


class TestCommissionTypeLabel:
    def test_labels(self) -> None:
        assert commission_type_label(_percentage_job()) == "Percentage"
        assert commission_type_label(_fixed_job()) == "Fixed"
        assert commission_type_label({"commissionPercentage": 10}) == "Legacy"
        assert commission_type_label(None) == "Legacy"

    def test_unknown_type_is_percentage(self) -> None:
        assert commission_type_label({"commission": {"type": "hourly"}}) == "Percentage"
