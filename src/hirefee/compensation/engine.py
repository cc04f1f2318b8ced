"""Commission engine — turns a company-set fee into the recruiter payout.

The company sets its fee either as a percentage of salary or as a fixed
amount. The platform keeps a share of that fee (the reduction); the
recruiter sees the rest. The formula is fully deterministic:

    percentage mode:
        recruiter_pct = original_pct × (100 − reduction) / 100
        recruiter_pct = min(max(recruiter_pct, MIN_COMMISSION), original_pct)
        platform_fee_pct = original_pct − recruiter_pct
        original_amount = salary_max × original_pct / 100
        recruiter_amount = salary_max × recruiter_pct / 100

    fixed mode:
        original_amount = fixed_amount
        recruiter_amount = fixed_amount × (100 − reduction) / 100

    reduction = clamp(reduction, MIN_REDUCTION, MAX_REDUCTION)

Two control paths exist for the recruiter share: set the reduction and
derive the recruiter percentage, or set the recruiter percentage
directly and back-derive the reduction. Either edit leaves the pair
consistent.

Every operation is a pure function of (spec, input) → new spec. No
operation raises on numeric input: missing, NaN, negative or
unparsable values are coerced to zero or snapped to the nearest bound.

Invariants:
- recruiter_pct <= original_pct, even when original_pct < MIN_COMMISSION
- platform_fee_pct + recruiter_pct == original_pct
- recruiter_amount <= original_amount
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from decimal import Decimal
from typing import Any, Dict, Optional

from hirefee.log import get_logger
from hirefee.models.commission import (
    CANONICAL_KEY,
    CommissionPolicy,
    CommissionSpec,
    CommissionType,
    LegacyFields,
    SalaryRange,
    classify_record,
)
from hirefee.numeric import (
    HUNDRED,
    ZERO,
    clamp,
    non_negative,
    percent_of,
    quantize_money,
    to_decimal,
)


log = get_logger(__name__)


def _pick(primary: Mapping, key: str, fallback: Mapping, *fallback_keys: str) -> Any:
    """Return primary[key] when present, else the first present fallback key."""
    value = primary.get(key)
    if value is not None:
        return value
    for fallback_key in fallback_keys:
        value = fallback.get(fallback_key)
        if value is not None:
            return value
    return None


class CommissionEngine:
    """Computes commission breakdowns for job records and form edits.

    The engine holds only its policy, which is immutable. One engine per
    caller role; the admin and company forms are configured separately.

    Usage:
        engine = CommissionEngine(resolver.commission_policy("admin"))
        spec = engine.normalize(job_record)
        spec = engine.set_reduction_percentage(spec, 35)
        payload = engine.to_record(spec)
    """

    def __init__(self, policy: Optional[CommissionPolicy] = None) -> None:
        self._policy = policy if policy is not None else CommissionPolicy.defaults()

    @property
    def policy(self) -> CommissionPolicy:
        return self._policy

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def normalize(self, raw_job: Any) -> CommissionSpec:
        """Collapse a job record of any shape into a CommissionSpec.

        Reads the canonical ``commission`` object first and falls back to
        the legacy flat fields. A stored recruiterPercentage is ignored
        and recomputed, which repairs records written with a stale value.

        Args:
            raw_job: Mapping with ``commission`` and/or legacy fields and
                an optional ``salary`` object. Anything else is treated
                as an empty record.

        Returns:
            A fully derived CommissionSpec.
        """
        log.debug("Normalizing %s commission record", classify_record(raw_job).value)
        if not isinstance(raw_job, Mapping):
            raw_job = {}
        commission = raw_job.get(CANONICAL_KEY)
        if not isinstance(commission, Mapping):
            commission = {}

        salary = SalaryRange.from_raw(raw_job.get("salary"))
        reference = salary.max if salary.max > ZERO else None

        original_pct = non_negative(
            _pick(commission, "originalPercentage", raw_job, "commissionPercentage")
        )
        fixed_amount = non_negative(
            _pick(commission, "fixedAmount", raw_job,
                  "fixedCommissionAmount", "commissionAmount")
        )
        stored_amount = non_negative(
            _pick(commission, "originalAmount", raw_job, "commissionAmount")
        )

        if commission.get("type") is not None:
            ctype = CommissionType.parse(commission["type"])
        elif original_pct > ZERO:
            ctype = CommissionType.PERCENTAGE
        elif fixed_amount > ZERO:
            ctype = CommissionType.FIXED
        else:
            ctype = CommissionType.PERCENTAGE

        raw_reduction = commission.get("reductionPercentage")
        if raw_reduction is None:
            raw_reduction = self._policy.default_reduction_percentage
        reduction = self._clamp_reduction(to_decimal(raw_reduction))

        if ctype is CommissionType.FIXED:
            spec = CommissionSpec(
                type=ctype,
                reduction_percentage=reduction,
                fixed_amount=quantize_money(fixed_amount),
                reference_salary=reference,
            )
            return self._recompute(spec)

        original_pct = self._clamp_original(original_pct)
        spec = CommissionSpec(
            type=ctype,
            original_percentage=original_pct,
            reduction_percentage=reduction,
            recruiter_percentage=self._recruiter_from_reduction(original_pct, reduction),
            original_amount=quantize_money(stored_amount),
            reference_salary=reference,
        )
        return self._recompute(spec)

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def set_original_percentage(self, spec: CommissionSpec, value: Any) -> CommissionSpec:
        """Set the company fee percentage and re-derive the recruiter share."""
        if spec.is_fixed:
            log.debug("Ignoring original percentage edit on a fixed commission")
            return spec
        original_pct = self._clamp_original(non_negative(value))
        return self._recompute(replace(
            spec,
            original_percentage=original_pct,
            recruiter_percentage=self._recruiter_from_reduction(
                original_pct, spec.reduction_percentage,
            ),
        ))

    def set_reduction_percentage(self, spec: CommissionSpec, value: Any) -> CommissionSpec:
        """Set the platform's share; out-of-range input snaps to the bound."""
        reduction = self._clamp_reduction(to_decimal(value))
        if spec.is_fixed:
            return self._recompute(replace(spec, reduction_percentage=reduction))
        return self._recompute(replace(
            spec,
            reduction_percentage=reduction,
            recruiter_percentage=self._recruiter_from_reduction(
                spec.original_percentage, reduction,
            ),
        ))

    def set_recruiter_percentage(self, spec: CommissionSpec, value: Any) -> CommissionSpec:
        """Override the recruiter percentage and back-derive the reduction.

        The value is clamped to the range the reduction bounds allow,
        [original × (100 − MAX_REDUCTION) / 100, original × (100 −
        MIN_REDUCTION) / 100], with MIN_COMMISSION raising the floor. The
        back-derived reduction therefore stays within the policy bounds,
        and replaying it through set_reduction_percentage reproduces the
        same recruiter percentage. When MIN_COMMISSION sits above the
        ceiling the result matches set_reduction_percentage(MIN_REDUCTION).
        """
        if spec.is_fixed:
            log.debug("Ignoring recruiter percentage edit on a fixed commission")
            return spec
        original_pct = spec.original_percentage
        if original_pct <= ZERO:
            return self._recompute(replace(
                spec,
                recruiter_percentage=ZERO,
                reduction_percentage=self._clamp_reduction(ZERO),
            ))

        policy = self._policy
        requested = to_decimal(value)
        high = percent_of(original_pct, HUNDRED - policy.min_reduction_percentage)
        low = max(
            percent_of(original_pct, HUNDRED - policy.max_reduction_percentage),
            policy.min_commission_percentage,
        )
        if low > high:
            reduction = policy.min_reduction_percentage
            recruiter_pct = self._recruiter_from_reduction(original_pct, reduction)
        else:
            recruiter_pct = clamp(requested, low, high)
            reduction = clamp(
                (original_pct - recruiter_pct) / original_pct * HUNDRED,
                policy.min_reduction_percentage,
                policy.max_reduction_percentage,
            )
        if recruiter_pct != requested:
            log.debug("Recruiter percentage %s clamped to %s", requested, recruiter_pct)
        return self._recompute(replace(
            spec,
            recruiter_percentage=recruiter_pct,
            reduction_percentage=reduction,
        ))

    def set_fixed_amount(self, spec: CommissionSpec, value: Any) -> CommissionSpec:
        """Set the company's fixed fee; the reduction is applied on top."""
        if not spec.is_fixed:
            log.debug("Ignoring fixed amount edit on a percentage commission")
            return spec
        return self._recompute(replace(
            spec, fixed_amount=quantize_money(non_negative(value)),
        ))

    def set_commission_type(self, spec: CommissionSpec, value: Any) -> CommissionSpec:
        """Switch between percentage and fixed, resetting the other mode's fields.

        The reduction and salary reference carry over.
        """
        ctype = CommissionType.parse(value)
        if ctype is spec.type:
            return spec
        if ctype is CommissionType.FIXED:
            switched = replace(
                spec,
                type=ctype,
                original_percentage=ZERO,
                recruiter_percentage=ZERO,
                platform_fee_percentage=ZERO,
            )
        else:
            switched = replace(
                spec,
                type=ctype,
                fixed_amount=ZERO,
                original_amount=ZERO,
            )
        return self._recompute(switched)

    def apply_salary(self, spec: CommissionSpec, salary_max: Any) -> CommissionSpec:
        """Recompute percentage-mode amounts against a new salary maximum.

        Passing None clears the salary reference. Fixed amounts are
        unaffected. Idempotent.
        """
        reference = None if salary_max is None else non_negative(salary_max)
        return self._recompute(replace(spec, reference_salary=reference))

    # ------------------------------------------------------------------
    # Projections
    # ------------------------------------------------------------------

    def to_legacy_fields(self, spec: CommissionSpec) -> LegacyFields:
        """Project onto the flat fields older records understand."""
        if spec.is_fixed:
            return LegacyFields(
                commission_percentage=ZERO,
                commission_amount=spec.fixed_amount,
            )
        return LegacyFields(
            commission_percentage=spec.original_percentage,
            commission_amount=spec.original_amount,
        )

    def to_record(self, spec: CommissionSpec) -> Dict[str, Any]:
        """Both representations, ready to merge into a job update payload."""
        record: Dict[str, Any] = {CANONICAL_KEY: spec.to_dict()}
        record.update(self.to_legacy_fields(spec).to_dict())
        return record

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _clamp_reduction(self, value: Decimal) -> Decimal:
        reduction = clamp(
            value,
            self._policy.min_reduction_percentage,
            self._policy.max_reduction_percentage,
        )
        if reduction != value:
            log.debug("Reduction percentage %s clamped to %s", value, reduction)
        return reduction

    def _clamp_original(self, value: Decimal) -> Decimal:
        original_pct = clamp(value, ZERO, self._policy.max_commission_percentage)
        if original_pct != value:
            log.debug("Original percentage %s clamped to %s", value, original_pct)
        return original_pct

    def _recruiter_from_reduction(self, original_pct: Decimal, reduction: Decimal) -> Decimal:
        if original_pct <= ZERO:
            return ZERO
        recruiter_pct = original_pct * (HUNDRED - reduction) / HUNDRED
        recruiter_pct = max(recruiter_pct, self._policy.min_commission_percentage)
        # Minimum never lifts the recruiter above what the company pays
        return min(recruiter_pct, original_pct)

    def _recompute(self, spec: CommissionSpec) -> CommissionSpec:
        """Re-derive platform fee and every monetary amount."""
        if spec.is_fixed:
            original_amount = spec.fixed_amount
            recruiter_amount = max(ZERO, quantize_money(
                original_amount * (HUNDRED - spec.reduction_percentage) / HUNDRED
            ))
            return replace(
                spec,
                original_percentage=ZERO,
                recruiter_percentage=ZERO,
                platform_fee_percentage=ZERO,
                original_amount=original_amount,
                recruiter_amount=recruiter_amount,
                platform_fee_amount=original_amount - recruiter_amount,
            )

        original_pct = spec.original_percentage
        recruiter_pct = spec.recruiter_percentage
        if spec.reference_salary is not None:
            original_amount = quantize_money(percent_of(spec.reference_salary, original_pct))
            recruiter_amount = quantize_money(percent_of(spec.reference_salary, recruiter_pct))
        else:
            # No salary: keep the stored amount and scale the recruiter share
            original_amount = spec.original_amount
            if original_pct > ZERO:
                recruiter_amount = quantize_money(
                    original_amount * recruiter_pct / original_pct
                )
            else:
                recruiter_amount = ZERO
        return replace(
            spec,
            platform_fee_percentage=max(ZERO, original_pct - recruiter_pct),
            original_amount=original_amount,
            recruiter_amount=recruiter_amount,
            platform_fee_amount=max(ZERO, original_amount - recruiter_amount),
        )
