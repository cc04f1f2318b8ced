#!/usr/bin/env python3
"""Commission invariant checks against the deployment policy file."""

import json
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]
POLICY_FILENAME = "commission_policy.json"
POLICY_PATH = ROOT / "config" / POLICY_FILENAME

REQUIRED_ROLES = ("admin", "internal", "company", "recruiter")
REQUIRED_KEYS = (
    "default_reduction_percentage",
    "min_reduction_percentage",
    "max_reduction_percentage",
    "min_commission_percentage",
    "max_commission_percentage",
)


def load_json(path: Path) -> dict:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def parse_number(raw: object) -> Decimal | None:
    """Read a bound the way the policy resolver does: int, float or numeric string."""
    if isinstance(raw, bool) or not isinstance(raw, (int, float, str)):
        return None
    try:
        value = Decimal(str(raw))
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


def check_profile(name: str, profile: dict, errors: list[str]) -> None:
    """Validate one role profile's bounds."""
    values: dict[str, Decimal] = {}
    for key in REQUIRED_KEYS:
        value = parse_number(profile.get(key))
        if value is None:
            errors.append(f"{name}.{key} must be a finite number")
            continue
        values[key] = value
    if len(values) != len(REQUIRED_KEYS):
        return

    min_red = values["min_reduction_percentage"]
    max_red = values["max_reduction_percentage"]
    default_red = values["default_reduction_percentage"]
    min_comm = values["min_commission_percentage"]
    max_comm = values["max_commission_percentage"]

    if not Decimal("0") <= min_red <= max_red <= Decimal("100"):
        errors.append(f"{name}: reduction bounds must satisfy 0 <= min <= max <= 100")
    if not min_red <= default_red <= max_red:
        errors.append(f"{name}: default reduction must lie within the reduction bounds")
    if not Decimal("0") <= min_comm <= max_comm <= Decimal("100"):
        errors.append(f"{name}: commission bounds must satisfy 0 <= min <= max <= 100")


def check(policy_path: Path = POLICY_PATH) -> int:
    policy = load_json(policy_path)
    errors: list[str] = []
    if not isinstance(policy, dict):
        errors.append("policy document must be an object")
        policy = {}

    profiles = policy.get("profiles")
    if not isinstance(profiles, dict) or not profiles:
        errors.append("profiles must be a non-empty object")
        profiles = {}

    for role in REQUIRED_ROLES:
        if role not in profiles:
            errors.append(f"missing profile for role: {role}")

    default_profile = policy.get("default_profile")
    if default_profile not in profiles:
        errors.append(f"default_profile {default_profile!r} is not a configured profile")

    for name, profile in sorted(profiles.items()):
        if not isinstance(profile, dict):
            errors.append(f"{name} must be an object")
            continue
        check_profile(name, profile, errors)

    if errors:
        print("Invariant check failed:")
        for err in errors:
            print(f"- {err}")
        return 1

    print("Invariant check passed.")
    return 0


if __name__ == "__main__":
    raise SystemExit(check(Path(sys.argv[1]) if len(sys.argv) > 1 else POLICY_PATH))
