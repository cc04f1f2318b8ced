"""Policy resolver — loads per-role commission bounds from config/.

The policy file holds one profile per caller role:

    {
      "default_profile": "admin",
      "profiles": {
        "admin":   {"default_reduction_percentage": 40, ...},
        "company": {"default_reduction_percentage": 50}
      }
    }

Keys omitted from a profile fall back to CommissionPolicy.defaults().
Admin and company call sites have historically disagreed on the default
reduction (40 vs 50). Each role carries its own value until product
settles it; the resolver never unifies them.

A malformed policy is a deployment error and raises PolicyError at load
time. Nothing downstream of the resolver raises on numeric input.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import fields
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, Optional

from hirefee.log import get_logger
from hirefee.models.commission import CommissionPolicy


log = get_logger(__name__)

POLICY_FILENAME = "commission_policy.json"
CONFIG_DIR_ENV = "HIREFEE_CONFIG_DIR"
DEFAULT_CONFIG_DIR = Path(__file__).resolve().parents[3] / "config"

_POLICY_KEYS = frozenset(f.name for f in fields(CommissionPolicy))


class PolicyError(ValueError):
    """Raised when the commission policy configuration is invalid."""


def resolve_config_dir(explicit: Optional[Path] = None) -> Path:
    """Pick the config directory: argument, then environment, then repo default."""
    if explicit is not None:
        return Path(explicit)
    from_env = os.environ.get(CONFIG_DIR_ENV)
    if from_env:
        return Path(from_env)
    return DEFAULT_CONFIG_DIR


def _parse_value(profile: str, key: str, value: Any) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise PolicyError(f"Profile '{profile}': {key} must be a number, got {value!r}")
    try:
        result = Decimal(str(value))
    except InvalidOperation as exc:
        raise PolicyError(
            f"Profile '{profile}': {key} must be a number, got {value!r}"
        ) from exc
    if not result.is_finite():
        raise PolicyError(f"Profile '{profile}': {key} must be finite")
    return result


def _parse_profile(name: str, data: Any) -> CommissionPolicy:
    if not isinstance(data, Mapping):
        raise PolicyError(f"Profile '{name}' must be an object")
    unknown = set(data) - _POLICY_KEYS
    if unknown:
        raise PolicyError(
            f"Profile '{name}' has unknown keys: {', '.join(sorted(unknown))}"
        )
    values = {key: _parse_value(name, key, value) for key, value in data.items()}
    policy = CommissionPolicy(**values)
    errors = policy.validate()
    if errors:
        raise PolicyError(f"Profile '{name}': {'; '.join(errors)}")
    return policy


class PolicyResolver:
    """Resolves the CommissionPolicy for a caller role.

    Usage:
        resolver = PolicyResolver.from_config_dir(config_dir)
        policy = resolver.commission_policy("company")
        engine = CommissionEngine(policy)
    """

    def __init__(
        self,
        profiles: Dict[str, CommissionPolicy],
        default_profile: str,
    ) -> None:
        if default_profile not in profiles:
            raise PolicyError(
                f"default_profile '{default_profile}' is not a configured profile"
            )
        self._profiles = dict(profiles)
        self._default_profile = default_profile

    @classmethod
    def from_dict(cls, data: Any) -> PolicyResolver:
        if not isinstance(data, Mapping):
            raise PolicyError("Policy document must be an object")
        raw_profiles = data.get("profiles")
        if not isinstance(raw_profiles, Mapping) or not raw_profiles:
            raise PolicyError("Policy document needs a non-empty 'profiles' object")
        profiles = {
            str(name): _parse_profile(str(name), profile)
            for name, profile in raw_profiles.items()
        }
        default_profile = data.get("default_profile")
        if default_profile is None:
            default_profile = next(iter(profiles))
        return cls(profiles, str(default_profile))

    @classmethod
    def from_config_dir(cls, config_dir: Path) -> PolicyResolver:
        path = Path(config_dir) / POLICY_FILENAME
        try:
            with path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except OSError as exc:
            raise PolicyError(f"Cannot read policy file {path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise PolicyError(f"Policy file {path} is not valid JSON: {exc}") from exc
        resolver = cls.from_dict(data)
        log.info("Loaded commission policy for roles: %s", ", ".join(resolver.roles()))
        return resolver

    @property
    def default_profile(self) -> str:
        return self._default_profile

    def roles(self) -> list[str]:
        return sorted(self._profiles)

    def commission_policy(self, role: Optional[str] = None) -> CommissionPolicy:
        """Return the policy for a role, or the default profile.

        Unknown roles fall back to the default profile with a warning,
        so a new role never blocks a page from rendering commission data.
        """
        if role is None:
            return self._profiles[self._default_profile]
        key = getattr(role, "value", role)
        policy = self._profiles.get(key)
        if policy is None:
            log.warning(
                "No commission policy for role '%s'; using '%s'",
                key, self._default_profile,
            )
            return self._profiles[self._default_profile]
        return policy
