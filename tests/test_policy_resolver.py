"""Tests for the policy resolver — proves per-role policy loads and validates."""

import json
import pytest
from decimal import Decimal
from pathlib import Path

from hirefee.models.commission import CommissionPolicy
from hirefee.policy.resolver import (
    CONFIG_DIR_ENV,
    DEFAULT_CONFIG_DIR,
    PolicyError,
    PolicyResolver,
    resolve_config_dir,
)


CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"


@pytest.fixture
def resolver() -> PolicyResolver:
    return PolicyResolver.from_config_dir(CONFIG_DIR)


def _write_policy(directory: Path, data: object) -> Path:
    (directory / "commission_policy.json").write_text(json.dumps(data), encoding="utf-8")
    return directory


class TestShippedConfig:
    def test_all_roles_present(self, resolver: PolicyResolver) -> None:
        assert resolver.roles() == ["admin", "company", "internal", "recruiter"]
        assert resolver.default_profile == "admin"

    def test_admin_side_defaults_to_forty(self, resolver: PolicyResolver) -> None:
        assert resolver.commission_policy("admin").default_reduction_percentage == Decimal("40")
        assert resolver.commission_policy("internal").default_reduction_percentage == Decimal("40")

    def test_company_side_defaults_to_fifty(self, resolver: PolicyResolver) -> None:
        assert resolver.commission_policy("company").default_reduction_percentage == Decimal("50")

    def test_every_profile_valid(self, resolver: PolicyResolver) -> None:
        for role in resolver.roles():
            assert resolver.commission_policy(role).validate() == []

    def test_none_role_uses_default_profile(self, resolver: PolicyResolver) -> None:
        assert resolver.commission_policy() == resolver.commission_policy("admin")

    def test_unknown_role_falls_back(
        self, resolver: PolicyResolver, caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level("WARNING", logger="hirefee"):
            policy = resolver.commission_policy("auditor")
        assert policy == resolver.commission_policy("admin")
        assert "auditor" in caplog.text


class TestFromDict:
    def test_partial_profile_uses_defaults(self) -> None:
        resolver = PolicyResolver.from_dict({
            "profiles": {"company": {"default_reduction_percentage": 50}},
        })
        policy = resolver.commission_policy("company")
        assert policy.default_reduction_percentage == Decimal("50")
        assert policy.max_reduction_percentage == CommissionPolicy.defaults().max_reduction_percentage
        assert resolver.default_profile == "company"

    def test_float_values_exact(self) -> None:
        resolver = PolicyResolver.from_dict({
            "profiles": {"admin": {"min_commission_percentage": 0.5}},
        })
        assert resolver.commission_policy("admin").min_commission_percentage == Decimal("0.5")

    def test_missing_profiles(self) -> None:
        with pytest.raises(PolicyError, match="profiles"):
            PolicyResolver.from_dict({"default_profile": "admin"})

    def test_not_an_object(self) -> None:
        with pytest.raises(PolicyError, match="must be an object"):
            PolicyResolver.from_dict(["admin"])

    def test_unknown_key(self) -> None:
        with pytest.raises(PolicyError, match="unknown keys: hourly_rate"):
            PolicyResolver.from_dict({"profiles": {"admin": {"hourly_rate": 5}}})

    def test_non_numeric_value(self) -> None:
        with pytest.raises(PolicyError, match="must be a number"):
            PolicyResolver.from_dict({
                "profiles": {"admin": {"max_commission_percentage": "lots"}},
            })

    def test_bool_rejected(self) -> None:
        with pytest.raises(PolicyError, match="must be a number"):
            PolicyResolver.from_dict({
                "profiles": {"admin": {"max_commission_percentage": True}},
            })

    def test_invalid_bounds(self) -> None:
        with pytest.raises(PolicyError, match="default_reduction_percentage"):
            PolicyResolver.from_dict({
                "profiles": {"admin": {"default_reduction_percentage": 95}},
            })

    def test_default_profile_must_exist(self) -> None:
        with pytest.raises(PolicyError, match="default_profile"):
            PolicyResolver.from_dict({
                "default_profile": "recruiter",
                "profiles": {"admin": {}},
            })

    def test_policy_error_is_value_error(self) -> None:
        assert issubclass(PolicyError, ValueError)


class TestFromConfigDir:
    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(PolicyError, match="Cannot read policy file"):
            PolicyResolver.from_config_dir(tmp_path)

    def test_bad_json(self, tmp_path: Path) -> None:
        (tmp_path / "commission_policy.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(PolicyError, match="not valid JSON"):
            PolicyResolver.from_config_dir(tmp_path)

    def test_custom_directory(self, tmp_path: Path) -> None:
        _write_policy(tmp_path, {"profiles": {"admin": {"default_reduction_percentage": 25}}})
        resolver = PolicyResolver.from_config_dir(tmp_path)
        assert resolver.commission_policy("admin").default_reduction_percentage == Decimal("25")


class TestResolveConfigDir:
    def test_explicit_wins(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(CONFIG_DIR_ENV, "/somewhere/else")
        assert resolve_config_dir(tmp_path) == tmp_path

    def test_environment(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(CONFIG_DIR_ENV, str(tmp_path))
        assert resolve_config_dir() == tmp_path

    def test_repo_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(CONFIG_DIR_ENV, raising=False)
        assert resolve_config_dir() == DEFAULT_CONFIG_DIR
        assert DEFAULT_CONFIG_DIR == CONFIG_DIR
