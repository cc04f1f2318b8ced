"""hirefee CLI — command-line interface for the commission engine.

Usage:
    python -m hirefee.cli quote --percentage 20 --reduction 40 --salary-max 100000
    python -m hirefee.cli quote --fixed 5000 --reduction 50 --role company
    python -m hirefee.cli normalize job.json --role admin
    python -m hirefee.cli normalize - --view recruiter < job.json
    python -m hirefee.cli policy --role company
    python -m hirefee.cli check-invariants
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from hirefee.compensation.engine import CommissionEngine
from hirefee.compensation.views import Role, format_commission, project_for_role
from hirefee.log import configure, get_logger
from hirefee.models.commission import SalaryRange
from hirefee.policy.resolver import PolicyError, PolicyResolver, resolve_config_dir


ROOT = Path(__file__).resolve().parents[2]

log = get_logger(__name__)


def _make_engine(config: Optional[Path], role: str) -> CommissionEngine:
    resolver = PolicyResolver.from_config_dir(resolve_config_dir(config))
    return CommissionEngine(resolver.commission_policy(role))


def _dump(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def _read_record(source: str) -> Any:
    if source == "-":
        return json.load(sys.stdin)
    with Path(source).open("r", encoding="utf-8") as handle:
        return json.load(handle)


def cmd_quote(args: argparse.Namespace) -> int:
    """Compute a breakdown from command-line figures."""
    engine = _make_engine(args.config, args.role)
    raw: dict[str, Any] = {
        "salary": {
            "min": args.salary_min,
            "max": args.salary_max,
            "currency": args.currency,
        },
    }
    if args.fixed is not None:
        commission: dict[str, Any] = {"type": "fixed", "fixedAmount": args.fixed}
    else:
        commission = {"type": "percentage", "originalPercentage": args.percentage}
    if args.reduction is not None:
        commission["reductionPercentage"] = args.reduction
    raw["commission"] = commission

    spec = engine.normalize(raw)
    output = engine.to_record(spec)
    output["display"] = format_commission(spec, SalaryRange.from_raw(raw["salary"]))
    _dump(output)
    return 0


def cmd_normalize(args: argparse.Namespace) -> int:
    """Normalize a stored job record."""
    engine = _make_engine(args.config, args.view or args.role)
    record = _read_record(args.source)
    if args.view:
        _dump(project_for_role(engine, record, args.view))
        return 0
    _dump(engine.to_record(engine.normalize(record)))
    return 0


def cmd_policy(args: argparse.Namespace) -> int:
    resolver = PolicyResolver.from_config_dir(resolve_config_dir(args.config))
    _dump({"role": args.role, **asdict(resolver.commission_policy(args.role))})
    return 0


def cmd_check_invariants(args: argparse.Namespace) -> int:
    """Run policy invariant checks."""
    # Import and run the existing check_invariants tool
    tools_dir = ROOT / "tools"
    if str(tools_dir) not in sys.path:
        sys.path.insert(0, str(tools_dir))
    from check_invariants import POLICY_FILENAME, check
    config_dir = resolve_config_dir(args.config)
    return check(config_dir / POLICY_FILENAME)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hirefee",
        description="Recruitment commission engine CLI",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config directory (default: $HIREFEE_CONFIG_DIR or config/)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: $LOG_LEVEL or WARNING)",
    )
    sub = parser.add_subparsers(dest="command")
    roles = [r.value for r in Role]

    # quote
    p_quote = sub.add_parser("quote", help="Compute a commission breakdown")
    kind = p_quote.add_mutually_exclusive_group(required=True)
    kind.add_argument("--percentage", help="Company fee as % of salary (Decimal)")
    kind.add_argument("--fixed", help="Company fee as a fixed amount (Decimal)")
    p_quote.add_argument("--reduction", help="Platform share of the fee in % (default: policy)")
    p_quote.add_argument("--salary-min", default="0", help="Salary minimum")
    p_quote.add_argument("--salary-max", default="0", help="Salary maximum")
    p_quote.add_argument("--currency", default="USD", help="Salary currency (default: USD)")
    p_quote.add_argument("--role", default="admin", choices=roles, help="Caller role policy")

    # normalize
    p_norm = sub.add_parser("normalize", help="Normalize a stored job record")
    p_norm.add_argument("source", help="Path to job JSON, or - for stdin")
    p_norm.add_argument("--role", default="admin", choices=roles, help="Caller role policy")
    p_norm.add_argument("--view", choices=roles, help="Print the projection for this role")

    # policy
    p_pol = sub.add_parser("policy", help="Show the resolved policy for a role")
    p_pol.add_argument("--role", default="admin", choices=roles, help="Caller role")

    # check-invariants
    sub.add_parser("check-invariants", help="Run policy invariant checks")

    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv(ROOT / ".env")
    parser = build_parser()
    args = parser.parse_args(argv)
    configure(args.log_level)

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "quote": cmd_quote,
        "normalize": cmd_normalize,
        "policy": cmd_policy,
        "check-invariants": cmd_check_invariants,
    }

    handler = commands.get(args.command)
    if handler is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    try:
        return handler(args)
    except PolicyError as exc:
        print(f"Failed: {exc}", file=sys.stderr)
        return 1
    except (OSError, json.JSONDecodeError) as exc:
        log.debug("Command %s failed", args.command, exc_info=True)
        print(f"Failed: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
