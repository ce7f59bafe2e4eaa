"""
Validates the generated fixtures for every critical contract.

    contract-guard-fixtures [--seed N] [--report reports/fixtures.json]

A failure here means a schema and the generator have drifted apart.
Exits 1 if any fixture fails its contract.
"""

import argparse
import logging
from typing import List, Optional

from contract_guard.core.config import configure_logging, load_settings
from contract_guard.core.errors import ReportExportError
from contract_guard.services.contract_validator import ContractValidator
from contract_guard.services.fixtures import TestDataGenerators

logger = logging.getLogger("contract_guard")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="contract-guard-fixtures",
        description="Validate generated fixtures against the registered contracts.",
    )
    parser.add_argument("--seed", type=int, default=None,
                        help="Fixture seed (defaults to CONTRACT_GUARD_SEED)")
    parser.add_argument("--report", metavar="PATH", default=None,
                        help="Write the JSON validation report to PATH")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings()
    configure_logging(settings)

    seed = args.seed if args.seed is not None else settings.seed
    generator = TestDataGenerators(seed=seed)
    validator = ContractValidator()

    print(f"\n🧬 Validating contract fixtures (seed {seed})")
    failures = 0
    for case in generator.generate_contract_test_cases():
        result = validator.validate_response(
            case["endpoint"], case["method"], case["response"], case["status_code"]
        )
        icon = "✅" if result.valid else "❌"
        print(f"{icon} {case['method']} {case['endpoint']} ({case['status_code']}) → {result.schema_key}")
        for issue in result.errors:
            print(f"     📍 {'/'.join(str(p) for p in issue.path) or '$'}: {issue.message}")
        if not result.valid:
            failures += 1

    stats = validator.get_validation_stats()
    print(f"\n📊 Summary: {stats['passed']}/{stats['total']} fixtures valid ({stats['successRate']}%)")

    if args.report:
        try:
            validator.export_validation_report(args.report)
        except ReportExportError as e:
            logger.error(f"❌ {e}")
            return 1
        print(f"💾 Report written to {args.report}")

    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
