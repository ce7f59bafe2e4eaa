"""
Critical endpoint smoke tests.

    API_BASE_URL=http://localhost:5000 API_AUTH_TOKEN=... contract-guard-smoke

Exits 1 if any critical check fails.
"""

import asyncio

from contract_guard.core.config import configure_logging, load_settings
from contract_guard.services.smoke_runner import SmokeTestRunner


def main() -> int:
    settings = load_settings()
    configure_logging(settings)

    runner = SmokeTestRunner(settings)
    asyncio.run(runner.run())
    runner.print_report()
    return runner.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
