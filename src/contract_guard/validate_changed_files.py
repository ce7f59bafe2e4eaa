"""
Pre-commit contract guard for changed files.

    git diff --cached --name-only | xargs contract-guard-validate-files

Exits 1 if any file has a blocking error.
"""

import asyncio
import sys
from typing import List, Optional

from contract_guard.core.config import configure_logging, load_settings
from contract_guard.services.file_scanner import ChangedFilesScanner


def main(argv: Optional[List[str]] = None) -> int:
    files = sys.argv[1:] if argv is None else list(argv)

    if not files:
        print("No files to validate")
        return 0

    configure_logging(load_settings())

    scanner = ChangedFilesScanner()
    asyncio.run(scanner.scan_files(files))
    scanner.print_results()
    return scanner.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
