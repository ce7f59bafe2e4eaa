"""
Error Taxonomy
==============
Infrastructure failures raised inside the engine.

Schema violations and transformation violations are never raised: they are
reported on the ValidationResult. Only failures that prevent validation from
running at all (no schema, unreadable file, unwritable report) use these.
"""


class ContractGuardError(Exception):
    """Base class for all contract-guard errors."""


class SchemaNotFoundError(ContractGuardError):
    """No schema key could be derived for an endpoint."""

    def __init__(self, endpoint: str, method: str, status_code: int) -> None:
        super().__init__(f"No schema found for endpoint: {endpoint} {method} {status_code}")
        self.endpoint = endpoint
        self.method = method
        self.status_code = status_code


class SchemaNotRegisteredError(ContractGuardError):
    """A schema key was derived but nothing is registered under it."""

    def __init__(self, schema_key: str) -> None:
        super().__init__(f"Schema not registered: {schema_key}")
        self.schema_key = schema_key


class ScanFileError(ContractGuardError):
    """A changed file could not be read by the scanner."""

    def __init__(self, file_path: str, reason: str) -> None:
        super().__init__(f"Error validating {file_path}: {reason}")
        self.file_path = file_path
        self.reason = reason


class ReportExportError(ContractGuardError):
    """The validation report could not be written."""

    def __init__(self, file_path: str, reason: str) -> None:
        super().__init__(f"Could not export validation report to {file_path}: {reason}")
        self.file_path = file_path
        self.reason = reason
