# investment_tracker/services/imports/__init__.py
"""
Imports Package.

Bulk entry of currency ledger transactions from CSV files. Rows are
validated with the same ledger policy as manual entry, and a batch is
committed completely or not at all.

Architecture:
    imports/
    ├── __init__.py              # This file - package exports
    ├── csv_reader.py            # CsvRowReader, header aliases, row numbering
    └── service.py               # CurrencyTransactionImportService, results

Usage:
    from investment_tracker.services.imports import CurrencyTransactionImportService

    result = CurrencyTransactionImportService().import_csv(file, ledger, repository)
    if result.status == "rejected":
        for error in result.errors:
            print(f"Row {error.row_number} {error.field_name}: {error.message}")
"""

from investment_tracker.services.imports.csv_reader import (
    FIELD_EXCHANGE_RATE,
    FIELD_FILE,
    FIELD_FOREIGN_AMOUNT,
    FIELD_HOME_AMOUNT,
    FIELD_NOTES,
    FIELD_TRANSACTION_DATE,
    FIELD_TRANSACTION_TYPE,
    CsvDocument,
    CsvRecord,
    CsvRowReader,
    normalize_header,
)
from investment_tracker.services.imports.service import (
    STATUS_COMMITTED,
    STATUS_REJECTED,
    CurrencyTransactionImportService,
    ImportResult,
    ImportRowError,
    ImportSummary,
    parse_date,
    parse_decimal,
)

__all__ = [
    # Service
    "CurrencyTransactionImportService",
    # Results
    "ImportResult",
    "ImportRowError",
    "ImportSummary",
    "STATUS_COMMITTED",
    "STATUS_REJECTED",
    # CSV reading
    "CsvDocument",
    "CsvRecord",
    "CsvRowReader",
    "normalize_header",
    # Field names
    "FIELD_EXCHANGE_RATE",
    "FIELD_FILE",
    "FIELD_FOREIGN_AMOUNT",
    "FIELD_HOME_AMOUNT",
    "FIELD_NOTES",
    "FIELD_TRANSACTION_DATE",
    "FIELD_TRANSACTION_TYPE",
    # Value parsing
    "parse_date",
    "parse_decimal",
]
