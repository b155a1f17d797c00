# investment_tracker/services/imports/service.py
"""
Currency transaction CSV import.

An import batch is all-or-nothing:
1. Read the file and map its header (CsvRowReader)
2. Validate every data row with the same policy manual entry uses
3. If anything is wrong, return a rejected result with EVERY diagnostic
4. Otherwise build all transactions, add them in one batch and commit

Error codes:
    File level (row_number=0, field_name="file"):
        CSV_EMPTY, CSV_UNREADABLE, CSV_HEADER_MISSING, CSV_NO_DATA_ROWS,
        CSV_ROW_LIMIT_EXCEEDED
    Row level:
        REQUIRED_FIELD_MISSING, INVALID_DATE_FORMAT, INVALID_NUMBER_FORMAT,
        INVALID_ENUM_VALUE, VALUE_OUT_OF_RANGE, FIELD_LENGTH_EXCEEDED,
        INVALID_TRANSACTION_TYPE_FOR_LEDGER

Row-level problems never raise. CurrencyImportError is raised only when
the repository fails after validation passed.
"""

import csv
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import BinaryIO

from investment_tracker.config import settings
from investment_tracker.services.constants import (
    IMPORT_DATE_FORMATS,
    IMPORT_MAX_FUTURE_DAYS,
    ONE,
    ZERO,
)
from investment_tracker.services.exceptions import CurrencyImportError
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
)
from investment_tracker.services.ledger import policy
from investment_tracker.services.ledger.types import (
    CurrencyLedger,
    CurrencyTransaction,
    CurrencyTransactionType,
)
from investment_tracker.services.protocols import CurrencyTransactionRepository
from investment_tracker.utils.context import correlation_scope

logger = logging.getLogger(__name__)

# =============================================================================
# RESULT STATUS AND ERROR CODES
# =============================================================================

STATUS_COMMITTED = "committed"
STATUS_REJECTED = "rejected"

CSV_EMPTY = "CSV_EMPTY"
CSV_UNREADABLE = "CSV_UNREADABLE"
CSV_NO_DATA_ROWS = "CSV_NO_DATA_ROWS"
CSV_HEADER_MISSING = "CSV_HEADER_MISSING"
CSV_ROW_LIMIT_EXCEEDED = "CSV_ROW_LIMIT_EXCEEDED"
INVALID_DATE_FORMAT = "INVALID_DATE_FORMAT"
INVALID_NUMBER_FORMAT = "INVALID_NUMBER_FORMAT"
INVALID_ENUM_VALUE = "INVALID_ENUM_VALUE"
VALUE_OUT_OF_RANGE = "VALUE_OUT_OF_RANGE"
FIELD_LENGTH_EXCEEDED = "FIELD_LENGTH_EXCEEDED"

# Policy diagnostics use client field names; imports report CSV field names
_POLICY_FIELD_MAP = {
    policy.FIELD_AMOUNT: FIELD_FOREIGN_AMOUNT,
    policy.FIELD_TARGET_AMOUNT: FIELD_HOME_AMOUNT,
}


# =============================================================================
# RESULT TYPES
# =============================================================================

@dataclass(frozen=True)
class ImportRowError:
    """
    One import diagnostic.

    Attributes:
        row_number: CSV row (header is row 1); 0 for file-level errors
        field_name: CSV field name, or "file"
        invalid_value: Raw rejected value ("" when absent)
        error_code: Stable machine-readable code
        message: What is wrong
        correction_guidance: How to fix it
    """
    row_number: int
    field_name: str
    invalid_value: str
    error_code: str
    message: str
    correction_guidance: str


@dataclass
class ImportSummary:
    total_rows: int = 0
    inserted_rows: int = 0
    rejected_rows: int = 0
    error_count: int | None = None


@dataclass
class ImportResult:
    """
    Outcome of one import batch.

    Attributes:
        status: "committed" or "rejected"
        summary: Row counts
        errors: Every diagnostic, sorted by row number then field name
        transactions: Transactions written (committed batches only)
    """
    status: str
    summary: ImportSummary
    errors: list[ImportRowError] = field(default_factory=list)
    transactions: list[CurrencyTransaction] = field(default_factory=list)

    @property
    def is_committed(self) -> bool:
        return self.status == STATUS_COMMITTED


@dataclass
class _ValidatedRow:
    row_number: int
    transaction_date: date
    transaction_type: CurrencyTransactionType
    foreign_amount: Decimal
    home_amount: Decimal | None
    exchange_rate: Decimal | None
    notes: str | None


class _Diagnostics:
    """Collects errors, dropping exact duplicates."""

    def __init__(self) -> None:
        self.errors: list[ImportRowError] = []
        self._seen: set[tuple[int, str, str, str]] = set()

    def add(
            self,
            row_number: int,
            field_name: str,
            invalid_value: str | None,
            error_code: str,
            message: str,
            correction_guidance: str,
    ) -> None:
        value = invalid_value or ""
        key = (row_number, field_name.lower(), error_code, value)
        if key in self._seen:
            return
        self._seen.add(key)
        self.errors.append(ImportRowError(
            row_number=row_number,
            field_name=field_name,
            invalid_value=value,
            error_code=error_code,
            message=message,
            correction_guidance=correction_guidance,
        ))

    def __len__(self) -> int:
        return len(self.errors)


# =============================================================================
# SERVICE
# =============================================================================

class CurrencyTransactionImportService:
    """
    Imports currency transactions from CSV into one ledger.

    Example:
        service = CurrencyTransactionImportService()

        with open("usd-ledger.csv", "rb") as f:
            result = service.import_csv(f, ledger, repository)

        if not result.is_committed:
            for error in result.errors:
                print(error.row_number, error.field_name, error.message)
    """

    def __init__(
            self,
            home_currency: str | None = None,
            max_rows: int | None = None,
            reader: CsvRowReader | None = None,
    ) -> None:
        self.home_currency = (home_currency or settings.home_currency).upper()
        self.max_rows = max_rows if max_rows is not None else settings.import_max_rows
        self.notes_max_length = settings.import_notes_max_length
        self.reader = reader or CsvRowReader()

    def import_csv(
            self,
            file: BinaryIO | bytes | str,
            ledger: CurrencyLedger,
            repository: CurrencyTransactionRepository,
            today: date | None = None,
    ) -> ImportResult:
        """
        Validate and import a CSV file into a ledger.

        Args:
            file: CSV content (binary file, bytes or text)
            ledger: Target ledger
            repository: Persistence seam (add_all / commit / rollback)
            today: Reference date for the future-date check (default today)

        Returns:
            ImportResult, committed or rejected with full diagnostics

        Raises:
            CurrencyImportError: If the repository fails; the batch is rolled back
        """
        with correlation_scope():
            today = today or date.today()
            diagnostics = _Diagnostics()
            total_rows, rows = self._parse_and_validate(file, ledger, today, diagnostics)

            if diagnostics:
                result = self._rejected(total_rows, diagnostics.errors)
                logger.warning(
                    f"CSV import rejected for {ledger.currency_code} ledger {ledger.id}: "
                    f"{result.summary.error_count} errors in {total_rows} rows"
                )
                return result

            transactions = self._commit(rows, ledger, repository)

            logger.info(
                f"CSV import committed for {ledger.currency_code} ledger {ledger.id}: "
                f"{len(transactions)} rows"
            )
            return ImportResult(
                status=STATUS_COMMITTED,
                summary=ImportSummary(
                    total_rows=total_rows,
                    inserted_rows=len(transactions),
                    rejected_rows=0,
                    error_count=None,
                ),
                transactions=transactions,
            )

    # =========================================================================
    # PARSING AND VALIDATION
    # =========================================================================

    def _parse_and_validate(
            self,
            file: BinaryIO | bytes | str,
            ledger: CurrencyLedger,
            today: date,
            diagnostics: _Diagnostics,
    ) -> tuple[int, list[_ValidatedRow]]:
        try:
            document = self.reader.read(file)
        except (UnicodeDecodeError, csv.Error) as e:
            logger.warning(f"Could not read CSV content: {e}")
            diagnostics.add(
                0, FIELD_FILE, "", CSV_UNREADABLE,
                "CSV content could not be read",
                "Upload a UTF-8 encoded CSV file.",
            )
            return 0, []

        if document.is_empty:
            diagnostics.add(
                0, FIELD_FILE, "", CSV_EMPTY,
                "CSV content is empty",
                "Upload a CSV file with a header row and data rows.",
            )
            return 0, []

        total_rows = len(document.rows)

        missing = self.reader.missing_required_fields(document)
        for field_name in missing:
            diagnostics.add(
                0, FIELD_FILE, field_name, CSV_HEADER_MISSING,
                f"CSV header is missing required column: {field_name}",
                f"Add a '{field_name}' column to the header row.",
            )
        if missing:
            return total_rows, []

        if total_rows == 0:
            diagnostics.add(
                0, FIELD_FILE, "", CSV_NO_DATA_ROWS,
                "CSV has no data rows to import",
                "Provide at least one transaction row.",
            )
            return 0, []

        if total_rows > self.max_rows:
            diagnostics.add(
                0, FIELD_FILE, str(total_rows), CSV_ROW_LIMIT_EXCEEDED,
                f"CSV exceeds the row limit ({self.max_rows} rows)",
                f"Split the file and import at most {self.max_rows} rows at a time.",
            )
            return total_rows, []

        rows = []
        for record in document.rows:
            row = self._validate_row(record, document, ledger, today, diagnostics)
            if row is not None:
                rows.append(row)

        return total_rows, rows

    def _validate_row(
            self,
            record: CsvRecord,
            document: CsvDocument,
            ledger: CurrencyLedger,
            today: date,
            diagnostics: _Diagnostics,
    ) -> _ValidatedRow | None:
        row_number = record.row_number
        errors_before = len(diagnostics)

        raw_date = document.value(record, FIELD_TRANSACTION_DATE)
        raw_type = document.value(record, FIELD_TRANSACTION_TYPE)
        raw_foreign = document.value(record, FIELD_FOREIGN_AMOUNT)
        raw_home = document.value(record, FIELD_HOME_AMOUNT)
        raw_rate = document.value(record, FIELD_EXCHANGE_RATE)
        raw_notes = document.value(record, FIELD_NOTES)

        # Date
        transaction_date = None
        if not raw_date:
            diagnostics.add(
                row_number, FIELD_TRANSACTION_DATE, raw_date, policy.REQUIRED_FIELD_MISSING,
                "Transaction date is required",
                "Enter a transaction date, e.g. 2026-02-13.",
            )
        else:
            parsed_date = parse_date(raw_date)
            if parsed_date is None:
                diagnostics.add(
                    row_number, FIELD_TRANSACTION_DATE, raw_date, INVALID_DATE_FORMAT,
                    "Transaction date format is invalid",
                    "Use a supported date format (yyyy-MM-dd recommended).",
                )
            elif parsed_date > today + timedelta(days=IMPORT_MAX_FUTURE_DAYS):
                diagnostics.add(
                    row_number, FIELD_TRANSACTION_DATE, raw_date, VALUE_OUT_OF_RANGE,
                    "Transaction date cannot be in the future",
                    "Enter today or an earlier date.",
                )
            else:
                transaction_date = parsed_date

        # Type
        transaction_type = None
        if not raw_type:
            diagnostics.add(
                row_number, FIELD_TRANSACTION_TYPE, raw_type, policy.REQUIRED_FIELD_MISSING,
                "Transaction type is required",
                "Enter a valid transactionType.",
            )
        else:
            try:
                transaction_type = CurrencyTransactionType(raw_type)
            except ValueError:
                diagnostics.add(
                    row_number, FIELD_TRANSACTION_TYPE, raw_type, INVALID_ENUM_VALUE,
                    "Transaction type is not valid",
                    "Use one of: " + ", ".join(t.value for t in CurrencyTransactionType) + ".",
                )

        # Amounts
        foreign_amount = None
        if not raw_foreign:
            diagnostics.add(
                row_number, FIELD_FOREIGN_AMOUNT, raw_foreign, policy.REQUIRED_FIELD_MISSING,
                "Foreign amount is required",
                "Enter a foreignAmount greater than 0.",
            )
        else:
            foreign_amount = self._parse_positive(
                row_number, FIELD_FOREIGN_AMOUNT, raw_foreign, diagnostics
            )

        home_amount = None
        if raw_home:
            home_amount = self._parse_positive(row_number, FIELD_HOME_AMOUNT, raw_home, diagnostics)

        exchange_rate = None
        if raw_rate:
            exchange_rate = self._parse_positive(row_number, FIELD_EXCHANGE_RATE, raw_rate, diagnostics)

        # Notes
        notes = raw_notes or None
        if notes is not None and len(notes) > self.notes_max_length:
            diagnostics.add(
                row_number, FIELD_NOTES, raw_notes, FIELD_LENGTH_EXCEEDED,
                f"Notes cannot exceed {self.notes_max_length} characters",
                f"Shorten notes to at most {self.notes_max_length} characters.",
            )

        # Ledger policy, shared with manual entry
        if transaction_type is not None:
            result = policy.validate(
                ledger.currency_code,
                transaction_type,
                policy.AmountPresence(has_amount=bool(raw_foreign), has_target_amount=bool(raw_home)),
                self.home_currency,
            )
            for diagnostic in result.diagnostics:
                field_name = _POLICY_FIELD_MAP.get(diagnostic.field_name, diagnostic.field_name)
                invalid_value = diagnostic.invalid_value or {
                    FIELD_TRANSACTION_TYPE: raw_type,
                    FIELD_FOREIGN_AMOUNT: raw_foreign,
                    FIELD_HOME_AMOUNT: raw_home,
                }.get(field_name, "")
                diagnostics.add(
                    row_number, field_name, invalid_value, diagnostic.error_code,
                    diagnostic.message, diagnostic.correction_guidance,
                )

            if transaction_type.is_exchange and not raw_rate:
                diagnostics.add(
                    row_number, FIELD_EXCHANGE_RATE, raw_rate, policy.REQUIRED_FIELD_MISSING,
                    "This transaction type requires exchangeRate",
                    "Enter an exchangeRate greater than 0.",
                )

        if (
                len(diagnostics) > errors_before
                or transaction_date is None
                or transaction_type is None
                or foreign_amount is None
        ):
            return None

        return _ValidatedRow(
            row_number=row_number,
            transaction_date=transaction_date,
            transaction_type=transaction_type,
            foreign_amount=foreign_amount,
            home_amount=home_amount,
            exchange_rate=exchange_rate,
            notes=notes,
        )

    @staticmethod
    def _parse_positive(
            row_number: int,
            field_name: str,
            raw_value: str,
            diagnostics: _Diagnostics,
    ) -> Decimal | None:
        value = parse_decimal(raw_value)
        if value is None:
            diagnostics.add(
                row_number, field_name, raw_value, INVALID_NUMBER_FORMAT,
                f"{field_name} is not a valid number",
                "Enter a plain decimal number, e.g. 1234.56.",
            )
            return None
        if value <= ZERO:
            diagnostics.add(
                row_number, field_name, raw_value, VALUE_OUT_OF_RANGE,
                f"{field_name} must be greater than 0",
                f"Enter a {field_name} greater than 0.",
            )
            return None
        return value

    # =========================================================================
    # RESULTS AND PERSISTENCE
    # =========================================================================

    @staticmethod
    def _rejected(total_rows: int, errors: list[ImportRowError]) -> ImportResult:
        sorted_errors = sorted(errors, key=lambda e: (e.row_number, e.field_name.lower()))
        return ImportResult(
            status=STATUS_REJECTED,
            summary=ImportSummary(
                total_rows=total_rows,
                inserted_rows=0,
                rejected_rows=total_rows,
                error_count=len(sorted_errors),
            ),
            errors=sorted_errors,
        )

    def _commit(
            self,
            rows: list[_ValidatedRow],
            ledger: CurrencyLedger,
            repository: CurrencyTransactionRepository,
    ) -> list[CurrencyTransaction]:
        home_ledger = ledger.currency_code == self.home_currency

        try:
            transactions = [self._build_transaction(row, ledger, home_ledger) for row in rows]
            repository.add_all(transactions)
            repository.commit()
        except Exception as e:
            logger.error(
                f"CSV import failed for ledger {ledger.id}, rolling back: {e}",
                exc_info=True,
            )
            repository.rollback()
            raise CurrencyImportError(f"Import could not be committed: {e}") from e

        return transactions

    @staticmethod
    def _build_transaction(
            row: _ValidatedRow,
            ledger: CurrencyLedger,
            home_ledger: bool,
    ) -> CurrencyTransaction:
        if home_ledger:
            home_amount, exchange_rate = row.foreign_amount, ONE
        else:
            home_amount, exchange_rate = row.home_amount, row.exchange_rate

        return CurrencyTransaction(
            ledger_id=ledger.id,
            transaction_date=row.transaction_date,
            transaction_type=row.transaction_type,
            foreign_amount=row.foreign_amount,
            home_amount=home_amount,
            exchange_rate=exchange_rate,
            notes=row.notes,
        )


# =============================================================================
# VALUE PARSING
# =============================================================================

def parse_date(raw_value: str) -> date | None:
    """Parse a CSV date using the supported formats, then ISO 8601."""
    value = raw_value.strip()
    for fmt in IMPORT_DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue

    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def parse_decimal(raw_value: str) -> Decimal | None:
    """Parse a finite decimal, allowing thousands separators."""
    try:
        value = Decimal(raw_value.strip().replace(",", ""))
    except InvalidOperation:
        return None
    return value if value.is_finite() else None
