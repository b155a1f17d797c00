# investment_tracker/services/imports/csv_reader.py
"""
CSV reader for currency transaction imports.

Splits an uploaded file into a header and numbered data rows, and maps
header names onto internal fields.

Expected CSV Format:
    transactionDate,transactionType,foreignAmount,homeAmount,exchangeRate,notes
    2026-01-15,ExchangeBuy,1000,31500,31.5,January purchase

Column Mapping:
    CSV Column (any alias)          -> Internal Field
    ------------------------------------------------------
    transactionDate / date / 日期    -> transactionDate   (required)
    transactionType / type / 類型    -> transactionType   (required)
    foreignAmount / amount / 金額    -> foreignAmount     (required)
    homeAmount / targetAmount / 台幣 -> homeAmount
    exchangeRate / rate / 匯率       -> exchangeRate
    notes / memo / 備註              -> notes

Header matching ignores case, surrounding whitespace, underscores, hyphens
and spaces. Row numbers are physical CSV records: the header is row 1 in a
well-formed file, so data rows start at 2. Blank records and records whose
first cell starts with ``#`` are skipped without consuming a data row.
"""

import csv
import io
import logging
from dataclasses import dataclass, field
from typing import BinaryIO

logger = logging.getLogger(__name__)


# =============================================================================
# FIELD NAMES
# =============================================================================

FIELD_FILE = "file"
FIELD_TRANSACTION_DATE = "transactionDate"
FIELD_TRANSACTION_TYPE = "transactionType"
FIELD_FOREIGN_AMOUNT = "foreignAmount"
FIELD_HOME_AMOUNT = "homeAmount"
FIELD_EXCHANGE_RATE = "exchangeRate"
FIELD_NOTES = "notes"


def normalize_header(value: str | None) -> str:
    """Lower-case a header and drop whitespace, underscores and hyphens."""
    if not value or not value.strip():
        return ""
    return (
        value.strip()
        .replace("_", "")
        .replace("-", "")
        .replace(" ", "")
        .lower()
    )


# =============================================================================
# DATA TYPES
# =============================================================================

@dataclass
class CsvRecord:
    """One physical CSV record with its 1-based row number."""
    row_number: int
    cells: list[str]

    @property
    def is_blank(self) -> bool:
        return all(not cell.strip() for cell in self.cells)

    @property
    def is_comment(self) -> bool:
        return bool(self.cells) and self.cells[0].lstrip().startswith("#")


@dataclass
class CsvDocument:
    """
    A decoded CSV file.

    Attributes:
        header: Header record, None when the file has no content records
        rows: Data records after the header (blank and comment rows removed)
        column_map: Internal field -> column index, for every matched field
    """
    header: CsvRecord | None = None
    rows: list[CsvRecord] = field(default_factory=list)
    column_map: dict[str, int] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return self.header is None

    def value(self, record: CsvRecord, field_name: str) -> str:
        """Stripped cell value for a field, empty when the column is absent."""
        index = self.column_map.get(field_name)
        if index is None or index >= len(record.cells):
            return ""
        return record.cells[index].strip()


class CsvRowReader:
    """
    Reads currency transaction CSV files.

    Example:
        reader = CsvRowReader()

        with open("usd-ledger.csv", "rb") as f:
            document = reader.read(f)

        missing = reader.missing_required_fields(document)
    """

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    # Internal field name -> accepted header names
    COLUMN_MAPPING: dict[str, list[str]] = {
        FIELD_TRANSACTION_DATE: ["transactionDate", "transaction_date", "date", "交易日期", "日期"],
        FIELD_TRANSACTION_TYPE: [
            "transactionType", "transaction_type", "type", "transaction", "交易類型", "類型", "種類",
        ],
        FIELD_FOREIGN_AMOUNT: ["foreignAmount", "foreign_amount", "amount", "外幣金額", "外幣", "金額"],
        FIELD_HOME_AMOUNT: [
            "homeAmount", "home_amount", "targetAmount", "target_amount", "台幣金額", "台幣", "twdAmount",
        ],
        FIELD_EXCHANGE_RATE: ["exchangeRate", "exchange_rate", "rate", "匯率"],
        FIELD_NOTES: ["notes", "memo", "description", "備註", "說明"],
    }

    # Fields whose column must exist in the header
    REQUIRED_FIELDS: tuple[str, ...] = (
        FIELD_TRANSACTION_DATE,
        FIELD_TRANSACTION_TYPE,
        FIELD_FOREIGN_AMOUNT,
    )

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def read(self, file: BinaryIO | bytes | str) -> CsvDocument:
        """
        Decode and split a CSV file.

        Args:
            file: Binary file object, raw bytes, or already decoded text

        Returns:
            CsvDocument (empty when the file holds no content records)

        Raises:
            UnicodeDecodeError: If the content is not valid UTF-8
            csv.Error: If the content is not parseable CSV
        """
        content = self._read_content(file)
        records = self._split_records(content)

        document = CsvDocument()
        content_records = [r for r in records if not r.is_blank and not r.is_comment]
        if not content_records:
            return document

        document.header = content_records[0]
        document.rows = content_records[1:]
        document.column_map = self._build_column_map(document.header.cells)

        logger.debug(
            f"Read CSV: {len(document.rows)} data rows, "
            f"mapped columns={sorted(document.column_map)}"
        )
        return document

    def missing_required_fields(self, document: CsvDocument) -> list[str]:
        """Required fields with no matching header column."""
        return [name for name in self.REQUIRED_FIELDS if name not in document.column_map]

    # =========================================================================
    # PRIVATE METHODS
    # =========================================================================

    @staticmethod
    def _read_content(file: BinaryIO | bytes | str) -> str:
        raw = file if isinstance(file, (bytes, str)) else file.read()
        if isinstance(raw, bytes):
            # utf-8-sig strips a leading BOM when present
            raw = raw.decode("utf-8-sig")
        return raw.lstrip("\ufeff")

    @staticmethod
    def _split_records(content: str) -> list[CsvRecord]:
        if not content.strip():
            return []

        reader = csv.reader(io.StringIO(content, newline=""))
        return [
            CsvRecord(row_number=row_number, cells=cells)
            for row_number, cells in enumerate(reader, start=1)
        ]

    def _build_column_map(self, headers: list[str]) -> dict[str, int]:
        normalized = [normalize_header(h) for h in headers]
        column_map: dict[str, int] = {}

        for internal_field, aliases in self.COLUMN_MAPPING.items():
            alias_set = {normalize_header(alias) for alias in aliases}
            for index, header in enumerate(normalized):
                if header and header in alias_set:
                    column_map[internal_field] = index
                    break

        return column_map
