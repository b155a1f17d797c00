# investment_tracker/schemas/imports.py
"""
Pydantic schemas for currency transaction CSV imports.

These schemas define the response format returned to callers of
CurrencyTransactionImportService. They carry no validation logic of
their own: every diagnostic is produced by the service.
"""

from typing import Literal

from pydantic import BaseModel, Field

from investment_tracker.services.imports.service import (
    ImportResult,
    ImportRowError,
    ImportSummary,
)


# =============================================================================
# ERROR SCHEMAS
# =============================================================================

class ImportErrorResponse(BaseModel):
    """
    A single import diagnostic.

    Every invalid row produces one entry per problem, so a user can fix
    the whole file in one pass.
    """

    row_number: int = Field(
        ...,
        ge=0,
        description="CSV row number, header is row 1 (0 for file-level errors)"
    )
    field_name: str = Field(
        ...,
        description="CSV field that failed validation, or 'file'"
    )
    invalid_value: str = Field(
        default="",
        description="Raw value that was rejected"
    )
    error_code: str = Field(
        ...,
        description="Stable error code for programmatic handling",
        examples=["INVALID_DATE_FORMAT", "INVALID_TRANSACTION_TYPE_FOR_LEDGER"]
    )
    message: str = Field(
        ...,
        description="Human-readable error description"
    )
    correction_guidance: str = Field(
        ...,
        description="How to correct the value"
    )

    @classmethod
    def from_error(cls, error: ImportRowError) -> "ImportErrorResponse":
        return cls(
            row_number=error.row_number,
            field_name=error.field_name,
            invalid_value=error.invalid_value,
            error_code=error.error_code,
            message=error.message,
            correction_guidance=error.correction_guidance,
        )


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class ImportSummaryResponse(BaseModel):
    """Row counts for an import batch."""

    total_rows: int = Field(
        ...,
        ge=0,
        description="Number of data rows in the file"
    )
    inserted_rows: int = Field(
        ...,
        ge=0,
        description="Number of transactions written (0 when rejected)"
    )
    rejected_rows: int = Field(
        ...,
        ge=0,
        description="Number of rows not written (all rows when rejected)"
    )
    error_count: int | None = Field(
        default=None,
        description="Number of diagnostics (None when committed)"
    )

    @classmethod
    def from_summary(cls, summary: ImportSummary) -> "ImportSummaryResponse":
        return cls(
            total_rows=summary.total_rows,
            inserted_rows=summary.inserted_rows,
            rejected_rows=summary.rejected_rows,
            error_count=summary.error_count,
        )


class ImportResultResponse(BaseModel):
    """
    Response schema for a currency transaction import.

    A batch is either fully committed or fully rejected.
    """

    status: Literal["committed", "rejected"] = Field(
        ...,
        description="'committed' if every row was written, 'rejected' otherwise"
    )
    summary: ImportSummaryResponse = Field(
        ...,
        description="Row counts"
    )
    errors: list[ImportErrorResponse] = Field(
        default_factory=list,
        description="Every diagnostic, sorted by row number then field name"
    )

    @classmethod
    def from_result(cls, result: ImportResult) -> "ImportResultResponse":
        """Build the response from a service ImportResult."""
        return cls(
            status=result.status,
            summary=ImportSummaryResponse.from_summary(result.summary),
            errors=[ImportErrorResponse.from_error(e) for e in result.errors],
        )
