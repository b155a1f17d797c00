# tests/schemas/test_import_schemas.py
"""
Tests for import response schemas.

Test Coverage:
- Building responses from service results
- Serialization of committed and rejected batches
- Field validation
"""

import pytest
from pydantic import ValidationError

from investment_tracker.schemas import (
    ImportErrorResponse,
    ImportResultResponse,
    ImportSummaryResponse,
)
from investment_tracker.services.imports import (
    STATUS_COMMITTED,
    STATUS_REJECTED,
    ImportResult,
    ImportRowError,
    ImportSummary,
)


def make_error(row_number: int = 2, field_name: str = "foreignAmount") -> ImportRowError:
    return ImportRowError(
        row_number=row_number,
        field_name=field_name,
        invalid_value="-5",
        error_code="VALUE_OUT_OF_RANGE",
        message="foreignAmount must be greater than 0",
        correction_guidance="Enter a foreignAmount greater than 0.",
    )


class TestImportResultResponse:
    """Tests for ImportResultResponse.from_result."""

    def test_rejected_result(self):
        result = ImportResult(
            status=STATUS_REJECTED,
            summary=ImportSummary(total_rows=4, inserted_rows=0, rejected_rows=4, error_count=1),
            errors=[make_error()],
        )

        response = ImportResultResponse.from_result(result)

        assert response.status == "rejected"
        assert response.summary.rejected_rows == 4
        assert response.summary.error_count == 1
        assert response.errors[0].field_name == "foreignAmount"
        assert response.errors[0].invalid_value == "-5"

    def test_committed_result_serializes(self):
        result = ImportResult(
            status=STATUS_COMMITTED,
            summary=ImportSummary(total_rows=2, inserted_rows=2, rejected_rows=0),
        )

        data = ImportResultResponse.from_result(result).model_dump()

        assert data == {
            "status": "committed",
            "summary": {
                "total_rows": 2,
                "inserted_rows": 2,
                "rejected_rows": 0,
                "error_count": None,
            },
            "errors": [],
        }

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            ImportResultResponse(
                status="partial",
                summary=ImportSummaryResponse(total_rows=1, inserted_rows=0, rejected_rows=1),
            )


class TestImportErrorResponse:
    """Tests for ImportErrorResponse."""

    def test_file_level_error(self):
        response = ImportErrorResponse.from_error(make_error(row_number=0, field_name="file"))

        assert response.row_number == 0
        assert response.field_name == "file"

    def test_negative_row_number_rejected(self):
        with pytest.raises(ValidationError):
            ImportErrorResponse(
                row_number=-1,
                field_name="file",
                error_code="CSV_EMPTY",
                message="CSV content is empty",
                correction_guidance="Upload a file.",
            )


class TestImportSummaryResponse:
    """Tests for ImportSummaryResponse."""

    def test_negative_counts_rejected(self):
        with pytest.raises(ValidationError):
            ImportSummaryResponse(total_rows=-1, inserted_rows=0, rejected_rows=0)
