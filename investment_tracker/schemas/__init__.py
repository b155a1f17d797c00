# investment_tracker/schemas/__init__.py
"""
Pydantic schemas for engine responses.

This package contains the response formats exposed to callers:
- imports: Currency transaction CSV import results and diagnostics

Usage:
    from investment_tracker.schemas import ImportResultResponse

    response = ImportResultResponse.from_result(result)
    payload = response.model_dump()
"""

from investment_tracker.schemas.imports import (
    ImportErrorResponse,
    ImportResultResponse,
    ImportSummaryResponse,
)

__all__ = [
    # Imports
    "ImportErrorResponse",
    "ImportResultResponse",
    "ImportSummaryResponse",
]
