"""
Company roster contracts.

The RData service answers the companies endpoint with an API envelope that
wraps a paged-data envelope that wraps the roster:

    {"status": ..., "message": ..., "data": {"data": {"companies": [...]}}}

Only the company code matters to reconciliation; other fields are kept in
`extra` so nothing is lost when logging or debugging a refresh.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from product_catalog.error_handler import UpstreamServiceError


class Company(BaseModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    code: str
    name: Optional[str] = None


class CompanyList(BaseModel):
    companies: List[Company] = Field(default_factory=list)


class _PagedData(BaseModel):
    data: CompanyList = Field(default_factory=CompanyList)


class CompanyListEnvelope(BaseModel):
    status: Optional[Any] = None
    message: Optional[str] = None
    data: _PagedData = Field(default_factory=_PagedData)


class CompanyRosterClient(ABC):
    """Every company roster source (mock or RData) implements this interface."""

    @abstractmethod
    async def list_companies(self) -> List[Company]:
        """Return the current roster; raise UpstreamServiceError when the source fails."""


def parse_company_roster(raw: Dict[str, Any]) -> List[Company]:
    try:
        envelope = CompanyListEnvelope(**(raw or {}))
    except (TypeError, ValidationError) as exc:
        raise UpstreamServiceError(f"Company roster response validation failed: {exc}", payload={"raw": raw}) from exc
    return envelope.data.data.companies
