"""
Local Company Roster Client (Mock/Local).

Purpose:
- Development-time stand-in for the RData companies endpoint.
- Returns a fixed roster (or one passed in) without network calls.

Swap:
Replace with clients/real_http/rdata_companies.py by setting INTEGRATIONS_MODE=real
and RDATA_BASE_URL.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from product_catalog.integrations.contracts.companies import Company, CompanyRosterClient, parse_company_roster

DEFAULT_ROSTER: Dict[str, Any] = {
    "status": "00",
    "message": "Companies successfully retrieved",
    "data": {
        "data": {
            "companies": [
                {"code": "1000", "name": "Main Brewery"},
                {"code": "2000", "name": "Soft Drinks Division"},
            ]
        }
    },
}


class LocalCompanyClient(CompanyRosterClient):
    def __init__(self, roster: Optional[Dict[str, Any]] = None) -> None:
        self._roster = roster or DEFAULT_ROSTER
        self.calls = 0

    async def list_companies(self) -> List[Company]:
        self.calls += 1
        return parse_company_roster(self._roster)
