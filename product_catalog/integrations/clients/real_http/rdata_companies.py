"""
RData Company Roster HTTP Client.

Purpose:
- Fetches the company roster from the RData microservice
- Normalizes the envelope into the Company contract

Usage:
- Wired in product_catalog/api/main.py when INTEGRATIONS_MODE=real
- Called by the reconciliation engine at the start of every refresh

Important:
- Non-success status codes, transport errors and malformed bodies all raise
  UpstreamServiceError, before any repository write happens.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

import httpx

from product_catalog.error_handler import UpstreamServiceError
from product_catalog.integrations.contracts.companies import Company, CompanyRosterClient, parse_company_roster
from product_catalog.utils.config_loader import UpstreamConfig

logger = logging.getLogger(__name__)


class RDataCompanyClient(CompanyRosterClient):
    def __init__(self, config: UpstreamConfig, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        if not config.base_url:
            raise ValueError("RData base URL is not configured.")
        self.config = config
        self._transport = transport

    async def list_companies(self) -> List[Company]:
        headers: Dict[str, str] = {"Accept": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"

        url = self.config.companies_url
        try:
            logger.info("Fetching company roster from %s", url)
            async with httpx.AsyncClient(timeout=self.config.timeout_seconds, transport=self._transport) as client:
                response = await client.get(url, headers=headers)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error("HTTP error from RData companies API: %s %s", e.response.status_code, e.response.text)
            raise UpstreamServiceError(
                f"Company roster request failed with status {e.response.status_code}",
                payload={"status_code": e.response.status_code},
            ) from e
        except httpx.RequestError as e:
            logger.error("Request error connecting to RData companies API: %s", e)
            raise UpstreamServiceError(f"Company roster request failed: {e}") from e
        except ValueError as e:
            logger.error("RData companies API returned a non-JSON body: %s", e)
            raise UpstreamServiceError("Company roster response was not valid JSON") from e

        companies = parse_company_roster(data)
        logger.info("Received %d companies from RData", len(companies))
        return companies
