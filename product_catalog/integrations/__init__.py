"""
Integrations layer.
This package contains all code used to communicate with external systems:
- the RData service (company roster used to scope product refreshes)
- the SAP product feed (rows posted to the staging cache)

Key rule:
- Services MUST NOT call external APIs directly.
- They call integration clients (under product_catalog/integrations/clients).
- MOCK clients are used during development; REAL_HTTP clients once endpoints are configured.

Switching implementations:
- The selection of mock vs real clients happens in ONE place (product_catalog/api/main.py).
"""

from .contracts.companies import Company, CompanyRosterClient, parse_company_roster
from .contracts.products import StagedSapProduct

__all__ = ["Company", "CompanyRosterClient", "StagedSapProduct", "parse_company_roster"]
