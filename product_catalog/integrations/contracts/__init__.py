"""
Contracts (data models).

Request/response shapes for external integrations:
- company roster envelope returned by RData
- SAP product rows posted for staging

Both mock and real clients return these contracts, so services never
handle ad-hoc dicts from the wire.
"""
