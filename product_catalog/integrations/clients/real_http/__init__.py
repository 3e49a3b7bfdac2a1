"""
Real HTTP integration clients.

Must implement the same interfaces as the mock clients and return data shaped
according to product_catalog/integrations/contracts/*.
"""
