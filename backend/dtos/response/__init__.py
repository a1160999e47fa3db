"""
Response DTOs

Outgoing bodies. Field names follow the public JSON contract
(e.g. `isPrimary`, `eventType`), which may differ from the column names.
"""
