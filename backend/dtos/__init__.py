"""
Data Transfer Objects (DTOs) Layer

Pydantic schemas for the HTTP boundary of the storefront API. The ORM models
never leave the repositories; endpoints accept request DTOs and return
response DTOs built from the stored rows.

Structure:
- request/: product, auth and activity payloads
- response/: products, image descriptors, auth tokens, activity records
"""
