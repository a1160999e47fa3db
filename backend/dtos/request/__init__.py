"""
Request DTOs

Incoming payloads for products, signup/login and activity events.
Validation failures are rendered as 400 {"error": ...}.
"""
