# Middleware package init
"""
Employee Dashboard Backend — Middleware Package
================================================

Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → [Bearer Token] → Route

    1. Request ID: correlation ID for every log line and error body
    2. Logging: method, path, status, duration, tagged with the request ID
    3. GZip: compresses larger list pages
    4. CORS: answers preflight before the gate can reject it
    5. Bearer Token: 401 for /employees* without the shared secret

Starlette runs middleware in reverse order of registration; see create_app().
"""
