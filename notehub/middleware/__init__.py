# Middleware package init
"""
NoteHub Backend: Middleware Package
====================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    1. Request ID first, so every later log line carries the correlation ID
    2. Logging measures everything below it, including error handlers
    3. CORS is FastAPI's CORSMiddleware (handles preflight)
"""
