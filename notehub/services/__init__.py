# Services package init
"""
NoteHub Backend: Services Layer
================================

What:  State and business rules, sitting between routes (HTTP) and storage.

Service Inventory:
    - NoteStore:       CRUD over the notes table (SQL backend)
    - NumberRegistry:  Shared in-memory int32 sequence behind a ReadWriteLock
    - PoemReader:      YAML document loader for GET /poem

Instances live on `app.state` (created by the app factory) so every request
in a process shares the same registry and nothing reads global singletons.
"""
