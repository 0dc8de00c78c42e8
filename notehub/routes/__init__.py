# Routes package init
"""
NoteHub Backend: API Routes Package
====================================

Route Inventory:
    - notes.py:      /api/notes, /api/notes/{id}      (note store CRUD)
    - numbers.py:    GET/POST /numbers                 (shared registry)
    - health.py:     GET /healthcheck                  (database probe)
    - greetings.py:  /, /ping, /greet, /kingkong/king  (static text)
    - documents.py:  GET /poem                         (YAML document)

Routes stay thin: extract and validate input, call a service, shape the
response. Exactly one handler exists per (method, path).
"""
