# Task board: sections, ordered tasks, optimistic persistence, session refresh
#
# Components:
#   schema.py      - Data model (Section, Task, Board) and persistence blob codec
#   errors.py      - Exception hierarchy (ValidationError, NotFound, OutOfRange, ...)
#   board.py       - Pure board transitions (the only legal mutation surface)
#   search.py      - Read-only task filtering by query
#   drag.py        - Drag-and-drop gesture -> single board command
#   mutations.py   - Request/success/failure lifecycle around persistence
#   store.py       - Persistence backends (SQLite, in-memory)
#   session.py     - Access token expiry scheduler
#   categorizer.py - Heuristic section classification and board stats
#   controller.py  - Dispatcher exposing the UI-facing command surface
#   config.py      - YAML configuration
#   server.py      - Flask JSON API
