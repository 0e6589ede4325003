"""Domain layer (pure logic).

- Keep squad-building rules and calculations here.
- Avoid I/O: no DB sessions, no HTTP/FastAPI.
- Prefer deterministic functions; card details are passed in as arguments.
"""
