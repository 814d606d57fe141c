"""Domain layer (pure logic).

- Keep game rules and plot state calculations here.
- Avoid I/O: no DB sessions, no HTTP/FastAPI.
- Time is never read directly; a Clock is passed in by the caller.
"""
