"""
Application Layer.

This package contains:
- ports/: Interfaces the core needs (remote gateway, credentials, rendering)
- events: Refresh signal bus
- local_store: In-memory entity cache and mutation operations
- exceptions: Gateway and lookup errors
"""
