"""
Utility functions module.

Time Semantics:
- Provider timestamps arrive as unix seconds and are kept as UTC datetimes
- Display formatting converts to the local timezone at render time only
"""
