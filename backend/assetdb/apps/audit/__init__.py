"""
Audit app.

Append-only change log written by every mutating service.
"""
