"""Read-only inventory statistics."""
