"""Borrow / return of individual serials."""
