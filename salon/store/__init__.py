"""Data access layer over the relational store."""

from salon.store.queries import RecordNotFoundError, to_record

__all__ = [
    "RecordNotFoundError",
    "to_record",
]
