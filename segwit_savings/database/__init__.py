"""Persistence layer for block savings summaries."""

from segwit_savings.database.airtable import AirtableSink

__all__ = [
    "AirtableSink",
]
