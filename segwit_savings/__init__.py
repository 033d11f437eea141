"""
Segwit Savings Scanner

Walks Bitcoin block history backward and measures how much block weight,
size and fees would have been saved if every legacy input used native segwit.
"""

__version__ = "1.0.0"
__description__ = "Per-block native segwit savings estimator backed by Esplora and Airtable"

from segwit_savings.core.scanner import BlockRangeScanner
from segwit_savings.core.esplora_client import EsploraClient
from segwit_savings.database.airtable import AirtableSink
from segwit_savings.models.config import ScannerConfig

__all__ = [
    "BlockRangeScanner",
    "EsploraClient",
    "AirtableSink",
    "ScannerConfig",
]
