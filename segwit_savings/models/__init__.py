"""Data models and configuration."""

from segwit_savings.models.config import ScannerConfig, load_config
from segwit_savings.models.blockchain import BlockSummary, TransactionSavings, InputClassification

__all__ = [
    "ScannerConfig",
    "load_config",
    "BlockSummary",
    "TransactionSavings",
    "InputClassification",
]
