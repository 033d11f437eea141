"""Core segwit savings components."""

from segwit_savings.core.classifier import classify_input
from segwit_savings.core.savings import compute_transaction_savings
from segwit_savings.core.aggregator import new_block_summary, fold, finalize
from segwit_savings.core.paginator import for_each_transaction_in_block
from segwit_savings.core.scanner import BlockRangeScanner, ScanResult
from segwit_savings.core.esplora_client import EsploraClient

__all__ = [
    "classify_input",
    "compute_transaction_savings",
    "new_block_summary",
    "fold",
    "finalize",
    "for_each_transaction_in_block",
    "BlockRangeScanner",
    "ScanResult",
    "EsploraClient",
]
