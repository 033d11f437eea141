"""Block-level aggregation of transaction savings."""

from dataclasses import replace
from typing import Dict, Any, Optional

from segwit_savings.errors import InvariantViolationError
from segwit_savings.models.blockchain import BlockSummary, TransactionSavings
from segwit_savings.utils.bitcoin import is_number


def new_block_summary(block: Dict[str, Any], fee: int) -> BlockSummary:
    """Start a summary from the block's real weight, size and fee proxy."""
    return BlockSummary(
        time=block["timestamp"],
        height=block["height"],
        fee=fee,
        real_weight=block["weight"],
        real_size=block["size"],
        new_weight=block["weight"],
        new_size=block["size"],
        saved=0.0,
    )


def fold(summary: BlockSummary, tx_savings: TransactionSavings,
         tx_fee: Optional[Any]) -> BlockSummary:
    """
    Return ``summary`` updated with one transaction's savings.

    Transactions without a numeric fee (coinbase) or with an undefined gain
    ratio add nothing to ``saved``.
    """
    saved = summary.saved
    if is_number(tx_fee) and not tx_savings.is_degenerate:
        saved += tx_fee * tx_savings.bech32_gain_ratio

    return replace(
        summary,
        new_weight=summary.new_weight - tx_savings.weight_loss,
        new_size=summary.new_size - tx_savings.size_loss,
        saved=saved,
    )


def finalize(summary: BlockSummary) -> BlockSummary:
    """Check the summary never exceeds the real block before it is stored."""
    if summary.new_weight > summary.real_weight or summary.new_size > summary.real_size:
        raise InvariantViolationError(
            f"Block {summary.height} summary grew: "
            f"weight {summary.new_weight}/{summary.real_weight}, "
            f"size {summary.new_size}/{summary.real_size}"
        )
    return summary
