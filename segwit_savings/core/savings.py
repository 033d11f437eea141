"""Per-transaction segwit savings calculation."""

from typing import Dict, Any
import structlog

from segwit_savings.core.classifier import classify_input
from segwit_savings.models.blockchain import InputClassification, TransactionSavings
from segwit_savings.utils.bitcoin import (
    P2SH_P2WPKH_OVERHEAD, P2SH_P2WSH_OVERHEAD, WITNESS_SCALE_FACTOR, script_sig_size
)

logger = structlog.get_logger(__name__)

# WU cost of the non-witness part of P2SH-P2WPKH / P2SH-P2WSH
P2SH_P2WPKH_COST = P2SH_P2WPKH_OVERHEAD * WITNESS_SCALE_FACTOR
P2SH_P2WSH_COST = P2SH_P2WSH_OVERHEAD * WITNESS_SCALE_FACTOR

# Moving a byte from scriptSig to the witness saves 4 - 1 WU
LEGACY_GAIN_PER_BYTE = WITNESS_SCALE_FACTOR - 1


def compute_transaction_savings(tx: Dict[str, Any]) -> TransactionSavings:
    """
    Compute how much a transaction would shrink with native segwit inputs.

    Legacy inputs only count towards the weight loss: their scriptSig moves to
    the witness but the byte size is not assumed to shrink.

    Args:
        tx: Esplora transaction descriptor

    Returns:
        TransactionSavings; ``bech32_gain_ratio`` is None when the
        transaction weight is zero.
    """
    weight_loss = 0
    size_loss = 0

    for vin in tx.get("vin", []):
        if not vin.get("prevout"):
            continue

        classification = classify_input(vin)

        if classification == InputClassification.WRAPPED_SEGWIT_PKH:
            weight_loss += P2SH_P2WPKH_COST
            size_loss += P2SH_P2WPKH_OVERHEAD
        elif classification == InputClassification.WRAPPED_SEGWIT_SH:
            weight_loss += P2SH_P2WSH_COST
            size_loss += P2SH_P2WSH_OVERHEAD
        elif classification in (InputClassification.LEGACY_PKH, InputClassification.LEGACY_SH):
            weight_loss += script_sig_size(vin) * LEGACY_GAIN_PER_BYTE
        # native segwit is already optimal, OTHER contributes nothing

    tx_weight = tx.get("weight") or 0
    tx_size = tx.get("size")

    weight_loss = min(weight_loss, tx_weight)
    if tx_size is not None:
        size_loss = min(size_loss, tx_size)

    if tx_weight == 0:
        logger.warning("Transaction weight is zero, fee savings ratio undefined",
                       txid=tx.get("txid"))
        return TransactionSavings(weight_loss=weight_loss, size_loss=size_loss,
                                  bech32_gain_ratio=None)

    return TransactionSavings(
        weight_loss=weight_loss,
        size_loss=size_loss,
        bech32_gain_ratio=weight_loss / tx_weight,
    )
