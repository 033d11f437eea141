"""Data models for segwit savings computation."""

from enum import Enum
from typing import Dict, Any, Optional
from dataclasses import dataclass


class InputClassification(str, Enum):
    """Spend type of a transaction input, as far as savings are concerned."""
    NATIVE_SEGWIT = "native_segwit"
    WRAPPED_SEGWIT_PKH = "wrapped_segwit_pkh"
    WRAPPED_SEGWIT_SH = "wrapped_segwit_sh"
    LEGACY_PKH = "legacy_pkh"
    LEGACY_SH = "legacy_sh"
    OTHER = "other"


@dataclass(frozen=True)
class TransactionSavings:
    """Weight and size a transaction would lose with native segwit inputs."""
    weight_loss: int = 0
    size_loss: int = 0
    # None when the transaction reports a zero weight
    bech32_gain_ratio: Optional[float] = 0.0

    @property
    def is_degenerate(self) -> bool:
        return self.bech32_gain_ratio is None


@dataclass
class BlockSummary:
    """Block-level savings aggregate, one row in the output table."""
    time: int
    height: int
    fee: int
    real_weight: int
    real_size: int
    new_weight: int
    new_size: int
    saved: float = 0.0

    @property
    def weight_saved(self) -> int:
        return self.real_weight - self.new_weight

    @property
    def size_saved(self) -> int:
        return self.real_size - self.new_size

    def to_fields(self) -> Dict[str, Any]:
        """Column mapping of the Airtable table."""
        return {
            "block_time": self.time,
            "block_height": self.height,
            "block_fee": self.fee,
            "real_weight": self.real_weight,
            "real_size": self.real_size,
            "block_saved": self.saved,
            "new_weight": self.new_weight,
            "new_size": self.new_size,
        }
