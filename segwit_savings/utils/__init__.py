"""Utility functions and helpers."""

from segwit_savings.utils.logging import setup_logging
from segwit_savings.utils.bitcoin import (
    prevout_type,
    has_witness,
    script_sig_size,
    first_opcode,
    sum_output_values,
)

__all__ = [
    "setup_logging",
    "prevout_type",
    "has_witness",
    "script_sig_size",
    "first_opcode",
    "sum_output_values",
]
