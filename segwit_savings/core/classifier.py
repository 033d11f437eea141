"""Input classification for segwit savings."""

from typing import Callable, Dict, Any, List, Tuple

from segwit_savings.models.blockchain import InputClassification
from segwit_savings.utils.bitcoin import (
    P2PKH, P2SH, P2WPKH, P2WSH, prevout_type, has_witness, first_opcode
)

Rule = Tuple[Callable[[Dict[str, Any]], bool], InputClassification]


def _is_native_segwit(vin: Dict[str, Any]) -> bool:
    return prevout_type(vin) in (P2WPKH, P2WSH)


def _is_wrapped(vin: Dict[str, Any], opcode: str) -> bool:
    return (prevout_type(vin) == P2SH
            and has_witness(vin)
            and first_opcode(vin) == opcode)


# Evaluated top to bottom, first match wins. Wrapped segwit must be
# checked before plain P2SH.
CLASSIFICATION_RULES: List[Rule] = [
    (lambda vin: prevout_type(vin) is None, InputClassification.OTHER),
    (_is_native_segwit, InputClassification.NATIVE_SEGWIT),
    (lambda vin: _is_wrapped(vin, "OP_PUSHBYTES_22"), InputClassification.WRAPPED_SEGWIT_PKH),
    (lambda vin: _is_wrapped(vin, "OP_PUSHBYTES_34"), InputClassification.WRAPPED_SEGWIT_SH),
    (lambda vin: prevout_type(vin) == P2PKH, InputClassification.LEGACY_PKH),
    (lambda vin: prevout_type(vin) == P2SH, InputClassification.LEGACY_SH),
]


def classify_input(vin: Dict[str, Any]) -> InputClassification:
    """
    Determine which savings case applies to a transaction input.

    Args:
        vin: Esplora input descriptor (``prevout``, ``scriptsig``,
            ``scriptsig_asm``, ``witness``)

    Returns:
        The first matching classification, ``OTHER`` when nothing matches.
    """
    for matches, classification in CLASSIFICATION_RULES:
        if matches(vin):
            return classification
    return InputClassification.OTHER
