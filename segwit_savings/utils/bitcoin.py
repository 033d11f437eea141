"""Bitcoin-specific helpers for Esplora transaction descriptors."""

from numbers import Real
from typing import Optional, Dict, Any

# Esplora scriptpubkey_type values
P2PKH = "p2pkh"
P2SH = "p2sh"
P2WPKH = "v0_p2wpkh"
P2WSH = "v0_p2wsh"

# Non-witness bytes a P2SH wrapper keeps in the scriptSig
P2SH_P2WPKH_OVERHEAD = 21
P2SH_P2WSH_OVERHEAD = 35

# Weight units per non-witness byte (BIP141)
WITNESS_SCALE_FACTOR = 4


def prevout_type(vin: Dict[str, Any]) -> Optional[str]:
    """Return the scriptpubkey type of the output spent by ``vin``."""
    prevout = vin.get("prevout")
    if not prevout:
        return None
    return prevout.get("scriptpubkey_type")


def has_witness(vin: Dict[str, Any]) -> bool:
    """Whether the input carries a witness stack."""
    return vin.get("witness") is not None


def script_sig_size(vin: Dict[str, Any]) -> int:
    """Size of the scriptSig in bytes."""
    script_sig = vin.get("scriptsig")
    return len(script_sig) // 2 if script_sig else 0


def first_opcode(vin: Dict[str, Any]) -> Optional[str]:
    """First opcode of the decoded scriptSig, e.g. ``OP_PUSHBYTES_22``."""
    if not vin.get("scriptsig"):
        return None

    asm = vin.get("scriptsig_asm") or ""
    tokens = asm.split()
    return tokens[0] if tokens else None


def is_number(value: Any) -> bool:
    """True for ints and floats, False for None, bools and anything else."""
    return isinstance(value, Real) and not isinstance(value, bool)


def sum_output_values(tx: Dict[str, Any]) -> int:
    """Total value in satoshis of a transaction's outputs."""
    total = 0
    for vout in tx.get("vout", []):
        value = vout.get("value")
        if is_number(value):
            total += value
    return total
