"""Pytest configuration and fixtures for segwit savings tests."""

import pytest
from typing import Dict, Any, List, Optional
from unittest.mock import MagicMock

from segwit_savings.core.esplora_client import EsploraClient
from segwit_savings.models.config import ScannerConfig


# ============================================================================
# ESPLORA DESCRIPTOR BUILDERS
# ============================================================================

def make_vin(scriptpubkey_type: Optional[str] = None,
             scriptsig: str = "",
             scriptsig_asm: str = "",
             witness: Optional[List[str]] = None) -> Dict[str, Any]:
    """Build an Esplora input; no ``scriptpubkey_type`` means coinbase."""
    if scriptpubkey_type is None:
        return {
            "is_coinbase": True,
            "prevout": None,
            "scriptsig": "03a0bb0d",
            "scriptsig_asm": "OP_PUSHBYTES_3 a0bb0d",
        }

    vin = {
        "is_coinbase": False,
        "prevout": {"scriptpubkey_type": scriptpubkey_type, "value": 50000},
        "scriptsig": scriptsig,
        "scriptsig_asm": scriptsig_asm,
    }
    if witness is not None:
        vin["witness"] = witness
    return vin


def p2pkh_vin(script_len: int = 106) -> Dict[str, Any]:
    return make_vin("p2pkh", scriptsig="ab" * script_len,
                    scriptsig_asm="OP_PUSHBYTES_71 30440220 OP_PUSHBYTES_33 02aa")


def p2sh_p2wpkh_vin() -> Dict[str, Any]:
    return make_vin("p2sh", scriptsig="16" + "00" * 22,
                    scriptsig_asm="OP_PUSHBYTES_22 0014" + "00" * 20,
                    witness=["3044", "02aa"])


def p2sh_p2wsh_vin() -> Dict[str, Any]:
    return make_vin("p2sh", scriptsig="22" + "00" * 34,
                    scriptsig_asm="OP_PUSHBYTES_34 0020" + "00" * 32,
                    witness=["", "3044", "5221"])


def p2wpkh_vin() -> Dict[str, Any]:
    return make_vin("v0_p2wpkh", witness=["3044", "02aa"])


def make_tx(vin: List[Dict[str, Any]], weight: int = 1000, size: int = 250,
            fee: Optional[int] = 1000, txid: str = "tx",
            vout: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    tx = {
        "txid": txid,
        "weight": weight,
        "size": size,
        "vin": vin,
        "vout": vout if vout is not None else [{"value": 10000}],
    }
    if fee is not None:
        tx["fee"] = fee
    return tx


def make_block(height: int, tx_count: int = 1, weight: int = 4000000,
               size: int = 1000000) -> Dict[str, Any]:
    return {
        "id": f"block{height}",
        "height": height,
        "timestamp": 1600000000 + height * 600,
        "tx_count": tx_count,
        "weight": weight,
        "size": size,
    }


def coinbase_tx(reward: int = 625000000) -> Dict[str, Any]:
    return make_tx([make_vin()], weight=800, size=200, fee=None, txid="coinbase",
                   vout=[{"value": reward}, {"value": 0}])


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def config():
    """Scanner configuration without any .env lookup."""
    return ScannerConfig(
        _env_file=None,
        airtable_api_key="key-test",
        airtable_base="appTEST",
        airtable_table="segwit",
        max_retries=3,
        retry_delay=0.0,
    )


@pytest.fixture
def mock_client():
    """Esplora client double serving blocks from ``chain`` and txs from ``txs``."""
    client = MagicMock(spec=EsploraClient)
    client.chain = {}
    client.txs = {}

    def blocks_page(height):
        return [client.chain[h] for h in range(height, height - 10, -1) if h in client.chain]

    def txs_page(block_id, offset):
        return client.txs.get(block_id, [])[offset:offset + 25]

    def first_tx(block_id):
        return client.txs.get(block_id, [coinbase_tx()])[0]

    client.get_blocks_page.side_effect = blocks_page
    client.get_transactions_page.side_effect = txs_page
    client.get_first_transaction.side_effect = first_tx
    return client


@pytest.fixture
def mock_sink():
    """Sink double recording every stored summary."""
    sink = MagicMock()
    sink.stored = []
    sink.store.side_effect = lambda summaries: sink.stored.extend(summaries)
    return sink
