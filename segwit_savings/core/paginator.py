"""Paged iteration over the transactions of a block."""

from typing import Callable, Dict, Any
import structlog

from segwit_savings.core.esplora_client import EsploraClient

logger = structlog.get_logger(__name__)

# Esplora serves transactions in fixed pages of 25
TXS_PAGE_SIZE = 25


def for_each_transaction_in_block(client: EsploraClient,
                                  block: Dict[str, Any],
                                  visit: Callable[[Dict[str, Any]], None]) -> int:
    """
    Feed every transaction of ``block`` to ``visit`` in ascending order.

    The offset moves by the number of transactions actually returned. Stops
    once the offset reaches the block's ``tx_count``, or the explorer returns
    an empty or short page. Fetch errors propagate to the caller.

    Returns:
        Number of transactions visited
    """
    block_id = block["id"]
    tx_count = block.get("tx_count", 0)
    offset = 0

    while offset < tx_count:
        page = client.get_transactions_page(block_id, offset)

        if not page:
            logger.debug("Empty transaction page, block exhausted",
                         block_id=block_id, offset=offset, tx_count=tx_count)
            break

        for tx in page:
            visit(tx)
        offset += len(page)

        if len(page) < TXS_PAGE_SIZE:
            break

    if offset < tx_count:
        logger.warning("Block returned fewer transactions than reported",
                       block_id=block_id, visited=offset, tx_count=tx_count)

    return offset
