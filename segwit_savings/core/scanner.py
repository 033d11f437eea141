"""Backward block range scan driving the savings computation."""

from dataclasses import dataclass
from typing import Optional, Dict, Any, List
import structlog

from segwit_savings.core.aggregator import new_block_summary, fold, finalize
from segwit_savings.core.esplora_client import EsploraClient
from segwit_savings.core.paginator import for_each_transaction_in_block
from segwit_savings.core.savings import compute_transaction_savings
from segwit_savings.models.blockchain import BlockSummary
from segwit_savings.utils.bitcoin import sum_output_values

logger = structlog.get_logger(__name__)


@dataclass
class ScanResult:
    """Outcome of a completed scan."""
    blocks_processed: int = 0
    transactions_processed: int = 0
    first_height: Optional[int] = None
    last_height: Optional[int] = None


class BlockRangeScanner:
    """
    Walks blocks backward from a start height down to a stop height.

    For each block the scanner:
    1. Reads the first transaction to get the block fee proxy
    2. Pages through every transaction, folding its savings into the summary
    3. Hands the finished summary to the sink

    The stop block itself is not processed; it is expected to be recorded
    by a previous run.
    """

    def __init__(self, client: EsploraClient, sink):
        self.client = client
        self.sink = sink
        self.logger = logger.bind(component="block_range_scanner")

    def scan(self, stop_height: int, start_height: Optional[int] = None) -> ScanResult:
        """
        Scan from ``start_height`` (chain tip when None) down to ``stop_height``.

        Raises:
            ValueError: if ``stop_height`` is above ``start_height``
        """
        if start_height is None:
            start_height = self.client.get_tip_height()
            self.logger.info("Resolved chain tip", height=start_height)

        if stop_height > start_height:
            raise ValueError(
                f"Stop height {stop_height} is above start height {start_height}"
            )

        self.logger.info("Starting backward scan",
                         start_height=start_height,
                         stop_height=stop_height)

        result = ScanResult()
        cursor = start_height
        stop_block_seen = False

        while not stop_block_seen:
            blocks = self.client.get_blocks_page(cursor)

            if not blocks:
                self.logger.warning("Empty block page, nothing left to scan", cursor=cursor)
                break

            # The next page starts below whatever this page actually returned
            cursor = blocks[-1]["height"] - 1
            blocks, stop_block_seen = self._truncate_at_stop(blocks, stop_height)

            for block in blocks:
                summary = self.process_block(block, result)
                self.sink.store([summary])

                result.blocks_processed += 1
                if result.first_height is None:
                    result.first_height = block["height"]
                result.last_height = block["height"]

        self.logger.info("Backward scan complete",
                         blocks_processed=result.blocks_processed,
                         transactions_processed=result.transactions_processed)
        return result

    @staticmethod
    def _truncate_at_stop(blocks: List[Dict[str, Any]], stop_height: int):
        """
        Drop the stop block and everything after it from the page.

        A page that jumps past the stop height without containing it is cut
        at the first block below it, so the scan never runs on to genesis.
        """
        for index, block in enumerate(blocks):
            if block["height"] <= stop_height:
                return blocks[:index], True
        return blocks, False

    def process_block(self, block: Dict[str, Any],
                      result: Optional[ScanResult] = None) -> BlockSummary:
        """Compute the finished summary of one block."""
        self.logger.info("Processing block", height=block["height"], tx_count=block.get("tx_count"))

        first_tx = self.client.get_first_transaction(block["id"])
        summary = new_block_summary(block, sum_output_values(first_tx))

        def visit(tx: Dict[str, Any]) -> None:
            nonlocal summary
            summary = fold(summary, compute_transaction_savings(tx), tx.get("fee"))

        visited = for_each_transaction_in_block(self.client, block, visit)
        if result is not None:
            result.transactions_processed += visited

        summary = finalize(summary)

        self.logger.info("Finished block",
                         height=summary.height,
                         transactions=visited,
                         weight_saved=summary.weight_saved,
                         size_saved=summary.size_saved,
                         fee_saved=summary.saved)
        return summary
