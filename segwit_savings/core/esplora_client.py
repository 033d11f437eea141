"""
Esplora API client (blockstream.info / mempool.space compatible).

Only the read endpoints needed by the backward block scan are wrapped.

API Documentation: https://github.com/Blockstream/esplora/blob/master/API.md
"""

import time
import requests
from typing import Dict, Any, List, Optional
import structlog

from segwit_savings.errors import EsploraAPIError
from segwit_savings.models.config import ScannerConfig

logger = structlog.get_logger(__name__)


class EsploraClient:
    """
    Esplora REST client with retry logic and optional rate limiting.

    Every request is retried up to ``max_retries`` times with exponential
    backoff; HTTP 429 waits for ``Retry-After``. Exhausting the attempts
    raises EsploraAPIError.
    """

    def __init__(self,
                 base_url: str = "https://blockstream.info/api",
                 max_retries: int = 5,
                 retry_delay: float = 1.0,
                 request_delay: float = 0.0,
                 timeout: int = 30):
        self.base_url = base_url.rstrip("/")
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.request_delay = request_delay
        self.timeout = timeout

        self.session = requests.Session()
        self.session.headers.update({
            'User-Agent': 'segwit-savings/1.0.0',
            'Accept': 'application/json'
        })

        self._last_request_time = 0.0

        logger.info("Esplora API client initialized",
                    base_url=self.base_url,
                    max_retries=max_retries)

    @classmethod
    def from_config(cls, config: ScannerConfig) -> "EsploraClient":
        return cls(
            base_url=config.esplora_url,
            max_retries=config.max_retries,
            retry_delay=config.retry_delay,
            request_delay=config.request_delay,
            timeout=config.request_timeout,
        )

    def _rate_limit(self):
        """Apply rate limiting between requests."""
        if self.request_delay <= 0:
            return
        elapsed = time.time() - self._last_request_time
        if elapsed < self.request_delay:
            time.sleep(self.request_delay - elapsed)
        self._last_request_time = time.time()

    def _make_request(self, endpoint: str, parse_json: bool = True) -> Any:
        """Make API request with retry logic."""
        url = f"{self.base_url}{endpoint}"
        last_error: Optional[Exception] = None

        for attempt in range(self.max_retries):
            try:
                self._rate_limit()

                response = self.session.get(url, timeout=self.timeout)

                if response.status_code == 429:
                    wait_time = int(response.headers.get('Retry-After', 30))
                    logger.warning("Rate limited, waiting",
                                   endpoint=endpoint,
                                   wait_time=wait_time)
                    last_error = EsploraAPIError(f"Rate limited on {endpoint}")
                    if attempt < self.max_retries - 1:
                        time.sleep(wait_time)
                    continue

                response.raise_for_status()

                return response.json() if parse_json else response.text

            except (requests.RequestException, ValueError) as e:
                last_error = e
                logger.warning("API request failed",
                               endpoint=endpoint,
                               attempt=attempt + 1,
                               error=str(e))

                if attempt < self.max_retries - 1:
                    time.sleep(self.retry_delay * (2 ** attempt))

        raise EsploraAPIError(
            f"Request to {endpoint} failed after {self.max_retries} attempts: {last_error}"
        )

    # ==================== Block Methods ====================

    def get_tip_height(self) -> int:
        """Get current blockchain tip height."""
        raw = self._make_request("/blocks/tip/height", parse_json=False)
        try:
            return int(str(raw).strip())
        except ValueError as e:
            raise EsploraAPIError(f"Unexpected tip height response: {raw!r}") from e

    def get_blocks_page(self, height: int) -> List[Dict[str, Any]]:
        """
        Get up to 10 blocks, newest first, starting at ``height``.

        Returns:
            [
                {
                    "id": "...",
                    "height": 617246,
                    "timestamp": 1581373523,
                    "tx_count": 2843,
                    "size": 1196215,
                    "weight": 3992941,
                    ...
                },
                ...
            ]
        """
        return self._make_request(f"/blocks/{height}") or []

    # ==================== Transaction Methods ====================

    def get_transactions_page(self, block_id: str, offset: int) -> List[Dict[str, Any]]:
        """
        Get up to 25 transactions of a block starting at ``offset``.

        ``offset`` must be a multiple of 25.
        """
        return self._make_request(f"/block/{block_id}/txs/{offset}") or []

    def get_first_transaction(self, block_id: str) -> Dict[str, Any]:
        """Get the first (coinbase) transaction of a block."""
        page = self._make_request(f"/block/{block_id}/txs")
        if not page:
            raise EsploraAPIError(f"Block {block_id} returned no transactions")
        return page[0]

    def close(self):
        """Close the HTTP session."""
        self.session.close()
