"""
Airtable persistence for block savings summaries.

Records are created through the Airtable REST API, which accepts at most
10 records per request.
"""

import time
from typing import Iterable, List, Dict, Any, Optional
import requests
import structlog

from segwit_savings.errors import AirtableError, AirtableRejectedError, AirtableValidationError
from segwit_savings.models.blockchain import BlockSummary
from segwit_savings.models.config import ScannerConfig

logger = structlog.get_logger(__name__)

AIRTABLE_MAX_BATCH = 10


def chunk(items: List[Any], size: int) -> List[List[Any]]:
    """Split ``items`` into consecutive lists of at most ``size`` elements."""
    return [items[i:i + size] for i in range(0, len(items), size)]


class AirtableSink:
    """
    Stores BlockSummary rows in an Airtable table.

    Features:
    - Batching (10 records per request)
    - Retry with exponential backoff for transient failures
    - HTTP 4xx (other than 429) is fatal and never retried
    - Record creation is not retried once Airtable may have stored it
    """

    def __init__(self,
                 api_key: str,
                 base: str,
                 table: str,
                 api_url: str = "https://api.airtable.com/v0",
                 batch_size: int = AIRTABLE_MAX_BATCH,
                 max_retries: int = 5,
                 retry_delay: float = 1.0,
                 timeout: int = 30,
                 errors_fatal: bool = True):
        self.table_url = f"{api_url.rstrip('/')}/{base}/{table}"
        self.table = table
        self.batch_size = min(batch_size, AIRTABLE_MAX_BATCH)
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.timeout = timeout
        self.errors_fatal = errors_fatal

        self.session = requests.Session()
        self.session.headers.update({
            'Authorization': f'Bearer {api_key}',
            'Content-Type': 'application/json',
            'User-Agent': 'segwit-savings/1.0.0'
        })

        self.logger = logger.bind(component="airtable_sink", table=table)
        self.logger.info("Airtable sink initialized", batch_size=self.batch_size)

    @classmethod
    def from_config(cls, config: ScannerConfig) -> "AirtableSink":
        return cls(
            api_key=config.airtable_api_key,
            base=config.airtable_base,
            table=config.airtable_table,
            api_url=config.airtable_url,
            batch_size=config.airtable_batch_size,
            max_retries=config.max_retries,
            retry_delay=config.retry_delay,
            timeout=config.request_timeout,
            errors_fatal=config.persist_errors_fatal,
        )

    def _request(self, method: str, **kwargs) -> Dict[str, Any]:
        """
        Send a request with retries.

        Client errors (4xx other than 429) are never retried. Record creation
        is only retried when Airtable cannot have stored anything: a failed
        connection, a 429 or a 503. A read timeout on a create may follow a
        saved record, so it is raised at once.
        """
        idempotent = method == "GET"
        last_error: Optional[Exception] = None

        for attempt in range(self.max_retries):
            final_attempt = attempt == self.max_retries - 1

            try:
                response = self.session.request(method, self.table_url,
                                                 timeout=self.timeout, **kwargs)
            except requests.RequestException as e:
                if not (idempotent or _never_sent(e)):
                    raise AirtableError(f"Airtable request failed and was not retried: {e}") from e

                last_error = e
                self.logger.warning("Airtable request failed",
                                    attempt=attempt + 1,
                                    error=str(e))
                if not final_attempt:
                    time.sleep(self.retry_delay * (2 ** attempt))
                continue

            status = response.status_code

            if status == 422:
                raise AirtableValidationError(
                    f"Airtable rejected the records: {_error_message(response)}"
                )

            if status == 429:
                self.logger.warning("Airtable rate limit hit", attempt=attempt + 1)
                last_error = AirtableError("Rate limited", status_code=429)
                if not final_attempt:
                    time.sleep(max(self.retry_delay * (2 ** attempt), 30))
                continue

            if 400 <= status < 500:
                raise AirtableRejectedError(
                    f"Airtable refused the request (HTTP {status}): {_error_message(response)}",
                    status_code=status
                )

            if status >= 500:
                last_error = AirtableError(
                    f"HTTP {status}: {_error_message(response)}", status_code=status
                )
                if not (idempotent or status == 503):
                    raise last_error

                self.logger.warning("Airtable request failed",
                                    attempt=attempt + 1,
                                    status_code=status)
                if not final_attempt:
                    time.sleep(self.retry_delay * (2 ** attempt))
                continue

            try:
                return response.json()
            except ValueError as e:
                raise AirtableError(f"Airtable returned an unreadable response: {e}") from e

        raise AirtableError(
            f"Airtable request failed after {self.max_retries} attempts: {last_error}",
            status_code=getattr(last_error, "status_code", None)
        )

    def store(self, summaries: Iterable[BlockSummary]) -> int:
        """
        Create one record per summary.

        Returns:
            Number of records Airtable confirmed

        Raises:
            AirtableRejectedError: on a schema mismatch or bad credentials, always
            AirtableError: on transient failures when ``errors_fatal`` is set
        """
        records = [{"fields": summary.to_fields()} for summary in summaries]
        created = 0

        for batch in chunk(records, self.batch_size):
            try:
                payload = self._request("POST", json={"records": batch})
            except AirtableRejectedError as e:
                self.logger.error("Airtable refused the records", error=str(e))
                raise
            except AirtableError as e:
                if self.errors_fatal:
                    raise
                self.logger.error("Dropping batch after Airtable failure",
                                  error=str(e),
                                  heights=[r["fields"]["block_height"] for r in batch])
                continue

            for record in payload.get("records", []):
                self.logger.info("Airtable record saved",
                                 record_id=record.get("id"),
                                 block_height=record.get("fields", {}).get("block_height"))
                created += 1

        return created

    def check_connection(self) -> bool:
        """Read a single record to verify credentials and table name."""
        try:
            self._request("GET", params={"maxRecords": 1})
            return True
        except AirtableError as e:
            self.logger.error("Airtable connection check failed", error=str(e))
            return False

    def close(self):
        """Close the HTTP session."""
        self.session.close()


def _error_message(response: requests.Response) -> str:
    """Pull Airtable's error message out of a failed response."""
    try:
        error = response.json().get("error", {})
    except ValueError:
        return response.text
    if isinstance(error, dict):
        return f"{error.get('type', 'UNKNOWN')}: {error.get('message', '')}"
    return str(error)


def _never_sent(error: requests.RequestException) -> bool:
    """Whether the request failed before Airtable could have acted on it."""
    return (isinstance(error, requests.ConnectionError)
            and not isinstance(error, requests.ReadTimeout))
