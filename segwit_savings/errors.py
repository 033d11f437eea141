"""Exception hierarchy for the segwit savings scanner."""

from typing import Optional

SETUP_HELP = """
    In order to properly run the segwit savings scanner you need a couple things.

      1. An Airtable base with a table which has the following columns (all type: number) named exactly as follows:
        block_time
        block_height
        block_saved
        block_fee
        real_weight
        real_size
        new_weight
        new_size

      2. A .env file at project root (or environment variables) with the following entries:
        AIRTABLE_API_KEY=your_airtable_api_key
        AIRTABLE_BASE=your_airtable_base_string
        AIRTABLE_TABLE=your_airtable_table_string
"""


class SegwitSavingsError(Exception):
    """Base error for the scanner."""
    pass


class ConfigurationError(SegwitSavingsError):
    """Required settings are missing or invalid."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"{detail}\n{SETUP_HELP}")


class EsploraAPIError(SegwitSavingsError):
    """Block explorer request failed after all retry attempts."""
    pass


class AirtableError(SegwitSavingsError):
    """Airtable request failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class AirtableRejectedError(AirtableError):
    """Airtable refused the request (HTTP 4xx other than 429): bad token, base or table."""
    pass


class AirtableValidationError(AirtableRejectedError):
    """Airtable rejected the records (HTTP 422), usually a column mismatch."""

    def __init__(self, message: str, status_code: Optional[int] = 422):
        super().__init__(f"{message}\n{SETUP_HELP}", status_code=status_code)


class InvariantViolationError(SegwitSavingsError):
    """A block summary ended up larger than the block it describes."""
    pass
