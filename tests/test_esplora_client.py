"""Unit tests for the Esplora API client."""

import pytest
import requests
from unittest.mock import MagicMock, patch

from segwit_savings.core.esplora_client import EsploraClient
from segwit_savings.errors import EsploraAPIError


def _response(status=200, json_data=None, text=""):
    response = MagicMock()
    response.status_code = status
    response.headers = {}
    response.json.return_value = json_data
    response.text = text
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    return response


class TestEsploraClient:
    """Tests for request handling and endpoint wrappers."""

    @pytest.fixture
    def client(self):
        client = EsploraClient(base_url="https://esplora.test/api/", max_retries=3, retry_delay=0)
        client.session = MagicMock()
        return client

    def test_tip_height_parses_plain_text(self, client):
        client.session.get.return_value = _response(text="840000\n")

        assert client.get_tip_height() == 840000
        client.session.get.assert_called_once_with(
            "https://esplora.test/api/blocks/tip/height", timeout=30
        )

    def test_tip_height_rejects_garbage(self, client):
        client.session.get.return_value = _response(text="<html>")

        with pytest.raises(EsploraAPIError):
            client.get_tip_height()

    def test_blocks_page_endpoint(self, client):
        client.session.get.return_value = _response(json_data=[{"height": 100}, {"height": 99}])

        assert client.get_blocks_page(100) == [{"height": 100}, {"height": 99}]
        assert client.session.get.call_args.args[0] == "https://esplora.test/api/blocks/100"

    def test_transactions_page_endpoint(self, client):
        client.session.get.return_value = _response(json_data=[{"txid": "a"}])

        assert client.get_transactions_page("abc", 25) == [{"txid": "a"}]
        assert client.session.get.call_args.args[0] == "https://esplora.test/api/block/abc/txs/25"

    def test_first_transaction(self, client):
        client.session.get.return_value = _response(json_data=[{"txid": "cb"}, {"txid": "b"}])

        assert client.get_first_transaction("abc") == {"txid": "cb"}
        assert client.session.get.call_args.args[0] == "https://esplora.test/api/block/abc/txs"

    def test_first_transaction_empty_block(self, client):
        client.session.get.return_value = _response(json_data=[])

        with pytest.raises(EsploraAPIError):
            client.get_first_transaction("abc")

    @patch("segwit_savings.core.esplora_client.time.sleep")
    def test_retries_transient_failures(self, mock_sleep, client):
        client.session.get.side_effect = [
            requests.ConnectionError("reset"),
            _response(status=502),
            _response(json_data=[{"height": 1}]),
        ]

        assert client.get_blocks_page(1) == [{"height": 1}]
        assert client.session.get.call_count == 3

    @patch("segwit_savings.core.esplora_client.time.sleep")
    def test_raises_after_retry_budget(self, mock_sleep, client):
        client.session.get.side_effect = requests.ConnectionError("down")

        with pytest.raises(EsploraAPIError):
            client.get_blocks_page(1)
        assert client.session.get.call_count == 3

    @patch("segwit_savings.core.esplora_client.time.sleep")
    def test_rate_limit_honours_retry_after(self, mock_sleep, client):
        limited = _response(status=429)
        limited.headers = {"Retry-After": "7"}
        client.session.get.side_effect = [limited, _response(json_data=[])]

        assert client.get_blocks_page(1) == []
        mock_sleep.assert_any_call(7)

    @patch("segwit_savings.core.esplora_client.time.sleep")
    def test_rate_limit_on_last_attempt_raises_without_waiting(self, mock_sleep, client):
        limited = _response(status=429)
        limited.headers = {"Retry-After": "7"}
        client.session.get.return_value = limited

        with pytest.raises(EsploraAPIError):
            client.get_blocks_page(1)

        assert client.session.get.call_count == 3
        assert mock_sleep.call_count == 2

    def test_from_config(self, config):
        client = EsploraClient.from_config(config)

        assert client.base_url == "https://blockstream.info/api"
        assert client.max_retries == 3
