"""
Unit tests for download module.

Tests download functionality with mocked network requests.
"""

from unittest.mock import Mock, patch

import pytest
import requests
import responses

from binkit.core.download import create_session, download_file, fetch_json
from binkit.core.exceptions import DownloadError, TransportError

URL = "https://example.com/tool.tar.gz"
MANIFEST_URL = "https://example.com/releases.json"


class TestCreateSession:
    """Test create_session function."""

    def test_user_agent(self):
        """Test session carries the user agent."""
        session = create_session("binkit-test")
        assert session.headers["User-Agent"] == "binkit-test"


class TestDownloadFile:
    """Test download_file function."""

    @responses.activate
    def test_download_success(self, tmp_path):
        """Test successful download."""
        responses.add(responses.GET, URL, body=b"archive bytes", status=200)

        dest = tmp_path / "nested" / "tool.tar.gz"
        result = download_file(URL, dest)

        assert result == dest
        assert dest.read_bytes() == b"archive bytes"

    @responses.activate
    def test_http_error_raises_download_error(self, tmp_path):
        """Test HTTP 404 is surfaced with the URL."""
        responses.add(responses.GET, URL, status=404)

        with pytest.raises(DownloadError, match="tool.tar.gz") as exc_info:
            download_file(URL, tmp_path / "tool.tar.gz")

        assert exc_info.value.status_code == 404
        assert exc_info.value.url == URL

    @responses.activate
    def test_connection_error(self, tmp_path):
        """Test network failures raise DownloadError."""
        responses.add(
            responses.GET, URL, body=requests.exceptions.ConnectionError("refused")
        )

        with pytest.raises(DownloadError, match="refused"):
            download_file(URL, tmp_path / "tool.tar.gz")

    def test_download_error_is_transport_error(self):
        """Test DownloadError belongs to the transport family."""
        assert issubclass(DownloadError, TransportError)

    def test_empty_url(self, tmp_path):
        """Test empty URL raises ValueError."""
        with pytest.raises(ValueError, match="URL cannot be empty"):
            download_file("", tmp_path / "file")

    @responses.activate
    def test_uses_session(self, tmp_path):
        """Test provided session headers are sent."""
        responses.add(responses.GET, URL, body=b"x", status=200)

        download_file(URL, tmp_path / "file", session=create_session("agent/1.0"))

        assert responses.calls[0].request.headers["User-Agent"] == "agent/1.0"

    def test_default_session_closed(self, tmp_path):
        """Test the session created when none is passed is closed."""
        with patch("requests.Session") as session_cls:
            response = session_cls.return_value.__enter__.return_value.get.return_value
            response.status_code = 200
            response.iter_content.return_value = [b"data"]

            download_file(URL, tmp_path / "file")

        session_cls.return_value.__exit__.assert_called_once()
        assert (tmp_path / "file").read_bytes() == b"data"


class TestFetchJson:
    """Test fetch_json function."""

    @responses.activate
    def test_fetch_success(self):
        """Test JSON document is returned."""
        responses.add(responses.GET, MANIFEST_URL, json={"latest": {"tag_name": "v1"}})

        assert fetch_json(MANIFEST_URL) == {"latest": {"tag_name": "v1"}}

    @responses.activate
    def test_error_status_includes_url_status_and_body(self):
        """Test non-success status message is diagnosable."""
        responses.add(responses.GET, MANIFEST_URL, body="rate limited", status=403)

        with pytest.raises(TransportError) as exc_info:
            fetch_json(MANIFEST_URL)

        message = str(exc_info.value)
        assert MANIFEST_URL in message
        assert "403" in message
        assert "rate limited" in message
        assert exc_info.value.status_code == 403

    @responses.activate
    def test_invalid_json(self):
        """Test malformed body raises TransportError."""
        responses.add(responses.GET, MANIFEST_URL, body="not json", status=200)

        with pytest.raises(TransportError, match="Invalid JSON"):
            fetch_json(MANIFEST_URL)

    def test_default_session_closed(self):
        """Test the session created when none is passed is closed."""
        with patch("requests.Session") as session_cls:
            http = session_cls.return_value.__enter__.return_value
            http.get.return_value.status_code = 200
            http.get.return_value.json.return_value = {"latest": {}}

            assert fetch_json(MANIFEST_URL) == {"latest": {}}

        session_cls.return_value.__exit__.assert_called_once()

    def test_given_session_left_open(self):
        """Test a caller-provided session is not closed."""
        session = Mock(spec=requests.Session)
        session.get.return_value.status_code = 200
        session.get.return_value.json.return_value = {}

        fetch_json(MANIFEST_URL, session=session)

        session.close.assert_not_called()
