"""Tests for the HEAD/GET fetcher against a mocked requests session."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from ohmycert.common.errors import CheckFailure, FetchFailure
from ohmycert.utils.fetcher import RemoteFetcher

BASE_URL = "https://bucket.example/certs/"


def make_response(status=200, headers=None, content=b""):
    response = MagicMock()
    response.status_code = status
    response.ok = status < 400
    response.headers = CaseInsensitiveDict(headers or {})
    response.content = content
    return response


def make_fetcher(session):
    return RemoteFetcher(BASE_URL, timeout=5, session=session)


class TestCheckChanged:
    def test_head_url_and_timeout(self):
        session = MagicMock()
        session.head.return_value = make_response(headers={"ETag": '"e1"'})

        make_fetcher(session).check_changed("example.com", None)

        session.head.assert_called_once_with(
            BASE_URL + "example.com.crt", timeout=5, allow_redirects=True
        )

    def test_same_etag_is_unchanged(self):
        session = MagicMock()
        session.head.return_value = make_response(headers={"etag": '"e1"'})

        result = make_fetcher(session).check_changed("a", '"e1"')

        assert result.changed is False
        assert result.fingerprint == '"e1"'

    def test_different_etag_is_changed(self):
        session = MagicMock()
        session.head.return_value = make_response(headers={"ETag": '"e2"'})

        result = make_fetcher(session).check_changed("a", '"e1"')

        assert result.changed is True
        assert result.fingerprint == '"e2"'

    def test_never_synced_is_changed(self):
        session = MagicMock()
        session.head.return_value = make_response(headers={"ETag": '"e1"'})

        assert make_fetcher(session).check_changed("a", None).changed is True

    def test_no_etag_is_always_changed(self):
        session = MagicMock()
        session.head.return_value = make_response()

        result = make_fetcher(session).check_changed("a", '"e1"')

        assert result.changed is True
        assert result.fingerprint is None

    def test_error_status_raises(self):
        session = MagicMock()
        session.head.return_value = make_response(status=404)

        with pytest.raises(CheckFailure) as excinfo:
            make_fetcher(session).check_changed("a", None)
        assert excinfo.value.status == 404
        assert excinfo.value.name == "a"

    def test_timeout_raises(self):
        session = MagicMock()
        session.head.side_effect = requests.Timeout("timed out")

        with pytest.raises(CheckFailure) as excinfo:
            make_fetcher(session).check_changed("a", None)
        assert excinfo.value.status is None


class TestRetrieve:
    def _session(self, responses):
        session = MagicMock()
        session.get.side_effect = lambda url, timeout: responses[url]
        return session

    def test_downloads_both(self):
        session = self._session({
            BASE_URL + "a.crt": make_response(content=b"CERT"),
            BASE_URL + "a.key": make_response(content=b"KEY"),
        })

        material = make_fetcher(session).retrieve("a")

        assert material.cert == b"CERT"
        assert material.key == b"KEY"
        assert session.get.call_count == 2

    def test_key_failure_fails_whole_cert(self):
        session = self._session({
            BASE_URL + "a.crt": make_response(content=b"CERT"),
            BASE_URL + "a.key": make_response(status=403),
        })

        with pytest.raises(FetchFailure) as excinfo:
            make_fetcher(session).retrieve("a")
        assert excinfo.value.status == 403

    def test_connection_error_raises(self):
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("refused")

        with pytest.raises(FetchFailure):
            make_fetcher(session).retrieve("a")
