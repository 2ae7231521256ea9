"""Shared test fixtures for ohmycert."""

from __future__ import annotations

from pathlib import Path

import pytest

from ohmycert.common.errors import CheckFailure, FetchFailure
from ohmycert.common.settings import Settings
from ohmycert.utils.fetcher import CertificateMaterial, CheckResult

TLS_CONFIG = """\
tls:
  certificates:
#>>>>>ohmycert-start<<<<<<
#>>>>>ohmycert-end<<<<<<
    - certFile: /etc/traefik/ssl/manual.crt
      keyFile: /etc/traefik/ssl/manual.key
"""


class FakeFetcher:
    """In-memory stand-in for RemoteFetcher.

    remote maps name -> (etag, cert, key); names missing from remote fail
    the check, names listed in broken fail the download.
    """

    def __init__(self, remote, broken=()):
        self.remote = dict(remote)
        self.broken = set(broken)
        self.checks = []
        self.retrieves = []

    def cert_url(self, name):
        return f"https://bucket.example/{name}.crt"

    def check_changed(self, name, known_fingerprint=None):
        self.checks.append(name)
        if name not in self.remote:
            raise CheckFailure(f"HEAD {self.cert_url(name)} returned 404", name=name, status=404)
        etag = self.remote[name][0]
        if etag and etag == known_fingerprint:
            return CheckResult(changed=False, fingerprint=etag)
        return CheckResult(changed=True, fingerprint=etag)

    def retrieve(self, name):
        self.retrieves.append(name)
        if name in self.broken:
            raise FetchFailure(f"{name}.key returned 403", name=name, status=403)
        _, cert, key = self.remote[name]
        return CertificateMaterial(cert=cert, key=key)


class RecordingObserver:
    def __init__(self):
        self.events = []

    def __call__(self, event):
        self.events.append(event)

    def kinds(self, name=None):
        return [e.kind for e in self.events if name is None or e.name == name]


@pytest.fixture
def tls_config(tmp_path: Path) -> Path:
    path = tmp_path / "_tls.yaml"
    path.write_text(TLS_CONFIG)
    return path


@pytest.fixture
def make_settings(tmp_path: Path, tls_config: Path):
    def _make(names=("a", "b"), **overrides):
        values = dict(
            cert_names=list(names),
            oss_base_url="https://bucket.example/",
            ssl_dir=str(tmp_path / "ssl"),
            tls_config_path=str(tls_config),
            db_path=str(tmp_path / "db.json"),
            cert_path_prefix="/etc/traefik/ssl/",
            max_workers=2,
        )
        values.update(overrides)
        return Settings(**values)

    return _make


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def make_fetcher():
    return FakeFetcher
