"""
HEAD/GET access to certificates in the object-storage bucket
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

import requests

from ..common.errors import CheckFailure, FetchFailure

logger = logging.getLogger(__name__)

CERT_SUFFIX = '.crt'
KEY_SUFFIX = '.key'


@dataclass
class CheckResult:
    changed: bool
    fingerprint: Optional[str]


@dataclass
class CertificateMaterial:
    cert: bytes
    key: bytes


class RemoteFetcher:
    """Talks to {base_url}{name}.crt and {base_url}{name}.key"""

    def __init__(self, base_url, timeout=10, session=None):
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def cert_url(self, name):
        return f"{self.base_url}{name}{CERT_SUFFIX}"

    def key_url(self, name):
        return f"{self.base_url}{name}{KEY_SUFFIX}"

    def check_changed(self, name, known_fingerprint=None):
        """HEAD the certificate and compare its ETag with known_fingerprint.

        Unchanged only when the remote returns an ETag equal to the known one;
        a response without an ETag always counts as changed.
        Raises CheckFailure on transport errors, timeouts and non-2xx responses.
        """
        url = self.cert_url(name)
        try:
            response = self.session.head(url, timeout=self.timeout, allow_redirects=True)
        except requests.RequestException as e:
            raise CheckFailure(f"HEAD {url} failed: {e}", name=name)

        if not response.ok:
            raise CheckFailure(f"HEAD {url} returned {response.status_code}",
                               name=name, status=response.status_code)

        etag = response.headers.get('ETag')
        if etag and known_fingerprint is not None and etag == known_fingerprint:
            return CheckResult(changed=False, fingerprint=etag)
        return CheckResult(changed=True, fingerprint=etag or None)

    def _get(self, name, url):
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise FetchFailure(f"GET {url} failed: {e}", name=name)
        if not response.ok:
            raise FetchFailure(f"GET {url} returned {response.status_code}",
                               name=name, status=response.status_code)
        return response.content

    def retrieve(self, name):
        """Download certificate and key together; both or neither"""
        with ThreadPoolExecutor(max_workers=2) as pool:
            cert_future = pool.submit(self._get, name, self.cert_url(name))
            key_future = pool.submit(self._get, name, self.key_url(name))
            cert = cert_future.result()
            key = key_future.result()
        logger.debug(f"{name}: got {len(cert)} bytes of certificate and {len(key)} bytes of key")
        return CertificateMaterial(cert=cert, key=key)
