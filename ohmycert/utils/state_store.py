"""
Persisted certificate name -> ETag mapping (db.json)
"""

import json
import logging

from ..common.errors import StateIOFailure
from ..common.file_utils import atomic_write

logger = logging.getLogger(__name__)

CERTS_KEY = 'certs'


class StateStore:
    """JSON state file holding the last synced ETag per certificate.

    Layout: {"certs": {"<name>": "<etag>", ...}}. Unknown top-level keys
    are kept as they are across load/commit.
    """

    def __init__(self, path):
        self.path = path
        self._document = {}

    def load(self):
        """Return the stored mapping; a missing or corrupt file yields {}"""
        self._document = {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                document = json.load(f)
        except FileNotFoundError:
            logger.info(f"No state file at {self.path}, starting fresh")
            return {}
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read state file {self.path}: {e}; treating as empty")
            return {}

        if not isinstance(document, dict):
            logger.warning(f"State file {self.path} is not an object; treating as empty")
            return {}

        self._document = document
        certs = document.get(CERTS_KEY)
        if not isinstance(certs, dict):
            return {}
        if not all(isinstance(k, str) and isinstance(v, str) for k, v in certs.items()):
            logger.warning(f"State file {self.path} has malformed certs entries; treating as empty")
            return {}
        return dict(certs)

    def commit(self, certs):
        """Replace the stored mapping with certs"""
        document = dict(self._document)
        document[CERTS_KEY] = dict(certs)
        data = (json.dumps(document, indent=2) + '\n').encode('utf-8')
        try:
            atomic_write(self.path, data)
        except OSError as e:
            raise StateIOFailure(f"Could not write state file {self.path}: {e}")
        self._document = document
