"""
Exceptions raised while syncing certificates
"""


class OhMyCertError(Exception):
    """Base class for all ohmycert failures"""

    def __init__(self, message, name=None):
        super().__init__(message)
        self.name = name


class ConfigError(OhMyCertError):
    """Configuration is missing or invalid"""


class CheckFailure(OhMyCertError):
    """Metadata (HEAD) check for a certificate did not succeed"""

    def __init__(self, message, name=None, status=None):
        super().__init__(message, name=name)
        self.status = status


class FetchFailure(OhMyCertError):
    """Certificate or key download did not succeed"""

    def __init__(self, message, name=None, status=None):
        super().__init__(message, name=name)
        self.status = status


class WriteFailure(OhMyCertError):
    """Writing a file to disk failed"""


class PatchStructureFailure(OhMyCertError):
    """The marker region of the TLS config is missing or malformed"""


class StateIOFailure(OhMyCertError):
    """The state file could not be written"""
