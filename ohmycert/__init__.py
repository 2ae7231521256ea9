"""
ohmycert - TLS certificate sync for reverse proxies

Pulls certificates from an object-storage bucket, skips the ones whose ETag
has not moved, and rewrites the marked region of the proxy's TLS config.
"""

__version__ = "0.1.0"
__author__ = "ohmycert Team"

from .utils.sync import run_sync

__all__ = ['run_sync']
