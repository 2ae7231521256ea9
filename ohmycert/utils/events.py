"""
Structured sync events and the default logging observer
"""

import logging
from collections import namedtuple

logger = logging.getLogger(__name__)

SyncEvent = namedtuple('SyncEvent', ['kind', 'name', 'detail'], defaults=(None, None))

CHECKING = 'checking'
UNCHANGED = 'unchanged'
CHANGED = 'changed'
CHECK_FAILED = 'check_failed'
FETCHED = 'fetched'
FETCH_FAILED = 'fetch_failed'
WRITTEN = 'written'
WRITE_FAILED = 'write_failed'
PATCHED = 'patched'
PATCH_UNCHANGED = 'patch_unchanged'
COMMITTED = 'committed'
NOTHING_TO_DO = 'nothing_to_do'

FAILURE_KINDS = {CHECK_FAILED, FETCH_FAILED, WRITE_FAILED}

_MESSAGES = {
    CHECKING: "Checking {name}",
    UNCHANGED: "{name}: ETag unchanged, skipping",
    CHANGED: "{name}: changed, downloading certificate",
    CHECK_FAILED: "{name}: check failed: {detail}",
    FETCHED: "{name}: downloaded certificate and key",
    FETCH_FAILED: "{name}: download failed: {detail}",
    WRITTEN: "{name}: written to {detail}",
    WRITE_FAILED: "{name}: write failed: {detail}",
    PATCHED: "Updated TLS config {detail}",
    PATCH_UNCHANGED: "TLS config {detail} already up to date",
    COMMITTED: "State saved to {detail}",
    NOTHING_TO_DO: "No new or changed certificates to download",
}


def format_event(event):
    template = _MESSAGES.get(event.kind, "{kind} {name} {detail}")
    return template.format(kind=event.kind, name=event.name, detail=event.detail)


def log_event(event):
    """Default observer: send the event to the logging module"""
    if event.kind in FAILURE_KINDS:
        logger.error(format_event(event))
    elif event.kind == CHECKING:
        logger.debug(format_event(event))
    else:
        logger.info(format_event(event))
