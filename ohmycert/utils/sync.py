"""
Certificate sync: decide what changed, download it, deploy it, record it.

Order for a run:
    1. load state (name -> ETag)
    2. HEAD every configured name, download the ones whose ETag moved
    3. write downloaded files
    4. patch the TLS config with the full configured list
    5. commit ETags of the names whose files were written

Nothing is committed unless steps 3 and 4 finished, so a recorded ETag
always means its files and config entry are on disk.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List

from jinja2 import TemplateError

from ..common.errors import CheckFailure, ConfigError, FetchFailure
from . import config_patcher
from .deploy import DeploymentWriter, load_fragment_template, render_fragment
from .events import (
    SyncEvent, CHECKING, UNCHANGED, CHANGED, CHECK_FAILED, FETCHED,
    FETCH_FAILED, PATCHED, PATCH_UNCHANGED, COMMITTED, NOTHING_TO_DO, log_event,
)
from .fetcher import RemoteFetcher
from .state_store import StateStore

logger = logging.getLogger(__name__)


class CertStatus:
    UNCHECKED = 'unchecked'
    CHECK_FAILED = 'check_failed'
    UNCHANGED = 'unchanged'
    CHANGED = 'changed'
    FETCH_FAILED = 'fetch_failed'
    FETCHED = 'fetched'
    WRITE_FAILED = 'write_failed'
    DEPLOYED = 'deployed'

    FAILED = (CHECK_FAILED, FETCH_FAILED, WRITE_FAILED)


@dataclass
class SyncResult:
    statuses: Dict[str, str]
    fragment: str
    config_changed: bool
    state: Dict[str, str] = field(default_factory=dict)

    @property
    def failed(self) -> List[str]:
        return [name for name, status in self.statuses.items() if status in CertStatus.FAILED]

    @property
    def deployed(self) -> List[str]:
        return [name for name, status in self.statuses.items() if status == CertStatus.DEPLOYED]

    @property
    def ok(self) -> bool:
        return not self.failed


def _check_one(name, known, fetcher, observer, fetch=True):
    """Run one name through check (and download). Returns (status, material, etag)"""
    observer(SyncEvent(CHECKING, name, fetcher.cert_url(name)))
    try:
        result = fetcher.check_changed(name, known)
    except CheckFailure as e:
        observer(SyncEvent(CHECK_FAILED, name, str(e)))
        return CertStatus.CHECK_FAILED, None, None

    if not result.changed:
        observer(SyncEvent(UNCHANGED, name, result.fingerprint))
        return CertStatus.UNCHANGED, None, result.fingerprint

    observer(SyncEvent(CHANGED, name, result.fingerprint))
    if not fetch:
        return CertStatus.CHANGED, None, result.fingerprint

    try:
        material = fetcher.retrieve(name)
    except FetchFailure as e:
        observer(SyncEvent(FETCH_FAILED, name, str(e)))
        return CertStatus.FETCH_FAILED, None, None

    observer(SyncEvent(FETCHED, name, result.fingerprint))
    return CertStatus.FETCHED, material, result.fingerprint


def check_and_fetch(names, state, fetcher, observer=log_event, max_workers=1, fetch=True):
    """Check every name against state and download the changed ones.

    Names are independent, so they are processed on a thread pool; the
    returned mappings are always in the order of names.

    Returns (fetched, fingerprints, statuses):
        fetched: name -> CertificateMaterial for names downloaded this run
        fingerprints: name -> ETag for downloaded names that had one
        statuses: name -> CertStatus for every name
    """
    names = list(names)
    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as pool:
        outcomes = list(pool.map(
            lambda name: _check_one(name, state.get(name), fetcher, observer, fetch),
            names,
        ))

    fetched = {}
    fingerprints = {}
    statuses = {}
    for name, (status, material, etag) in zip(names, outcomes):
        statuses[name] = status
        if status != CertStatus.FETCHED:
            continue
        fetched[name] = material
        if etag:
            fingerprints[name] = etag
    return fetched, fingerprints, statuses


def build_fragment(settings):
    """Render the TLS config fragment for every configured certificate"""
    try:
        template_source = load_fragment_template(settings.fragment_template)
        return render_fragment(settings.cert_names, settings.cert_path_prefix, template_source)
    except OSError as e:
        raise ConfigError(f"Could not read fragment template {settings.fragment_template}: {e}")
    except TemplateError as e:
        raise ConfigError(f"Invalid fragment template: {e}")


def run_sync(settings, fetcher=None, store=None, writer=None, observer=log_event):
    """Sync all configured certificates and return a SyncResult.

    Per-certificate check, download and write failures are reported through
    observer and in the result. PatchStructureFailure, and StateIOFailure on
    commit, propagate; the state file is not touched in either case.
    """
    fetcher = fetcher or RemoteFetcher(settings.oss_base_url, timeout=settings.timeout)
    store = store or StateStore(settings.db_path)
    writer = writer or DeploymentWriter(settings.ssl_dir)

    # A broken template should stop the run before anything is written
    fragment = build_fragment(settings)

    state = store.load()
    fetched, fingerprints, statuses = check_and_fetch(
        settings.cert_names, state, fetcher, observer, max_workers=settings.max_workers
    )

    if not fetched:
        observer(SyncEvent(NOTHING_TO_DO))
    else:
        logger.info(f"Deploying {len(fetched)} certificate(s)")

    deployed, failed = writer.write_all(fetched, observer)
    for name in deployed:
        statuses[name] = CertStatus.DEPLOYED
    for name in failed:
        statuses[name] = CertStatus.WRITE_FAILED

    config_changed = config_patcher.patch(settings.tls_config_path, fragment)
    observer(SyncEvent(PATCHED if config_changed else PATCH_UNCHANGED, None, settings.tls_config_path))

    new_state = dict(state)
    for name in deployed:
        if name in fingerprints:
            new_state[name] = fingerprints[name]
        else:
            # Remote gave no ETag; an older one would be stale
            new_state.pop(name, None)
    store.commit(new_state)
    observer(SyncEvent(COMMITTED, None, store.path))

    return SyncResult(statuses=statuses, fragment=fragment,
                      config_changed=config_changed, state=new_state)


def check_only(settings, fetcher=None, store=None, observer=log_event):
    """Report which certificates would be downloaded, without side effects"""
    fetcher = fetcher or RemoteFetcher(settings.oss_base_url, timeout=settings.timeout)
    store = store or StateStore(settings.db_path)
    state = store.load()
    _, _, statuses = check_and_fetch(
        settings.cert_names, state, fetcher, observer,
        max_workers=settings.max_workers, fetch=False,
    )
    return statuses
