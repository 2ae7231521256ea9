"""
Write downloaded certificates to the SSL directory and render the TLS
config fragment that points the proxy at them
"""

import logging
import os

from jinja2 import Template

from ..common.errors import WriteFailure
from ..common.file_utils import atomic_write_many
from .events import SyncEvent, WRITTEN, WRITE_FAILED, log_event

logger = logging.getLogger(__name__)

CERT_MODE = 0o644
KEY_MODE = 0o600

# Traefik dynamic configuration, tls.certificates entries
DEFAULT_FRAGMENT_TEMPLATE = """\
{% for name in names %}
    - certFile: {{ prefix }}{{ name }}.crt # {{ name }}
      keyFile: {{ prefix }}{{ name }}.key
{% endfor %}
"""


class DeploymentWriter:
    """Places {name}.crt and {name}.key verbatim into ssl_dir"""

    def __init__(self, ssl_dir):
        self.ssl_dir = ssl_dir

    def cert_path(self, name):
        return os.path.join(self.ssl_dir, f"{name}.crt")

    def key_path(self, name):
        return os.path.join(self.ssl_dir, f"{name}.key")

    def write(self, name, material):
        try:
            os.makedirs(self.ssl_dir, exist_ok=True)
            atomic_write_many([
                (self.cert_path(name), material.cert, CERT_MODE),
                (self.key_path(name), material.key, KEY_MODE),
            ])
        except OSError as e:
            raise WriteFailure(f"Could not write files for {name} in {self.ssl_dir}: {e}", name=name)

    def write_all(self, fetched, observer=log_event):
        """Write every fetched certificate, returning (deployed, failed) names"""
        deployed = []
        failed = []
        for name, material in fetched.items():
            try:
                self.write(name, material)
            except WriteFailure as e:
                observer(SyncEvent(WRITE_FAILED, name, str(e)))
                failed.append(name)
                continue
            observer(SyncEvent(WRITTEN, name, self.ssl_dir))
            deployed.append(name)
        return deployed, failed

    def has_files(self, name):
        return os.path.isfile(self.cert_path(name)) and os.path.isfile(self.key_path(name))


def load_fragment_template(path=None):
    """Return template source from path, or the built-in Traefik template"""
    if not path:
        return DEFAULT_FRAGMENT_TEMPLATE
    with open(path, 'r') as f:
        return f.read()


def render_fragment(names, prefix, template_source=None):
    """Render one block per name, in the order given"""
    template = Template(template_source or DEFAULT_FRAGMENT_TEMPLATE,
                        trim_blocks=True, keep_trailing_newline=True)
    return template.render(names=list(names), prefix=prefix)
