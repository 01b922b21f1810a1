# src/check_certs/render.py

"""
Text, markdown, JSON and CSV output for certificate records.

Plain text and markdown are Jinja2 templates rendered over the record list,
available in the template as ``records``. A user template replaces the plain
text layout; a malformed one raises TemplateRenderError instead of falling
back to the default.
"""

import csv
import io
import json
import logging
import os
from typing import Optional, Sequence

from jinja2 import Environment, StrictUndefined, TemplateError

from check_certs.exceptions import TemplateRenderError
from check_certs.tls_checker import CertificateRecord

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = """\
{% for cert in records %}DomainName: {{ cert.domain_name }}
IP:         {{ cert.ip }}
Issuer:     {{ cert.issuer }}
NotBefore:  {{ cert.not_before }}
NotAfter:   {{ cert.not_after }}
CommonName: {{ cert.common_name }}
SANs:       {{ cert.sans | list }}
SerialNumber: {{ cert.serial_number }}
SignatureAlgorithm: {{ cert.signature_algorithm }}
PublicKeyAlgorithm: {{ cert.public_key_algorithm }}
PublicKey:  {{ cert.public_key }}
Error:      {{ cert.error }}

{% endfor %}"""

MARKDOWN_TEMPLATE = """\
DomainName | IP | Issuer | NotBefore | NotAfter | CN | SANs | Error
--- | --- | --- | --- | --- | --- | --- | ---
{% for cert in records %}{{ cert.domain_name }} | {{ cert.ip }} | {{ cert.issuer }} | \
{{ cert.not_before }} | {{ cert.not_after }} | {{ cert.common_name }} | \
{% for san in cert.sans %}{{ san | escape_star }}<br/>{% endfor %} | {{ cert.error }}
{% endfor %}"""

CSV_HEADERS = [
    "DomainName", "IP", "Issuer", "CommonName", "SANs", "NotBefore", "NotAfter",
    "SerialNumber", "SignatureAlgorithm", "PublicKeyAlgorithm", "PublicKey", "Error",
]


def escape_star(value: str) -> str:
    """Escape '*' so markdown does not read it as emphasis."""
    return value.replace("*", "\\*")


def _environment() -> Environment:
    env = Environment(undefined=StrictUndefined, keep_trailing_newline=True, autoescape=False)
    env.filters['escape_star'] = escape_star
    return env


def _render(source: str, records: Sequence[CertificateRecord], name: str) -> str:
    try:
        template = _environment().from_string(source)
        return template.render(records=list(records))
    except TemplateError as e:
        raise TemplateRenderError(f"Invalid {name} template: {e}")
    except Exception as e:
        raise TemplateRenderError(f"Error rendering {name} template: {e}")


def load_user_template(value: Optional[str]) -> Optional[str]:
    """
    Resolve a user template option.

    If ``value`` names an existing path, its contents are the template and
    read errors propagate (a directory raises ``IsADirectoryError``).
    Otherwise ``value`` itself is taken as the template text. An empty
    value means no override.
    """
    if not value:
        return None
    path = os.path.abspath(value)
    if not os.path.exists(path):
        return value
    with open(path, encoding='utf-8') as f:
        logger.debug(f"Loaded output template from {path}")
        return f.read()


def render_text(records: Sequence[CertificateRecord], template: Optional[str] = None) -> str:
    if template:
        return _render(template, records, "user")
    return _render(DEFAULT_TEMPLATE, records, "default")


def render_markdown(records: Sequence[CertificateRecord]) -> str:
    return _render(MARKDOWN_TEMPLATE, records, "markdown")


def render_json(records: Sequence[CertificateRecord], indent: Optional[int] = None) -> str:
    return json.dumps([record.to_dict() for record in records], indent=indent, ensure_ascii=False)


def render_csv(records: Sequence[CertificateRecord]) -> str:
    out = io.StringIO()
    writer = csv.writer(out)
    writer.writerow(CSV_HEADERS)
    for record in records:
        writer.writerow([
            record.domain_name, record.ip, record.issuer, record.common_name,
            " ".join(record.sans), record.not_before, record.not_after,
            record.serial_number, record.signature_algorithm,
            record.public_key_algorithm, record.public_key, record.error,
        ])
    return out.getvalue()

