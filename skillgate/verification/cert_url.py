"""Allow-list check for the signing certificate URL.

Runs before anything is downloaded, so an attacker cannot point us at a
certificate they control and sign the body with its key.
"""

from __future__ import annotations

import posixpath
from urllib.parse import urlsplit

from skillgate.verification.models import ValidatorConfig

DEFAULT_HTTPS_PORT = 443


def is_valid_cert_url(url: str, config: ValidatorConfig) -> bool:
    try:
        parts = urlsplit(url)
    except ValueError:
        return False

    if parts.scheme != "https":
        return False

    host = config.allowed_cert_host.lower()
    if parts.netloc.lower() not in (host, f"{host}:{DEFAULT_HTTPS_PORT}"):
        return False

    # "/echo.api/../x" must not sneak past the prefix check
    path = parts.path
    if not path:
        return False
    normalized = posixpath.normpath(path)
    if path.endswith("/") and not normalized.endswith("/"):
        normalized += "/"

    return normalized.startswith(config.allowed_cert_path_prefix)
