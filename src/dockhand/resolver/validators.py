"""Validators and normalizers for resolvable parameters.

Every function here is pure: validators take a candidate string and return
a bool, normalizers return the transformed string.
"""

import re
from typing import Tuple


_LABEL_RE = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$")
_TLD_RE = re.compile(r"^[a-z]{2,}$")

MAX_DOMAIN_LENGTH = 253

YES_ANSWERS = ("y", "yes")
NO_ANSWERS = ("n", "no")


def sanitize(value: str) -> str:
    """Strip a trailing carriage return and outer whitespace."""
    return value.rstrip("\r\n").strip()


def lowercase(value: str) -> str:
    return value.lower()


def is_dns_label(value: str) -> bool:
    """Single DNS label: 1-63 chars of a-z, 0-9 and '-', no hyphen at either end."""
    return bool(_LABEL_RE.match(value))


def is_domain(value: str) -> bool:
    """Dot-separated DNS labels with an alphabetic final label of 2+ chars."""
    if not value or len(value) > MAX_DOMAIN_LENGTH:
        return False
    labels = value.split(".")
    if len(labels) < 2:
        return False
    if not all(is_dns_label(label) for label in labels):
        return False
    return bool(_TLD_RE.match(labels[-1]))


def is_email(value: str) -> bool:
    """Non-empty local part, '@', and a valid domain on the right-hand side."""
    local, sep, domain = value.rpartition("@")
    if not sep or not local or "@" in local:
        return False
    if any(ch.isspace() for ch in local):
        return False
    return is_domain(domain.lower())


def is_yes_no(value: str) -> bool:
    return value.lower() in YES_ANSWERS + NO_ANSWERS


def is_yes(value: str) -> bool:
    return value.lower() in YES_ANSWERS


def split_fqdn(fqdn: str) -> Tuple[str, str]:
    """Split a fully qualified name into (subdomain, domain) at the first dot."""
    subdomain, sep, domain = fqdn.partition(".")
    if not sep:
        raise ValueError(f"'{fqdn}' has no domain part")
    return subdomain, domain


def join_fqdn(subdomain: str, domain: str) -> str:
    return f"{subdomain}.{domain}"


def is_fqdn(value: str) -> bool:
    """A domain with a subdomain label in front of an at-least-two-label base."""
    return is_domain(value) and value.count(".") >= 2
