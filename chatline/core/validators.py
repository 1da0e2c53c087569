"""
core/validators.py
------------------
Format checks shared by the user and message services.

Both wrap pydantic type adapters so the service layer can raise its own
ValidationError instead of pydantic's.

Media URLs follow the rules the mobile client has always relied on:
  - the scheme is optional and defaults to http; when present it must be
    http, https or ftp
  - the host is a public domain name with a top-level domain
    (cdn.example.com, not localhost) or an IP address
"""

import ipaddress

from pydantic import AnyUrl, EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from chatline.core.exceptions import ValidationError

MEDIA_URL_SCHEMES = ("http", "https", "ftp")

_email_adapter = TypeAdapter(EmailStr)
_url_adapter = TypeAdapter(AnyUrl)


def validate_email(email: str) -> str:
    try:
        return _email_adapter.validate_python(email)
    except PydanticValidationError:
        raise ValidationError("Invalid email format")


def _is_ip_address(host: str) -> bool:
    try:
        ipaddress.ip_address(host.strip("[]"))
    except ValueError:
        return False
    return True


def _has_top_level_domain(host: str) -> bool:
    labels = host.rstrip(".").split(".")
    if len(labels) < 2 or not all(labels):
        return False
    tld = labels[-1]
    return tld.startswith("xn--") or (len(tld) >= 2 and tld.isalpha())


def validate_media_url(url: str) -> str:
    """Accept e.g. https://cdn.example.com/a.png or cdn.example.com/a.png."""
    if not url or any(ch.isspace() for ch in url):
        raise ValidationError("Invalid media URL")

    candidate = url if "://" in url else f"http://{url}"
    try:
        parsed = _url_adapter.validate_python(candidate)
    except PydanticValidationError:
        raise ValidationError("Invalid media URL")

    if parsed.scheme not in MEDIA_URL_SCHEMES or not parsed.host:
        raise ValidationError("Invalid media URL")
    if not (_is_ip_address(parsed.host) or _has_top_level_domain(parsed.host)):
        raise ValidationError("Invalid media URL")
    return url
