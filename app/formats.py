import re
import string
from urllib.parse import urlparse

from pydantic import HttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

ALPHABET = string.ascii_letters + string.digits
GENERATED_CODE_LENGTH = 7
CODE_PATTERN = re.compile(r"[A-Za-z0-9]{6,8}")
MAX_URL_LENGTH = 2048

# Path segments that are routes of their own and never resolve as codes
RESERVED = {"api", "code", "healthz", "_next", "favicon.ico"}

_http_url = TypeAdapter(HttpUrl)


def is_valid_url(value) -> bool:
    """Absolute http(s) URL with a host, short enough for the target_url column."""
    if not isinstance(value, str) or not value or len(value) > MAX_URL_LENGTH:
        return False
    try:
        _http_url.validate_python(value)
    except PydanticValidationError:
        return False
    # HttpUrl normalises "https:///host" into "https://host/"; the host must be written out
    try:
        return bool(urlparse(value).hostname)
    except ValueError:
        return False


def is_valid_code(value) -> bool:
    return isinstance(value, str) and CODE_PATTERN.fullmatch(value) is not None


def is_reserved_path(segment: str) -> bool:
    return segment in RESERVED or "." in segment or segment.startswith("_next")
