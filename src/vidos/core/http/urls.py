from __future__ import annotations

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

GLOBAL_REGION = "global"


def build_management_base_url(service: str, region: str, domain: str) -> str:
    return f"https://{service}.management.{region}.{domain}"


def join_url(base: str, path: str) -> str:
    return base.rstrip("/") + path


def join_url_with_query(base: str, path: str, query: dict[str, str]) -> str:
    """Join ``base`` and ``path`` and merge non-blank ``query`` values.

    Keys are sorted in the resulting query string; blank values are skipped.
    """
    joined = join_url(base, path)
    try:
        parts = urlsplit(joined)
    except ValueError:
        return joined
    merged = dict(parse_qsl(parts.query, keep_blank_values=True))
    for key, value in query.items():
        if not value.strip():
            continue
        merged[key] = value
    encoded = urlencode(sorted(merged.items()))
    return urlunsplit((parts.scheme, parts.netloc, parts.path, encoded, parts.fragment))
