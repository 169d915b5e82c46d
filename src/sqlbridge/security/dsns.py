"""DSN parsing and redaction utilities."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import parse_qs, unquote, urlencode, urlparse

from .redaction import redact_query_params


@dataclass
class DSNConfig:
    driver: str
    username: Optional[str]
    password: Optional[str]
    host: Optional[str]
    port: Optional[int]
    database: Optional[str]
    path: str
    query: dict[str, str] = field(default_factory=dict)

    def redacted(self) -> str:
        """
        Return the DSN with credentials redacted but structure preserved.
        """

        netloc = ""
        if self.username:
            netloc += self.username
            if self.password:
                netloc += ":***"
            netloc += "@"
        if self.host:
            netloc += self.host
        if self.port:
            netloc += f":{self.port}"

        query_string = urlencode(redact_query_params(self.query)) if self.query else ""

        # keep the double slash even when there is no netloc (sqlite:///path)
        result = f"{self.driver}://"
        if netloc:
            result += netloc
        result += self.path or ""
        if query_string:
            result += f"?{query_string}"
        return result


def parse_dsn(dsn: str) -> DSNConfig:
    parsed = urlparse(dsn)
    if not parsed.scheme:
        raise ValueError(f"DSN is missing a driver scheme: {dsn!r}")
    query = {k: v[0] for k, v in parse_qs(parsed.query).items()}
    return DSNConfig(
        driver=parsed.scheme,
        username=unquote(parsed.username) if parsed.username else None,
        password=unquote(parsed.password) if parsed.password else None,
        host=parsed.hostname,
        port=parsed.port,
        database=parsed.path.lstrip("/") or None,
        path=parsed.path or "",
        query=query,
    )
