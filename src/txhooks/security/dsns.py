"""DSN parsing and redaction utilities."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qs, urlencode, urlparse

from .redaction import redact_query_params

_SPANNER_PATH_RE = re.compile(
    r"^/?projects/(?P<project>[^/]+)/instances/(?P<instance>[^/]+)/databases/(?P<database>[^/]+)/?$"
)


@dataclass
class DSNConfig:
    driver: str
    username: Optional[str]
    password: Optional[str]
    host: Optional[str]
    port: Optional[int]
    database: Optional[str]
    path: str
    query: dict[str, str]

    def redacted(self) -> str:
        """
        Return the DSN with credentials and sensitive query values masked.
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

        result = f"{self.driver}://{netloc}{self.path or ''}"
        if self.query:
            result += f"?{urlencode(redact_query_params(self.query), safe='*')}"
        return result

    def spanner_database_path(self) -> tuple[str, str, str]:
        """
        Split ``spanner:///projects/P/instances/I/databases/D`` into its ids.
        """

        match = _SPANNER_PATH_RE.match(self.path)
        if not match:
            raise ValueError(
                "Spanner DSN must look like spanner:///projects/<p>/instances/<i>/databases/<d>"
            )
        return match.group("project"), match.group("instance"), match.group("database")


def parse_dsn(dsn: str) -> DSNConfig:
    parsed = urlparse(dsn)
    if not parsed.scheme:
        raise ValueError(f"DSN is missing a scheme: {dsn!r}")
    query = {k: v[0] for k, v in parse_qs(parsed.query).items()}
    return DSNConfig(
        driver=parsed.scheme,
        username=parsed.username,
        password=parsed.password,
        host=parsed.hostname,
        port=parsed.port,
        database=parsed.path.lstrip("/") or None,
        path=parsed.path or "",
        query=query,
    )
