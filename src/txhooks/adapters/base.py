"""
Transactional client protocol, connection configuration and adapter errors.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional, Protocol

from ..persistence.transaction import TransactionScope
from ..security.dsns import DSNConfig, parse_dsn
from ..utils.config import DSN_ENV_VAR


class AdapterError(RuntimeError):
    """Base error for client adapter failures."""


class AdapterConfigurationError(AdapterError):
    """Raised when configuration or required dependencies are invalid."""


class AdapterConnectionError(AdapterError):
    """Raised when establishing or using a connection fails."""


class AdapterExecutionError(AdapterError):
    """Raised when applying a write or statement fails."""


class NotFoundError(AdapterExecutionError):
    """Raised when an update targets a row that does not exist."""


class AlreadyExistsError(AdapterExecutionError):
    """Raised when an insert targets a key that already exists."""


class ConflictError(AdapterExecutionError):
    """Raised when the backend aborts the transaction because of contention."""


TransactionFunc = Callable[[TransactionScope], Any]


_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(value: str, *, key: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise AdapterConfigurationError(f"Invalid boolean value for '{key}': {value!r}")


def _parse_number(value: str, *, key: str, kind: type) -> Any:
    try:
        return kind(value)
    except ValueError as exc:
        raise AdapterConfigurationError(
            f"Invalid {kind.__name__} value for '{key}': {value!r}"
        ) from exc


@dataclass
class SSLConfig:
    mode: str | None = None
    rootcert: str | None = None
    cert: str | None = None
    key: str | None = None
    ca: str | None = None
    check_hostname: bool | None = None

    _POSTGRES_KEYS = {"sslmode": "mode", "sslrootcert": "rootcert", "sslcert": "cert", "sslkey": "key"}
    _MYSQL_KEYS = {"ssl_ca": "ca", "ssl_cert": "cert", "ssl_key": "key"}

    @classmethod
    def pop_from(cls, query: dict[str, str]) -> "SSLConfig | None":
        ssl = cls()
        found = False
        for source in (cls._POSTGRES_KEYS, cls._MYSQL_KEYS):
            for query_key, attr in source.items():
                if query_key in query:
                    setattr(ssl, attr, query.pop(query_key))
                    found = True
        if "ssl_check_hostname" in query:
            ssl.check_hostname = _parse_bool(query.pop("ssl_check_hostname"), key="ssl_check_hostname")
            found = True
        return ssl if found else None

    def postgres_options(self) -> dict[str, Any]:
        return {
            query_key: getattr(self, attr)
            for query_key, attr in self._POSTGRES_KEYS.items()
            if getattr(self, attr)
        }

    def mysql_options(self) -> dict[str, Any]:
        ssl: dict[str, Any] = {
            attr: getattr(self, attr) for attr in self._MYSQL_KEYS.values() if getattr(self, attr)
        }
        if self.check_hostname is not None:
            ssl["check_hostname"] = self.check_hostname
        return {"ssl": ssl} if ssl else {}


@dataclass
class ConnectionConfig:
    """
    Normalized connection settings for a transactional client.

    ``timeout`` is the default transaction timeout in seconds used when
    ``run_in_transaction`` is called without one.
    """

    url: str
    timeout: float | None = None
    isolation_level: str | None = None
    options: dict[str, Any] = field(default_factory=dict)
    ssl: SSLConfig | None = None
    dsn: DSNConfig | None = None
    source: str | None = None

    @classmethod
    def from_dsn(cls, dsn: str, **kwargs: Any) -> "ConnectionConfig":
        parsed = parse_dsn(dsn)
        query = dict(parsed.query)

        timeout = None
        if "timeout" in query:
            timeout = _parse_number(query.pop("timeout"), key="timeout", kind=float)
        isolation_level = query.pop("isolation_level", None)
        ssl = SSLConfig.pop_from(query)

        options: dict[str, Any] = {}
        for key, value in query.items():
            options[key] = _parse_number(value, key=key, kind=int) if key == "connect_timeout" else value
        options.update(kwargs.pop("options", None) or {})

        return cls(
            url=dsn,
            dsn=parsed,
            timeout=kwargs.pop("timeout", timeout),
            isolation_level=kwargs.pop("isolation_level", isolation_level),
            ssl=kwargs.pop("ssl", ssl),
            options=options,
            **kwargs,
        )

    @classmethod
    def from_env(cls, env_var: str = DSN_ENV_VAR, **kwargs: Any) -> "ConnectionConfig":
        value = os.getenv(env_var)
        if not value:
            raise AdapterConfigurationError(f"Environment variable {env_var} is not set")
        return cls.from_dsn(value, source=env_var, **kwargs)

    @property
    def scheme(self) -> str:
        if self.dsn:
            return self.dsn.driver
        return self.url.split(":", 1)[0]

    def redacted_dsn(self) -> str:
        if self.dsn:
            return self.dsn.redacted()
        return self.url

    def descriptive_label(self) -> str:
        redacted = self.redacted_dsn()
        if self.source:
            return f"{self.source} ({redacted})"
        return redacted


class TransactionalClient(Protocol):
    """
    Interface the mutation dispatcher consumes.

    ``run_in_transaction`` executes ``func`` inside one read-write transaction,
    commits the buffered writes and returns the commit timestamp. Any exception
    raised by ``func`` aborts the transaction and propagates.
    """

    def run_in_transaction(
        self, func: TransactionFunc, *, timeout: Optional[float] = None
    ) -> datetime: ...

    def close(self) -> None: ...
