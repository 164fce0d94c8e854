"""Redaction of credentials and secrets before data reaches logs.

Field names are matched exactly after lower-casing; there is no substring or
pattern matching, so ``"password"`` is redacted while ``"password_hint"`` is not.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Iterable

REDACTED_VALUE: Final[str] = "******"

_DEFAULT_SENSITIVE_FIELDS: Final[frozenset[str]] = frozenset(
    {
        # passwords
        "password",
        "passwd",
        "pwd",
        "user_password",
        "userpassword",
        "pass",
        "passphrase",
        "new_password",
        "old_password",
        "current_password",
        "password_hash",
        "passwordhash",
        # secrets
        "secret",
        "secret_key",
        "secretkey",
        "client_secret",
        "clientsecret",
        "app_secret",
        "appsecret",
        "api_secret",
        "apisecret",
        # tokens
        "token",
        "auth_token",
        "authtoken",
        "access_token",
        "accesstoken",
        "bearer_token",
        "bearertoken",
        "refresh_token",
        "refreshtoken",
        "id_token",
        "idtoken",
        "csrf_token",
        "csrftoken",
        "session_token",
        "sessiontoken",
        "jwt",
        "jwt_token",
        "oauth_token",
        "oauthtoken",
        # keys
        "api_key",
        "apikey",
        "key",
        "private_key",
        "privatekey",
        "public_key",
        "publickey",
        "access_key",
        "accesskey",
        "secret_access_key",
        # sessions
        "session",
        "session_id",
        "sessionid",
        "sessid",
        # auth
        "auth",
        "authorization",
        "credentials",
        "credential",
        # misc
        "pin",
        "security_answer",
        "securityanswer",
    }
)

_DEFAULT_SENSITIVE_HEADERS: Final[frozenset[str]] = frozenset(
    {
        "authorization",
        "qiscus-secret-key",
        "qiscus-app-secret",
        "x-api-key",
        "x-auth-token",
        "cookie",
        "set-cookie",
        "proxy-authorization",
        "www-authenticate",
    }
)


def _lowered(names: Iterable[str]) -> frozenset[str]:
    return frozenset(name.lower() for name in names)


@dataclass(frozen=True, slots=True)
class SanitizerConfig:
    """Names whose values must never be logged verbatim."""

    sensitive_fields: frozenset[str] = field(default=_DEFAULT_SENSITIVE_FIELDS)
    sensitive_headers: frozenset[str] = field(default=_DEFAULT_SENSITIVE_HEADERS)

    def __post_init__(self) -> None:
        object.__setattr__(self, "sensitive_fields", _lowered(self.sensitive_fields))
        object.__setattr__(self, "sensitive_headers", _lowered(self.sensitive_headers))

    def with_fields(self, *names: str) -> SanitizerConfig:
        return SanitizerConfig(
            sensitive_fields=self.sensitive_fields | _lowered(names),
            sensitive_headers=self.sensitive_headers,
        )

    def with_headers(self, *names: str) -> SanitizerConfig:
        return SanitizerConfig(
            sensitive_fields=self.sensitive_fields,
            sensitive_headers=self.sensitive_headers | _lowered(names),
        )


DEFAULT_SANITIZER_CONFIG: Final[SanitizerConfig] = SanitizerConfig()


class Sanitizer:
    """Return redacted copies of structured payloads and header sets."""

    def __init__(self, config: SanitizerConfig = DEFAULT_SANITIZER_CONFIG) -> None:
        self._config = config

    @property
    def config(self) -> SanitizerConfig:
        return self._config

    def add_sensitive_fields(self, *names: str) -> None:
        self._config = self._config.with_fields(*names)

    def add_sensitive_headers(self, *names: str) -> None:
        self._config = self._config.with_headers(*names)

    def is_sensitive_field(self, name: str) -> bool:
        return name.lower() in self._config.sensitive_fields

    def is_sensitive_header(self, name: str) -> bool:
        return name.lower() in self._config.sensitive_headers

    def sanitize(self, data: object) -> object:
        """Redact sensitive fields at any depth.

        Mappings and sequences come back as redacted copies. ``str`` and
        ``bytes`` are treated as JSON documents: a parseable document comes
        back as compact JSON text, anything else is returned as given so that
        non-JSON payloads can still be logged.
        """

        if isinstance(data, str | bytes | bytearray):
            return self._sanitize_text(data)
        return self._sanitize_value(data)

    def sanitize_headers(
        self,
        headers: Mapping[str, str] | Mapping[str, list[str]] | None,
    ) -> dict[str, str | list[str]] | None:
        if headers is None:
            return None
        sanitized: dict[str, str | list[str]] = {}
        for name, value in headers.items():
            if not self.is_sensitive_header(name):
                sanitized[name] = list(value) if isinstance(value, list) else value
            elif isinstance(value, list):
                sanitized[name] = [REDACTED_VALUE]
            else:
                sanitized[name] = REDACTED_VALUE
        return sanitized

    def _sanitize_text(self, data: str | bytes | bytearray) -> object:
        if not data:
            return ""
        try:
            parsed = json.loads(data)
        except (UnicodeDecodeError, json.JSONDecodeError):
            return data
        return json.dumps(
            self._sanitize_value(parsed),
            ensure_ascii=False,
            separators=(",", ":"),
        )

    def _sanitize_value(self, value: object) -> object:
        if isinstance(value, Mapping):
            return {
                key: REDACTED_VALUE
                if isinstance(key, str) and self.is_sensitive_field(key)
                else self._sanitize_value(item)
                for key, item in value.items()
            }
        if isinstance(value, list | tuple):
            return [self._sanitize_value(item) for item in value]
        return value
