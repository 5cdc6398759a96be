"""Built-in redaction rules applied to every file."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

# (?i) makes a pattern case insensitive
# groups named `mask` are replaced with the placeholder
# groups named `drop` are removed

IPV4_PATTERN = (
    r"(?P<mask>\b(?P<drop>25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\."
    r"(?P<drop>25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\."
    r"(?P<drop>25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\."
    r"(?P<drop>25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\b)"
)

# env entries serialized inside a JSON string, e.g. a last-applied-configuration annotation
_ESCAPED_ENV = r'(?i)(\\\"name\\\":\\\"[^\"]*{name}\\\",\\\"value\\\":\\\")(?P<mask>[^\"]*)(\\\")'

URL_CREDENTIALS_PATTERN = (
    r'(?i)(https?|ftp)(:\/\/)(?P<mask>[^:\"\/]+){1}(:)(?P<mask>[^@\"\/]+){1}'
    r'(?P<host>@[^:\/\s\"]+){1}(?P<port>:[\d]+)?'
)
MYSQL_TCP_DSN_PATTERN = (
    r'\b(?P<mask>[^:\"\/]*){1}(:)(?P<mask>[^:\"\/]*){1}(@tcp\()(?P<mask>[^:\"\/]*){1}'
    r'(?P<port>:[\d]*)?(\)\/)(?P<mask>[\w\d\S_-]+){1}\b'
)
_CONNECTION_FIELD = r"(?i)({field} *= *)(?P<mask>[^\;]+)(;)"

# env entries in pretty-printed JSON, name on one line and value on the next
_ENV_NAME = r'(?i)"name": *"{name}"'
ENV_VALUE_PATTERN = r'(?i)("value": *")(?P<mask>.*[^\"]*)(")'


@dataclass(frozen=True, slots=True)
class BuiltinRule:
    name: str
    pattern: str
    selector: Optional[str] = None

    @property
    def multi_line(self) -> bool:
        return self.selector is not None


def _escaped_env(name: str, key: str) -> BuiltinRule:
    return BuiltinRule(f"builtin.escaped-env.{name}", _ESCAPED_ENV.format(name=key))


def _connection_field(name: str, field: str) -> BuiltinRule:
    return BuiltinRule(f"builtin.connection-string.{name}", _CONNECTION_FIELD.format(field=field))


def _env_pair(name: str, key: str) -> BuiltinRule:
    return BuiltinRule(f"builtin.env-pair.{name}", ENV_VALUE_PATTERN, selector=_ENV_NAME.format(name=key))


SINGLE_LINE_RULES: Tuple[BuiltinRule, ...] = (
    BuiltinRule("builtin.ipv4", IPV4_PATTERN),
    _escaped_env("aws-secret-access-key", r"SECRET_?ACCESS_?KEY"),
    _escaped_env("aws-access-key-id", r"ACCESS_?KEY_?ID"),
    _escaped_env("aws-owner-account", r"OWNER_?ACCOUNT"),
    _escaped_env("password", r"password[^\"]*"),
    _escaped_env("token", r"token[^\"]*"),
    _escaped_env("database", r"database[^\"]*"),
    _escaped_env("user", r"user[^\"]*"),
    BuiltinRule("builtin.url-credentials", URL_CREDENTIALS_PATTERN),
    BuiltinRule("builtin.mysql-tcp-dsn", MYSQL_TCP_DSN_PATTERN),
    _connection_field("data-source", "Data Source"),
    _connection_field("location", "location"),
    _connection_field("user-id", "User ID"),
    _connection_field("password", "password"),
    _connection_field("server", "Server"),
    _connection_field("database", "Database"),
    _connection_field("uid", "Uid"),
    _connection_field("pwd", "Pwd"),
)

MULTI_LINE_RULES: Tuple[BuiltinRule, ...] = (
    _env_pair("aws-secret-access-key", r"[^\"]*SECRET_?ACCESS_?KEY[^\"]*"),
    _env_pair("aws-access-key-id", r"[^\"]*ACCESS_?KEY_?ID[^\"]*"),
    _env_pair("aws-owner-account", r"[^\"]*OWNER_?ACCOUNT[^\"]*"),
    _env_pair("password", r".*password[^\"]*"),
    _env_pair("token", r".*token[^\"]*"),
    _env_pair("database", r".*database[^\"]*"),
    _env_pair("user", r".*user[^\"]*"),
)

BUILTIN_RULES: Tuple[BuiltinRule, ...] = SINGLE_LINE_RULES + MULTI_LINE_RULES


__all__ = [
    "BUILTIN_RULES",
    "BuiltinRule",
    "MULTI_LINE_RULES",
    "SINGLE_LINE_RULES",
]
