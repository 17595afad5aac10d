"""Secret redaction for log output."""

import logging
import os
import re

# Env vars whose values should be redacted from all output
_SECRET_ENV_VARS = [
    "LINODE_TOKEN",
    "LINODE_CLI_TOKEN",
]

_MIN_SECRET_LENGTH = 8  # skip short values to avoid false positives

_extra_secrets: set[str] = set()


def _collect_secret_values() -> set[str]:
    values = set(_extra_secrets)
    for var in _SECRET_ENV_VARS:
        val = os.environ.get(var, "")
        if len(val) >= _MIN_SECRET_LENGTH:
            values.add(val)
    return values


def _build_patterns(values: set[str]) -> list[re.Pattern]:
    # Longer values first so a secret containing another is masked whole
    return [re.compile(re.escape(v)) for v in sorted(values, key=len, reverse=True)]


# Lazy-initialized module cache
_patterns: list[re.Pattern] | None = None


def _get_patterns() -> list[re.Pattern]:
    global _patterns
    if _patterns is None:
        _patterns = _build_patterns(_collect_secret_values())
    return _patterns


def register_secret(value: str) -> None:
    """Redact *value* too, e.g. a token passed on the command line or read from a file."""
    global _patterns
    if value and len(value) >= _MIN_SECRET_LENGTH:
        _extra_secrets.add(value)
        _patterns = None


def redact_secrets(text: str) -> str:
    """Replace known secret values with '***'."""
    for pattern in _get_patterns():
        text = pattern.sub("***", text)
    return text


class SecretRedactingFilter(logging.Filter):
    """Logging filter that replaces secret values in log records with '***'.

    Handles both f-string messages (msg is pre-formatted) and
    %-style messages (msg + args).
    """

    def filter(self, record: logging.LogRecord) -> bool:
        patterns = _get_patterns()
        if patterns:
            record.msg = redact_secrets(str(record.msg))
            if record.args:
                if isinstance(record.args, dict):
                    record.args = {k: redact_secrets(v) if isinstance(v, str) else v for k, v in record.args.items()}
                elif isinstance(record.args, tuple):
                    record.args = tuple(redact_secrets(a) if isinstance(a, str) else a for a in record.args)
        return True
