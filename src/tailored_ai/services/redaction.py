"""Secret redaction for repository text forwarded to the LLM.

README files and user notes occasionally contain tokens or connection
strings.  Everything matched here is replaced before a prompt is built.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Mapping

_SECRET_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    ("AWS_KEY", re.compile(r"AKIA[0-9A-Z]{16}")),
    ("GITHUB_TOKEN", re.compile(r"(?:gh[pousr]_[A-Za-z0-9_]{36,}|github_pat_[A-Za-z0-9_]{22,})")),
    ("OPENAI_KEY", re.compile(r"\bsk-[A-Za-z0-9\-_]{20,}")),
    ("GOOGLE_KEY", re.compile(r"AIza[0-9A-Za-z\-_]{35}")),
    (
        "ASSIGNED_SECRET",
        re.compile(
            r"(?:api[_\-]?key|secret[_\-]?key|access[_\-]?token|auth[_\-]?token|password)"
            r"""\s*[:=]\s*['"]?[^\s'"]{8,}['"]?""",
            re.IGNORECASE,
        ),
    ),
    ("PRIVATE_KEY", re.compile(r"-----BEGIN (?:RSA |EC |DSA |OPENSSH )?PRIVATE KEY-----")),
    ("JWT", re.compile(r"eyJ[A-Za-z0-9_-]{10,}\.[A-Za-z0-9_-]{10,}\.[A-Za-z0-9_-]{10,}")),
    (
        "CONN_STRING",
        re.compile(r"(?:postgres(?:ql)?|mysql|mongodb)(?:\+\w+)?://[^\s]{10,}", re.IGNORECASE),
    ),
]

REDACTED = "[REDACTED]"


@dataclass(frozen=True, slots=True)
class Redaction:
    text: str
    count: int
    labels: tuple[str, ...] = ()


def redact(text: str) -> Redaction:
    """Replace every secret-looking match in *text* with ``[REDACTED]``."""
    count = 0
    labels: list[str] = []
    for label, pattern in _SECRET_PATTERNS:
        text, num = pattern.subn(REDACTED, text)
        if num:
            count += num
            labels.append(label)
    return Redaction(text=text, count=count, labels=tuple(labels))


def redact_fields(fields: Mapping[str, str | None]) -> tuple[dict[str, str], int]:
    """Redact each non-empty value; returns the cleaned mapping and total hits."""
    cleaned: dict[str, str] = {}
    total = 0
    for key, value in fields.items():
        if not value:
            cleaned[key] = ""
            continue
        result = redact(value)
        cleaned[key] = result.text
        total += result.count
    return cleaned, total
