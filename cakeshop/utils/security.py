"""Security helpers: PII masking for log lines."""
import re
from typing import Any

_PHONE = re.compile(r"\+?\d[\d\s-]{7,}\d")
_EMAIL = re.compile(r"[\w.+-]+@[\w-]+\.[\w.]+")


def mask_pii(value: Any) -> str:
    """Redact phone numbers and e-mail addresses before a value is logged."""
    text = str(value) if value is not None else ""
    masked = _PHONE.sub("[REDACTED]", text)
    return _EMAIL.sub("[EMAIL]", masked)
