"""Regex detection of personal data in generated text."""

import re
from datetime import date

from models.schemas.safety import PIIFinding, PIIReport

EMAIL_RE = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
PHONE_RE = re.compile(r"(?<!\d)(?:\+?\d{1,3}[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}(?!\d)")
SSN_RE = re.compile(r"\b\d{3}-\d{2}-\d{4}\b")
CARD_RE = re.compile(r"\b\d{4}[\s-]?\d{4}[\s-]?\d{4}[\s-]?\d{4}\b")
DATE_RE = re.compile(r"\b\d{1,2}[/-]\d{1,2}[/-]\d{2,4}\b|\b\d{4}-\d{1,2}-\d{1,2}\b")

_ISSUES = {
    "email": "Email addresses detected",
    "phone": "Phone numbers detected",
    "ssn": "Social Security Numbers detected",
    "credit_card": "Credit card numbers detected",
    "dob": "Potential dates of birth detected",
}


def _looks_like_birth_date(value: str) -> bool:
    parts = re.split(r"[/-]", value)
    if len(parts) != 3:
        return False
    year_part = parts[0] if len(parts[0]) == 4 else parts[2]
    if len(year_part) != 4:
        return False
    return 1900 <= int(year_part) <= date.today().year


def detect_pii(content: str) -> PIIReport:
    if not content:
        return PIIReport()

    findings: list[PIIFinding] = []
    ssns = SSN_RE.findall(content)
    cards = CARD_RE.findall(content)
    findings += [PIIFinding(type="email", value=v) for v in EMAIL_RE.findall(content)]
    # SSNs and card numbers also match the phone pattern
    taken = " ".join(ssns + cards)
    findings += [
        PIIFinding(type="phone", value=m.group().strip())
        for m in PHONE_RE.finditer(content)
        if m.group().strip() not in taken
    ]
    findings += [PIIFinding(type="ssn", value=v) for v in ssns]
    findings += [PIIFinding(type="credit_card", value=v) for v in cards]
    findings += [
        PIIFinding(type="dob", value=v) for v in DATE_RE.findall(content) if _looks_like_birth_date(v)
    ]

    found_types = []
    for f in findings:
        if f.type not in found_types:
            found_types.append(f.type)
    return PIIReport(
        has_pii=bool(findings),
        findings=findings,
        issues=[_ISSUES[t] for t in found_types],
    )
