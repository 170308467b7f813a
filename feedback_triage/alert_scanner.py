"""Keyword scanner that raises safety alerts for submitted feedback.

Pure and offline: no model, no network. Matching is a case-insensitive raw
substring check, so "abuser" also matches "abuse".
"""
from typing import List, Optional, Sequence

from config import config
from schemas import AlertHit, Severity


def severity_for(keyword: str, high_keywords: Optional[Sequence[str]] = None) -> Severity:
    """Map a matched keyword to its alert severity.

    The scanner only ever produces high or medium; low is reserved for
    alerts created by other means.
    """
    if high_keywords is None:
        high_keywords = config.HIGH_SEVERITY_KEYWORDS
    return Severity.HIGH if keyword in high_keywords else Severity.MEDIUM


def scan(
    text: str,
    keywords: Optional[Sequence[str]] = None,
    high_keywords: Optional[Sequence[str]] = None,
) -> List[AlertHit]:
    """Scan feedback text against the alert lexicon.

    Args:
        text: Feedback text, any length
        keywords: Lexicon to scan with (default from config)
        high_keywords: Keywords that map to high severity (default from config)

    Returns:
        One AlertHit per matched keyword, in lexicon order. Empty when
        nothing matches.
    """
    if keywords is None:
        keywords = config.ALERT_KEYWORDS

    lowered = text.lower()
    return [
        AlertHit(alert_type=keyword, severity=severity_for(keyword, high_keywords))
        for keyword in keywords
        if keyword in lowered
    ]
