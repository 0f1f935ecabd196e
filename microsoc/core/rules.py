from __future__ import annotations

from typing import Optional

from .models import Event, Severity

CRITICAL_SCORE = 80
HIGH_SCORE = 50
MEDIUM_SCORE = 20


def classify_severity(abuse_score: int) -> Severity:
    """Map a 0-100 abuse score to a severity level."""
    if abuse_score > CRITICAL_SCORE:
        return Severity.CRITICAL
    if abuse_score > HIGH_SCORE:
        return Severity.HIGH
    if abuse_score > MEDIUM_SCORE:
        return Severity.MEDIUM
    return Severity.LOW


def spike_description(event: Event) -> str:
    return f"Traffic spike from {event.source_address} ({event.origin_region})"


def critical_description(event: Event) -> str:
    return f"Critical threat from {event.origin_region} (score {event.abuse_score})"


def escalation_description(event: Event, is_spike: bool) -> Optional[str]:
    """
    Decide which incident, if any, an event should raise.

    Rules are evaluated in order and the first match wins:

    1. A traffic spike from the event's address, regardless of score.
    2. A Critical-severity event.

    Returns the candidate incident description, or None when the event does
    not qualify. Deduplication against open incidents is the escalator's job.
    """
    if is_spike:
        return spike_description(event)
    if event.severity == Severity.CRITICAL:
        return critical_description(event)
    return None
