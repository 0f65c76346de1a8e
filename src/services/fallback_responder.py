"""Deterministic rule-based replies for demo mode.

Used whenever no chat provider can be reached: no credential configured, or
the upstream refused the request before streaming began.  The caller can't
tell the difference from a widget deliberately running in demo mode.

Rules are checked in order against the lowercased last user message; the
first match wins.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

_GREETING = re.compile(r"^(hi|hello|hey)")

GENERIC_REPLY = (
    "Thanks for your message! I'm currently running in demo mode. "
    "For more detailed assistance, please contact our team directly."
)


@dataclass(frozen=True)
class _Rule:
    name: str
    matches: Callable[[str], bool]
    template: str


def _contains(*needles: str) -> Callable[[str], bool]:
    return lambda text: any(needle in text for needle in needles)


_RULES: tuple[_Rule, ...] = (
    _Rule(
        "greeting",
        lambda text: _GREETING.match(text) is not None,
        "Hello! Welcome to {business_name}. How can I help you today?",
    ),
    _Rule(
        "hours",
        _contains("hours", "open"),
        "For our business hours, please check our website or contact us directly.",
    ),
    _Rule(
        "contact",
        _contains("contact", "email", "phone"),
        "You can reach us through our contact page. How else can I help?",
    ),
    _Rule(
        "pricing",
        _contains("price", "cost"),
        "For pricing information, please contact our team for a customized quote.",
    ),
    _Rule(
        "thanks",
        _contains("thank"),
        "You're welcome! Is there anything else I can help with?",
    ),
    _Rule(
        "farewell",
        _contains("bye", "see you"),
        "Goodbye! Thanks for visiting {business_name}.",
    ),
    _Rule(
        "help",
        _contains("help", "support"),
        "I'm happy to help! You can ask me about {business_name}, "
        "our hours, pricing, or how to get in touch.",
    ),
)


class FallbackResponder:
    """Pattern-matching responder for when no LLM is available."""

    def reply(self, message: str, business_name: str) -> str:
        """Return the canned reply for *message*, or the generic demo reply."""
        lowered = message.lower().strip()
        for rule in _RULES:
            if rule.matches(lowered):
                return rule.template.format(business_name=business_name)
        return GENERIC_REPLY

    def match_rule(self, message: str) -> str | None:
        """Return the name of the rule *message* triggers, or ``None``."""
        lowered = message.lower().strip()
        for rule in _RULES:
            if rule.matches(lowered):
                return rule.name
        return None
