"""
Bank Name Inference

Remote accounts only carry a free-text name ("Chase Business Checking",
"Acme Credit Union - Savings", ...). The dashboard groups accounts by
institution, so we derive a display grouping key from that name.

DESIGN DECISION: Known institutions live in an ordered table of
InstitutionRule records rather than in the matching code. Adding a bank
means adding a row, not touching `infer_bank_name`.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence


@dataclass(frozen=True)
class InstitutionRule:
    """
    One known institution.

    `classifier`, when set, receives the lower-cased account name and
    returns the display name to use (e.g. to split business accounts
    from personal ones).
    """
    display_name: str
    keywords: tuple[str, ...]
    classifier: Optional[Callable[[str], str]] = field(default=None, compare=False)

    def matches(self, lowered_name: str) -> bool:
        return any(keyword in lowered_name for keyword in self.keywords)

    def resolve(self, lowered_name: str) -> str:
        if self.classifier is None:
            return self.display_name
        return self.classifier(lowered_name)


CHASE_BUSINESS_HINTS = ("business", "biz", "ink", "commercial")


def _classify_chase(lowered_name: str) -> str:
    if any(hint in lowered_name for hint in CHASE_BUSINESS_HINTS):
        return "Chase Business"
    return "Chase Personal"


KNOWN_INSTITUTIONS: tuple[InstitutionRule, ...] = (
    InstitutionRule("Chase", ("chase", "jpmorgan", "jp morgan", "jpm"), _classify_chase),
    InstitutionRule("Selco", ("selco",)),
    InstitutionRule("PayPal", ("paypal", "pay pal")),
    InstitutionRule("Venmo", ("venmo",)),
)

NAME_SEPARATORS = (" - ", " • ", " | ", " / ")

ACCOUNT_TYPE_WORDS = frozenset({
    "checking",
    "savings",
    "credit",
    "loan",
    "brokerage",
    "investment",
    "cash",
    "prepaid",
    "money",
    "market",
})


def _prefix_before_separator(account_name: str) -> Optional[str]:
    # Separators are tried in table order, not by position in the name
    for separator in NAME_SEPARATORS:
        head, found, _ = account_name.partition(separator)
        if found and head.strip():
            return head.strip()
    return None


def _prefix_before_type_word(account_name: str) -> Optional[str]:
    words = [word for word in account_name.split(" ") if word]
    if len(words) > 1 and words[-1].lower() in ACCOUNT_TYPE_WORDS:
        return " ".join(words[:-1])
    return None


def infer_bank_name(
    account_name: str,
    fallback: str,
    institutions: Sequence[InstitutionRule] = KNOWN_INSTITUTIONS,
) -> str:
    """
    Derive a display grouping key from a raw account name.

    Rules, first match wins:
    1. Known institution keyword (case-insensitive substring)
    2. Text before the first separator (" - ", " • ", " | ", " / ")
    3. Every word but a trailing account-type word ("... Checking")
    4. The fallback, unchanged
    """
    lowered = account_name.lower()

    for institution in institutions:
        if institution.matches(lowered):
            return institution.resolve(lowered)

    prefix = _prefix_before_separator(account_name)
    if prefix:
        return prefix

    prefix = _prefix_before_type_word(account_name)
    if prefix:
        return prefix

    return fallback
