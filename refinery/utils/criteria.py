"""Rule criteria — deterministic acceptance checks on a draft.

Each check returns a CriterionCheck. Unmet checks carry a message that tells
the refiner exactly what to change.
"""

import re

from refinery.state import CriterionCheck

# Pictographs, dingbats, flags, variation selectors and ZWJ sequences.
_EMOJI_RE = re.compile(
    "["
    "\U0001F1E6-\U0001F1FF"
    "\U0001F300-\U0001FAFF"
    "\u2600-\u27BF"
    "\u2B50\u2B55"
    "\uFE0F\u200D"
    "]"
)
_HASHTAG_RE = re.compile(r"(?<![\w&])#[A-Za-z_]\w*")


def check_length(text: str, min_length: int, max_length: int) -> CriterionCheck:
    """Check the character count of text against inclusive bounds."""
    count = len(text)

    if count < min_length:
        needed = min_length - count
        return CriterionCheck(
            "length",
            False,
            f"Draft is too short ({count} characters). Add {needed} more characters "
            f"to reach the minimum length of {min_length}.",
        )
    if count > max_length:
        excess = count - max_length
        return CriterionCheck(
            "length",
            False,
            f"Draft is too long ({count} characters). Remove {excess} characters "
            f"to meet the maximum length of {max_length}.",
        )
    return CriterionCheck("length", True, f"Length is good ({count} characters).")


def check_required_phrases(text: str, phrases: list[str]) -> list[CriterionCheck]:
    """One check per phrase that must appear (case-insensitive)."""
    lowered = text.lower()
    checks = []
    for phrase in phrases:
        found = phrase.lower() in lowered
        checks.append(CriterionCheck(
            f"requires:{phrase}",
            found,
            "" if found else f"Mention '{phrase}' somewhere in the draft.",
        ))
    return checks


def check_forbidden_phrases(text: str, phrases: list[str]) -> list[CriterionCheck]:
    """One check per phrase that must not appear (case-insensitive)."""
    lowered = text.lower()
    checks = []
    for phrase in phrases:
        found = phrase.lower() in lowered
        checks.append(CriterionCheck(
            f"forbids:{phrase}",
            not found,
            f"Remove every occurrence of '{phrase}'." if found else "",
        ))
    return checks


def check_no_emojis(text: str) -> CriterionCheck:
    found = sorted(set(_EMOJI_RE.findall(text)) - {"\uFE0F", "\u200D"})
    if found:
        return CriterionCheck(
            "no_emojis",
            False,
            f"Remove all emojis ({len(found)} distinct found: {' '.join(found)}).",
        )
    return CriterionCheck("no_emojis", True)


def check_no_hashtags(text: str) -> CriterionCheck:
    found = list(dict.fromkeys(_HASHTAG_RE.findall(text)))
    if found:
        return CriterionCheck(
            "no_hashtags",
            False,
            f"Remove all hashtags: {', '.join(found)}.",
        )
    return CriterionCheck("no_hashtags", True)


def run_rule_checks(text: str, criteria: dict) -> list[CriterionCheck]:
    """Run every configured rule check, in a fixed order.

    Order: length, required phrases, forbidden phrases, emojis, hashtags.
    """
    max_length = criteria.get("max_length")
    checks = [
        check_length(
            text,
            criteria.get("min_length") or 0,
            float("inf") if max_length is None else max_length,
        )
    ]
    checks.extend(check_required_phrases(text, criteria.get("required_phrases") or []))
    checks.extend(check_forbidden_phrases(text, criteria.get("forbidden_phrases") or []))
    if criteria.get("forbid_emojis", True):
        checks.append(check_no_emojis(text))
    if criteria.get("forbid_hashtags", True):
        checks.append(check_no_hashtags(text))
    return checks
