"""Match free-text transaction descriptions to budget keys.

Matching is a lookup of candidate strings inside a piece of text. The default
strategy is case-insensitive substring containment; :class:`PrefixMatcher` and
:class:`ExactKeyMatcher` are stricter drop-in alternatives for callers that
find substring matching too loose.

Candidates are tried in iteration order and the first hit wins. For budget
keys that order is the catalog's row order, so an earlier, shorter key such as
``"GAS"`` shadows a later ``"GASTRO"``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol


class Matcher(Protocol):
    """Strategy deciding whether ``candidate`` identifies ``text``."""

    def matches(self, candidate: str, text: str) -> bool: ...


class SubstringMatcher:
    """Candidate occurs anywhere in the text, ignoring case."""

    def matches(self, candidate: str, text: str) -> bool:
        return candidate.casefold() in text.casefold()


class PrefixMatcher:
    """Text starts with the candidate, ignoring case and leading blanks."""

    def matches(self, candidate: str, text: str) -> bool:
        return text.strip().casefold().startswith(candidate.casefold())


class ExactKeyMatcher:
    """Text equals the candidate, ignoring case and surrounding blanks."""

    def matches(self, candidate: str, text: str) -> bool:
        return text.strip().casefold() == candidate.strip().casefold()


DEFAULT_MATCHER: Matcher = SubstringMatcher()


def find_first_key(
    candidates: Iterable[str], text: str, *, matcher: Matcher = DEFAULT_MATCHER
) -> str | None:
    """Return the first candidate that ``matcher`` finds in ``text``.

    Blank candidates never match; an empty substring would otherwise match
    every description.
    """

    for candidate in candidates:
        if not candidate or not candidate.strip():
            continue
        if matcher.matches(candidate, text):
            return candidate
    return None


class MatchKind(Enum):
    IGNORED = "ignored"
    MATCHED = "matched"
    UNMATCHED = "unmatched"


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Outcome of matching one description.

    ``key`` is the budget key for ``MATCHED``, the raw description (case
    preserved) for ``UNMATCHED``, and ``None`` for ``IGNORED``.
    """

    kind: MatchKind
    key: str | None = None

    @classmethod
    def ignored(cls) -> MatchResult:
        return cls(MatchKind.IGNORED)

    @classmethod
    def matched(cls, key: str) -> MatchResult:
        return cls(MatchKind.MATCHED, key)

    @classmethod
    def unmatched(cls, description: str) -> MatchResult:
        return cls(MatchKind.UNMATCHED, description)

    @property
    def is_ignored(self) -> bool:
        return self.kind is MatchKind.IGNORED

    @property
    def bucket_key(self) -> str:
        """Key the transaction is filed under; ignored results have none."""

        if self.key is None:
            raise ValueError("an ignored transaction has no bucket key")
        return self.key


def match_description(
    description: str,
    candidate_keys: Iterable[str],
    ignore_list: Iterable[str],
    *,
    matcher: Matcher = DEFAULT_MATCHER,
) -> MatchResult:
    """Resolve ``description`` against the ignore list, then the budget keys.

    The ignore list always takes precedence: a description matching both an
    ignore entry and a budget key is ignored. Ignore entries are always
    substring-matched; ``matcher`` only applies to the budget keys.
    """

    if find_first_key(ignore_list, description) is not None:
        return MatchResult.ignored()
    key = find_first_key(candidate_keys, description, matcher=matcher)
    if key is not None:
        return MatchResult.matched(key)
    return MatchResult.unmatched(description)


__all__ = [
    "Matcher",
    "SubstringMatcher",
    "PrefixMatcher",
    "ExactKeyMatcher",
    "DEFAULT_MATCHER",
    "find_first_key",
    "MatchKind",
    "MatchResult",
    "match_description",
]
