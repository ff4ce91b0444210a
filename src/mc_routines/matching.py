"""Name matching shared by every find, dig, drop, craft and container operation."""

from __future__ import annotations

from typing import Iterable


def _field_matches(value: str | None, target: str, partial_match: bool) -> bool:
    if not value:
        return False
    candidate = value.lower()
    return candidate == target or (partial_match and target in candidate)


def names_match(target_name: str, candidate: object, *, partial_match: bool = False) -> bool:
    """Compare ``target_name`` with the candidate's username, name and display name.

    Matching is case-insensitive. In partial mode a field matches when it contains
    ``target_name`` (``"log"`` matches ``"spruce_log"``). Any matching field is enough;
    a candidate without any of the three fields never matches.
    """
    target = target_name.lower()
    if _field_matches(getattr(candidate, "username", None), target, partial_match):
        return True
    return _field_matches(getattr(candidate, "name", None), target, partial_match) or _field_matches(
        getattr(candidate, "display_name", None), target, partial_match
    )


def matches_any(target_names: Iterable[str], candidate: object, *, partial_match: bool = False) -> bool:
    """True when no names are given or any of them matches the candidate.

    A bare string is treated as a single name.
    """
    names = [target_names] if isinstance(target_names, str) else list(target_names)
    if not names:
        return True
    return any(names_match(name, candidate, partial_match=partial_match) for name in names)


def display_name_of(candidate: object) -> str | None:
    return getattr(candidate, "display_name", None) or getattr(candidate, "name", None)
