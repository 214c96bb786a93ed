"""Label and annotation matching expressions.

Two strictness levels share one atom syntax, ``key=value``:

* ``label_match`` (``label=`` / ``annotation=`` filters): one atom, values
  compared for equality.
* ``custom_match`` (``dogo=`` filter): a boolean expression, ``,`` is AND and
  ``||`` is OR, values compared by substring containment::

      dogo=a=b||c=d,e=f   ->   (a~b OR c~d) AND e~f

In both modes a trailing ``!`` on the key negates the atom (``key!=value``)
and a bare ``key`` means "key present with any value". A negated atom only
matches when the key is present with a different value; an absent key never
matches.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Mapping, Optional

WILDCARD = "*"
AND_SEPARATOR = ","
OR_SEPARATOR = "||"


@dataclass(frozen=True)
class LabelAtom:
    key: str
    value: str = WILDCARD
    negated: bool = False


def parse_atom(expression: str) -> LabelAtom:
    key, sep, value = expression.partition("=")
    if not sep:
        return LabelAtom(key=key)

    negated = key.endswith("!")
    if negated:
        key = key[:-1]
    return LabelAtom(key=key, value=value, negated=negated)


def _equals(actual: str, expected: str) -> bool:
    return actual == expected


def _contains(actual: str, expected: str) -> bool:
    return expected in actual


def _atom_matches(
    labels: Mapping[str, str],
    atom: LabelAtom,
    value_matches: Callable[[str, str], bool],
) -> bool:
    for k, v in labels.items():
        if k != atom.key:
            continue
        if atom.negated:
            if not value_matches(v, atom.value):
                return True
        elif atom.value == WILDCARD or value_matches(v, atom.value):
            return True
    return False


def label_match(labels: Optional[Mapping[str, str]], expression: str) -> bool:
    """Exact-match a single ``key[!]=value`` atom against a label map."""
    return _atom_matches(labels or {}, parse_atom(expression), _equals)


def custom_match(labels: Optional[Mapping[str, str]], expression: str) -> bool:
    """Evaluate a ``,``/``||`` boolean expression using substring matching."""
    labels = labels or {}
    for and_clause in expression.split(AND_SEPARATOR):
        alternatives = and_clause.split(OR_SEPARATOR)
        if not any(_atom_matches(labels, parse_atom(alt), _contains) for alt in alternatives):
            return False
    return True
