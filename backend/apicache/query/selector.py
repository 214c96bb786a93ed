"""Kubernetes label selector parsing and evaluation.

Supports the set-based and equality-based grammar accepted by the API server:

    app=web, tier!=cache, env in (prod,staging), !legacy, release, replicas>2

A selector that fails to parse raises ``SelectorParseError``; callers that
must never fail (see ``Query.selector``) fall back to ``EVERYTHING``.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional

_MAX_NAME_LENGTH = 63
_MAX_PREFIX_LENGTH = 253

_NAME_RE = re.compile(r"^[A-Za-z0-9]([-A-Za-z0-9_.]*[A-Za-z0-9])?$")
_PREFIX_RE = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$")
_KEY_AND_REST_RE = re.compile(r"^(?P<key>[^\s=!<>(),]+)\s*(?P<rest>.*)$", re.DOTALL)
_SET_RE = re.compile(r"^(?P<op>in|notin)\s*\((?P<values>[^()]*)\)$")


class SelectorParseError(ValueError):
    """Raised when a label selector string is malformed."""


class Operator(str, Enum):
    EQUALS = "="
    DOUBLE_EQUALS = "=="
    NOT_EQUALS = "!="
    IN = "in"
    NOT_IN = "notin"
    EXISTS = "exists"
    DOES_NOT_EXIST = "!"
    GREATER_THAN = "gt"
    LESS_THAN = "lt"


@dataclass(frozen=True)
class Requirement:
    key: str
    operator: Operator
    values: tuple[str, ...] = ()

    def matches(self, labels: Mapping[str, str]) -> bool:
        present = self.key in labels
        if self.operator in (Operator.EQUALS, Operator.DOUBLE_EQUALS, Operator.IN):
            return present and labels[self.key] in self.values
        if self.operator in (Operator.NOT_EQUALS, Operator.NOT_IN):
            return not present or labels[self.key] not in self.values
        if self.operator == Operator.EXISTS:
            return present
        if self.operator == Operator.DOES_NOT_EXIST:
            return not present
        if not present:
            return False
        try:
            actual = int(labels[self.key])
        except ValueError:
            return False
        expected = int(self.values[0])
        if self.operator == Operator.GREATER_THAN:
            return actual > expected
        return actual < expected

    def __str__(self) -> str:
        if self.operator == Operator.EXISTS:
            return self.key
        if self.operator == Operator.DOES_NOT_EXIST:
            return f"!{self.key}"
        if self.operator in (Operator.IN, Operator.NOT_IN):
            return f"{self.key} {self.operator.value} ({','.join(sorted(self.values))})"
        if self.operator == Operator.GREATER_THAN:
            return f"{self.key}>{self.values[0]}"
        if self.operator == Operator.LESS_THAN:
            return f"{self.key}<{self.values[0]}"
        return f"{self.key}{self.operator.value}{self.values[0]}"


@dataclass(frozen=True)
class LabelSelector:
    requirements: tuple[Requirement, ...] = field(default_factory=tuple)

    @property
    def empty(self) -> bool:
        return not self.requirements

    def matches(self, labels: Optional[Mapping[str, str]]) -> bool:
        labels = labels or {}
        return all(r.matches(labels) for r in self.requirements)

    def __str__(self) -> str:
        return ",".join(str(r) for r in self.requirements)


EVERYTHING = LabelSelector()


def selector_from_set(labels: Optional[Mapping[str, str]]) -> LabelSelector:
    """Build an equality selector from a label map, e.g. a Service's spec.selector."""
    requirements = [
        Requirement(key=k, operator=Operator.EQUALS, values=(v,))
        for k, v in sorted((labels or {}).items())
    ]
    return LabelSelector(requirements=tuple(requirements))


def parse_selector(text: Optional[str]) -> LabelSelector:
    """Parse a label selector string.

    Raises:
        SelectorParseError: on any syntax or validation error.
    """
    if text is None or not text.strip():
        return EVERYTHING

    requirements = [_parse_requirement(part.strip()) for part in _split_requirements(text)]
    requirements.sort(key=lambda r: r.key)
    return LabelSelector(requirements=tuple(requirements))


def _split_requirements(text: str) -> list[str]:
    """Split on commas that are not inside a parenthesised value set."""
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for ch in text:
        if ch == "(":
            depth += 1
            if depth > 1:
                raise SelectorParseError(f"nested parentheses in selector {text!r}")
        elif ch == ")":
            depth -= 1
            if depth < 0:
                raise SelectorParseError(f"unbalanced parentheses in selector {text!r}")
        if ch == "," and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
    if depth != 0:
        raise SelectorParseError(f"unbalanced parentheses in selector {text!r}")
    parts.append("".join(current))
    return parts


def _parse_requirement(text: str) -> Requirement:
    if not text:
        raise SelectorParseError("empty requirement")

    if text.startswith("!"):
        key = text[1:].strip()
        _validate_key(key)
        return Requirement(key=key, operator=Operator.DOES_NOT_EXIST)

    match = _KEY_AND_REST_RE.match(text)
    if not match:
        raise SelectorParseError(f"invalid requirement {text!r}")
    key, rest = match.group("key"), match.group("rest").strip()
    _validate_key(key)

    if not rest:
        return Requirement(key=key, operator=Operator.EXISTS)

    for token, operator in (("!=", Operator.NOT_EQUALS), ("==", Operator.DOUBLE_EQUALS), ("=", Operator.EQUALS)):
        if rest.startswith(token):
            value = rest[len(token):].strip()
            _validate_value(value)
            return Requirement(key=key, operator=operator, values=(value,))

    for token, operator in ((">", Operator.GREATER_THAN), ("<", Operator.LESS_THAN)):
        if rest.startswith(token):
            value = rest[1:].strip()
            try:
                int(value)
            except ValueError:
                raise SelectorParseError(f"{operator.value} requires an integer value, got {value!r}")
            return Requirement(key=key, operator=operator, values=(value,))

    set_match = _SET_RE.match(rest)
    if not set_match:
        raise SelectorParseError(f"unknown operator in requirement {text!r}")
    values = tuple(v.strip() for v in set_match.group("values").split(","))
    if values == ("",):
        raise SelectorParseError(f"empty value set in requirement {text!r}")
    for value in values:
        _validate_value(value)
    operator = Operator.IN if set_match.group("op") == "in" else Operator.NOT_IN
    return Requirement(key=key, operator=operator, values=values)


def _validate_key(key: str) -> None:
    if not key:
        raise SelectorParseError("empty label key")
    prefix, _, name = key.rpartition("/")
    if "/" in key:
        if not prefix or len(prefix) > _MAX_PREFIX_LENGTH or not _PREFIX_RE.match(prefix):
            raise SelectorParseError(f"invalid label key prefix in {key!r}")
    if len(name) > _MAX_NAME_LENGTH or not _NAME_RE.match(name):
        raise SelectorParseError(f"invalid label key {key!r}")


def _validate_value(value: str) -> None:
    if value == "":
        return
    if len(value) > _MAX_NAME_LENGTH or not _NAME_RE.match(value):
        raise SelectorParseError(f"invalid label value {value!r}")
