"""
Set-based label selector parsing and matching.

Accepts the same expressions as ``kubectl get pods -l``::

    app=web,tier!=cache
    environment in (production, qa),track notin (canary)
    partition,!experimental
    replicas>2
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Mapping, Optional, Tuple

from .exceptions import InvalidSelectorSyntaxError


class Operator(str, Enum):
    """Requirement operators."""

    EQUALS = "="
    NOT_EQUALS = "!="
    IN = "in"
    NOT_IN = "notin"
    EXISTS = "exists"
    DOES_NOT_EXIST = "!"
    GREATER_THAN = "gt"
    LESS_THAN = "lt"


_NAME_MAX_LENGTH = 63
_PREFIX_MAX_LENGTH = 253
_NAME_RE = re.compile(r"^([A-Za-z0-9][-A-Za-z0-9_.]*)?[A-Za-z0-9]$")
_DNS_LABEL_RE = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")

# Token kinds
_IDENT = "identifier"
_EOS = "end of string"
_SPECIAL_TOKENS = {
    "!": "!",
    "!=": "!=",
    "=": "=",
    "==": "==",
    ",": ",",
    "(": "(",
    ")": ")",
    ">": ">",
    "<": "<",
}
_SPECIAL_CHARS = set("!=,()<>")
# Operator words; only usable as values
_KEYWORDS = ("in", "notin")


def _tokenize(expression: str) -> List[Tuple[str, str]]:
    tokens: List[Tuple[str, str]] = []
    i = 0
    length = len(expression)
    while i < length:
        ch = expression[i]
        if ch.isspace():
            i += 1
            continue
        if ch in _SPECIAL_CHARS:
            # Longest match: "!=" and "==" before "!" and "="
            pair = expression[i:i + 2]
            if pair in _SPECIAL_TOKENS:
                tokens.append((pair, pair))
                i += 2
            else:
                tokens.append((ch, ch))
                i += 1
            continue
        start = i
        while i < length and not expression[i].isspace() and expression[i] not in _SPECIAL_CHARS:
            i += 1
        tokens.append((_IDENT, expression[start:i]))
    tokens.append((_EOS, ""))
    return tokens


def _validate_key(key: str):
    prefix, sep, name = key.rpartition("/")
    if sep:
        if not prefix or len(prefix) > _PREFIX_MAX_LENGTH:
            raise InvalidSelectorSyntaxError(f"invalid label key {key!r}: bad prefix")
        for label in prefix.split("."):
            if not _DNS_LABEL_RE.match(label):
                raise InvalidSelectorSyntaxError(
                    f"invalid label key {key!r}: prefix must be a DNS subdomain"
                )
    if not name or len(name) > _NAME_MAX_LENGTH or not _NAME_RE.match(name):
        raise InvalidSelectorSyntaxError(f"invalid label key {key!r}")


def _validate_value(value: str):
    if value == "":
        return
    if len(value) > _NAME_MAX_LENGTH or not _NAME_RE.match(value):
        raise InvalidSelectorSyntaxError(f"invalid label value {value!r}")


def _parse_int(value: str) -> Optional[int]:
    try:
        return int(value, 10)
    except ValueError:
        return None


@dataclass(frozen=True)
class Requirement:
    """A single ``key <op> values`` clause."""

    key: str
    operator: Operator
    values: Tuple[str, ...] = ()

    def matches(self, labels: Mapping[str, str]) -> bool:
        present = self.key in labels
        if self.operator in (Operator.EQUALS, Operator.IN):
            return present and labels[self.key] in self.values
        if self.operator in (Operator.NOT_EQUALS, Operator.NOT_IN):
            return not present or labels[self.key] not in self.values
        if self.operator == Operator.EXISTS:
            return present
        if self.operator == Operator.DOES_NOT_EXIST:
            return not present
        if not present:
            return False
        actual = _parse_int(labels[self.key])
        if actual is None:
            return False
        bound = int(self.values[0])
        if self.operator == Operator.GREATER_THAN:
            return actual > bound
        return actual < bound

    def __str__(self) -> str:
        if self.operator == Operator.EXISTS:
            return self.key
        if self.operator == Operator.DOES_NOT_EXIST:
            return f"!{self.key}"
        if self.operator in (Operator.IN, Operator.NOT_IN):
            return f"{self.key} {self.operator.value} ({','.join(self.values)})"
        symbol = {
            Operator.EQUALS: "=",
            Operator.NOT_EQUALS: "!=",
            Operator.GREATER_THAN: ">",
            Operator.LESS_THAN: "<",
        }[self.operator]
        return f"{self.key}{symbol}{self.values[0]}"


class _Parser:
    """Recursive-descent parser over the token list."""

    def __init__(self, expression: str):
        self.expression = expression
        self.tokens = _tokenize(expression)
        self.position = 0

    def _error(self, message: str) -> InvalidSelectorSyntaxError:
        return InvalidSelectorSyntaxError(
            f"unable to parse selector {self.expression!r}: {message}"
        )

    def _lookahead(self) -> Tuple[str, str]:
        return self.tokens[self.position]

    def _consume(self) -> Tuple[str, str]:
        token = self.tokens[self.position]
        self.position += 1
        return token

    def parse(self) -> List[Requirement]:
        requirements: List[Requirement] = []
        kind, _ = self._lookahead()
        if kind == _EOS:
            return requirements
        while True:
            kind, literal = self._lookahead()
            if kind not in (_IDENT, "!"):
                raise self._error(f"found {literal!r}, expected: !, identifier")
            requirements.append(self._parse_requirement())
            kind, literal = self._consume()
            if kind == _EOS:
                return requirements
            if kind != ",":
                raise self._error(f"found {literal!r}, expected: ',' or end of string")
            kind, literal = self._lookahead()
            if kind not in (_IDENT, "!"):
                raise self._error(f"found {literal or kind!r}, expected: identifier after ','")

    def _parse_requirement(self) -> Requirement:
        negated = False
        kind, literal = self._consume()
        if kind == "!":
            negated = True
            kind, literal = self._consume()
        if kind != _IDENT:
            raise self._error(f"found {literal or kind!r}, expected: identifier")
        key = literal
        if key in _KEYWORDS:
            raise self._error(f"found {key!r}, expected: identifier, not a keyword")
        _validate_key(key)

        next_kind, _ = self._lookahead()
        if next_kind in (_EOS, ","):
            operator = Operator.DOES_NOT_EXIST if negated else Operator.EXISTS
            return Requirement(key, operator)
        if negated:
            raise self._error(f"'!' must be followed by a key only, got more after {key!r}")

        operator = self._parse_operator()
        if operator in (Operator.IN, Operator.NOT_IN):
            values = self._parse_values()
        else:
            values = (self._parse_exact_value(),)

        for value in values:
            _validate_value(value)
        if operator in (Operator.GREATER_THAN, Operator.LESS_THAN):
            if _parse_int(values[0]) is None:
                raise self._error(
                    f"for 'gt', 'lt' operators, the value must be an integer, got {values[0]!r}"
                )
        return Requirement(key, operator, tuple(sorted(set(values))))

    def _parse_operator(self) -> Operator:
        kind, literal = self._consume()
        if kind in ("=", "=="):
            return Operator.EQUALS
        if kind == "!=":
            return Operator.NOT_EQUALS
        if kind == ">":
            return Operator.GREATER_THAN
        if kind == "<":
            return Operator.LESS_THAN
        if kind == _IDENT and literal == "in":
            return Operator.IN
        if kind == _IDENT and literal == "notin":
            return Operator.NOT_IN
        raise self._error(
            f"found {literal or kind!r}, expected: =, !=, ==, in, notin, >, <"
        )

    def _parse_exact_value(self) -> str:
        kind, literal = self._lookahead()
        if kind in (_EOS, ","):
            return ""
        self._consume()
        if kind != _IDENT:
            raise self._error(f"found {literal!r}, expected: identifier")
        return literal

    def _parse_values(self) -> Tuple[str, ...]:
        kind, literal = self._consume()
        if kind != "(":
            raise self._error(f"found {literal or kind!r}, expected: '('")
        values: List[str] = []
        current = ""
        while True:
            kind, literal = self._consume()
            if kind == _IDENT:
                if current:
                    raise self._error(f"found {literal!r}, expected: ',' or ')'")
                current = literal
            elif kind == ",":
                values.append(current)
                current = ""
            elif kind == ")":
                values.append(current)
                return tuple(values)
            else:
                raise self._error(f"found {literal or kind!r}, expected: ',', ')' or identifier")


class LabelSelector:
    """An immutable conjunction of label requirements."""

    def __init__(self, requirements: Tuple[Requirement, ...] = ()):
        self._requirements = tuple(sorted(requirements, key=lambda r: (r.key, str(r))))

    @classmethod
    def parse(cls, expression: str) -> "LabelSelector":
        """
        Parse a selector expression.

        Raises:
            InvalidSelectorSyntaxError: If the expression does not parse
        """
        return cls(tuple(_Parser(expression).parse()))

    @property
    def requirements(self) -> Tuple[Requirement, ...]:
        return self._requirements

    def is_empty(self) -> bool:
        return not self._requirements

    def matches(self, labels: Optional[Mapping[str, str]]) -> bool:
        labels = labels or {}
        return all(req.matches(labels) for req in self._requirements)

    def __str__(self) -> str:
        return ",".join(str(req) for req in self._requirements)

    def __repr__(self) -> str:
        return f"LabelSelector({str(self)!r})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, LabelSelector):
            return NotImplemented
        return self._requirements == other._requirements

    def __hash__(self) -> int:
        return hash(self._requirements)
