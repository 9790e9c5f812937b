"""Segment compiler (source of truth).

Turns one declared path into a compiled pattern: a matcher, an interpolator
for reverse routing and a precedence score. Patterns are compiled once, when
the route map is built; nothing here keeps state between calls.

Segments
--------
A path is split on ``/``; empty chunks (leading, trailing or doubled slashes)
are dropped. Each remaining chunk becomes a :class:`Segment` of one kind:

- ``literal``: plain text, compared verbatim.
- ``param``: contains ``:name`` (``name`` is ``\\w+``). Text before the colon
  is a literal prefix, text after the name a literal suffix
  (``abc:def.html`` captures ``def``). An input segment matches when it
  carries both affixes and leaves a non-empty capture.
- ``wildcard``: exactly ``*``. Only legal as the last segment. Captures the
  rest of the input, still joined with ``/``, under the key ``"*"``; it needs
  at least one remaining input segment.

A parameter name may appear only once per pattern.

Scoring
-------
``score = sum(WEIGHTS[kind] / (1 + index))`` with weights ``8`` (literal),
``4`` (param) and ``-2`` (wildcard). The empty pattern scores ``0.0``, which
ranks it above a bare wildcard. Scores only order siblings.

Localized paths
---------------
A mapping ``{locale: pattern}`` compiles every variant independently and
requires the same segment count and kind profile (and therefore the same
score) everywhere. Matching picks the variant named by the locale parameter
already captured by an ancestor; without it the pattern does not match.
Reversing reads the same parameter from the caller's params.

Errors
------
Every problem found while compiling raises :class:`RouteDefinitionError`
naming the owning route. Problems found while interpolating raise
:class:`ReverseRouteError`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

from .errors import ReverseRouteError, RouteDefinitionError

__all__ = [
    "LITERAL",
    "PARAM",
    "WILDCARD",
    "WILDCARD_KEY",
    "WEIGHTS",
    "Segment",
    "PathPattern",
    "LocalizedPattern",
    "compile_path",
    "split_path",
]

LITERAL = "literal"
PARAM = "param"
WILDCARD = "wildcard"
WILDCARD_KEY = "*"

WEIGHTS: Dict[str, int] = {LITERAL: 8, PARAM: 4, WILDCARD: -2}

_PARAM_RE = re.compile(r"^(?P<prefix>[^:]*):(?P<name>\w+)(?P<suffix>.*)$")

MatchResult = Tuple[Dict[str, str], Tuple[str, ...]]


def split_path(path: str) -> Tuple[str, ...]:
    """Return the non-empty ``/``-separated chunks of ``path``."""
    return tuple(part for part in path.split("/") if part)


@dataclass(frozen=True)
class Segment:
    """One compiled chunk of a pattern."""

    text: str
    kind: str
    name: Optional[str] = None
    prefix: str = ""
    suffix: str = ""

    @classmethod
    def parse(cls, text: str) -> "Segment":
        if text == WILDCARD_KEY:
            return cls(text, WILDCARD, name=WILDCARD_KEY)
        found = _PARAM_RE.match(text)
        if found is None:
            return cls(text, LITERAL)
        return cls(
            text,
            PARAM,
            name=found.group("name"),
            prefix=found.group("prefix"),
            suffix=found.group("suffix"),
        )

    def match(self, value: str) -> Optional[Dict[str, str]]:
        """Match a single input segment; wildcards are handled by the pattern."""
        if self.kind == LITERAL:
            return {} if value == self.text else None
        affixes = len(self.prefix) + len(self.suffix)
        if len(value) <= affixes:
            return None
        if not (value.startswith(self.prefix) and value.endswith(self.suffix)):
            return None
        captured = value[len(self.prefix) : len(value) - len(self.suffix)]
        return {self.name: captured}  # type: ignore[dict-item]

    def render(self, params: Mapping[str, Any], *, route: Any = None) -> str:
        if self.kind == LITERAL:
            return self.text
        value = params.get(self.name)  # type: ignore[arg-type]
        if value is None or value == "":
            raise ReverseRouteError(
                f"Could not find value for '{self.name}' while building '{route}'",
                route=route,
                param=self.name,
            )
        return f"{self.prefix}{value}{self.suffix}"


class PathPattern:
    """Compiled single-variant path."""

    __slots__ = ("source", "segments", "score", "param_names")

    def __init__(self, source: str, *, owner: str = "?") -> None:
        self.source = source
        segments = tuple(Segment.parse(chunk) for chunk in split_path(source))
        for index, segment in enumerate(segments):
            if segment.kind == WILDCARD and index != len(segments) - 1:
                raise RouteDefinitionError(
                    f"Route '{owner}': wildcard '*' must be the last segment of {source!r}"
                )
        names = [segment.name for segment in segments if segment.name is not None]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise RouteDefinitionError(
                f"Route '{owner}': parameter(s) {', '.join(duplicates)} repeated in {source!r}"
            )
        self.segments = segments
        self.param_names: Tuple[str, ...] = tuple(names)
        self.score = float(
            sum(WEIGHTS[segment.kind] / (1 + index) for index, segment in enumerate(segments))
        )

    @property
    def kinds(self) -> Tuple[str, ...]:
        return tuple(segment.kind for segment in self.segments)

    @property
    def is_localized(self) -> bool:
        return False

    def match(
        self, parts: Sequence[str], known: Optional[Mapping[str, str]] = None
    ) -> Optional[MatchResult]:
        """Consume a prefix of ``parts``; return captured params and the rest."""
        params: Dict[str, str] = {}
        index = 0
        for segment in self.segments:
            if segment.kind == WILDCARD:
                if index >= len(parts):
                    return None
                params[WILDCARD_KEY] = "/".join(parts[index:])
                index = len(parts)
                break
            if index >= len(parts):
                return None
            captured = segment.match(parts[index])
            if captured is None:
                return None
            params.update(captured)
            index += 1
        return params, tuple(parts[index:])

    def interpolate(self, params: Mapping[str, Any], *, route: Any = None) -> str:
        return "/".join(segment.render(params, route=route) for segment in self.segments)

    def __repr__(self) -> str:
        return f"PathPattern({self.source!r}, score={self.score:.3f})"


class LocalizedPattern:
    """Compiled locale map; every variant shares one shape and score."""

    __slots__ = ("source", "variants", "locale_param", "score", "param_names")

    def __init__(self, source: Mapping[str, str], *, owner: str = "?", locale_param: str) -> None:
        if not source:
            raise RouteDefinitionError(f"Route '{owner}': localized path has no variants")
        variants: Dict[str, PathPattern] = {}
        for locale, text in source.items():
            if not isinstance(locale, str) or not isinstance(text, str):
                raise RouteDefinitionError(
                    f"Route '{owner}': localized path must map locale strings to path strings, "
                    f"got {locale!r}: {text!r}"
                )
            variants[locale] = PathPattern(text, owner=f"{owner}[{locale}]")

        first_locale, first = next(iter(variants.items()))
        for locale, pattern in variants.items():
            if pattern.kinds != first.kinds:
                raise RouteDefinitionError(
                    f"Route '{owner}': localized variants differ in shape "
                    f"({first_locale}={list(first.kinds)}, {locale}={list(pattern.kinds)})"
                )
            if pattern.score != first.score:  # pragma: no cover - implied by equal kinds
                raise RouteDefinitionError(
                    f"Route '{owner}': localized variants differ in score "
                    f"({first_locale}={first.score}, {locale}={pattern.score})"
                )

        names: Dict[str, None] = {}
        for pattern in variants.values():
            names.update(dict.fromkeys(pattern.param_names))
        self.source = dict(source)
        self.variants = variants
        self.locale_param = locale_param
        self.score = first.score
        self.param_names: Tuple[str, ...] = tuple(names)

    @property
    def kinds(self) -> Tuple[str, ...]:
        return next(iter(self.variants.values())).kinds

    @property
    def is_localized(self) -> bool:
        return True

    def match(
        self, parts: Sequence[str], known: Optional[Mapping[str, str]] = None
    ) -> Optional[MatchResult]:
        locale = (known or {}).get(self.locale_param)
        pattern = self.variants.get(locale) if locale is not None else None
        if pattern is None:
            return None
        return pattern.match(parts, known)

    def interpolate(self, params: Mapping[str, Any], *, route: Any = None) -> str:
        locale = params.get(self.locale_param)
        if locale is None or locale == "":
            raise ReverseRouteError(
                f"Cannot determine which locale variant of '{route}' to use: "
                f"no value for '{self.locale_param}'",
                route=route,
                param=self.locale_param,
            )
        pattern = self.variants.get(locale)
        if pattern is None:
            available = ", ".join(sorted(self.variants))
            raise ReverseRouteError(
                f"Locale '{locale}' ({self.locale_param}) is not available for '{route}'; "
                f"available: {available}",
                route=route,
                param=self.locale_param,
            )
        return pattern.interpolate(params, route=route)

    def __repr__(self) -> str:
        return f"LocalizedPattern({self.source!r}, score={self.score:.3f})"


CompiledPattern = Union[PathPattern, LocalizedPattern]


def compile_path(path: Any, *, owner: str, locale_param: str) -> CompiledPattern:
    """Compile a declared path (string or locale map) for route ``owner``."""
    if isinstance(path, str):
        return PathPattern(path, owner=owner)
    if isinstance(path, Mapping):
        return LocalizedPattern(path, owner=owner, locale_param=locale_param)
    raise RouteDefinitionError(
        f"Route '{owner}' has an invalid path {path!r}: "
        "expected a string or a mapping of locale to string"
    )
