"""Glob-style ignore rules for source tree traversal.

A rule without a slash is matched against every segment of a relative
path, so ``node_modules`` or ``*.min.js`` exclude matching directories
and files at any depth. A rule containing a slash is matched against
the whole relative path and each of its leading-directory prefixes;
``**`` in such a rule crosses segment boundaries.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from fnmatch import fnmatchcase
from functools import lru_cache
from typing import Iterable, Sequence, Union


@dataclass(frozen=True)
class IgnoreRule:
    """A single normalised ignore pattern.

    Attributes:
        pattern: Pattern text with any leading or trailing slash removed.
        anchored: Whether the pattern is matched against full paths from
            the traversal root instead of single segments.
    """

    pattern: str
    anchored: bool

    def matches(self, rel_path: str) -> bool:
        if not self.pattern or not rel_path:
            return False

        segments = rel_path.split("/")
        if self.anchored:
            regex = _compile_path_glob(self.pattern)
            for depth in range(1, len(segments) + 1):
                if regex.match("/".join(segments[:depth])):
                    return True
            return False

        return any(fnmatchcase(part, self.pattern) for part in segments)


def build_ignore_rule(pattern: str) -> IgnoreRule | None:
    """Normalise a raw pattern string into an IgnoreRule.

    Args:
        pattern: Pattern as given on the command line or in config.

    Returns:
        The rule, or None for a blank pattern.
    """
    pattern = pattern.strip().replace("\\", "/")
    while pattern.startswith("./"):
        pattern = pattern[2:]

    anchored = pattern.startswith("/")
    pattern = pattern.strip("/")
    if not pattern:
        return None
    return IgnoreRule(pattern=pattern, anchored=anchored or "/" in pattern)


def build_ignore_rules(patterns: Iterable[str]) -> list[IgnoreRule]:
    """Build rules for every non-blank pattern, keeping their order."""
    rules = []
    for pattern in patterns:
        rule = build_ignore_rule(pattern)
        if rule is not None:
            rules.append(rule)
    return rules


def normalize_path(relative_path: str) -> str:
    """Normalise a relative path to slash-separated form without ``./``."""
    path = relative_path.replace("\\", "/")
    parts = [part for part in path.split("/") if part and part != "."]
    return "/".join(parts)


def is_ignored(
    relative_path: str,
    patterns: Sequence[Union[str, IgnoreRule]],
) -> bool:
    """Decide whether a path should be excluded from traversal.

    Args:
        relative_path: Path relative to the traversal root.
        patterns: Pattern strings or prebuilt rules. An empty sequence
            excludes nothing.

    Returns:
        True if any pattern matches the path or one of its segments.
    """
    path = normalize_path(relative_path)
    if not path:
        return False

    for pattern in patterns:
        rule = pattern if isinstance(pattern, IgnoreRule) else build_ignore_rule(pattern)
        if rule is not None and rule.matches(path):
            return True
    return False


@lru_cache(maxsize=256)
def _compile_path_glob(pattern: str) -> re.Pattern[str]:
    """Translate a path glob into a regular expression.

    ``*`` and ``?`` stay within a segment, ``**`` spans segments and
    ``**/`` also matches zero directories.
    """
    out: list[str] = []
    i, n = 0, len(pattern)
    while i < n:
        char = pattern[i]
        if char == "*":
            if pattern.startswith("**", i):
                i += 2
                if pattern.startswith("/", i):
                    i += 1
                    out.append("(?:.*/)?")
                else:
                    out.append(".*")
                continue
            out.append("[^/]*")
        elif char == "?":
            out.append("[^/]")
        elif char == "[":
            end = pattern.find("]", i + 2)
            if end == -1:
                out.append(re.escape(char))
            else:
                inner = pattern[i + 1 : end].replace("\\", "\\\\")
                if inner.startswith("!"):
                    inner = "^" + inner[1:]
                out.append(f"[{inner}]")
                i = end + 1
                continue
        else:
            out.append(re.escape(char))
        i += 1
    return re.compile("".join(out) + r"\Z", re.DOTALL)
