"""Parameterized Cypher statements."""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

# Matches $name placeholders; backtick-quoted parameters are not used here
_PLACEHOLDER_RE = re.compile(r"\$([A-Za-z_][A-Za-z0-9_]*)")


def placeholders(text: str) -> frozenset[str]:
    """Return the parameter names referenced by a Cypher statement."""
    return frozenset(_PLACEHOLDER_RE.findall(text))


@dataclass(frozen=True)
class Statement:
    """A fixed Cypher text plus the values bound to its placeholders.

    Request data only ever reaches the database through ``parameters``; the
    constructor rejects a statement whose placeholders and parameter names
    disagree, so a template cannot be sent with a missing or stray binding.
    """

    text: str
    parameters: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        expected = placeholders(self.text)
        provided = frozenset(self.parameters)
        if expected != provided:
            missing = sorted(expected - provided)
            unexpected = sorted(provided - expected)
            raise ValueError(
                f"Statement parameters do not match placeholders "
                f"(missing={missing}, unexpected={unexpected})"
            )
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))

    @property
    def summary(self) -> str:
        """Whitespace-collapsed prefix of the statement, for logs."""
        return " ".join(self.text.split())[:80]
