"""Schema inspector for schema-gate.

Compares two built schemas and classifies each difference. Detection is
delegated to graphql-core:

  find_breaking_changes   -> Criticality.BREAKING
  find_dangerous_changes  -> Criticality.DANGEROUS

The inspector optionally takes a usage checker as a dependency instead of
importing any operation store directly. When given, breaking changes on schema
coordinates that no client of the target uses are downgraded to dangerous.
"""

import re
from collections.abc import Awaitable, Callable
from dataclasses import replace
from typing import TypeAlias

from graphql import GraphQLSchema, find_breaking_changes, find_dangerous_changes
from loguru import logger

from schema_gate.schema.changes import Criticality, SchemaChange
from schema_gate.schema.objects import TargetSelector


# Type alias for the usage checker dependency.
# Given a selector and a list of dotted coordinates, returns the ones in use.
UsageChecker: TypeAlias = Callable[[TargetSelector, list[str]], Awaitable[set[str]]]


# --- Path extraction ---
# graphql-core only reports a description per change. The coordinate is
# recovered from the description shapes it emits, most specific first.
# 3.2 leads with the bare name ("User.email was removed."), 3.3 leads with
# the element kind and a schema coordinate ("Field User.email was removed.",
# "A required argument Query.users(limit:) was added.").

_KIND_PREFIX = (
    r"(?:An? (?:required|optional) )?"
    r"(?:Type|Field|Input field|input field|Enum value|Argument|argument|Directive|Member|Interface) "
)


def _coordinate_segments(coordinate: str) -> list[str]:
    """Split a schema coordinate: "Query.users(limit:)" -> ["Query", "users", "limit"]."""
    return re.findall(r"@?\w+", coordinate)


_PATH_PATTERNS: list[tuple[re.Pattern[str], Callable[[re.Match[str]], list[str]]]] = [
    (
        re.compile(r"^(?:Member )?(\w+) was (?:removed from|added to) (?:enum|union) type (\w+)"),
        lambda m: [m.group(2), m.group(1)],
    ),
    (
        re.compile(r"^(?:Interface )?\w+ added to interfaces implemented by (\w+)"),
        lambda m: [m.group(1)],
    ),
    (
        re.compile(r"^An? (?:required|optional) (?:arg|field) (\w+) on (?:input type |directive )?([\w.]+)"),
        lambda m: [*m.group(2).split("."), m.group(1)],
    ),
    (
        re.compile(r"^" + _KIND_PREFIX + r"(?!(?:was|has|changed|added|no) )(@?\w+(?:\.\w+)?(?:\(\w+:\))?)"),
        lambda m: _coordinate_segments(m.group(1)),
    ),
    (
        re.compile(r"^([\w.]+) arg (\w+) "),
        lambda m: [*m.group(1).split("."), m.group(2)],
    ),
    (
        re.compile(r"^(\w+) was removed from (\w+)\.$"),
        lambda m: [m.group(2), m.group(1)],
    ),
    (
        re.compile(r"^Repeatable flag was removed from (@?\w+)"),
        lambda m: [m.group(1)],
    ),
    (
        re.compile(r"^([\w.]+)"),
        lambda m: m.group(1).split("."),
    ),
]


def change_path(description: str) -> list[str] | None:
    """Derive a schema coordinate path from a change description.

    Examples:
        "Query.user was removed."                  -> ["Query", "user"]
        "Query.user arg id was removed."           -> ["Query", "user", "id"]
        "ADMIN was removed from enum type Role."   -> ["Role", "ADMIN"]
        "Field User.email was removed."            -> ["User", "email"]
        "Argument Query.users(limit:) was removed." -> ["Query", "users", "limit"]
    """
    for pattern, to_path in _PATH_PATTERNS:
        match = pattern.match(description)
        if match:
            return to_path(match)
    return None


class Inspector:
    """Diffs two built schemas into an ordered list of classified changes."""

    def __init__(self, usage_checker: UsageChecker | None = None):
        self.usage_checker = usage_checker

    async def diff(
        self,
        existing: GraphQLSchema,
        incoming: GraphQLSchema,
        selector: TargetSelector,
    ) -> list[SchemaChange]:
        """Compare `existing` against `incoming` for the given target.

        Breaking changes come first in the order graphql-core reports them,
        followed by dangerous changes.
        """
        changes = [
            SchemaChange(
                criticality=Criticality.BREAKING,
                message=change.description,
                path=change_path(change.description),
            )
            for change in find_breaking_changes(existing, incoming)
        ]
        changes.extend(
            SchemaChange(
                criticality=Criticality.DANGEROUS,
                message=change.description,
                path=change_path(change.description),
            )
            for change in find_dangerous_changes(existing, incoming)
        )

        logger.debug(f"Found {len(changes)} changes for target {selector}")

        if self.usage_checker is not None and any(c.is_breaking for c in changes):
            changes = await self._downgrade_unused(changes, selector)

        return changes

    async def _downgrade_unused(
        self,
        changes: list[SchemaChange],
        selector: TargetSelector,
    ) -> list[SchemaChange]:
        """Downgrade breaking changes on coordinates no client of the target uses."""
        assert self.usage_checker is not None

        coordinates = [c.coordinate for c in changes if c.is_breaking and c.coordinate]
        in_use = await self.usage_checker(selector, coordinates)

        result: list[SchemaChange] = []
        for change in changes:
            # Trigger: breaking change on a coordinate the usage checker did not report
            # Outcome: same change, criticality lowered to dangerous
            if change.is_breaking and change.coordinate and change.coordinate not in in_use:
                logger.debug(f"Downgrading unused breaking change: {change.message}")
                change = replace(change, criticality=Criticality.DANGEROUS)
            result.append(change)
        return result
