"""
RouteLens — Route Table Parser
===============================

What:  Converts the whitespace-delimited `rails routes` dump into Route records.
How:   Positional column split; rows that are not 4 or 5 columns wide are skipped.
Who:   Called by RouteIndex on every cache miss.

Column layout:
    Rails right-aligns the route name column, so rows without a name start
    with indentation. Leading whitespace therefore yields an empty first
    column instead of being dropped:

        "   posts GET  /posts(.:format) posts#index"  → 5 columns
        "         POST /posts(.:format) posts#create" → 4 columns

    5 columns: [name, verb, url, pattern, controller#action]  (name dropped)
    4 columns: [skipped, url, pattern, controller#action]      (verb = "")
"""

import re
from typing import List

from routelens.models.route import Route

_WHITESPACE = re.compile(r"\s+")


def split_columns(line: str) -> List[str]:
    """Splits a dump row on whitespace runs, keeping a leading empty column."""
    return _WHITESPACE.split(line.rstrip())


def _split_target(target: str):
    controller, _, action = target.partition("#")
    return controller, action


def parse_routes(raw_text: str) -> List[Route]:
    """
    Parse a raw route listing into an ordered list of routes.

    Never raises: blank and malformed rows are expected in the dump
    (headers, engine mounts, redirects) and contribute nothing.
    """
    routes: List[Route] = []

    for line in raw_text.splitlines():
        columns = split_columns(line)

        if len(columns) == 5:
            _, verb, url, pattern, target = columns
        elif len(columns) == 4:
            _, url, pattern, target = columns
            verb = ""
        else:
            continue

        controller, action = _split_target(target)
        routes.append(
            Route(verb=verb, url=url, pattern=pattern, controller=controller, action=action)
        )

    return routes


class RouteTableParser:
    """Stateless entry point used by RouteIndex; see parse_routes()."""

    @staticmethod
    def parse(raw_text: str) -> List[Route]:
        return parse_routes(raw_text)
