"""Acceptor matching for waiters.

An attempt produces an ``Outcome``: either the decoded output of the
operation or the normalized error it raised. Each acceptor inspects the
outcome with its matcher and either matches or not.
"""

from dataclasses import dataclass
from typing import Any

import jmespath

from servicecall.exceptions import AwsError
from servicecall.models.operation import Acceptor


@dataclass(frozen=True)
class Outcome:
    """Observed result of one waiter attempt."""

    output: dict[str, Any] | None = None
    error: AwsError | None = None

    @property
    def status_code(self) -> int | None:
        if self.error is not None:
            return self.error.status_code
        if self.output is None:
            return None
        return self.output.get("ResponseMetadata", {}).get("HTTPStatusCode")


def _search(acceptor: Acceptor, outcome: Outcome) -> Any:
    if outcome.output is None or not acceptor.argument:
        return None
    return jmespath.search(acceptor.argument, outcome.output)


def _match_path(acceptor: Acceptor, outcome: Outcome) -> bool:
    if outcome.error is not None:
        return False
    return _search(acceptor, outcome) == acceptor.expected


def _match_path_all(acceptor: Acceptor, outcome: Outcome) -> bool:
    if outcome.error is not None:
        return False
    values = _search(acceptor, outcome)
    if not isinstance(values, list) or not values:
        return False
    return all(value == acceptor.expected for value in values)


def _match_path_any(acceptor: Acceptor, outcome: Outcome) -> bool:
    if outcome.error is not None:
        return False
    values = _search(acceptor, outcome)
    if not isinstance(values, list):
        return False
    return any(value == acceptor.expected for value in values)


def _match_status(acceptor: Acceptor, outcome: Outcome) -> bool:
    return outcome.status_code is not None and outcome.status_code == acceptor.expected


def _match_error(acceptor: Acceptor, outcome: Outcome) -> bool:
    # A boolean expectation matches "any error" / "no error".
    if isinstance(acceptor.expected, bool):
        return (outcome.error is not None) is acceptor.expected
    return outcome.error is not None and outcome.error.service_code == acceptor.expected


_MATCHERS = {
    "path": _match_path,
    "pathAll": _match_path_all,
    "pathAny": _match_path_any,
    "status": _match_status,
    "error": _match_error,
}


def matches(acceptor: Acceptor, outcome: Outcome) -> bool:
    """Return whether ``acceptor`` holds for ``outcome``."""
    return _MATCHERS[acceptor.matcher](acceptor, outcome)


def first_match(acceptors: tuple[Acceptor, ...], outcome: Outcome) -> Acceptor | None:
    """Return the first acceptor, in declared order, that holds for ``outcome``."""
    for acceptor in acceptors:
        if matches(acceptor, outcome):
            return acceptor
    return None
