"""Status predicates: pure functions classifying a response status code.

A request carries ordered lists of predicates (success, retry, not-found,
exists). A list matches when any of its predicates does; an empty list never
matches.

    >>> retry_on = [status_in(429, 502, 503), status_in_range(520, 527)]
    >>> status_matches(503, retry_on), status_matches(404, retry_on)
    (True, False)
"""

from __future__ import annotations

from collections.abc import Iterable
from http import HTTPStatus
from typing import Callable

StatusFn = Callable[[int], bool]


def status_is(code: int) -> StatusFn:
    return lambda status: status == code


def status_in(*codes: int) -> StatusFn:
    allowed = frozenset(codes)
    return lambda status: status in allowed


def status_in_range(low: int, high: int) -> StatusFn:
    """Inclusive on both ends."""
    return lambda status: low <= status <= high


def status_not(code: int) -> StatusFn:
    return lambda status: status != code


def status_not_in(*codes: int) -> StatusFn:
    excluded = frozenset(codes)
    return lambda status: status not in excluded


def status_matches(status: int, fns: Iterable[StatusFn]) -> bool:
    """Logical OR over ``fns``."""
    return any(fn(status) for fn in fns)


# Named shortcuts
def status_ok() -> StatusFn: return status_is(HTTPStatus.OK)
def status_created() -> StatusFn: return status_is(HTTPStatus.CREATED)
def status_accepted() -> StatusFn: return status_is(HTTPStatus.ACCEPTED)
def status_no_content() -> StatusFn: return status_is(HTTPStatus.NO_CONTENT)
def status_not_found() -> StatusFn: return status_is(HTTPStatus.NOT_FOUND)
def status_conflict() -> StatusFn: return status_is(HTTPStatus.CONFLICT)
def status_unprocessable_entity() -> StatusFn: return status_is(HTTPStatus.UNPROCESSABLE_ENTITY)
def status_internal_server_error() -> StatusFn: return status_is(HTTPStatus.INTERNAL_SERVER_ERROR)
def status_successful() -> StatusFn: return status_in_range(200, 299)
