"""
Eligibility of a record for the engine under test.

A record carries zero or more `skipif <engine>` / `onlyif <engine>`
conditions. The two kinds don't combine cleanly, so an `onlyif` is honored
only when it is the record's single condition; in any longer list only the
`skipif` entries count.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from logictest.domain.models import Condition


def should_execute_for_engine(conditions: Sequence["Condition"], engine: str) -> bool:
    """
    Return whether a record with `conditions` should run against `engine`.

    Examples
    --------
    [onlyif mysql]              -> runs only on "mysql"
    [skipif mysql]              -> runs everywhere except "mysql"
    [onlyif mysql, skipif oracle] -> runs everywhere except "oracle"
    """
    if len(conditions) == 1 and conditions[0].is_only:
        return conditions[0].engine == engine

    for condition in conditions:
        if condition.is_skip and condition.engine == engine:
            return False

    return True


__all__ = ["should_execute_for_engine"]
