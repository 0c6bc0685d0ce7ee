'''Quota functions used in largest fraction apportionment methods.

A quota function takes the total number of votes and the number of seats
to allocate and returns the number of votes required to reach a seat.
The unrounded quota functions return fractions to retain exact values.

All supported quota functions are assembled in the `QUOTAS` dictionary keyed
by their name. `get()` retrieves from this dictionary by string key;
`construct()` also accepts callables and passes them through.
'''

from fractions import Fraction
from typing import Callable
from numbers import Number

import seatlib.component.core


QUOTAS = {}


quota_mark, get, construct = seatlib.component.core.register_functions(
    QUOTAS, 'quota', Callable[[int, int], Number]
)


@quota_mark
def hare(votes: int, seats: int) -> Fraction:
    '''Hare quota, the most basic one.

    This is the unrounded variant, giving the exact fraction, so that the
    number of outright seats never exceeds the number of seats.
    '''
    return Fraction(votes, seats)


@quota_mark
def droop(votes: int, seats: int) -> int:
    '''Droop quota.

    The smallest integer quota guaranteeing the number of outright seats
    will not be higher than the number of seats.
    '''
    return int(Fraction(votes, seats + 1)) + 1
