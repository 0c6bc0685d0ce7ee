'''Evaluate the seat distribution of an election.

Seat distribution happens in two stages. First, the district seats of each
district are apportioned among parties by one of the methods in
:mod:`seatlib.evaluate.proportional`; every district is independent of the
others. Second, the national levelling seats are distributed among the
under-represented parties and placed into districts by
:mod:`seatlib.evaluate.leveling`, which requires all district results.

The error types signalled by the evaluators live in
:mod:`seatlib.evaluate.core`.
'''

from seatlib.evaluate.core import *    # noqa
