'''Divisor functions used in highest averages apportionment methods.

This provides arguments for the
:class:`seatlib.evaluate.proportional.HighestAverages` evaluator.

A divisor function takes the order number (equal to the number of seats
the party won so far in the district) and returns the divisor by which to
divide the number of votes for the party. The party with the largest
result then gets the next seat.

The Norwegian Storting election uses the Sainte-Laguë divisor with the
zeroth divisor raised to 1.4 to make the first seat harder to win for
small parties. Use :func:`modified_first_coef` for that.

All supported divisor functions are assembled in the `DIVISORS` dictionary
keyed by their name. `get()` retrieves from this dictionary by string key;
`construct()` also accepts callables and passes them through.
'''

from fractions import Fraction
from decimal import Decimal
from typing import Callable, Union
from numbers import Number

import seatlib.util
import seatlib.persist
import seatlib.component.core


DIVISORS = {}


divisor_mark, get, construct = seatlib.component.core.register_functions(
    DIVISORS, 'divisor', Callable[[int], Number]
)


@divisor_mark
def d_hondt(order: int) -> int:
    '''D'Hondt divisor.

    Forms a simple sequence 1, 2, 3...

    Known to slightly favor larger parties.
    '''
    return order + 1


@divisor_mark
def sainte_lague(order: int) -> int:
    '''Sainte-Laguë divisor.

    Forms a sequence 1, 3, 5...

    Known to favor mid-sized parties.
    '''
    return 2 * order + 1


@seatlib.persist.simple_serialization
class ModifiedFirstCoef:
    '''Modify the divisor for the zeroth order to an apriori coefficient.

    This raises the threshold for parties that have not yet obtained
    a seat in the district, as in Norway and Sweden.

    :param divisor_fx: The ordinary divisor function to be wrapped and used
        for subsequent orders.
    :param first_coef: The coefficient to be used when order == 0. It is
        stored as an exact number.
    '''
    def __init__(self,
                 divisor_fx: Callable[[int], Number],
                 first_coef: Union[Decimal, float, Fraction] = Decimal('1.4'),
                 ):
        self.divisor_fx = construct(divisor_fx)
        self.first_coef = seatlib.util.exact_number(first_coef)

    def __call__(self, order: int) -> Number:
        return self.divisor_fx(order) if order > 0 else self.first_coef


def modified_first_coef(divisor_fx: Callable[[int], Number],
                        first_coef: Union[Decimal, float, Fraction] =
                        Decimal('1.4'),
                        ) -> ModifiedFirstCoef:
    '''Wrap a divisor function to use first_coef as the zeroth divisor.'''
    return ModifiedFirstCoef(divisor_fx, first_coef)
