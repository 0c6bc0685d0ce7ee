'''Various utility functions for other modules of Seatlib.

There should normally be no need to use these functions directly.
'''

from decimal import Decimal
from fractions import Fraction
from typing import Any, Dict, List, Tuple, Union
from numbers import Number


def add_dict_to_dict(dict1: Dict[Any, Number],
                     dict2: Dict[Any, Number],
                     ) -> None:
    for key, addition in dict2.items():
        dict1[key] = dict1.get(key, 0) + addition


def ranking_key(item: Tuple[str, Number]) -> Tuple[Number, str]:
    '''Sort key of the fixed total order used to break all ties.

    Orders (party code, value) pairs by value descending and, for equal
    values, by party code ascending.
    '''
    code, value = item
    return (-value, code)


def ranked(values: Dict[str, Number]) -> List[Tuple[str, Number]]:
    '''Return the items ordered by the tie-breaking total order.'''
    return list(sorted(values.items(), key=ranking_key))


def precedes(code1: str, code2: str) -> bool:
    '''Whether the first party wins a tie against the second one.'''
    return code1 < code2


def national_totals(votes: Dict[Any, Dict[str, Number]]
                    ) -> Dict[str, Number]:
    '''Sum party votes over all districts, keeping first-seen party order.'''
    totals = {}
    for dvotes in votes.values():
        add_dict_to_dict(totals, dvotes)
    return totals


def exact_number(value: Union[int, float, Decimal, Fraction]
                 ) -> Union[int, Fraction]:
    '''Convert a number to an exact one.

    Floats are converted through their shortest decimal representation so
    that a value given as ``1.4`` is exactly seven fifths rather than
    the nearest binary fraction.
    '''
    if isinstance(value, (int, Fraction)):
        return value
    elif isinstance(value, float):
        value = Decimal(repr(value))
    return Fraction(value)
