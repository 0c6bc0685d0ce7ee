import sys
import os
from fractions import Fraction

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))
import seatlib.evaluate
import seatlib.evaluate.core


@pytest.mark.parametrize('votes', [
    {'A': 10, 'B': 0},
    {'A': Fraction(21, 2)},
    {},
])
def test_check_votes_ok(votes):
    seatlib.evaluate.core.check_votes(votes)


@pytest.mark.parametrize('votes', [
    {'A': -10},
    {'A': 10.5},
    {'A': None},
    {'A': False},
])
def test_check_votes_invalid(votes):
    with pytest.raises(seatlib.evaluate.core.InvalidInput) as excinfo:
        seatlib.evaluate.core.check_votes(votes, ' in Oslo')
    assert 'A in Oslo' in str(excinfo.value)


@pytest.mark.parametrize('n_seats', [-1, 1.0, '3', None, True])
def test_check_seats_invalid(n_seats):
    with pytest.raises(seatlib.evaluate.core.InvalidInput):
        seatlib.evaluate.core.check_seats(n_seats)


def test_error_hierarchy():
    assert issubclass(
        seatlib.evaluate.InvalidInput, seatlib.evaluate.ApportionmentError
    )
    assert issubclass(seatlib.evaluate.InvalidInput, ValueError)
    assert issubclass(
        seatlib.evaluate.Unsatisfiable, seatlib.evaluate.ApportionmentError
    )
    assert not issubclass(seatlib.evaluate.Unsatisfiable, ValueError)


def test_unsatisfiable_message():
    error = seatlib.evaluate.core.Unsatisfiable({'A': 2, 'B': 0}, 3)
    assert error.deficits == {'A': 2, 'B': 0}
    assert error.awarded == 3
    assert 'A: 2' in str(error)
    assert 'B' not in str(error)
