import sys
import os
import random
import itertools
from fractions import Fraction

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))
import seatlib.component.quota as q

VOTES = [1, 2, 5, 1000, 5, 1000, 42, 15000000, 150000000]
SEATS = [1, 1, 1, 1, 2, 2, 42, 200, 1]

# add some random stuff to n_votes and n_seats
random.seed(1711)
for i in range(25):
    n_votes = random.randint(1, 1000000)
    n_seats = random.randint(1, 10000)
    if n_seats > n_votes:
        n_votes, n_seats = n_seats, n_votes
    VOTES.append(n_votes)
    SEATS.append(n_seats)


@pytest.mark.parametrize(
    ('n_votes', 'n_seats', 'quota_name'),
    [vs + (q,) for vs, q in itertools.product(
        list(zip(VOTES, SEATS)), q.QUOTAS.keys()
    )]
)
def test_result(n_votes, n_seats, quota_name):
    quota_fx = q.get(quota_name)
    quota = quota_fx(n_votes, n_seats)
    assert 0 < quota <= n_votes
    # never more outright seats than seats
    assert n_votes // quota <= n_seats


def test_values():
    assert q.hare(100, 5) == 20
    assert q.hare(100, 3) == Fraction(100, 3)
    assert q.droop(100, 5) == 17
    assert q.droop(100, 4) == 21


def test_get():
    for fx_name, fx in q.QUOTAS.items():
        assert q.get(fx_name) == fx
    for bad_name in ('oapsdjf', '', None):
        with pytest.raises(KeyError):
            q.get(bad_name)


def test_construct():
    for fx_name, fx in q.QUOTAS.items():
        assert q.construct(fx_name) == q.get(fx_name) == fx
    for bad_name in ('oapsdjf', '', None):
        with pytest.raises(KeyError):
            q.construct(bad_name)
    def own_quotaf(nv, ns):
        return nv / (ns + 3)
    assert q.construct(own_quotaf) == own_quotaf
