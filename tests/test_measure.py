import sys
import os

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
import seatlib.measure
from seatlib.measure import DisproportionalityIndex
from seatlib.model import PartyResult

CANADA_2015_VOTES = {
    'Liberal': 6943276,
    'Conservative': 5613614,
    'New Democratic': 3470350,
    'Bloc Québécois': 821144,
    'Green': 602944,
    'Other': 91837,
}

CANADA_2015_SEATS = {
    'Liberal': 184,
    'Conservative': 99,
    'New Democratic': 44,
    'Bloc Québécois': 10,
    'Green': 1,
}


@pytest.mark.parametrize('index', list(DisproportionalityIndex))
def test_perfect(index):
    equals = {'A': 7, 'B': 5, 'C': 3}
    index_fx = seatlib.measure.INDICES[index]
    assert index_fx(equals, equals) == 0


def test_canada_gallagher():
    # taken from https://iscanadafair.ca/gallagher-index/
    assert abs(seatlib.measure.gallagher(CANADA_2015_VOTES, CANADA_2015_SEATS) - .12) < .001


def test_lh_kalogirou_1():
    assert round(seatlib.measure.loosemore_hanby({'A': 68, 'B': 22}, {'A': 2}), 2) == .24


def test_lh_kalogirou_2():
    assert round(seatlib.measure.loosemore_hanby(
        {'A': 68, 'B': 22, 'C': 10},
        {'A': 1, 'B': 1}
    ), 2) == .28


def test_gallagher_below_lh():
    votes = {'A': 68, 'B': 22, 'C': 10}
    seats = {'A': 1, 'B': 1}
    assert seatlib.measure.gallagher(votes, seats) <= seatlib.measure.loosemore_hanby(votes, seats)


def test_seats_without_votes():
    assert seatlib.measure.loosemore_hanby({'A': 10}, {'A': 1, 'B': 1}) == .5


def test_disproportionality_percent():
    party_results = [
        PartyResult.compute('A', 68, 100, 1, 0, 2),
        PartyResult.compute('B', 22, 100, 1, 0, 2),
        PartyResult.compute('C', 10, 100, 0, 0, 2),
    ]
    lh = seatlib.measure.disproportionality(
        party_results, DisproportionalityIndex.LOOSEMORE_HANBY
    )
    assert lh == pytest.approx(28)
    gallagher = seatlib.measure.disproportionality(
        party_results, 'gallagher'
    )
    assert gallagher == pytest.approx(100 * ((.18 ** 2 + .28 ** 2 + .1 ** 2) / 2) ** .5)


def test_empty():
    assert seatlib.measure.loosemore_hanby({}, {}) == 0
    assert seatlib.measure.gallagher({'A': 0}, {'A': 0}) == 0
