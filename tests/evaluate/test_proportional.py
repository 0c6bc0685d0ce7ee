import sys
import os
import random
from decimal import Decimal
from fractions import Fraction

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))
import seatlib.evaluate.core
import seatlib.evaluate.proportional
from seatlib.model import AlgorithmType, District


HARE_VOTES = {'A': 41, 'B': 29, 'C': 17, 'D': 13}

RANDOM_VOTES = []
random.seed(1814)
for i in range(10):
    RANDOM_VOTES.append({
        party: random.randint(0, 100000) for party in 'ABCDEFG'
    })


def winners(result):
    return [seat.winner for seat in result.seat_results]


def test_modified_sainte_lague_order():
    evaluator = seatlib.evaluate.proportional.evaluator_for(
        AlgorithmType.MODIFIED_SAINTE_LAGUE, Decimal('1.4')
    )
    result = evaluator.evaluate({'A': 100000, 'B': 80000, 'C': 30000}, 4)
    # B/3 beats C/1.4 for the last seat
    assert winners(result) == ['A', 'B', 'A', 'B']
    assert result.seat_counts() == {'A': 2, 'B': 2}
    assert result.seat_results[0].quotient == Fraction(100000 * 5, 7)
    assert result.seat_results[-1].quotient == Fraction(80000, 3)


def test_d_hondt_order():
    evaluator = seatlib.evaluate.proportional.HighestAverages('d_hondt')
    result = evaluator.evaluate({'A': 60, 'B': 40}, 3)
    assert winners(result) == ['A', 'B', 'A']
    assert result.seat_counts() == {'A': 2, 'B': 1}


@pytest.mark.parametrize('votes', [
    {'A': 50, 'B': 50},
    {'B': 50, 'A': 50},
])
def test_tie_by_party_code(votes):
    for algorithm in AlgorithmType:
        evaluator = seatlib.evaluate.proportional.evaluator_for(algorithm)
        result = evaluator.evaluate(votes, 1)
        assert winners(result) == ['A']


def test_hare_order():
    evaluator = seatlib.evaluate.proportional.LargestRemainder('hare')
    assert evaluator.quota(HARE_VOTES, 5) == 20
    result = evaluator.evaluate(HARE_VOTES, 5)
    assert winners(result) == ['A', 'B', 'A', 'C', 'D']
    assert [seat.quotient for seat in result.seat_results] == [
        Fraction(41, 20), Fraction(29, 20), Fraction(21, 20),
        Fraction(17, 20), Fraction(13, 20),
    ]
    assert result.seat_counts() == {'A': 2, 'B': 1, 'C': 1, 'D': 1}


def test_droop():
    evaluator = seatlib.evaluate.proportional.LargestRemainder('droop')
    assert evaluator.quota(HARE_VOTES, 5) == 17
    result = evaluator.evaluate(HARE_VOTES, 5)
    assert winners(result) == ['A', 'B', 'A', 'C', 'D']
    assert all(
        standing.divisor == 17
        for seat in result.seat_results for standing in seat.party_results
    )


def test_first_divisor_effect():
    votes = {'A': 100, 'B': 45}
    plain = seatlib.evaluate.proportional.evaluator_for(
        AlgorithmType.SAINTE_LAGUE
    ).distribute(votes, 2)
    modified = seatlib.evaluate.proportional.evaluator_for(
        AlgorithmType.MODIFIED_SAINTE_LAGUE
    ).distribute(votes, 2)
    assert plain == {'A': 1, 'B': 1}
    assert modified == {'A': 2}


def test_zero_votes_never_contend():
    evaluator = seatlib.evaluate.proportional.HighestAverages('sainte_lague')
    result = evaluator.evaluate({'A': 100, 'B': 0}, 3)
    assert winners(result) == ['A', 'A', 'A']
    for seat in result.seat_results:
        assert [sp.party_code for sp in seat.party_results] == ['A']
    assert result.party_result('B').total_seats == 0


def test_zero_seats():
    evaluator = seatlib.evaluate.proportional.HighestAverages()
    result = evaluator.evaluate({'A': 100, 'B': 50}, 0, name='Finnmark')
    assert result.seat_results == ()
    assert result.last_seat is None
    assert result.votes_per_seat == 0
    assert [pr.party_code for pr in result.party_results] == ['A', 'B']


def test_standings():
    evaluator = seatlib.evaluate.proportional.HighestAverages('sainte_lague')
    result = evaluator.evaluate({'A': 100, 'B': 100, 'C': 30}, 2)
    first = result.seat_results[0]
    assert [sp.party_code for sp in first.party_results] == ['A', 'B', 'C']
    second = result.seat_results[1]
    assert second.winner == 'B'
    assert second.party_result('A').quotient == Fraction(100, 3)
    assert second.party_result('A').divisor == 3
    assert second.party_result('C').divisor == 1


def test_district_threshold():
    evaluator = seatlib.evaluate.proportional.HighestAverages('d_hondt')
    votes = {'A': 900, 'B': 60, 'C': 40}
    result = evaluator.evaluate(votes, 20, threshold=5)
    assert 'C' not in result.seat_counts()
    for seat in result.seat_results:
        assert seat.party_result('C') is None
    unlimited = evaluator.evaluate(votes, 20)
    assert unlimited.seat_results[0].party_result('C') is not None
    assert result.seat_counts() == {'A': 19, 'B': 1}


@pytest.mark.parametrize('votes', RANDOM_VOTES)
def test_nonincreasing_quotients(votes):
    for algorithm in AlgorithmType:
        evaluator = seatlib.evaluate.proportional.evaluator_for(algorithm)
        result = evaluator.evaluate(votes, 25)
        quotients = [seat.quotient for seat in result.seat_results]
        assert quotients == sorted(quotients, reverse=True)
        assert sum(result.seat_counts().values()) == 25


@pytest.mark.parametrize('votes', RANDOM_VOTES)
def test_largest_remainder_outright(votes):
    for quota_name in ('hare', 'droop'):
        evaluator = seatlib.evaluate.proportional.LargestRemainder(quota_name)
        quota = evaluator.quota(votes, 25)
        counts = evaluator.distribute(votes, 25)
        for party, n_votes in votes.items():
            outright = int(Fraction(n_votes) / quota)
            assert outright <= counts.get(party, 0) <= outright + 1


def test_party_results():
    evaluator = seatlib.evaluate.proportional.HighestAverages('d_hondt')
    result = evaluator.evaluate(
        {'B': 40, 'A': 60}, 3, name='Oslo',
        party_names={'A': 'Arbeiderpartiet'},
    )
    assert result.name == 'Oslo'
    assert result.votes == 100
    assert result.seats == 3
    assert result.votes_per_seat == Fraction(100, 3)
    a_res, b_res = result.party_results
    assert a_res.party_code == 'A'
    assert a_res.party_name == 'Arbeiderpartiet'
    assert a_res.percent_votes == 60
    assert a_res.district_seats == a_res.total_seats == 2
    assert a_res.leveling_seats == 0
    assert round(b_res.proportionality, 6) == round(40 - 100 / 3, 6)


def test_party_names_default():
    evaluator = seatlib.evaluate.proportional.HighestAverages('d_hondt')
    names = {'A': 'Arbeiderpartiet'}
    named = evaluator.evaluate({'A': 60, 'B': 40}, 3, party_names=names)
    assert named.party_results[0].party_name == 'Arbeiderpartiet'
    assert names == {'A': 'Arbeiderpartiet'}
    unnamed = evaluator.evaluate({'A': 60, 'B': 40}, 3)
    assert [pr.party_name for pr in unnamed.party_results] == [None, None]
    national = seatlib.evaluate.proportional.district_party_results(
        {'A': 60}, {'A': 2}, {}
    )
    assert national[0].party_name is None


@pytest.mark.parametrize('votes', [
    {'A': -1, 'B': 10},
    {'A': 1.5, 'B': 10},
    {'A': True, 'B': 10},
    {'A': '10'},
])
def test_invalid_votes(votes):
    evaluator = seatlib.evaluate.proportional.HighestAverages()
    with pytest.raises(seatlib.evaluate.core.InvalidInput):
        evaluator.evaluate(votes, 2)


def test_invalid_seats():
    evaluator = seatlib.evaluate.proportional.HighestAverages()
    with pytest.raises(seatlib.evaluate.core.InvalidInput):
        evaluator.evaluate({'A': 10}, -1)
    with pytest.raises(ValueError):
        evaluator.evaluate({'A': 10}, -1)


def test_no_contenders():
    evaluator = seatlib.evaluate.proportional.HighestAverages()
    with pytest.raises(seatlib.evaluate.core.InvalidInput):
        evaluator.evaluate({'A': 0}, 2)
    with pytest.raises(seatlib.evaluate.core.InvalidInput):
        evaluator.evaluate({}, 1)
    assert evaluator.evaluate({}, 0).seat_results == ()


def test_apportion():
    district = District('Oslo', 3)
    result = seatlib.evaluate.proportional.apportion(
        district, {'A': 60, 'B': 40}, 3, AlgorithmType.D_HONDT
    )
    assert result.name == 'Oslo'
    assert winners(result) == ['A', 'B', 'A']


def test_apportion_seat_mismatch():
    district = District('Oslo', 3)
    with pytest.raises(seatlib.evaluate.core.InvalidInput):
        seatlib.evaluate.proportional.apportion(
            district, {'A': 60, 'B': 40}, 4, AlgorithmType.D_HONDT
        )


def test_apportion_district_threshold():
    district = District('Oslo', 3, threshold=50)
    result = seatlib.evaluate.proportional.apportion(
        district, {'A': 60, 'B': 40}, 3, AlgorithmType.D_HONDT
    )
    assert result.seat_counts() == {'A': 3}


def test_evaluator_for_all():
    for algorithm in AlgorithmType:
        evaluator = seatlib.evaluate.proportional.evaluator_for(algorithm)
        assert isinstance(
            evaluator, seatlib.evaluate.proportional.SequentialAllocator
        )
        assert algorithm.is_largest_fraction == isinstance(
            evaluator, seatlib.evaluate.proportional.LargestRemainder
        )
    by_value = seatlib.evaluate.proportional.evaluator_for('d_hondt')
    assert by_value.distribute({'A': 60, 'B': 40}, 3) == {'A': 2, 'B': 1}
    with pytest.raises(ValueError):
        seatlib.evaluate.proportional.evaluator_for('imperiali')
