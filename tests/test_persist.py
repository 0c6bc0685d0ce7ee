import sys
import os
import json
from decimal import Decimal
from fractions import Fraction

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
import seatlib.persist
import seatlib.system
import seatlib.evaluate.leveling
import seatlib.evaluate.proportional
from seatlib.model import (
    AlgorithmType, ComputationPayload, District, Election, LagueDhontResult,
    Votes,
)

sys.path.append(os.path.join(os.path.dirname(__file__)))
import test_system


EVALUATORS = [
    seatlib.evaluate.proportional.HighestAverages(),
    seatlib.evaluate.proportional.HighestAverages('sainte_lague'),
    seatlib.evaluate.proportional.LargestRemainder('droop'),
    seatlib.evaluate.proportional.evaluator_for(
        AlgorithmType.MODIFIED_SAINTE_LAGUE, Decimal('1.4')
    ),
    seatlib.evaluate.leveling.LevelingDistributor(
        Decimal('1.4'), exclude_won_districts=False, max_per_district=1,
    ),
]


def json_round_trip(obj):
    return seatlib.persist.from_dict(
        json.loads(json.dumps(seatlib.persist.to_dict(obj)))
    )


@pytest.mark.parametrize('evaluator', EVALUATORS)
def test_evaluator_round_trip(evaluator):
    restored = json_round_trip(evaluator)
    assert type(restored) == type(evaluator)
    assert restored.to_dict() == evaluator.to_dict()


def test_evaluator_behaves_same():
    evaluator = seatlib.evaluate.proportional.HighestAverages('sainte_lague')
    restored = json_round_trip(evaluator)
    votes = {'A': 100, 'B': 45, 'C': 20}
    assert restored.distribute(votes, 5) == evaluator.distribute(votes, 5)


def test_modified_sainte_lague_round_trip():
    evaluator = seatlib.evaluate.proportional.evaluator_for(
        AlgorithmType.MODIFIED_SAINTE_LAGUE, 1.4
    )
    serialized = seatlib.persist.to_dict(evaluator)
    assert serialized['divisor_function'] == {
        'class': 'seatlib.component.divisor.ModifiedFirstCoef',
        'divisor_fx': {
            'callable': 'seatlib.component.divisor.sainte_lague'
        },
        'first_coef': {'type': 'Fraction', 'value': '7/5'},
    }
    restored = json_round_trip(evaluator)
    assert restored.divisor_function.first_coef == Fraction(7, 5)
    votes = {'A': 100000, 'B': 80000, 'C': 30000}
    assert restored.distribute(votes, 4) == {'A': 2, 'B': 2}
    assert restored.distribute(votes, 4) == evaluator.distribute(votes, 4)


def test_numbers_to_dict():
    assert seatlib.persist.to_dict(Fraction(2, 7)) == {
        'type': 'Fraction', 'value': '2/7'
    }
    assert seatlib.persist.to_dict(Decimal('1.40')) == {
        'type': 'Decimal', 'value': '1.40'
    }
    assert seatlib.persist.to_dict((1, Fraction(1, 2))) == {
        'type': 'tuple', 'value': [1, {'type': 'Fraction', 'value': '1/2'}]
    }
    with pytest.raises(ValueError):
        seatlib.persist.to_dict({1: 'A'})


def test_election_round_trip():
    election = Election(
        2021, [District('Oslo', 19), District('Finnmark', 4, threshold=4)],
        threshold=4, first_divisor=Decimal('1.4'), leveling_seats=19,
        algorithm=AlgorithmType.MODIFIED_SAINTE_LAGUE,
    )
    restored = json_round_trip(election)
    assert restored.algorithm is AlgorithmType.MODIFIED_SAINTE_LAGUE
    assert restored.first_divisor == Decimal('1.4')
    assert [(d.name, d.seats, d.threshold) for d in restored.districts] \
        == [('Oslo', 19, None), ('Finnmark', 4, 4)]
    assert restored.seats == 23


def test_result_round_trip():
    payload = ComputationPayload.historical(
        test_system.ELECTION, test_system.VOTE_RECORDS
    )
    result = seatlib.system.compute(payload)
    restored = json_round_trip(result)
    assert isinstance(restored, LagueDhontResult)
    assert restored.to_dict() == result.to_dict()
    assert restored.seat_counts() == result.seat_counts()
    quotient = restored.leveling_seat_distribution[0].quotient
    assert isinstance(quotient, Fraction)
    assert quotient == Fraction(2, 7)
    last_seat = restored.district_result('X').last_seat
    assert last_seat.party_result('A').divisor == 3


def test_payload_round_trip():
    payload = ComputationPayload.historical(
        test_system.ELECTION, test_system.VOTE_RECORDS
    ).replace(district_seats=7)
    restored = json_round_trip(payload)
    assert restored.district_seats == 7
    assert restored.parameters.is_loaded is False
    assert [(v.district, v.party_code, v.votes) for v in restored.votes] \
        == [(v.district, v.party_code, v.votes) for v in payload.votes]


@pytest.mark.parametrize('bad_value', [
    [], 'Votes', {'district': 'Oslo'}, {'class': '.Votes'},
])
def test_from_dict_invalid(bad_value):
    with pytest.raises(ValueError):
        seatlib.persist.from_dict(bad_value)


def test_votes_to_dict():
    assert Votes('Oslo', 'A', 10, 2021).to_dict() == {
        'class': 'seatlib.model.Votes',
        'district': 'Oslo',
        'party_code': 'A',
        'votes': 10,
        'election_year': 2021,
        'party_name': None,
    }
