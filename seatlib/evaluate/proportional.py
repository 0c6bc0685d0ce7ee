'''Apportionment of district seats among parties.

Two families of methods are supported, both implemented as a sequence of
award rounds in which each contending party is assigned a value and the
seat goes to the party with the highest one:

-   *Highest averages* (divisor) methods divide the votes of a party by an
    increasing divisor sequence indexed by the number of seats it won so
    far (D'Hondt, Sainte-Laguë and its modified variant).
-   *Largest fraction* (largest remainder) methods compute a quota and
    give each party ``floor(votes / quota)`` seats outright and the rest
    by the largest remainders. Here the value of a party is the number of
    quotas its votes fill minus the seats it already won, so all outright
    seats are awarded before any remainder seat and the remainder seats
    follow in order of decreasing remainders.

Equal values are resolved by a fixed total order, party code ascending,
so the result never depends on chance or input ordering. The whole
chronological award sequence is retained in the result to allow analysis
of the last seat (see :mod:`seatlib.vulnerability`).

Quotients are exact fractions. Their magnitude depends on the scale of the
input votes, so they are only comparable within a single run.
'''

import abc
import logging
from decimal import Decimal
from fractions import Fraction
from typing import Callable, Dict, List, Optional, Union
from numbers import Number

import seatlib.util
import seatlib.component.divisor
import seatlib.component.quota
from seatlib.evaluate.core import (
    Evaluator, InvalidInput, check_seats, check_votes
)
from seatlib.model import (
    AlgorithmType, District, DistrictResult, PartyResult,
    SeatPartyResult, SeatResult,
)
from seatlib.persist import simple_serialization


logger = logging.getLogger(__name__)


class SequentialAllocator(Evaluator):
    '''Award district seats one by one to the party with the highest value.

    Subclasses define the value of a party given its votes and the number
    of seats it has won so far.
    '''

    def evaluate(self,
                 votes: Dict[str, int],
                 n_seats: int,
                 name: str = '',
                 threshold: Optional[Number] = None,
                 party_names: Optional[Dict[str, str]] = None,
                 ) -> DistrictResult:
        '''Apportion the seats of a district among parties.

        :param votes: Votes for each party in the district.
        :param n_seats: Number of seats to be filled.
        :param name: Name of the district, used in the result.
        :param threshold: Percentage of the district votes a party must
            reach to contend for the seats. No threshold if None.
        :param party_names: Full party names to be put in the results.
        :raises InvalidInput: If any vote count is negative or not an
            integer, if the seat count is negative, or if there are seats
            to be filled but no party contends for them.
        '''
        where = f' in {name}' if name else ''
        check_votes(votes, where)
        check_seats(n_seats, where)
        contenders = self._contenders(votes, threshold)
        if n_seats > 0 and not contenders:
            raise InvalidInput(
                f'no votes to apportion {n_seats} seats{where}'
            )
        scale = self.scale(sum(contenders.values()), n_seats)
        won = {party: 0 for party in contenders}
        seat_results = []
        for seat_number in range(1, n_seats + 1):
            standings = self._standings(contenders, won, scale)
            best = standings[0]
            won[best.party_code] += 1
            logger.info('%s seat %d to %s at %s', name, seat_number,
                        best.party_code, float(best.quotient))
            logger.debug('round standings: %s', standings)
            seat_results.append(SeatResult(
                seat_number, best.party_code, best.quotient, standings
            ))
        return DistrictResult(
            name=name,
            votes=sum(votes.values()),
            seats=n_seats,
            votes_per_seat=(
                Fraction(sum(votes.values()), n_seats) if n_seats else 0
            ),
            party_results=district_party_results(
                votes, won, {}, party_names
            ),
            seat_results=seat_results,
        )

    def distribute(self,
                   votes: Dict[str, int],
                   n_seats: int,
                   ) -> Dict[str, int]:
        '''Return just the seat counts of the parties that won any seats.'''
        result = self.evaluate(votes, n_seats)
        return result.seat_counts()

    def scale(self, total_votes: int, n_seats: int) -> Optional[Number]:
        '''Return the district-wide constant the values depend on, if any.'''
        return None

    @abc.abstractmethod
    def value(self, n_votes: int, n_won: int, scale: Optional[Number]
              ) -> Fraction:
        '''Return the value of a party with n_votes votes and n_won seats.'''
        raise NotImplementedError

    @abc.abstractmethod
    def vote_unit(self, n_won: int, scale: Optional[Number]) -> Number:
        '''Return the number of votes worth a unit of value.'''
        raise NotImplementedError

    def _standings(self,
                   contenders: Dict[str, int],
                   won: Dict[str, int],
                   scale: Optional[Number],
                   ) -> List[SeatPartyResult]:
        values = {
            party: self.value(n_votes, won[party], scale)
            for party, n_votes in contenders.items()
        }
        return [
            SeatPartyResult(
                party, contenders[party], value,
                self.vote_unit(won[party], scale)
            )
            for party, value in seatlib.util.ranked(values)
        ]

    @staticmethod
    def _contenders(votes: Dict[str, int],
                    threshold: Optional[Number],
                    ) -> Dict[str, int]:
        total = sum(votes.values())
        if threshold is None or threshold <= 0:
            passing = 0
        else:
            passing = total * seatlib.util.exact_number(threshold) / 100
        return {
            party: n_votes for party, n_votes in votes.items()
            if n_votes > 0 and n_votes >= passing
        }


@simple_serialization
class HighestAverages(SequentialAllocator):
    '''Apportion seats by ordering divided vote counts.

    Divides the vote count for each party by an increasing sequence of
    divisors and awards each seat to the highest quotient.

    :param divisor_function: A callable producing the divisor from the
        number of seats awarded to the party so far. The common divisor
        functions can be referenced by string name from the
        :mod:`seatlib.component.divisor` module.
    '''
    def __init__(self,
                 divisor_function: Union[
                     str, Callable[[int], Number]
                 ] = 'd_hondt',
                 ):
        self.divisor_function = seatlib.component.divisor.construct(
            divisor_function
        )

    def value(self, n_votes: int, n_won: int, scale: Optional[Number]
              ) -> Fraction:
        return Fraction(n_votes) / self.divisor_function(n_won)

    def vote_unit(self, n_won: int, scale: Optional[Number]) -> Number:
        return self.divisor_function(n_won)


@simple_serialization
class LargestRemainder(SequentialAllocator):
    '''Apportion seats by whole quotas, rounding by largest remainder.

    The result is usually very close to proportionality but might suffer
    from an Alabama paradox where adding seats causes one of the parties
    to lose one.

    :param quota_function: A callable producing the quota from the total
        number of votes and number of seats. The common quota functions
        can be referenced by string name from the
        :mod:`seatlib.component.quota` module.
    '''
    def __init__(self,
                 quota_function: Union[
                     str, Callable[[int, int], Number]
                 ] = 'hare',
                 ):
        self.quota_function = seatlib.component.quota.construct(
            quota_function
        )

    def scale(self, total_votes: int, n_seats: int) -> Optional[Number]:
        if n_seats == 0 or total_votes == 0:
            return None
        return self.quota_function(total_votes, n_seats)

    def quota(self, votes: Dict[str, int], n_seats: int) -> Number:
        '''Return the quota for the given district votes.'''
        return self.quota_function(sum(votes.values()), n_seats)

    def value(self, n_votes: int, n_won: int, scale: Optional[Number]
              ) -> Fraction:
        return Fraction(n_votes) / scale - n_won

    def vote_unit(self, n_won: int, scale: Optional[Number]) -> Number:
        return scale


def district_party_results(votes: Dict[str, int],
                           district_seats: Dict[str, int],
                           leveling_seats: Dict[str, int],
                           party_names: Optional[Dict[str, str]] = None,
                           ) -> List[PartyResult]:
    '''Build party results of a district, ordered by votes descending.'''
    if party_names is None:
        party_names = {}
    total_votes = sum(votes.values())
    all_seats = (
        sum(district_seats.values()) + sum(leveling_seats.values())
    )
    return [
        PartyResult.compute(
            party, n_votes, total_votes,
            district_seats.get(party, 0),
            leveling_seats.get(party, 0),
            all_seats,
            party_names.get(party),
        )
        for party, n_votes in seatlib.util.ranked(votes)
    ]


DEFAULT_FIRST_DIVISOR = Decimal('1.4')


EVALUATOR_FACTORIES: Dict[
    AlgorithmType, Callable[[Optional[Number]], SequentialAllocator]
] = {
    AlgorithmType.SAINTE_LAGUE: lambda first_divisor: HighestAverages(
        'sainte_lague'
    ),
    AlgorithmType.MODIFIED_SAINTE_LAGUE: lambda first_divisor: (
        HighestAverages(seatlib.component.divisor.modified_first_coef(
            seatlib.component.divisor.sainte_lague,
            DEFAULT_FIRST_DIVISOR if first_divisor is None else first_divisor,
        ))
    ),
    AlgorithmType.D_HONDT: lambda first_divisor: HighestAverages('d_hondt'),
    AlgorithmType.LARGEST_FRACTION_HARE: lambda first_divisor: (
        LargestRemainder('hare')
    ),
    AlgorithmType.LARGEST_FRACTION_DROOP: lambda first_divisor: (
        LargestRemainder('droop')
    ),
}


def evaluator_for(algorithm: AlgorithmType,
                  first_divisor: Optional[Number] = None,
                  ) -> SequentialAllocator:
    '''Return the district evaluator for the given method.

    :param algorithm: The apportionment method.
    :param first_divisor: First divisor of the modified Sainte-Laguë method;
        ignored by the other methods. Defaults to 1.4.
    '''
    return EVALUATOR_FACTORIES[AlgorithmType(algorithm)](first_divisor)


def apportion(district: District,
              votes_by_party: Dict[str, int],
              seat_count: int,
              method: AlgorithmType,
              first_divisor: Optional[Number] = None,
              threshold: Optional[Number] = None,
              party_names: Optional[Dict[str, str]] = None,
              ) -> DistrictResult:
    '''Apportion the seats of a district among parties.

    :param district: The district; its seat count must equal seat_count.
    :param votes_by_party: Votes for each party in the district.
    :param seat_count: Number of seats to be filled.
    :param method: The apportionment method.
    :param first_divisor: First divisor of the modified Sainte-Laguë method.
    :param threshold: District threshold in percent; the district's own
        threshold is used if not given.
    :param party_names: Full party names to be put in the results.
    :raises InvalidInput: On a seat count mismatch or malformed votes.
    '''
    if seat_count != district.seats:
        raise InvalidInput(
            f'seat count {seat_count} does not match {district.seats}'
            f' configured for {district.name}'
        )
    if threshold is None:
        threshold = district.threshold
    return evaluator_for(method, first_divisor).evaluate(
        votes_by_party, seat_count,
        name=district.name,
        threshold=threshold,
        party_names=party_names,
    )
