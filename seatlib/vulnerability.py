'''Analysis of the last district seat awarded in a district.

The last seat of a district is the one most easily lost: a slightly
different vote count could have given it to another party. Two different
questions are answered about it:

-   *By quotient*: which party came closest to it in the deciding round,
    i.e. the runner-up by quotient (or remainder), and by how much.
-   *By votes*: which losing party would have needed the fewest additional
    votes to overtake the winner in the deciding round.

The two answers can differ because a party's quotient grows by one unit
per divisor votes, and divisors differ between parties. Both are computed
from the round standings stored in the district result, without
re-running the apportionment.

Under largest fraction methods, additional votes also raise the quota,
so the analysis by votes must be told the quota function of the method
(see :attr:`seatlib.model.AlgorithmType.quota_function`).
'''

import math
from fractions import Fraction
from typing import Callable, Dict, Iterable, List, Optional, Union
from numbers import Number

import seatlib.util
import seatlib.component.quota
from seatlib.model import DistrictResult, SeatPartyResult, SeatResult
from seatlib.persist import simple_serialization


QuotaFunction = Union[str, Callable[[int, int], Number]]


@simple_serialization
class VulnerableSeat:
    '''A losing party's distance from the last seat of a district.

    :param district: Name of the district.
    :param winner: Code of the party that won the last seat.
    :param runner_up: Code of the losing party analyzed.
    :param quotient_margin: Winner's quotient minus the runner-up's.
    :param more_votes_to_win: Minimum number of additional votes the
        runner-up needed to win the seat.
    '''
    def __init__(self,
                 district: str,
                 winner: str,
                 runner_up: str,
                 quotient_margin: Fraction,
                 more_votes_to_win: int,
                 ):
        self.district = district
        self.winner = winner
        self.runner_up = runner_up
        self.quotient_margin = quotient_margin
        self.more_votes_to_win = more_votes_to_win

    def __repr__(self) -> str:
        return (
            f'<VulnerableSeat({self.district},{self.winner}'
            f'<-{self.runner_up},{self.more_votes_to_win})>'
        )


@simple_serialization
class VulnerableSeats:
    def __init__(self,
                 by_quotient: VulnerableSeat,
                 by_votes: VulnerableSeat,
                 ):
        self.by_quotient = by_quotient
        self.by_votes = by_votes


def votes_to_win(winner: SeatPartyResult,
                 loser: SeatPartyResult,
                 quota_function: Optional[QuotaFunction] = None,
                 total: Optional[Number] = None,
                 n_seats: Optional[int] = None,
                 ) -> int:
    '''Return the minimum additional votes for loser to beat winner.

    The loser's quotient must exceed the winner's, or equal it when the
    loser precedes the winner in the tie-breaking order.

    For divisor methods, the loser's divisor stays the same whatever its
    vote count, so the quotient gap converts to votes directly. Largest
    fraction methods need the quota function, the total contending votes
    and the number of seats of the district: the additional votes raise
    the total and thus the quota, lowering the values of all parties.
    '''
    loser_first = seatlib.util.precedes(loser.party_code, winner.party_code)
    if quota_function is None:
        gap = (winner.quotient - loser.quotient) * loser.divisor
        return _smallest_above(gap, loser_first)
    quota_function = seatlib.component.quota.construct(quota_function)
    # with quota q, the loser wins if its votes - winner's > seat diff * q
    seat_diff = _seats_won(loser) - _seats_won(winner)
    vote_diff = loser.votes - winner.votes

    def needed(quota: Number) -> int:
        return _smallest_above(seat_diff * quota - vote_diff, loser_first)

    def wins(extra: int) -> bool:
        return needed(quota_function(total + extra, n_seats)) <= extra

    extra = needed(quota_function(total, n_seats))
    if seat_diff > 0:
        # the quota only grows with the votes, so this converges upwards
        while not wins(extra):
            extra = needed(quota_function(total + extra, n_seats))
        return extra
    else:
        low, high = 0, extra
        while low < high:
            mid = (low + high) // 2
            if wins(mid):
                high = mid
            else:
                low = mid + 1
        return high


def _smallest_above(bound: Number, inclusive: bool) -> int:
    if inclusive:
        return max(math.ceil(bound), 0)
    else:
        return max(math.floor(bound) + 1, 0)


def _seats_won(result: SeatPartyResult) -> int:
    return int(Fraction(result.votes) / result.divisor - result.quotient)


def _losers(seat: SeatResult) -> List[SeatPartyResult]:
    return [
        result for result in seat.party_results
        if result.party_code != seat.winner
    ]


def _winner(seat: SeatResult) -> SeatPartyResult:
    return seat.party_result(seat.winner)


def _votes_needed(district_result: DistrictResult,
                  quota_function: Optional[QuotaFunction],
                  ) -> Callable[[SeatPartyResult], int]:
    seat = district_result.last_seat
    winner = _winner(seat)
    total = sum(result.votes for result in seat.party_results)
    n_seats = len(district_result.seat_results)
    return lambda loser: votes_to_win(
        winner, loser, quota_function, total, n_seats
    )


def votes_to_vulnerable_seat_map(district_result: DistrictResult,
                                 quota_function: Optional[QuotaFunction] =
                                 None,
                                 ) -> Dict[str, int]:
    '''Return the additional votes each loser needed for the last seat.

    :param district_result: The district to analyze.
    :param quota_function: Quota function (or its name) if the district
        was apportioned by a largest fraction method; None for divisor
        methods.
    '''
    seat = district_result.last_seat
    if seat is None:
        return {}
    needed = _votes_needed(district_result, quota_function)
    return {loser.party_code: needed(loser) for loser in _losers(seat)}


def quotients_to_vulnerable_seat_map(district_result: DistrictResult
                                     ) -> Dict[str, Fraction]:
    '''Return the quotient gap of each loser to the last seat.'''
    seat = district_result.last_seat
    if seat is None:
        return {}
    return {
        loser.party_code: seat.quotient - loser.quotient
        for loser in _losers(seat)
    }


def vulnerable_seat_by_quotient(district_result: DistrictResult,
                                quota_function: Optional[QuotaFunction] =
                                None,
                                ) -> Optional[VulnerableSeat]:
    '''Return the runner-up by quotient for the last seat, if any.'''
    seat = district_result.last_seat
    if seat is None:
        return None
    losers = _losers(seat)
    if not losers:
        return None
    runner_up = losers[0]
    return VulnerableSeat(
        district_result.name,
        seat.winner,
        runner_up.party_code,
        seat.quotient - runner_up.quotient,
        _votes_needed(district_result, quota_function)(runner_up),
    )


def vulnerable_seat_by_votes(district_result: DistrictResult,
                             quota_function: Optional[QuotaFunction] = None,
                             ) -> Optional[VulnerableSeat]:
    '''Return the loser needing the fewest votes for the last seat, if any.

    Among losers needing equally many votes, the one closer by quotient
    is returned.
    '''
    seat = district_result.last_seat
    if seat is None:
        return None
    losers = _losers(seat)
    if not losers:
        return None
    needed = list(map(_votes_needed(district_result, quota_function), losers))
    best_i = min(range(len(losers)), key=lambda i: (needed[i], i))
    closest = losers[best_i]
    return VulnerableSeat(
        district_result.name,
        seat.winner,
        closest.party_code,
        seat.quotient - closest.quotient,
        needed[best_i],
    )


def vulnerable_seat(district_result: DistrictResult,
                    quota_function: Optional[QuotaFunction] = None,
                    ) -> Optional[VulnerableSeats]:
    '''Analyze the last seat of a district both by quotient and by votes.

    Returns None if the district awarded no seat or there was no losing
    party contending for the last seat.

    :param district_result: The district to analyze.
    :param quota_function: Quota function (or its name) if the district
        was apportioned by a largest fraction method; None for divisor
        methods.
    '''
    by_quotient = vulnerable_seat_by_quotient(district_result, quota_function)
    if by_quotient is None:
        return None
    return VulnerableSeats(
        by_quotient, vulnerable_seat_by_votes(district_result, quota_function)
    )


def most_vulnerable_seat(district_results: Iterable[DistrictResult],
                         quota_function: Optional[QuotaFunction] = None,
                         ) -> Optional[VulnerableSeat]:
    '''Return the last seat that the fewest additional votes would flip.

    The votes needed are taken relative to the votes cast in the district
    so that districts of different sizes are comparable. Quotients are not
    used since a largest fraction remainder may be zero or negative.
    '''
    best = None
    best_margin = None
    for district_result in district_results:
        seat = vulnerable_seat_by_votes(district_result, quota_function)
        if seat is None:
            continue
        margin = Fraction(seat.more_votes_to_win) / district_result.votes
        if best_margin is None or margin < best_margin:
            best, best_margin = seat, margin
    return best
