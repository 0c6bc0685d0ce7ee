'''Distribution of national levelling seats.

Levelling seats (utjevningsmandater) compensate parties that came out of
the district apportionment with fewer seats than their national vote
share entitles them to. The distribution proceeds in three steps:

1.  Parties reaching the national threshold qualify. The seats of the
    whole assembly minus the district seats of non-qualifying parties are
    apportioned among the qualifying parties by the national votes using
    the modified Sainte-Laguë method. A party that already holds more
    district seats than that keeps them but drops out, and the
    apportionment is repeated without it.
2.  The deficit of each remaining party, its national entitlement minus
    its district seats, is the number of levelling seats it receives. The
    deficits always add up to the number of levelling seats.
3.  The seats are placed into districts one per round. Each round the
    party with the largest remaining deficit receives a seat in the
    eligible district where its levelling quotient is the highest. The
    levelling quotient is the quotient the party would have for its next
    district seat divided by the number of votes per seat in the district,
    so that quotients from districts of different sizes are comparable.

A party receives at most one levelling seat per district and, unless
configured otherwise, none in a district where it won a district seat.
If no remaining party has an eligible district left, the distribution
fails with :class:`Unsatisfiable` rather than dropping a seat.
'''

import logging
from decimal import Decimal
from fractions import Fraction
from typing import Dict, Iterable, List, Optional, Set, Tuple
from numbers import Number

import seatlib.util
import seatlib.component.divisor
from seatlib.evaluate.core import InvalidInput, Unsatisfiable, check_seats
from seatlib.evaluate.proportional import (
    HighestAverages, district_party_results
)
from seatlib.model import (
    DistrictQuotients, DistrictResult, LagueDhontResult, LevelingSeat,
    PartyQuotient, PartyResult,
)
from seatlib.persist import simple_serialization


logger = logging.getLogger(__name__)


@simple_serialization
class LevelingDistributor:
    '''Distribute levelling seats among parties and place them in districts.

    :param first_divisor: First divisor of the modified Sainte-Laguë method
        used for the national apportionment and the levelling quotients.
    :param exclude_won_districts: If True, a party cannot receive
        a levelling seat in a district where it won a district seat.
    :param max_per_district: Maximum number of levelling seats placed in
        any single district; unlimited if None. The Norwegian law places
        exactly one levelling seat in each district.
    '''
    def __init__(self,
                 first_divisor: Number = Decimal('1.4'),
                 exclude_won_districts: bool = True,
                 max_per_district: Optional[int] = None,
                 ):
        self.first_divisor = first_divisor
        self.exclude_won_districts = exclude_won_districts
        self.max_per_district = max_per_district
        self._national = HighestAverages(
            seatlib.component.divisor.modified_first_coef(
                seatlib.component.divisor.sainte_lague, first_divisor
            )
        )

    def evaluate(self,
                 district_results: Iterable[DistrictResult],
                 n_seats: int,
                 threshold: Number,
                 national_votes: Optional[Dict[str, int]] = None,
                 party_names: Optional[Dict[str, str]] = None,
                 ) -> LagueDhontResult:
        '''Distribute levelling seats given the complete district results.

        :param district_results: Results of the district apportionment in
            all districts of the election.
        :param n_seats: Number of levelling seats.
        :param threshold: National threshold in percent of the votes for
            a party to qualify for levelling seats.
        :param national_votes: National votes of each party; summed from
            the district results if not given.
        :param party_names: Full party names to be put in the results.
        :returns: The complete result with levelling seats merged into
            the district and national party results.
        :raises Unsatisfiable: If a levelling seat cannot be placed.
        '''
        check_seats(n_seats, ' of levelling seats')
        if party_names is None:
            party_names = {}
        district_results = list(district_results)
        if national_votes is None:
            national_votes = seatlib.util.national_totals({
                dr.name: _votes_of(dr) for dr in district_results
            })
        district_seats = seatlib.util.national_totals({
            dr.name: {
                pr.party_code: pr.district_seats for pr in dr.party_results
            }
            for dr in district_results
        })
        qualifying = self.qualifying(national_votes, threshold)
        deficits = self.deficits(
            national_votes, district_seats, qualifying,
            sum(district_seats.values()) + n_seats,
        )
        if n_seats and not deficits:
            raise Unsatisfiable({}, 0)
        quotients = self.quotients(district_results, qualifying)
        seats = self.place(district_results, deficits, quotients)
        return self._result(
            district_results, national_votes, district_seats,
            qualifying, quotients, seats, party_names,
        )

    @staticmethod
    def qualifying(national_votes: Dict[str, int],
                   threshold: Number,
                   ) -> List[str]:
        '''Return the parties reaching the threshold, in input order.'''
        total = sum(national_votes.values())
        if total == 0:
            return []
        limit = Fraction(total) * seatlib.util.exact_number(threshold) / 100
        return [
            party for party, n_votes in national_votes.items()
            if n_votes > 0 and n_votes >= limit
        ]

    def deficits(self,
                 national_votes: Dict[str, int],
                 district_seats: Dict[str, int],
                 qualifying: List[str],
                 total_seats: int,
                 ) -> Dict[str, int]:
        '''Return the number of levelling seats owed to each party.

        :param national_votes: National votes of each party.
        :param district_seats: District seats won by each party.
        :param qualifying: Parties qualifying for levelling seats.
        :param total_seats: Number of seats in the assembly, district and
            levelling seats together.
        '''
        excluded = set()
        while True:
            contenders = {
                party: national_votes[party] for party in qualifying
                if party not in excluded
            }
            if not contenders:
                return {}
            n_contended = total_seats - sum(
                n for party, n in district_seats.items()
                if party not in contenders
            )
            entitled = self._national.distribute(contenders, n_contended)
            overhang = [
                party for party in contenders
                if district_seats.get(party, 0) > entitled.get(party, 0)
            ]
            if not overhang:
                break
            logger.info('%s won more district seats than entitled,'
                        ' excluding from levelling', overhang)
            excluded.update(overhang)
        deficits = {
            party: entitled.get(party, 0) - district_seats.get(party, 0)
            for party in contenders
        }
        logger.info('levelling seats owed: %s', deficits)
        return deficits

    def quotients(self,
                  district_results: List[DistrictResult],
                  qualifying: List[str],
                  ) -> Dict[str, Dict[str, Fraction]]:
        '''Return levelling quotients by district and qualifying party.'''
        divisor_fx = self._national.divisor_function
        quotients = {}
        for dr in district_results:
            dquots = {}
            for party in qualifying:
                result = dr.party_result(party)
                if result is None or not dr.votes_per_seat:
                    dquots[party] = Fraction(0)
                else:
                    dquots[party] = (
                        Fraction(result.votes)
                        / divisor_fx(result.district_seats)
                        / dr.votes_per_seat
                    )
            quotients[dr.name] = dquots
        return quotients

    def place(self,
              district_results: List[DistrictResult],
              deficits: Dict[str, int],
              quotients: Dict[str, Dict[str, Fraction]],
              ) -> List[LevelingSeat]:
        '''Place the owed levelling seats into districts, one per round.'''
        remaining = {
            party: n for party, n in deficits.items() if n > 0
        }
        won_district = {
            (dr.name, pr.party_code)
            for dr in district_results for pr in dr.party_results
            if pr.district_seats > 0
        }
        given = set()
        n_given = {dr.name: 0 for dr in district_results}
        seats = []
        while remaining:
            options = {}
            for party in remaining:
                eligible = [
                    (quotients[dr.name][party], dr.name)
                    for dr in district_results
                    if self._is_eligible(
                        party, dr, given, won_district, n_given,
                    )
                ]
                if eligible:
                    # best quotient; earliest district among equals
                    options[party] = max(eligible, key=lambda opt: opt[0])
            if not options:
                raise Unsatisfiable(dict(remaining), len(seats))
            party = min(options, key=lambda p: (
                -remaining[p], -options[p][0], p
            ))
            quotient, district = options[party]
            seats.append(LevelingSeat(
                party, district, len(seats) + 1, quotient
            ))
            logger.info('levelling seat %d to %s in %s at %s', len(seats),
                        party, district, float(quotient))
            given.add((district, party))
            n_given[district] += 1
            remaining[party] -= 1
            if not remaining[party]:
                del remaining[party]
        return seats

    def _is_eligible(self,
                     party: str,
                     dr: DistrictResult,
                     given: Set[Tuple[str, str]],
                     won_district: Set[Tuple[str, str]],
                     n_given: Dict[str, int],
                     ) -> bool:
        pr = dr.party_result(party)
        return (
            pr is not None and pr.votes > 0
            and (dr.name, party) not in given
            and not (
                self.exclude_won_districts
                and (dr.name, party) in won_district
            )
            and (
                self.max_per_district is None
                or n_given[dr.name] < self.max_per_district
            )
        )

    def _result(self,
                district_results: List[DistrictResult],
                national_votes: Dict[str, int],
                district_seats: Dict[str, int],
                qualifying: List[str],
                quotients: Dict[str, Dict[str, Fraction]],
                seats: List[LevelingSeat],
                party_names: Dict[str, str],
                ) -> LagueDhontResult:
        by_district = {dr.name: {} for dr in district_results}
        for seat in seats:
            seatlib.util.add_dict_to_dict(
                by_district[seat.district], {seat.party_code: 1}
            )
        new_district_results = [
            _with_leveling(dr, by_district[dr.name], party_names)
            for dr in district_results
        ]
        national_leveling = seatlib.util.national_totals(by_district)
        total_votes = sum(national_votes.values())
        all_seats = sum(district_seats.values()) + len(seats)
        party_results = [
            PartyResult.compute(
                party, n_votes, total_votes,
                district_seats.get(party, 0),
                national_leveling.get(party, 0),
                all_seats,
                party_names.get(party),
            )
            for party, n_votes in seatlib.util.ranked(national_votes)
        ]
        final_quotients = [
            DistrictQuotients(dr.name, [
                PartyQuotient(
                    party, quotients[dr.name][party],
                    party in by_district[dr.name],
                )
                for party in qualifying
            ])
            for dr in district_results
        ]
        return LagueDhontResult(
            new_district_results, party_results, seats, final_quotients,
        )


def aggregate_party_results(district_results: Iterable[DistrictResult],
                            party_names: Optional[Dict[str, str]] = None,
                            ) -> List[PartyResult]:
    '''Sum district-level party results to national ones.

    Levelling seats already merged into the district results are summed
    as well.
    '''
    district_results = list(district_results)
    votes = seatlib.util.national_totals({
        dr.name: _votes_of(dr) for dr in district_results
    })
    district_seats, leveling_seats = {}, {}
    for dr in district_results:
        for pr in dr.party_results:
            seatlib.util.add_dict_to_dict(
                district_seats, {pr.party_code: pr.district_seats}
            )
            seatlib.util.add_dict_to_dict(
                leveling_seats, {pr.party_code: pr.leveling_seats}
            )
    return district_party_results(
        votes, district_seats, leveling_seats, party_names
    )


def distribute_leveling(national_party_results: Iterable[PartyResult],
                        district_results: Iterable[DistrictResult],
                        leveling_seat_count: int,
                        threshold: Number,
                        first_divisor: Number = Decimal('1.4'),
                        ) -> Tuple[Tuple[PartyResult, ...],
                                   Tuple[LevelingSeat, ...]]:
    '''Distribute levelling seats and update the national party results.

    :param national_party_results: National results of the district
        apportionment, giving the national votes and party names.
    :param district_results: Results of the district apportionment.
    :param leveling_seat_count: Number of levelling seats.
    :param threshold: National threshold in percent.
    :param first_divisor: First divisor of modified Sainte-Laguë.
    :returns: Updated national party results and the levelling seats.
    '''
    national_party_results = list(national_party_results)
    national_votes = {
        pr.party_code: pr.votes for pr in national_party_results
    }
    if len(national_votes) != len(national_party_results):
        raise InvalidInput('duplicate party in national results')
    party_names = {
        pr.party_code: pr.party_name for pr in national_party_results
        if pr.party_name is not None
    }
    result = LevelingDistributor(first_divisor).evaluate(
        district_results, leveling_seat_count, threshold,
        national_votes=national_votes,
        party_names=party_names,
    )
    return result.party_results, result.leveling_seat_distribution


def _votes_of(district_result: DistrictResult) -> Dict[str, int]:
    return {pr.party_code: pr.votes for pr in district_result.party_results}


def _with_leveling(district_result: DistrictResult,
                   leveling: Dict[str, int],
                   party_names: Dict[str, str],
                   ) -> DistrictResult:
    district_seats = {
        pr.party_code: pr.district_seats
        for pr in district_result.party_results
    }
    names = {
        pr.party_code: pr.party_name for pr in district_result.party_results
        if pr.party_name is not None
    }
    names.update(party_names)
    return DistrictResult(
        name=district_result.name,
        votes=district_result.votes,
        seats=sum(district_seats.values()) + sum(leveling.values()),
        votes_per_seat=district_result.votes_per_seat,
        party_results=district_party_results(
            _votes_of(district_result), district_seats, leveling, names,
        ),
        seat_results=district_result.seat_results,
    )
