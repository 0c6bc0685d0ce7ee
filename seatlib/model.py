'''Record types flowing into and out of the apportionment engine.

Input records (:class:`Election`, :class:`District`, :class:`Votes`,
:class:`Metrics`, :class:`Parameters`) describe one election year as loaded
by the caller. Output records (:class:`PartyResult`, :class:`SeatResult`,
:class:`DistrictResult`, :class:`LevelingSeat`, :class:`DistrictQuotients`,
:class:`LagueDhontResult`) are computed by the engine and never edited
afterwards; a presentation layer may hold several of them side by side
(e.g. a historical, a current and a comparison run) and compare them.

All records store their constructor arguments unchanged under the same
name, with sequences converted to tuples, and can be serialized by
:mod:`seatlib.persist`.
'''

from __future__ import annotations

import enum
import collections
from fractions import Fraction
from typing import Dict, Iterable, Optional, Union
from numbers import Number

from seatlib.persist import simple_serialization


class AlgorithmType(enum.Enum):
    '''Apportionment methods known to the engine.

    The set is closed: every member is mapped to an evaluator by
    :func:`seatlib.evaluate.proportional.evaluator_for`.
    '''
    SAINTE_LAGUE = 'sainte_lague'
    MODIFIED_SAINTE_LAGUE = 'modified_sainte_lague'
    D_HONDT = 'd_hondt'
    LARGEST_FRACTION_HARE = 'largest_fraction_hare'
    LARGEST_FRACTION_DROOP = 'largest_fraction_droop'

    @property
    def is_largest_fraction(self) -> bool:
        return self in (
            AlgorithmType.LARGEST_FRACTION_HARE,
            AlgorithmType.LARGEST_FRACTION_DROOP,
        )

    @property
    def quota_function(self) -> Optional[str]:
        '''Name of the quota function of a largest fraction method.'''
        return {
            AlgorithmType.LARGEST_FRACTION_HARE: 'hare',
            AlgorithmType.LARGEST_FRACTION_DROOP: 'droop',
        }.get(self)

    @property
    def uses_first_divisor(self) -> bool:
        '''Whether the first divisor setting has any effect on the method.'''
        return self is AlgorithmType.MODIFIED_SAINTE_LAGUE


@simple_serialization
class District:
    '''An electoral district (fylke) of one election.

    :param name: Name of the district; serves as its identifier.
    :param seats: Number of district seats to be filled in it.
    :param threshold: Optional percentage of the district votes a party
        must reach to contend for its district seats.
    '''
    def __init__(self,
                 name: str,
                 seats: int,
                 threshold: Optional[Number] = None,
                 ):
        self.name = name
        self.seats = seats
        self.threshold = threshold

    def __repr__(self) -> str:
        return f'<District({self.name},{self.seats})>'


@simple_serialization
class Election:
    '''Configuration of a specific election year.

    :param year: Election year.
    :param districts: Districts in their canonical order.
    :param threshold: National percentage of votes a party must reach to
        qualify for levelling seats.
    :param first_divisor: First divisor of the modified Sainte-Laguë method
        used in the year.
    :param leveling_seats: Number of national levelling seats.
    :param algorithm: Apportionment method legally used in the year.
    '''
    def __init__(self,
                 year: int,
                 districts: Iterable[District],
                 threshold: Number,
                 first_divisor: Number,
                 leveling_seats: int,
                 algorithm: AlgorithmType =
                 AlgorithmType.MODIFIED_SAINTE_LAGUE,
                 ):
        self.year = year
        self.districts = tuple(districts)
        self.threshold = threshold
        self.first_divisor = first_divisor
        self.leveling_seats = leveling_seats
        self.algorithm = algorithm

    @property
    def seats(self) -> int:
        '''Total number of district seats.'''
        return sum(district.seats for district in self.districts)

    def district(self, name: str) -> District:
        for district in self.districts:
            if district.name == name:
                return district
        raise KeyError(f'unknown district: {name}')

    def with_districts(self, districts: Iterable[District]) -> Election:
        '''Return a copy of the election with the districts replaced.'''
        return Election(
            self.year, districts, self.threshold, self.first_divisor,
            self.leveling_seats, self.algorithm,
        )

    def __repr__(self) -> str:
        return f'<Election({self.year},{len(self.districts)} districts)>'


@simple_serialization
class Votes:
    '''Number of votes cast for a party in a district.

    :param district: Name of the district.
    :param party_code: Party identifier (e.g. ``'AP'``).
    :param votes: Number of votes.
    :param election_year: Election year the votes belong to.
    :param party_name: Full name of the party, if known.
    '''
    def __init__(self,
                 district: str,
                 party_code: str,
                 votes: int,
                 election_year: int,
                 party_name: Optional[str] = None,
                 ):
        self.district = district
        self.party_code = party_code
        self.votes = votes
        self.election_year = election_year
        self.party_name = party_name

    @staticmethod
    def table(votes: Iterable[Votes]) -> Dict[str, Dict[str, int]]:
        '''Group vote records into a district-party table.

        Districts and parties keep the order of their first appearance;
        repeated cells are summed.
        '''
        table = collections.OrderedDict()
        for record in votes:
            dvotes = table.setdefault(record.district, {})
            dvotes[record.party_code] = (
                dvotes.get(record.party_code, 0) + record.votes
            )
        return dict(table)

    @staticmethod
    def party_names(votes: Iterable[Votes]) -> Dict[str, str]:
        return {
            record.party_code: record.party_name
            for record in votes if record.party_name is not None
        }

    def __repr__(self) -> str:
        return f'<Votes({self.district},{self.party_code},{self.votes})>'


@simple_serialization
class Metrics:
    '''Auxiliary figures of a district used to distribute district seats.

    :param district: Name of the district.
    :param election_year: Year the figures belong to.
    :param population: Number of inhabitants.
    :param area: Area in square kilometres.
    '''
    def __init__(self,
                 district: str,
                 election_year: int,
                 population: int,
                 area: Number,
                 ):
        self.district = district
        self.election_year = election_year
        self.population = population
        self.area = area

    def __repr__(self) -> str:
        return f'<Metrics({self.district},{self.election_year})>'


@simple_serialization
class Parameters:
    '''Legally defined method configuration for an election year.

    Read-only reference data. :data:`UNLOADED_PARAMETERS` stands in for
    years with no explicit parameters.

    :param election_year: Election year.
    :param algorithm: Apportionment method, or None if unknown.
    :param district_seats: Legal number of district seats by district name.
    :param area_factor: Weight of a square kilometre of district area
        relative to one inhabitant in the distribution of district seats.
    :param threshold: National levelling seat threshold in percent.
    :param leveling_seats: Number of levelling seats.
    :param total_votes: Total number of votes cast nationally.
    :param first_divisor: First divisor of the modified Sainte-Laguë
        method, if the method uses one.
    '''
    def __init__(self,
                 election_year: int,
                 algorithm: Optional[AlgorithmType],
                 district_seats: Dict[str, int],
                 area_factor: Number,
                 threshold: Number,
                 leveling_seats: int,
                 total_votes: int,
                 first_divisor: Optional[Number] = None,
                 ):
        self.election_year = election_year
        self.algorithm = algorithm
        self.district_seats = dict(district_seats)
        self.area_factor = area_factor
        self.threshold = threshold
        self.leveling_seats = leveling_seats
        self.total_votes = total_votes
        self.first_divisor = first_divisor

    @property
    def is_loaded(self) -> bool:
        return self.election_year >= 0 and self.algorithm is not None

    def __repr__(self) -> str:
        return f'<Parameters({self.election_year},{self.algorithm})>'


UNLOADED_PARAMETERS = Parameters(
    election_year=-1,
    algorithm=None,
    district_seats={},
    area_factor=-1,
    threshold=-1,
    leveling_seats=-1,
    total_votes=-1,
)


@simple_serialization
class PartyResult:
    '''Outcome of a party within a district or nationally.

    :param party_code: Party identifier.
    :param votes: Number of votes.
    :param percent_votes: Share of the votes in percent.
    :param district_seats: Number of district seats won.
    :param leveling_seats: Number of levelling seats won.
    :param total_seats: Total number of seats won.
    :param proportionality: Vote share minus seat share in percentage
        points; positive for under-represented parties.
    :param party_name: Full name of the party, if known.
    '''
    def __init__(self,
                 party_code: str,
                 votes: int,
                 percent_votes: float,
                 district_seats: int,
                 leveling_seats: int,
                 total_seats: int,
                 proportionality: float,
                 party_name: Optional[str] = None,
                 ):
        self.party_code = party_code
        self.votes = votes
        self.percent_votes = percent_votes
        self.district_seats = district_seats
        self.leveling_seats = leveling_seats
        self.total_seats = total_seats
        self.proportionality = proportionality
        self.party_name = party_name

    @classmethod
    def compute(cls,
                party_code: str,
                votes: int,
                total_votes: int,
                district_seats: int,
                leveling_seats: int,
                all_seats: int,
                party_name: Optional[str] = None,
                ) -> PartyResult:
        '''Create a party result, deriving the shares from the counts.

        :param total_votes: Total votes of all parties in the same scope.
        :param all_seats: Total seats of all parties in the same scope.
        '''
        total_seats = district_seats + leveling_seats
        percent_votes = _percent(votes, total_votes)
        return cls(
            party_code, votes, percent_votes,
            district_seats, leveling_seats, total_seats,
            percent_votes - _percent(total_seats, all_seats),
            party_name,
        )

    def __repr__(self) -> str:
        return f'<PartyResult({self.party_code},{self.total_seats})>'


@simple_serialization
class SeatPartyResult:
    '''Standing of one party in one seat award round.

    :param party_code: Party identifier.
    :param votes: Votes of the party in the district.
    :param quotient: Value compared in the round - the quotient for
        divisor methods, the remaining fraction of a quota for largest
        fraction methods.
    :param divisor: Number of votes worth one unit of quotient in the
        round - the current divisor, or the quota.
    '''
    def __init__(self,
                 party_code: str,
                 votes: int,
                 quotient: Fraction,
                 divisor: Number,
                 ):
        self.party_code = party_code
        self.votes = votes
        self.quotient = quotient
        self.divisor = divisor

    def __repr__(self) -> str:
        return f'<SeatPartyResult({self.party_code},{float(self.quotient)})>'


@simple_serialization
class SeatResult:
    '''Award of a single district seat.

    :param seat_number: Order of the award in the district, from 1.
    :param winner: Code of the party that won the seat.
    :param quotient: Winning quotient or remainder.
    :param party_results: Standings of all contending parties in the round,
        best first.
    '''
    def __init__(self,
                 seat_number: int,
                 winner: str,
                 quotient: Fraction,
                 party_results: Iterable[SeatPartyResult],
                 ):
        self.seat_number = seat_number
        self.winner = winner
        self.quotient = quotient
        self.party_results = tuple(party_results)

    def party_result(self, party_code: str) -> Optional[SeatPartyResult]:
        for result in self.party_results:
            if result.party_code == party_code:
                return result
        return None

    def __repr__(self) -> str:
        return f'<SeatResult({self.seat_number},{self.winner})>'


@simple_serialization
class DistrictResult:
    '''Result of the apportionment in a single district.

    :param name: Name of the district.
    :param votes: Total votes cast in the district.
    :param seats: Number of seats of the district (district and levelling).
    :param votes_per_seat: Votes per district seat.
    :param party_results: Party outcomes, in order of votes descending.
    :param seat_results: District seat awards in chronological order.
    '''
    def __init__(self,
                 name: str,
                 votes: int,
                 seats: int,
                 votes_per_seat: Number,
                 party_results: Iterable[PartyResult],
                 seat_results: Iterable[SeatResult],
                 ):
        self.name = name
        self.votes = votes
        self.seats = seats
        self.votes_per_seat = votes_per_seat
        self.party_results = tuple(party_results)
        self.seat_results = tuple(seat_results)

    @property
    def last_seat(self) -> Optional[SeatResult]:
        return self.seat_results[-1] if self.seat_results else None

    def party_result(self, party_code: str) -> Optional[PartyResult]:
        for result in self.party_results:
            if result.party_code == party_code:
                return result
        return None

    def seat_counts(self) -> Dict[str, int]:
        '''Return total seats by party for the parties that won any.'''
        return {
            result.party_code: result.total_seats
            for result in self.party_results if result.total_seats
        }

    def __repr__(self) -> str:
        return f'<DistrictResult({self.name},{self.seats})>'


@simple_serialization
class LevelingSeat:
    '''A levelling seat awarded to a party in a district.

    :param party_code: Party identifier.
    :param district: Name of the district.
    :param seat_number: Order of the award, from 1.
    :param quotient: Levelling quotient of the party in the district.
    '''
    def __init__(self,
                 party_code: str,
                 district: str,
                 seat_number: int,
                 quotient: Fraction,
                 ):
        self.party_code = party_code
        self.district = district
        self.seat_number = seat_number
        self.quotient = quotient

    def __repr__(self) -> str:
        return f'<LevelingSeat({self.seat_number},{self.party_code},' \
            f'{self.district})>'


@simple_serialization
class PartyQuotient:
    def __init__(self,
                 party_code: str,
                 quotient: Fraction,
                 won_leveling_seat: bool,
                 ):
        self.party_code = party_code
        self.quotient = quotient
        self.won_leveling_seat = won_leveling_seat


@simple_serialization
class DistrictQuotients:
    '''Levelling quotients of all qualifying parties in a district.

    Evidence for why the levelling seats went where they did.
    '''
    def __init__(self,
                 district: str,
                 leveling_seat_rounds: Iterable[PartyQuotient],
                 ):
        self.district = district
        self.leveling_seat_rounds = tuple(leveling_seat_rounds)


@simple_serialization
class LagueDhontResult:
    '''Complete output of one apportionment run.

    :param district_results: Results by district, levelling seats included.
    :param party_results: National results by party.
    :param leveling_seat_distribution: Levelling seats in award order.
    :param final_quotients: Levelling quotients by district.
    '''
    def __init__(self,
                 district_results: Iterable[DistrictResult],
                 party_results: Iterable[PartyResult],
                 leveling_seat_distribution: Iterable[LevelingSeat],
                 final_quotients: Iterable[DistrictQuotients] = (),
                 ):
        self.district_results = tuple(district_results)
        self.party_results = tuple(party_results)
        self.leveling_seat_distribution = tuple(leveling_seat_distribution)
        self.final_quotients = tuple(final_quotients)

    @property
    def total_seats(self) -> int:
        return sum(result.total_seats for result in self.party_results)

    def district_result(self, name: str) -> DistrictResult:
        for result in self.district_results:
            if result.name == name:
                return result
        raise KeyError(f'unknown district: {name}')

    def seat_counts(self) -> Dict[str, int]:
        '''Return national total seats by party for parties with seats.'''
        return {
            result.party_code: result.total_seats
            for result in self.party_results if result.total_seats
        }


@simple_serialization
class ComputationPayload:
    '''Full set of settings for one computation run.

    Everything except the input records can be altered by the caller to
    explore alternative outcomes; :meth:`historical` gives the legally
    defined settings of the year.

    :param election: Election configuration.
    :param algorithm: Apportionment method.
    :param first_divisor: First divisor for modified Sainte-Laguë; also
        used for the national levelling computation.
    :param election_threshold: National levelling threshold in percent.
    :param district_threshold: District threshold in percent.
    :param district_seats: Total number of district seats, redistributed
        among districts by area factor where the year allows it; None or
        a negative number keeps the configured district seat counts.
    :param leveling_seats: Number of levelling seats.
    :param area_factor: Area factor for district seat distribution.
    :param votes: Vote records of the election.
    :param metrics: District metrics for district seat distribution.
    :param parameters: Legal parameters of the year.
    '''
    def __init__(self,
                 election: Election,
                 algorithm: AlgorithmType,
                 first_divisor: Number,
                 election_threshold: Number,
                 district_threshold: Number,
                 district_seats: Optional[int],
                 leveling_seats: int,
                 area_factor: Number,
                 votes: Iterable[Votes],
                 metrics: Iterable[Metrics] = (),
                 parameters: Parameters = UNLOADED_PARAMETERS,
                 ):
        self.election = election
        self.algorithm = algorithm
        self.first_divisor = first_divisor
        self.election_threshold = election_threshold
        self.district_threshold = district_threshold
        self.district_seats = district_seats
        self.leveling_seats = leveling_seats
        self.area_factor = area_factor
        self.votes = tuple(votes)
        self.metrics = tuple(metrics)
        self.parameters = parameters

    @classmethod
    def historical(cls,
                   election: Election,
                   votes: Iterable[Votes],
                   metrics: Iterable[Metrics] = (),
                   parameters: Parameters = UNLOADED_PARAMETERS,
                   ) -> ComputationPayload:
        '''Build the payload with the legal settings of the election year.

        Values come from the parameters where they are loaded and from the
        election otherwise.
        '''
        if parameters.is_loaded:
            algorithm = parameters.algorithm
            threshold = parameters.threshold
            leveling_seats = parameters.leveling_seats
            area_factor = parameters.area_factor
            first_divisor = _first_present(
                parameters.first_divisor, election.first_divisor
            )
        else:
            algorithm = election.algorithm
            threshold = election.threshold
            leveling_seats = election.leveling_seats
            area_factor = -1
            first_divisor = election.first_divisor
        return cls(
            election=election,
            algorithm=algorithm,
            first_divisor=first_divisor,
            election_threshold=threshold,
            district_threshold=0,
            district_seats=None,
            leveling_seats=leveling_seats,
            area_factor=area_factor,
            votes=votes,
            metrics=metrics,
            parameters=parameters,
        )

    def replace(self, **kwargs) -> ComputationPayload:
        '''Return a copy of the payload with some settings changed.'''
        params = {
            name: getattr(self, name) for name in (
                'election', 'algorithm', 'first_divisor',
                'election_threshold', 'district_threshold',
                'district_seats', 'leveling_seats', 'area_factor',
                'votes', 'metrics', 'parameters',
            )
        }
        params.update(kwargs)
        return ComputationPayload(**params)


def _first_present(*values: Optional[Number]) -> Optional[Number]:
    for value in values:
        if value is not None and value >= 0:
            return value
    return None


def _percent(part: Union[int, Fraction], whole: Union[int, Fraction]
             ) -> float:
    return float(Fraction(part * 100, whole)) if whole else 0.

