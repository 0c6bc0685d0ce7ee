'''Complete seat distribution of a Storting election.

:func:`compute` runs the whole pipeline for one set of settings:

1.  If the year distributes seats among districts by law and a total
    number of district seats is requested, the district seat counts are
    recomputed from the district metrics (:func:`distribute_district_seats`).
2.  The district seats of every district are apportioned among parties.
    The districts are independent of each other.
3.  The levelling seats are distributed once all districts are complete.

No state is kept between calls; memoizing results by year and settings is
left to the caller.
'''

import logging
from fractions import Fraction
from typing import Dict, Iterable, List
from numbers import Number

import seatlib.util
from seatlib.evaluate.core import InvalidInput
from seatlib.evaluate.leveling import LevelingDistributor
from seatlib.evaluate.proportional import (
    DEFAULT_FIRST_DIVISOR, HighestAverages, apportion
)
from seatlib.merge import should_distribute_district_seats
from seatlib.model import (
    ComputationPayload, District, Election, LagueDhontResult, Metrics,
    Parameters, UNLOADED_PARAMETERS, Votes,
)


logger = logging.getLogger(__name__)


def district_points(metrics: Iterable[Metrics],
                    area_factor: Number,
                    ) -> Dict[str, Fraction]:
    '''Return the points of each district: inhabitants plus weighted area.'''
    factor = seatlib.util.exact_number(area_factor)
    return {
        record.district: (
            Fraction(record.population)
            + factor * seatlib.util.exact_number(record.area)
        )
        for record in metrics
    }


def distribute_district_seats(metrics: Iterable[Metrics],
                              n_seats: int,
                              area_factor: Number,
                              ) -> Dict[str, int]:
    '''Distribute district seats among districts by their points.

    Uses the unmodified Sainte-Laguë method on the district points.

    :param metrics: Metrics of each district.
    :param n_seats: Total number of district seats.
    :param area_factor: Points per square kilometre of district area.
    :returns: Number of seats of each district, including zeros.
    '''
    points = district_points(metrics, area_factor)
    counts = HighestAverages('sainte_lague').distribute(points, n_seats)
    return {district: counts.get(district, 0) for district in points}


def legal_districts(election: Election,
                    parameters: Parameters,
                    ) -> List[District]:
    '''Return the districts of the election with their legal seat counts.

    Loaded parameters override the seat counts of the districts they list;
    the other districts keep the seat counts of the election.

    :raises InvalidInput: If the parameters list seats for a district that
        is not a part of the election.
    '''
    districts = list(election.districts)
    if not parameters.is_loaded or not parameters.district_seats:
        return districts
    known = {district.name for district in districts}
    for name in parameters.district_seats:
        if name not in known:
            raise InvalidInput(
                f'parameters of {parameters.election_year} list seats for'
                f' unknown district {name}'
            )
    return [
        District(
            district.name,
            parameters.district_seats.get(district.name, district.seats),
            district.threshold,
        )
        for district in districts
    ]


def configured_districts(payload: ComputationPayload) -> List[District]:
    '''Return the districts of the run with their seat counts.

    The district seat counts are redistributed by area factor when the
    payload requests a district seat total, the year distributes seats by
    district and metrics are available for all districts; otherwise the
    legal seat counts are kept (see :func:`legal_districts`).
    '''
    election = payload.election
    districts = legal_districts(election, payload.parameters)
    n_seats = payload.district_seats
    if n_seats is None or n_seats < 0 or payload.area_factor < 0:
        return districts
    if not should_distribute_district_seats(election.year):
        return districts
    metrics = [
        record for record in payload.metrics
        if record.district in {d.name for d in districts}
    ]
    if {record.district for record in metrics} != {d.name for d in districts}:
        logger.warning('metrics incomplete for %d, keeping district seats',
                       election.year)
        return districts
    counts = distribute_district_seats(metrics, n_seats, payload.area_factor)
    logger.info('district seats by area factor %s: %s',
                payload.area_factor, counts)
    return [
        District(district.name, counts[district.name], district.threshold)
        for district in districts
    ]


def compute(payload: ComputationPayload) -> LagueDhontResult:
    '''Compute the complete seat distribution for the given settings.

    :param payload: Settings and input records of the run.
    :raises InvalidInput: If the votes are malformed or refer to a district
        that is not a part of the election.
    :raises Unsatisfiable: If a levelling seat cannot be placed.
    '''
    table = Votes.table(payload.votes)
    party_names = Votes.party_names(payload.votes)
    parameters = payload.parameters
    if parameters.is_loaded and parameters.total_votes >= 0:
        cast = sum(sum(dvotes.values()) for dvotes in table.values())
        if cast != parameters.total_votes:
            logger.warning('%s votes given for %d, parameters record %s',
                           cast, parameters.election_year,
                           parameters.total_votes)
    districts = configured_districts(payload)
    known = {district.name for district in districts}
    for name in table:
        if name not in known:
            raise InvalidInput(f'votes for unknown district {name}')
    district_results = []
    for district in districts:
        threshold = district.threshold
        if threshold is None:
            threshold = payload.district_threshold
        district_results.append(apportion(
            district,
            table.get(district.name, {}),
            district.seats,
            payload.algorithm,
            payload.first_divisor,
            threshold=threshold,
            party_names=party_names,
        ))
    distributor = LevelingDistributor(
        first_divisor=_national_first_divisor(payload.first_divisor)
    )
    return distributor.evaluate(
        district_results,
        payload.leveling_seats,
        payload.election_threshold,
        party_names=party_names,
    )


def compute_historical(election: Election,
                       votes: Iterable[Votes],
                       metrics: Iterable[Metrics] = (),
                       parameters: Parameters = UNLOADED_PARAMETERS,
                       ) -> LagueDhontResult:
    '''Compute the seat distribution with the legal settings of the year.'''
    return compute(ComputationPayload.historical(
        election, votes, metrics, parameters
    ))


def _national_first_divisor(first_divisor: Number) -> Number:
    if first_divisor is None or first_divisor <= 0:
        return DEFAULT_FIRST_DIVISOR
    return first_divisor
