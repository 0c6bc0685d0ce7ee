'''Merging of historical electoral districts.

Seat counts have been distributed among districts by law only since 2005;
before that, the district configuration changed several times, most
notably with the city of Bergen forming a district of its own until it was
merged into Hordaland. To compare historical elections with the modern
district structure, the votes, metrics and seat counts of the legacy
districts are summed onto the district that succeeded them.

Merging is a pure transform: the input records are left untouched, the
order of first appearance of the target districts is preserved, national
vote totals are conserved and merging an already merged election changes
nothing.
'''

import logging
import types
from typing import Dict, Iterable, List, Mapping, Tuple

from seatlib.model import District, Election, Metrics, Votes


logger = logging.getLogger(__name__)


FIRST_DISTRICT_SEAT_DISTRIBUTION_YEAR = 2005

MODERN_DISTRICTS = (
    'Østfold',
    'Akershus',
    'Oslo',
    'Hedmark',
    'Oppland',
    'Buskerud',
    'Vestfold',
    'Telemark',
    'Aust-Agder',
    'Vest-Agder',
    'Rogaland',
    'Hordaland',
    'Sogn og Fjordane',
    'Møre og Romsdal',
    'Sør-Trøndelag',
    'Nord-Trøndelag',
    'Nordland',
    'Troms',
    'Finnmark',
)

DISTRICT_MAP: Mapping[str, str] = types.MappingProxyType(dict(
    [(district, district) for district in MODERN_DISTRICTS]
    + [
        ('Bergen', 'Hordaland'),
        ('Kristiania', 'Oslo'),
        ('Smaalenene', 'Østfold'),
        ('Hedemarken', 'Hedmark'),
        ('Kristians amt', 'Oppland'),
        ('Jarlsberg og Larvik', 'Vestfold'),
        ('Bratsberg', 'Telemark'),
        ('Nedenes', 'Aust-Agder'),
        ('Lister og Mandal', 'Vest-Agder'),
        ('Stavanger', 'Rogaland'),
        ('Søndre Bergenhus', 'Hordaland'),
        ('Nordre Bergenhus', 'Sogn og Fjordane'),
        ('Romsdal', 'Møre og Romsdal'),
        ('Søndre Trondhjem', 'Sør-Trøndelag'),
        ('Nordre Trondhjem', 'Nord-Trøndelag'),
        ('Tromsø', 'Troms'),
    ]
))
'''Mapping of legacy district names to the modern districts.'''


def should_distribute_district_seats(year: int) -> bool:
    '''Whether seats were distributed among districts by law in the year.'''
    return year >= FIRST_DISTRICT_SEAT_DISTRIBUTION_YEAR


def should_merge(target_year: int, requested: bool) -> bool:
    '''Whether the districts of an election should be merged.

    Merging applies only when the caller requested a merged comparison
    and the regime of the year whose seat law is applied distributes
    seats by district.
    '''
    return requested and should_distribute_district_seats(target_year)


def is_merged(district_names: Iterable[str],
              district_map: Mapping[str, str] = DISTRICT_MAP,
              ) -> bool:
    '''Whether all the districts already lie in the map's target set.'''
    targets = frozenset(district_map.values())
    return all(name in targets for name in district_names)


def merge_election_districts(election: Election,
                             district_map: Mapping[str, str] = DISTRICT_MAP,
                             ) -> Election:
    '''Return the election with legacy districts summed onto their targets.

    Seat counts are summed. A merged district keeps the threshold of the
    first of its sources that has one.
    '''
    if is_merged((d.name for d in election.districts), district_map):
        return election
    merged: Dict[str, Tuple[int, object]] = {}
    for district in election.districts:
        target = district_map.get(district.name, district.name)
        seats, threshold = merged.get(target, (0, None))
        if threshold is None:
            threshold = district.threshold
        merged[target] = (seats + district.seats, threshold)
    logger.info('merged %d districts of %d into %d', len(election.districts),
                election.year, len(merged))
    return election.with_districts(
        District(name, seats, threshold)
        for name, (seats, threshold) in merged.items()
    )


def merge_vote_districts(votes: Iterable[Votes],
                         district_map: Mapping[str, str] = DISTRICT_MAP,
                         ) -> List[Votes]:
    '''Return the vote records with legacy districts summed onto targets.

    Votes of the same party in districts with a common target are summed
    into a single record.
    '''
    votes = list(votes)
    if is_merged((record.district for record in votes), district_map):
        return votes
    merged: Dict[Tuple[str, str, int], Votes] = {}
    for record in votes:
        target = district_map.get(record.district, record.district)
        key = (target, record.party_code, record.election_year)
        if key in merged:
            prev = merged[key]
            merged[key] = Votes(
                target, record.party_code, prev.votes + record.votes,
                record.election_year,
                prev.party_name if prev.party_name else record.party_name,
            )
        else:
            merged[key] = Votes(
                target, record.party_code, record.votes,
                record.election_year, record.party_name,
            )
    return list(merged.values())


def merge_metric_districts(metrics: Iterable[Metrics],
                           district_map: Mapping[str, str] = DISTRICT_MAP,
                           ) -> List[Metrics]:
    '''Return the metrics with legacy districts summed onto targets.'''
    metrics = list(metrics)
    if is_merged((record.district for record in metrics), district_map):
        return metrics
    merged: Dict[Tuple[str, int], Metrics] = {}
    for record in metrics:
        target = district_map.get(record.district, record.district)
        key = (target, record.election_year)
        if key in merged:
            prev = merged[key]
            merged[key] = Metrics(
                target, record.election_year,
                prev.population + record.population,
                prev.area + record.area,
            )
        else:
            merged[key] = Metrics(
                target, record.election_year,
                record.population, record.area,
            )
    return list(merged.values())


def merge(election: Election,
          votes: Iterable[Votes],
          metrics: Iterable[Metrics],
          district_map: Mapping[str, str] = DISTRICT_MAP,
          ) -> Tuple[Election, List[Votes], List[Metrics]]:
    '''Merge legacy districts of an election, its votes and its metrics.

    :param election: Election configuration.
    :param votes: Vote records of the election.
    :param metrics: District metrics of the election.
    :param district_map: Mapping of legacy district names to targets.
        Districts missing from the map are kept as they are.
    '''
    return (
        merge_election_districts(election, district_map),
        merge_vote_districts(votes, district_map),
        merge_metric_districts(metrics, district_map),
    )

