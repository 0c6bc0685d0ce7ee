"""A commandline tool for quick evaluation of a Storting election.

Reads an election from a JSON file, distributes its district and levelling
seats and shows the seats won by each party, the levelling seats, the
disproportionality of the result and the most vulnerable seats.
"""

import argparse
import decimal
import io
import json
import logging
import sys
import warnings
from typing import Any, Dict, Optional

import seatlib.measure
import seatlib.merge
import seatlib.system
import seatlib.vulnerability
from seatlib.model import (
    AlgorithmType, ComputationPayload, District, Election, LagueDhontResult,
    Metrics, Votes,
)

argparser = argparse.ArgumentParser(
    description=__doc__,
    formatter_class=argparse.ArgumentDefaultsHelpFormatter,
)
argparser.add_argument(
    '-i', '--input-file',
    type=argparse.FileType('r', encoding='utf8'),
    help='JSON file to load the election from',
)
argparser.add_argument(
    '-I', '--use-stdin',
    action='store_true',
    help='load the election from standard input',
)
argparser.add_argument(
    '-a', '--algorithm',
    choices=[algorithm.value for algorithm in AlgorithmType],
    help='apportionment method (overrides the one given in the input)',
)
argparser.add_argument(
    '-f', '--first-divisor',
    type=decimal.Decimal,
    help='first divisor of the modified Sainte-Laguë method',
)
argparser.add_argument(
    '-t', '--threshold',
    type=decimal.Decimal,
    help='national levelling seat threshold in percent',
)
argparser.add_argument(
    '-l', '--leveling-seats',
    type=int,
    help='number of levelling seats',
)
argparser.add_argument(
    '-m', '--merge-year',
    type=int,
    help=(
        'merge historical districts onto the modern ones to compare the'
        ' election under the seat law of this year'
    ),
)
argparser.add_argument(
    '-x', '--index',
    choices=[index.value for index in seatlib.measure.DisproportionalityIndex],
    default=seatlib.measure.DisproportionalityIndex.GALLAGHER.value,
    help='disproportionality index to show',
)
argparser.add_argument(
    '-v', '--verbose',
    action='store_true',
    help='show all evaluator log messages',
)
argparser.add_argument(
    '-q', '--quiet',
    action='store_true',
    help='do not show any evaluator log messages',
)


def main(input_file: io.TextIOBase,
         use_stdin: bool = False,
         algorithm: Optional[str] = None,
         first_divisor: Optional[decimal.Decimal] = None,
         threshold: Optional[decimal.Decimal] = None,
         leveling_seats: Optional[int] = None,
         merge_year: Optional[int] = None,
         index: str = 'gallagher',
         verbose: bool = False,
         quiet: bool = False,
         ) -> None:
    logging.basicConfig(
        level=(
            logging.DEBUG if verbose
            else (logging.WARNING if quiet else logging.INFO)
        ),
        format='%(levelname)-10s %(message)s'
    )
    if use_stdin:
        input_file = sys.stdin
    payload = load_payload(
        json.load(input_file, parse_float=decimal.Decimal),
        merge_year=merge_year,
    )
    if not payload.votes:
        warnings.warn('empty votes: cannot evaluate election, terminating')
        return
    overrides = {
        'algorithm': (
            None if algorithm is None else AlgorithmType(algorithm)
        ),
        'first_divisor': first_divisor,
        'election_threshold': threshold,
        'leveling_seats': leveling_seats,
    }
    payload = payload.replace(**{
        key: value for key, value in overrides.items() if value is not None
    })
    print()
    print(f'Evaluating the {payload.election.year} election'
          f' by {payload.algorithm.value}...')
    result = seatlib.system.compute(payload)
    print()
    show_party_results(result)
    print()
    show_leveling_seats(result)
    print()
    show_disproportionality(
        result, seatlib.measure.DisproportionalityIndex(index)
    )
    print()
    show_vulnerable_seats(result, payload.algorithm.quota_function)


def load_payload(data: Dict[str, Any], merge_year: Optional[int] = None
                 ) -> ComputationPayload:
    """Create the historical computation payload from a JSON document.

    The document holds the election settings (``year``, ``threshold``,
    ``first_divisor``, ``leveling_seats`` and optionally ``algorithm``),
    a list of ``districts``, a list of ``votes`` records and optionally
    a list of ``metrics`` records and an ``area_factor`` to redistribute
    ``district_seats`` among districts.
    """
    year = data['year']
    election = Election(
        year=year,
        districts=[
            District(d['name'], d['seats'], d.get('threshold'))
            for d in data['districts']
        ],
        threshold=data['threshold'],
        first_divisor=data['first_divisor'],
        leveling_seats=data['leveling_seats'],
        algorithm=AlgorithmType(
            data.get('algorithm', AlgorithmType.MODIFIED_SAINTE_LAGUE.value)
        ),
    )
    votes = [
        Votes(
            record['district'], record['party_code'], record['votes'],
            record.get('election_year', year), record.get('party_name'),
        )
        for record in data.get('votes', [])
    ]
    metrics = [
        Metrics(
            record['district'], record.get('election_year', year),
            record['population'], record['area'],
        )
        for record in data.get('metrics', [])
    ]
    if seatlib.merge.should_merge(merge_year, merge_year is not None):
        election, votes, metrics = seatlib.merge.merge(
            election, votes, metrics
        )
    payload = ComputationPayload.historical(election, votes, metrics)
    if 'area_factor' in data and 'district_seats' in data:
        payload = payload.replace(
            area_factor=data['area_factor'],
            district_seats=data['district_seats'],
        )
    return payload


def show_party_results(result: LagueDhontResult) -> None:
    print('Party results:')
    n_just_chars = max(
        (len(pr.party_code) for pr in result.party_results), default=0
    )
    for pr in result.party_results:
        print(
            pr.party_code.ljust(n_just_chars),
            f'{pr.percent_votes:6.2f} %',
            f'{pr.district_seats:4d} + {pr.leveling_seats:2d}'
            f' = {pr.total_seats:4d}',
        )
    print(f'{result.total_seats} seats in total')


def show_leveling_seats(result: LagueDhontResult) -> None:
    if not result.leveling_seat_distribution:
        print('No levelling seats awarded')
        return
    print('Levelling seats:')
    for seat in result.leveling_seat_distribution:
        print(f'{seat.seat_number:4d}', seat.party_code, seat.district)


def show_disproportionality(result: LagueDhontResult,
                            index: seatlib.measure.DisproportionalityIndex,
                            ) -> None:
    value = seatlib.measure.disproportionality(result.party_results, index)
    print(f'Disproportionality ({index.value}): {value:.3f}')


def show_vulnerable_seats(result: LagueDhontResult,
                          quota_function: Optional[str] = None,
                          ) -> None:
    print('Last district seats:')
    for dr in result.district_results:
        seats = seatlib.vulnerability.vulnerable_seat(dr, quota_function)
        if seats is None:
            continue
        by_votes = seats.by_votes
        print(
            dr.name, by_votes.winner, '<-', by_votes.runner_up,
            f'({by_votes.more_votes_to_win} votes)'
        )
    most = seatlib.vulnerability.most_vulnerable_seat(
        result.district_results, quota_function
    )
    if most is not None:
        print(f'Most vulnerable: {most.district}, {most.winner}'
              f' ahead of {most.runner_up}')


if __name__ == '__main__':
    args = argparser.parse_args()
    if not args.input_file and not args.use_stdin:
        argparser.print_usage()
    else:
        main(**vars(args))
