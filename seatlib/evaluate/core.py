'''General apportionment evaluator machinery and the error taxonomy.'''

import abc
from typing import Any
from numbers import Rational

from seatlib.model import DistrictResult


class ApportionmentError(Exception):
    '''Base class of all errors signalled by the engine.'''
    pass


class InvalidInput(ApportionmentError, ValueError):
    '''Malformed input was passed to the engine.

    Negative vote counts, negative seat counts or seat counts not matching
    the configured district are caller bugs; no partial result is produced.
    '''
    pass


class Unsatisfiable(ApportionmentError):
    '''A levelling seat cannot be placed under the eligibility rules.

    :param deficits: Levelling seats still owed to each party when no
        eligible party-district pair remained.
    :param awarded: Number of levelling seats awarded before that.
    '''
    def __init__(self, deficits: dict, awarded: int):
        self.deficits = deficits
        self.awarded = awarded
        owed = ', '.join(
            f'{party}: {n}' for party, n in deficits.items() if n > 0
        )
        super().__init__(
            f'no eligible district for remaining levelling seats ({owed})'
            f' after {awarded} awarded'
        )


class Evaluator(metaclass=abc.ABCMeta):
    '''Allocate the seats of a district to parties.

    A root abstract base class for all district evaluators.
    '''
    @abc.abstractmethod
    def evaluate(self,
                 votes: Any,
                 n_seats: int,
                 name: str = '',
                 ) -> DistrictResult:
        '''Allocate n_seats seats among parties according to votes.'''
        raise NotImplementedError


def check_votes(votes: dict, where: str = '') -> None:
    '''Raise InvalidInput if any vote count is not a non-negative number.'''
    for party, n_votes in votes.items():
        if not isinstance(n_votes, Rational) or isinstance(n_votes, bool):
            raise InvalidInput(
                f'vote count for {party}{where} must be an exact number,'
                f' got {n_votes!r}'
            )
        if n_votes < 0:
            raise InvalidInput(
                f'negative vote count for {party}{where}: {n_votes}'
            )


def check_seats(n_seats: int, where: str = '') -> None:
    if (not isinstance(n_seats, int) or isinstance(n_seats, bool)
            or n_seats < 0):
        raise InvalidInput(f'invalid seat count{where}: {n_seats!r}')
