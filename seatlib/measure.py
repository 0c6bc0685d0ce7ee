"""Measure proportionality of election results.

These functions evaluate how proportionally the seats are allocated to parties
according to their votes received. For a review of such indicators, see
[#kalog]_.

The functions :func:`loosemore_hanby` and :func:`gallagher` accept votes and
seat counts as dictionaries keyed by party and return the index on a scale
from zero (perfect proportionality) to one. :func:`disproportionality`
computes the index selected by :class:`DisproportionalityIndex` from party
results and expresses it in percentage points, like the ``proportionality``
attribute of :class:`seatlib.model.PartyResult`.

Shares are computed as exact fractions, so an index is exactly zero if and
only if every party's vote share equals its seat share.

.. [#kalog] "Measures of disproportionality", Kalogirou.
    http://www2.stat-athens.aueb.gr/~jpan/diatrives/Kalogirou/chapter5.pdf
"""

import enum
import math
from fractions import Fraction
from typing import Callable, Dict, Iterable, Tuple
from numbers import Number

from seatlib.model import PartyResult


class DisproportionalityIndex(enum.Enum):
    LOOSEMORE_HANBY = 'loosemore_hanby'
    GALLAGHER = 'gallagher'


def gallagher(votes: Dict[str, Number],
              results: Dict[str, Number],
              ) -> float:
    """Compute the Gallagher index of election result disproportionality.

    The Gallagher (LSq) index [#lsq]_ expresses the mismatch between the
    fraction of votes received and seats allocated for each party.
    Compared to the Loosemore–Hanby index, it highlights large deviations
    rather than small ones.

    :param votes: Numbers of votes for each party.
    :param results: Seat counts awarded to each party.

    .. [#lsq] "Gallagher index", Wikipedia.
        https://en.wikipedia.org/wiki/Gallagher_index
    """
    paired_fractions = _vote_seat_fractions(votes, results)
    return math.sqrt(Fraction(1, 2) * sum(
        (vote_frac - seat_frac) ** 2
        for vote_frac, seat_frac in paired_fractions.values()
    ))


def loosemore_hanby(votes: Dict[str, Number],
                    results: Dict[str, Number],
                    ) -> float:
    """Compute the Loosemore–Hanby index of election result disproportionality.

    The Loosemore–Hanby (LH) index [#lhind]_ expresses the mismatch between the
    fraction of votes received and seats allocated for each party.
    Compared to the Gallagher index, it does not diminish the effect of smaller
    deviations.

    :param votes: Numbers of votes for each party.
    :param results: Seat counts awarded to each party.

    .. [#lhind] "Loosemore–Hanby index", Wikipedia.
        https://en.wikipedia.org/wiki/Loosemore%E2%80%93Hanby_index
    """
    paired_fractions = _vote_seat_fractions(votes, results)
    return float(Fraction(1, 2) * sum(
        abs(vote_frac - seat_frac)
        for vote_frac, seat_frac in paired_fractions.values()
    ))


INDICES: Dict[
    DisproportionalityIndex,
    Callable[[Dict[str, Number], Dict[str, Number]], float]
] = {
    DisproportionalityIndex.LOOSEMORE_HANBY: loosemore_hanby,
    DisproportionalityIndex.GALLAGHER: gallagher,
}


def disproportionality(party_results: Iterable[PartyResult],
                       index: DisproportionalityIndex,
                       ) -> float:
    """Compute a disproportionality index of party results in percent.

    :param party_results: Results of all parties in the scope (a district
        or the whole country).
    :param index: The index to compute.
    """
    party_results = list(party_results)
    votes = {pr.party_code: pr.votes for pr in party_results}
    seats = {pr.party_code: pr.total_seats for pr in party_results}
    return 100 * INDICES[DisproportionalityIndex(index)](votes, seats)


def _vote_seat_fractions(votes: Dict[str, Number],
                         results: Dict[str, Number],
                         ) -> Dict[str, Tuple[Fraction, Fraction]]:
    total_votes = sum(votes.values())
    total_seats = sum(results.values())
    merged = {
        party: (
            _share(n_votes, total_votes),
            _share(results.get(party, 0), total_seats),
        )
        for party, n_votes in votes.items()
    }
    for party, result in results.items():
        if party not in merged:
            merged[party] = (Fraction(0), _share(result, total_seats))
    return merged


def _share(part: Number, whole: Number) -> Fraction:
    if not whole:
        return Fraction(0)
    return Fraction(part) / Fraction(whole)
