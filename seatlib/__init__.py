"""Seatlib - a library for apportioning seats of the Norwegian Storting.

Seatlib computes which party wins which seat in which electoral district
(fylke) under a chosen apportionment method and distributes the national
levelling seats (utjevningsmandater) that compensate under-represented
parties.

A computation run usually proceeds as follows:

-   The input records (election configuration, votes, district metrics and
    the legally defined parameters of the year) from the :mod:`model` module
    are optionally merged onto the modern district structure by the
    :mod:`merge` module to allow comparing historical elections.
-   The district seats of each district are apportioned among parties by
    one of the evaluators from the ``evaluate`` subpackage - highest
    averages (Sainte-Laguë, its modified variant or D'Hondt) or largest
    fraction (Hare or Droop quota).
-   The levelling seats are distributed among the parties reaching the
    national threshold and placed into districts.

The :func:`compute` function of the :mod:`system` module runs all of these
for a single :class:`ComputationPayload`. Its results can then be analyzed
for disproportionality by the :mod:`measure` module and for the seats most
easily lost by the :mod:`vulnerability` module.
"""
