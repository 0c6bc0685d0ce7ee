'''Interchangeable building blocks of apportionment methods.

Divisor functions (:mod:`seatlib.component.divisor`) drive the highest
averages methods and quota functions (:mod:`seatlib.component.quota`)
drive the largest fraction methods.
'''
