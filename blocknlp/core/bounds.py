#  ___________________________________________________________________________
#
#  BlockNLP: Block-structured Nonlinear Programming
#  Copyright (c) 2025 The BlockNLP Developers
#  This software is distributed under the 3-clause BSD License.
#  ___________________________________________________________________________

"""Upper and lower bounds of variables and constraint rows"""

import math

from collections import namedtuple

from blocknlp.common.dependencies import numpy as np

inf = math.inf


class Bounds(namedtuple('Bounds', ('lower', 'upper'))):
    """The (lower, upper) bounds of a single scalar entry.

    A value x is within the bounds if ``lower <= x <= upper``.  Either
    side may be infinite.  Bounds are immutable and unpack like a tuple::

        >>> lb, ub = Bounds(-1.0, 1.0)

    Adding or subtracting a scalar shifts both sides.
    """

    __slots__ = ()

    def __new__(cls, lower=0.0, upper=0.0):
        lower = float(lower)
        upper = float(upper)
        if lower > upper:
            raise ValueError(
                "Invalid bounds: lower bound (%s) is greater than "
                "the upper bound (%s)" % (lower, upper)
            )
        return super().__new__(cls, lower, upper)

    def __add__(self, scalar):
        return Bounds(self.lower + scalar, self.upper + scalar)

    def __sub__(self, scalar):
        return Bounds(self.lower - scalar, self.upper - scalar)

    def __repr__(self):
        return 'Bounds(%r, %r)' % (self.lower, self.upper)

    def is_equality(self):
        """True if the lower and upper bound coincide"""
        return self.lower == self.upper

    def contains(self, value, tol=0.0):
        """True if ``value`` is within the bounds (up to ``tol``)"""
        return self.lower - tol <= value <= self.upper + tol


NoBound = Bounds(-inf, +inf)
BoundZero = Bounds(0.0, 0.0)
BoundGreaterZero = Bounds(0.0, +inf)
BoundSmallerZero = Bounds(-inf, 0.0)


def bounds_to_arrays(bounds):
    """Split a sequence of Bounds into (lower, upper) numpy arrays"""
    lower = np.array([b.lower for b in bounds], dtype=float)
    upper = np.array([b.upper for b in bounds], dtype=float)
    return lower, upper
