#  ___________________________________________________________________________
#
#  BlockNLP: Block-structured Nonlinear Programming
#  Copyright (c) 2025 The BlockNLP Developers
#  This software is distributed under the 3-clause BSD License.
#  ___________________________________________________________________________

import math
from collections.abc import Mapping, Sequence

# Import the base unittest environment.  We will override things
# specifically later
from unittest import *
from unittest import mock
import unittest as _unittest

from blocknlp.common.dependencies import attempt_import

# We defer this import so that we don't add a hard dependence on pytest.
pytest, pytest_available = attempt_import('pytest')


def _defaultFormatter(msg, default):
    return msg or default


def _toStructure(val):
    """Convert numpy arrays and sparse matrices to nested lists"""
    if hasattr(val, 'toarray'):
        val = val.toarray()
    if hasattr(val, 'tolist') and not isinstance(val, (str, bytes)):
        return val.tolist()
    return val


def assertStructuredAlmostEqual(
    first,
    second,
    places=None,
    msg=None,
    delta=None,
    reltol=None,
    abstol=None,
    exception=ValueError,
    formatter=_defaultFormatter,
):
    """Test that first and second are equal up to a tolerance

    This compares first and second using both an absolute (`abstol`) and
    relative (`reltol`) tolerance.  It will recursively descend into
    Sequence and Mapping containers (allowing for the relative
    comparison of structured data including lists and dicts).  numpy
    arrays and scipy sparse matrices are compared as (dense) nested
    lists.

    `places` and `delta` is supported for compatibility with
    assertAlmostEqual.  If `places` is supplied, `abstol` is
    computed as `10**-places`.  `delta` is an alias for `abstol`.

    If none of {`abstol`, `reltol`, `places`, `delta`} are specified,
    `reltol` defaults to 1e-7.

    The relative error is computed for numerical values as

        `abs(first - second) / max(abs(first), abs(second))`,

    only when first != second (thereby avoiding divide-by-zero errors).

    """
    if sum(1 for _ in (places, delta, abstol) if _ is not None) > 1:
        raise ValueError("Cannot specify more than one of {places, delta, abstol}")

    if places is not None:
        abstol = 10 ** (-places)
    if delta is not None:
        abstol = delta
    if abstol is None and reltol is None:
        reltol = 10**-7

    fail = _assertStructuredAlmostEqual(
        _toStructure(first), _toStructure(second), abstol, reltol
    )
    if fail:
        raise exception(formatter(msg, fail))


def _assertStructuredAlmostEqual(first, second, abstol, reltol):
    if isinstance(first, Mapping):
        if not isinstance(second, Mapping):
            return 'mappings are different types (%s, %s)' % (
                type(first).__name__,
                type(second).__name__,
            )
        if len(first) != len(second):
            return 'mappings are different sizes (%s != %s)' % (
                len(first),
                len(second),
            )
        for key in first:
            if key not in second:
                return 'key (%s) from first not found in second' % (key,)
            fail = _assertStructuredAlmostEqual(
                _toStructure(first[key]), _toStructure(second[key]), abstol, reltol
            )
            if fail:
                return 'key (%s): %s' % (key, fail)
        return None

    if isinstance(first, Sequence) and not isinstance(first, str):
        if not isinstance(second, Sequence) or isinstance(second, str):
            return 'sequences are different types (%s, %s)' % (
                type(first).__name__,
                type(second).__name__,
            )
        if len(first) != len(second):
            return 'sequences are different sizes (%s != %s)' % (
                len(first),
                len(second),
            )
        for i, (f, s) in enumerate(zip(first, second)):
            fail = _assertStructuredAlmostEqual(
                _toStructure(f), _toStructure(s), abstol, reltol
            )
            if fail:
                return 'sequence element %s: %s' % (i, fail)
        return None

    if first == second:
        return None
    try:
        f = float(first)
        s = float(second)
    except (TypeError, ValueError):
        return '%s !~= %s' % (first, second)
    if f == s:
        return None
    if math.isnan(f) and math.isnan(s):
        return None
    diff = abs(f - s)
    if abstol is not None and diff <= abstol:
        return None
    if reltol is not None and diff / max(abs(f), abs(s)) <= reltol:
        return None
    return '%s !~= %s (error %s, abstol %s, reltol %s)' % (
        first,
        second,
        diff,
        abstol,
        reltol,
    )


class TestCase(_unittest.TestCase):
    """A BlockNLP-specific class whose instances are single test cases.

    This class derives from unittest.TestCase and adds
    :py:meth:`~TestCase.assertStructuredAlmostEqual`, which also
    understands numpy arrays and scipy sparse matrices.

    """

    # By default, we always want to spend the time to create the full
    # diff of the test result and the baseline
    maxDiff = None

    def assertStructuredAlmostEqual(
        self,
        first,
        second,
        places=None,
        msg=None,
        delta=None,
        reltol=None,
        abstol=None,
    ):
        assertStructuredAlmostEqual(
            first=first,
            second=second,
            places=places,
            msg=msg,
            delta=delta,
            reltol=reltol,
            abstol=abstol,
            exception=self.failureException,
            formatter=self._formatMessage,
        )


TestCase.assertStructuredAlmostEqual.__doc__ = assertStructuredAlmostEqual.__doc__
