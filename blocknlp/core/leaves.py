#  ___________________________________________________________________________
#
#  BlockNLP: Block-structured Nonlinear Programming
#  Copyright (c) 2025 The BlockNLP Developers
#  This software is distributed under the 3-clause BSD License.
#  ___________________________________________________________________________

"""Declares the leaf components VariableSet, ConstraintSet and CostTerm.

These are the classes users derive from to formulate a problem.  A
typical constraint only has to know the *names* of the variable sets it
depends on::

    class ExConstraint(ConstraintSet):
        def __init__(self):
            super().__init__(1, "constraint1")

        def get_values(self):
            x = self.get_variables().get_component("var_set1").get_values()
            return np.array([x[0] ** 2 + x[1]])

        def get_bounds(self):
            return [Bounds(1.0, 1.0)]

        def fill_jacobian_block(self, var_set, jac_block):
            if var_set == "var_set1":
                x = self.get_variables().get_component("var_set1").get_values()
                jac_block[0, 0] = 2.0 * x[0]
                jac_block[0, 1] = 1.0

:meth:`ConstraintSet.get_jacobian` then places every block at the
columns its variable set occupies in the overall problem.
"""

import abc
import logging
import weakref

from blocknlp.common.dependencies import numpy as np, scipy
from blocknlp.common.errors import DimensionMismatchError, LinkError
from blocknlp.core.bounds import Bounds, NoBound
from blocknlp.core.component import Composite, IDerivableBlock, IVariableBlock

logger = logging.getLogger('blocknlp.core')


class VariableSet(IVariableBlock):
    """
    A container holding a set of related optimization variables.

    This is a single set of variables representing a single concept,
    e.g. "spline coefficients" or "step durations".  Derived classes
    implement :meth:`get_values`, :meth:`set_variables` and
    :meth:`get_bounds`.

    A variable set is never differentiated: it has no ``get_jacobian``.

    Args:
        rows (int): Number of variables.
        name (str): What the variables represent.
    """


class VectorVariableSet(VariableSet):
    """A variable set storing its values in a numpy vector.

    Args:
        rows (int): Number of variables.
        name (str): What the variables represent.
        values: Initial values (default: all zero).
        bounds: Either a single :class:`Bounds` (or (lower, upper)
            pair) applied to every variable, or a sequence with one
            entry per variable (default: unbounded).
    """

    def __init__(self, rows, name, values=None, bounds=None):
        super().__init__(rows, name)
        if values is None:
            self._values = np.zeros(self.rows)
        else:
            self._values = self._as_vector(values)
        if bounds is None:
            bounds = NoBound
        if len(bounds) == 2 and not hasattr(bounds[0], '__len__'):
            self._bounds = [Bounds(*bounds)] * self.rows
        else:
            self._bounds = [Bounds(*b) for b in bounds]
            if len(self._bounds) != self.rows:
                raise DimensionMismatchError(
                    "Variable set '%s' has %d rows, but %d bounds were given"
                    % (self.name, self.rows, len(self._bounds))
                )

    def _as_vector(self, x):
        x = np.array(x, dtype=float).reshape(-1)
        if x.size != self.rows:
            raise DimensionMismatchError(
                "Variable set '%s' has %d rows, but %d values were given"
                % (self.name, self.rows, x.size)
            )
        return x

    def get_values(self):
        return self._values.copy()

    def set_variables(self, x):
        self._values = self._as_vector(x)

    def get_bounds(self):
        return list(self._bounds)


class ConstraintSet(IDerivableBlock):
    """
    A container holding a set of related constraints.

    This container holds constraints representing a single concept,
    e.g. ``n`` constraints keeping a foot inside its range of motion.
    Each of the ``n`` rows is given by::

        lower_bound <= g(x) <= upper_bound

    The constraint set is created *unlinked*.  The problem links it to
    the optimization variables exactly once (see
    :meth:`link_variable_all`), after which the values and the Jacobian
    can be queried.  Derived classes implement :meth:`get_values`,
    :meth:`get_bounds` and :meth:`fill_jacobian_block`.

    Args:
        rows (int): The number of constraints.
        name (str): What these constraints represent.
    """

    def __init__(self, rows, name):
        super().__init__(rows, name)
        self._variables = None

    def is_linked(self):
        """True once the constraint set was linked to the variables"""
        return self._variables is not None

    def link_variable_all(self, variables):
        """Link this constraint set to the optimization variables.

        Only a weak reference to the ``variables`` composite is kept:
        the composite is owned by the problem.  After storing the
        reference, the :meth:`link_variables` hook is called.  If the hook
        raises, the constraint set is left unlinked.

        Linking again to the same composite does nothing.

        Raises:
            LinkError: if the constraint set is already linked to a
                different composite
        """
        if not isinstance(variables, Composite):
            raise TypeError(
                "Constraint set '%s' can only be linked to a Composite of "
                "variable sets (received %s)" % (self.name, type(variables).__name__)
            )
        if self._variables is not None:
            current = self._variables()
            if current is variables:
                return
            raise LinkError(
                "Constraint set '%s' is already linked to the variables "
                "composite '%s' and cannot be re-linked to '%s'"
                % (
                    self.name,
                    '<deleted>' if current is None else current.name,
                    variables.name,
                )
            )
        self._variables = weakref.ref(variables)
        try:
            self.link_variables(variables)
        except Exception:
            self._variables = None
            raise
        logger.debug(
            "Linked constraint set '%s' to variables '%s'", self.name, variables.name
        )

    def link_variables(self, variables):
        """Hook called once when the constraint set is linked.

        Derived classes can override this to keep shorthands to the
        specific variable sets they depend on, e.g.::

            def link_variables(self, variables):
                self._spline = variables.get_component("spline coefficients")

        The default implementation does nothing.
        """
        pass

    def get_variables(self):
        """Read access to the optimization variables.

        This must be used to formulate the constraint values and the
        Jacobian.  The returned composite must not be modified.

        Raises:
            LinkError: if the constraint set is not linked, or the linked
                variables no longer exist
        """
        if self._variables is None:
            raise LinkError(
                "Constraint set '%s' is not linked to any optimization "
                "variables" % (self.name,)
            )
        variables = self._variables()
        if variables is None:
            raise LinkError(
                "The optimization variables linked to constraint set '%s' "
                "no longer exist" % (self.name,)
            )
        return variables

    def get_jacobian(self):
        """The matrix of derivatives for these constraints and variables.

        Assuming ``n`` constraints and ``m`` variables, the returned
        Jacobian (a ``scipy.sparse.csr_matrix``) has dimensions n x m.
        Every row represents the derivatives of a single constraint,
        whereas every column refers to a single optimization variable.

        This function only combines the blocks filled by
        :meth:`fill_jacobian_block`: each variable set is handed a zero
        (rows x size) block, and the result is placed at the columns
        the variable set occupies in the variables composite.
        """
        variables = self.get_variables()
        row_idx = [np.zeros(0, dtype=int)]
        col_idx = [np.zeros(0, dtype=int)]
        data = [np.zeros(0)]
        for var_set, (offset, size) in variables.get_block_indices():
            jac_block = scipy.sparse.lil_matrix((self.rows, size))
            self.fill_jacobian_block(var_set, jac_block)
            if jac_block.shape != (self.rows, size):
                raise DimensionMismatchError(
                    "Constraint set '%s' changed the shape of the Jacobian "
                    "block for variable set '%s' to %s; expected (%d, %d)"
                    % (self.name, var_set, jac_block.shape, self.rows, size)
                )
            block = jac_block.tocoo()
            row_idx.append(block.row)
            col_idx.append(block.col + offset)
            data.append(block.data)
        return scipy.sparse.coo_matrix(
            (np.concatenate(data), (np.concatenate(row_idx), np.concatenate(col_idx))),
            shape=(self.rows, variables.rows),
        ).tocsr()

    @abc.abstractmethod
    def fill_jacobian_block(self, var_set, jac_block):
        """Set the Jacobian block corresponding to one variable set.

        Args:
            var_set (str): Name of the variable set the block belongs to.
            jac_block (scipy.sparse.lil_matrix): A zero (rows x size of
                ``var_set``) matrix; column 0 is the first variable of
                ``var_set``.

        This is a convenience so the user does not have to worry about
        the ordering of variable sets.  All that is required is that the
        user knows the internal ordering of variables in each individual
        set and provides the Jacobian of the constraints w.r.t. this set
        (starting at column 0).  :meth:`get_jacobian` then inserts these
        columns at the correct position in the overall Jacobian.

        If the constraint doesn't depend on ``var_set``, this function
        should simply do nothing.
        """


class CostTerm(ConstraintSet):
    """
    A container holding a single cost term.

    This container builds a scalar cost term from the values of the
    variables.  This can be seen as a constraint with only one row and
    no bounds.  Derived classes implement :meth:`get_cost` and
    :meth:`fill_jacobian_block` (with a single-row block).

    Args:
        name (str): What this cost term represents.
    """

    def __init__(self, name):
        super().__init__(1, name)

    @abc.abstractmethod
    def get_cost(self):
        """Returns the scalar cost term calculated from the variables."""

    def get_values(self):
        """Wraps the cost into a vector of length one."""
        return np.array([float(self.get_cost())])

    def get_bounds(self):
        """Returns infinite bounds (i.e., no bounds)."""
        return [NoBound]
