#  ___________________________________________________________________________
#
#  BlockNLP: Block-structured Nonlinear Programming
#  Copyright (c) 2025 The BlockNLP Developers
#  This software is distributed under the 3-clause BSD License.
#  ___________________________________________________________________________

"""The Component / Composite abstraction of the modeling layer.

Every block of the problem (a set of variables, a set of constraint
rows, a cost term) is a :class:`Component`: a named group of ``rows``
scalar entries with current values and bounds.  Components come in two
categories (``ctype``):

* :class:`IVariableBlock`: values can be read *and assigned*.  This is
  what the solver iterates on.
* :class:`IDerivableBlock`: values are read-only (computed from the
  variables) and a Jacobian w.r.t. all variables is available.

A :class:`Composite` stacks same-category components in registration
order and exposes them as one component.
"""

import abc
import logging
import sys
import weakref

from collections import namedtuple

from blocknlp.common.dependencies import numpy as np, scipy
from blocknlp.common.errors import DeveloperError, DimensionMismatchError
from blocknlp.core.bounds import NoBound

logger = logging.getLogger('blocknlp.core')

BlockIndex = namedtuple('BlockIndex', ('offset', 'size'))
BlockIndex.__doc__ = """Position of a member block inside a Composite:
the first global index (``offset``) and the number of entries (``size``)"""


class Component(abc.ABC):
    """
    Interface shared by every block of an optimization problem.

    Attributes:
        _ctype: The category of the component (:class:`IVariableBlock`
            or :class:`IDerivableBlock`), declared at the class level.
        _parent: A weak reference to the Composite storing this
            component, or :const:`None`.
    """

    _ctype = None

    def __init__(self, rows, name):
        rows = int(rows)
        if rows < 0:
            raise ValueError(
                "Component '%s' must have a non-negative number of rows "
                "(received %s)" % (name, rows)
            )
        self._rows = rows
        self._name = str(name)
        self._parent = None

    @property
    def ctype(self):
        """The component's category type."""
        return self._ctype

    @property
    def name(self):
        """The name of the block (unique within its Composite)"""
        return self._name

    @property
    def rows(self):
        """The number of scalar entries in this block"""
        return self._rows

    @property
    def parent(self):
        """The Composite this component is stored in (possibly None)"""
        if self._parent is None:
            return None
        return self._parent()

    @abc.abstractmethod
    def get_values(self):
        """Returns the current values of the entries as a numpy vector"""

    @abc.abstractmethod
    def get_bounds(self):
        """Returns a list with the :class:`Bounds` of every entry"""

    def get_violated_indices(self, tol=1e-4):
        """Returns the (local) indices of entries outside their bounds"""
        values = self.get_values()
        bounds = self.get_bounds()
        return [
            i for i, (val, b) in enumerate(zip(values, bounds)) if not b.contains(val, tol)
        ]

    def pprint(self, ostream=None, tol=1e-4, index_start=0):
        """Print a one-line summary of this component

        The summary includes the name, the number of rows, the range of
        global indices the rows occupy (starting at ``index_start``) and
        the number of entries that violate their bounds by more than
        ``tol``.  Returns the first index after this component.
        """
        if ostream is None:
            ostream = sys.stdout
        n_violated = len(self.get_violated_indices(tol))
        index_end = index_start + self.rows
        ostream.write(
            "%-30s (%d)  Index [%d, %d]  violated: %d\n"
            % (self.name, self.rows, index_start, index_end - 1, n_violated)
        )
        return index_end

    def __str__(self):
        return self.name

    def __repr__(self):
        return "<%s '%s' (%d rows)>" % (type(self).__name__, self.name, self.rows)


class IVariableBlock(Component):
    """
    A component whose values are optimization variables: they can be
    read and assigned (by the solver), but not differentiated.
    """

    @abc.abstractmethod
    def set_variables(self, x):
        """Assign new values (a vector of length ``rows``) to this block"""


class IDerivableBlock(Component):
    """
    A component whose values are functions of the optimization
    variables.  Values cannot be assigned; the Jacobian of the values
    w.r.t. all optimization variables is available.
    """

    @abc.abstractmethod
    def get_jacobian(self):
        """Returns the (rows x n_variables) Jacobian as a scipy.sparse matrix"""


IVariableBlock._ctype = IVariableBlock
IDerivableBlock._ctype = IDerivableBlock


def _check_size(component, what, n):
    if n != component.rows:
        raise DimensionMismatchError(
            "Component '%s' declares %d rows, but returned %d %s"
            % (component.name, component.rows, n, what)
        )


class Composite(IVariableBlock, IDerivableBlock):
    """An ordered collection of same-category components.

    Members are stored in registration order, which is also the order
    of their entries in the stacked value vector, bounds and Jacobian.
    The composite keeps an explicit mapping from member name to
    :class:`BlockIndex` (offset, size), rebuilt whenever the membership
    of this composite (or of a nested composite) changes.

    The first member fixes the category (``ctype``) of the composite:
    a composite of :class:`IVariableBlock` members supports
    :meth:`set_variables`, a composite of :class:`IDerivableBlock`
    members supports :meth:`get_jacobian`.

    Args:
        name (str): The name of the composite.
        is_cost (bool): If True, the members are cost terms (one row
            each) and the composite represents their sum: a single row
            whose value and Jacobian are the sums of the members'.
    """

    def __init__(self, name, is_cost=False):
        super().__init__(0, name)
        self._is_cost = bool(is_cost)
        self._components = []
        self._index = {}

    @property
    def ctype(self):
        """The category of the stored components (None if undetermined)"""
        for c in self._components:
            if c.ctype is not None:
                return c.ctype
        return None

    @property
    def is_cost(self):
        return self._is_cost

    #
    # Membership
    #

    def validate_component(self, component):
        """Raise if ``component`` cannot be appended to this composite"""
        if not isinstance(component, Component):
            raise TypeError(
                "Invalid assignment to composite '%s': %r is not a Component"
                % (self.name, component)
            )
        if component.name in self._index:
            raise ValueError(
                "Duplicate component name '%s' in composite '%s'"
                % (component.name, self.name)
            )
        if component.parent is not None:
            raise ValueError(
                "Invalid assignment of component '%s' to composite '%s'. "
                "The component is already stored in composite '%s'"
                % (component.name, self.name, component.parent.name)
            )
        ctype = self.ctype
        if ctype is not None and component.ctype not in (None, ctype):
            raise TypeError(
                "Invalid assignment of component '%s' to composite '%s'. "
                "The composite stores %s components, but the component "
                "has the category type %s"
                % (component.name, self.name, ctype.__name__, component.ctype.__name__)
            )
        if self._is_cost and component.rows != 1:
            raise DimensionMismatchError(
                "Cost composite '%s' only accepts single-row cost terms; "
                "component '%s' has %d rows"
                % (self.name, component.name, component.rows)
            )

    def add_component(self, component):
        """Append a component to the end of this composite"""
        self.validate_component(component)
        component._parent = weakref.ref(self)
        self._components.append(component)
        self._membership_changed()
        logger.debug(
            "Added component '%s' (%d rows) to composite '%s'",
            component.name,
            component.rows,
            self.name,
        )

    def remove_component(self, name):
        """Remove (and return) the member with the given name"""
        component = self.get_component(name)
        self._components.remove(component)
        component._parent = None
        self._membership_changed()
        return component

    def clear_components(self):
        """Remove all members from this composite"""
        for c in self._components:
            c._parent = None
        self._components = []
        self._membership_changed()

    def _membership_changed(self):
        self._rebuild_index()
        parent = self.parent
        if parent is not None:
            parent._membership_changed()

    def _rebuild_index(self):
        index = {}
        offset = 0
        for c in self._components:
            index[c.name] = BlockIndex(offset, c.rows)
            offset += c.rows
        self._index = index
        if self._is_cost:
            self._rows = 1 if self._components else 0
        else:
            self._rows = offset

    def get_component(self, name):
        """Returns the member with the given name

        Raises:
            KeyError: if no member has that name
        """
        for c in self._components:
            if c.name == name:
                return c
        raise KeyError(
            "Component '%s' not found in composite '%s'" % (name, self.name)
        )

    def get_components(self):
        """Returns the list of members in registration order"""
        return list(self._components)

    def get_index(self, name):
        """Returns the :class:`BlockIndex` (offset, size) of a member"""
        try:
            return self._index[name]
        except KeyError:
            raise KeyError(
                "Component '%s' not found in composite '%s'" % (name, self.name)
            ) from None

    def get_block_indices(self):
        """Returns a list of (name, :class:`BlockIndex`) in registration order"""
        return list(self._index.items())

    def get_slice(self, name):
        """Returns the slice of the stacked vector occupied by a member"""
        offset, size = self.get_index(name)
        return slice(offset, offset + size)

    def __contains__(self, name):
        return name in self._index

    def __iter__(self):
        return iter(self._components)

    def __len__(self):
        return len(self._components)

    #
    # Component interface
    #

    def get_values(self):
        if not self._components:
            return np.zeros(0)
        parts = []
        for c in self._components:
            values = np.asarray(c.get_values(), dtype=float).reshape(-1)
            _check_size(c, "values", values.size)
            parts.append(values)
        values = np.concatenate(parts)
        if self._is_cost:
            return np.array([values.sum()])
        return values

    def get_bounds(self):
        if self._is_cost:
            return [NoBound] if self._components else []
        bounds = []
        for c in self._components:
            b = list(c.get_bounds())
            _check_size(c, "bounds", len(b))
            bounds.extend(b)
        return bounds

    def set_variables(self, x):
        """Distribute the vector ``x`` over the members by their offsets"""
        ctype = self.ctype
        if ctype is not None and ctype is not IVariableBlock:
            raise DeveloperError(
                "Composite '%s' stores constraint or cost blocks; their "
                "values are computed from the optimization variables and "
                "cannot be assigned" % (self.name,)
            )
        x = np.asarray(x, dtype=float).reshape(-1)
        if x.size != self.rows:
            raise DimensionMismatchError(
                "Composite '%s' has %d rows, but %d values were assigned"
                % (self.name, self.rows, x.size)
            )
        for c in self._components:
            c.set_variables(x[self.get_slice(c.name)])

    def get_jacobian(self):
        """Stack the member Jacobians (summing them for a cost composite)"""
        ctype = self.ctype
        if ctype is not None and ctype is not IDerivableBlock:
            raise DeveloperError(
                "Composite '%s' stores variable blocks, which have no "
                "Jacobian" % (self.name,)
            )
        if not self._components:
            return scipy.sparse.csr_matrix((self.rows, 0))

        n_var = None
        row_idx, col_idx, data = [], [], []
        row = 0
        for c in self._components:
            jac = scipy.sparse.coo_matrix(c.get_jacobian())
            if n_var is None:
                n_var = jac.shape[1]
            if jac.shape[0] != c.rows or jac.shape[1] != n_var:
                raise DimensionMismatchError(
                    "Component '%s' returned a Jacobian of shape %s; "
                    "expected (%d, %d)" % (c.name, jac.shape, c.rows, n_var)
                )
            row_idx.append(jac.row + row)
            col_idx.append(jac.col)
            data.append(jac.data)
            if not self._is_cost:
                row += c.rows

        # Duplicate entries (cost terms mapped onto row 0) are summed
        return scipy.sparse.coo_matrix(
            (np.concatenate(data), (np.concatenate(row_idx), np.concatenate(col_idx))),
            shape=(self.rows, n_var),
        ).tocsr()

    def pprint(self, ostream=None, tol=1e-4, index_start=0):
        """Print the composite name followed by a summary of every member"""
        if ostream is None:
            ostream = sys.stdout
        ostream.write("%s:\n" % (self.name,))
        index = index_start
        for c in self._components:
            ostream.write("   ")
            index = c.pprint(ostream=ostream, tol=tol, index_start=index)
        return index
