#  ___________________________________________________________________________
#
#  BlockNLP: Block-structured Nonlinear Programming
#  Copyright (c) 2025 The BlockNLP Developers
#  This software is distributed under the 3-clause BSD License.
#  ___________________________________________________________________________

import logging
import sys

from blocknlp.common.dependencies import numpy as np, scipy
from blocknlp.core.component import Composite

logger = logging.getLogger('blocknlp.core')


class Problem(object):
    """A generic optimization problem with variables, costs and constraints.

    This class is responsible for holding all the information of an
    optimization problem, which includes the optimization variables,
    their variable bounds, the cost function, the constraints and their
    bounds and derivatives of all.  With this information the problem
    can be solved by any specific solver::

        find x0, x1                              (variable sets)
        s.t
          x0 <= 1.0                              (bounds on variables)
          x0^2 + x1 = 1.0                        (constraint)

        minimize -(x1 - 2)^2                     (cost)

    The problem owns the variables composite.  Constraint and cost sets
    only keep a weak reference to it (see
    :meth:`ConstraintSet.link_variable_all`), which is established when
    they are added to the problem.

    Every set of variables, constraints and costs is identified by its
    name, so the order in which they are added does not matter to the
    formulation; it only defines the order of the stacked vectors.
    """

    def __init__(self):
        self._variables = Composite("variable-sets", False)
        self._constraints = Composite("constraint-sets", False)
        self._costs = Composite("cost-terms", True)
        self._x_prev = []

    @property
    def variables(self):
        """The composite holding all variable sets"""
        return self._variables

    @property
    def constraints(self):
        """The composite holding all constraint sets"""
        return self._constraints

    @property
    def costs(self):
        """The composite holding all cost terms"""
        return self._costs

    #
    # Problem formulation
    #

    def add_variable_set(self, variable_set):
        """Add one individual set of variables to the optimization problem.

        The variables are appended to the end of the optimization vector.
        Constraints that are already part of the problem see the new
        variables in their next Jacobian evaluation.
        """
        self._variables.add_component(variable_set)

    def add_constraint_set(self, constraint_set):
        """Link a constraint set to the variables and add it to the problem"""
        self._constraints.validate_component(constraint_set)
        constraint_set.link_variable_all(self._variables)
        self._constraints.add_component(constraint_set)

    def add_cost_set(self, cost_set):
        """Link a cost term to the variables and add it to the problem.

        The cost of the problem is the sum of all cost terms.
        """
        self._costs.validate_component(cost_set)
        cost_set.link_variable_all(self._variables)
        self._costs.add_component(cost_set)

    #
    # Variables
    #

    def get_number_of_optimization_variables(self):
        """The number of optimization variables of all variable sets"""
        return self._variables.rows

    def get_bounds_on_optimization_variables(self):
        """The list of bounds of every optimization variable"""
        return self._variables.get_bounds()

    def get_variable_values(self):
        """The current values of all optimization variables"""
        return self._variables.get_values()

    def set_variables(self, x):
        """Set the values of all optimization variables"""
        self._variables.set_variables(x)

    #
    # Costs
    #

    def has_cost_terms(self):
        """True if at least one cost term was added"""
        return len(self._costs) > 0

    def evaluate_cost_function(self, x):
        """Set the variables to ``x`` and evaluate the total cost"""
        self.set_variables(x)
        if not self.has_cost_terms():
            return 0.0
        return float(self._costs.get_values()[0])

    def evaluate_cost_function_gradient(
        self, x, use_finite_difference_approximation=False, epsilon=1e-8
    ):
        """The gradient of the total cost w.r.t. all variables at ``x``.

        By default the gradient is assembled from the cost terms'
        Jacobians.  With ``use_finite_difference_approximation`` every
        variable is perturbed by ``epsilon`` in turn and the gradient is
        computed by forward differences.
        """
        n = self.get_number_of_optimization_variables()
        grad = np.zeros(n)
        if not self.has_cost_terms():
            self.set_variables(x)
            return grad

        if use_finite_difference_approximation:
            x = np.array(x, dtype=float).reshape(-1)
            cost = self.evaluate_cost_function(x)
            x_new = x.copy()
            for i in range(n):
                x_new[i] += epsilon
                grad[i] = (self.evaluate_cost_function(x_new) - cost) / epsilon
                x_new[i] = x[i]
            # leave the problem at the evaluation point
            self.set_variables(x)
        else:
            self.set_variables(x)
            jac = self.get_jacobian_of_costs()
            if jac.shape[1]:
                grad = np.asarray(jac.toarray()).reshape(-1)
        return grad

    def get_jacobian_of_costs(self):
        """The (1 x n) Jacobian of the total cost at the current variables"""
        n = self.get_number_of_optimization_variables()
        if not self.has_cost_terms():
            return scipy.sparse.csr_matrix((1, n))
        return self._costs.get_jacobian()

    #
    # Constraints
    #

    def get_number_of_constraints(self):
        """The number of rows of all constraint sets"""
        return self._constraints.rows

    def get_bounds_on_constraints(self):
        """The list of bounds of every constraint row"""
        return self._constraints.get_bounds()

    def evaluate_constraints(self, x):
        """Set the variables to ``x`` and evaluate every constraint row"""
        self.set_variables(x)
        return self._constraints.get_values()

    def get_jacobian_of_constraints(self):
        """The (m x n) Jacobian of all constraints at the current variables"""
        n = self.get_number_of_optimization_variables()
        if not len(self._constraints):
            return scipy.sparse.csr_matrix((0, n))
        return self._constraints.get_jacobian()

    #
    # Iteration history
    #

    def save_current(self):
        """Save the current values of the optimization variables.

        This is called by solvers after every iteration, so the
        intermediate iterates can be inspected (or replayed) later.
        """
        self._x_prev.append(self._variables.get_values())

    def get_iteration_count(self):
        """The number of saved iterates"""
        return len(self._x_prev)

    def get_opt_variables(self):
        """Read access to the variables composite"""
        return self._variables

    def set_opt_variables(self, iter):
        """Set the variables to the values saved at iteration ``iter``"""
        if not self._x_prev:
            raise IndexError("No iterations have been saved for this problem")
        try:
            x = self._x_prev[iter]
        except IndexError:
            raise IndexError(
                "Iteration %s does not exist; %d iterations were saved"
                % (iter, len(self._x_prev))
            ) from None
        self._variables.set_variables(x)

    def set_opt_variables_final(self):
        """Set the variables to the values of the last saved iteration"""
        self.set_opt_variables(-1)

    #
    # Output
    #

    def print_current(self, ostream=None, tol=1e-3):
        """Print the variables, costs and constraints at the current point"""
        if ostream is None:
            ostream = sys.stdout
        ostream.write(
            "\n"
            "************************************************************\n"
            "    BlockNLP - Block-structured Nonlinear Programming\n"
            "************************************************************\n"
            "Each set is listed as: name (number of rows), the range of its\n"
            "indices in the overall problem and the number of rows that\n"
            "violate their bounds.\n"
            "\n"
        )
        self._variables.pprint(ostream=ostream, tol=tol)
        if self.has_cost_terms():
            ostream.write(
                "Total cost: %s\n" % (float(self._costs.get_values()[0]),)
            )
        self._costs.pprint(ostream=ostream, tol=tol)
        self._constraints.pprint(ostream=ostream, tol=tol)
        ostream.write("\n")

    pprint = print_current

    def __str__(self):
        return (
            "Problem(%d variables, %d constraints, %d cost terms)"
            % (
                self.get_number_of_optimization_variables(),
                self.get_number_of_constraints(),
                len(self._costs),
            )
        )
