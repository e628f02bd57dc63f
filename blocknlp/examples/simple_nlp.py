#  ___________________________________________________________________________
#
#  BlockNLP: Block-structured Nonlinear Programming
#  Copyright (c) 2025 The BlockNLP Developers
#  This software is distributed under the 3-clause BSD License.
#  ___________________________________________________________________________

"""A small example problem built from the leaf components.

Formulation::

    find x0, x1                              (variable set "var_set1")
    s.t
      -1.0 <= x0 <= 1.0                      (bounds on variables)
      x0^2 + x1 = 1.0                        (constraint "constraint1")

    minimize -(x1 - 2)^2                     (cost "cost_term1")

The optimal solution is x0 = 1.0, x1 = 0.0 with a cost of -4.0.
"""

from blocknlp.common.dependencies import numpy as np
from blocknlp.core import (
    Bounds,
    ConstraintSet,
    CostTerm,
    NoBound,
    Problem,
    VariableSet,
)


class ExVariables(VariableSet):
    # Every variable set has a name, here "var_set1". This allows the
    # constraints and costs to define values and Jacobians specifically
    # w.r.t this variable set.
    def __init__(self, name="var_set1"):
        super().__init__(2, name)
        # the initial values where the NLP starts iterating from
        self._x0 = 3.5
        self._x1 = 1.5

    def set_variables(self, x):
        self._x0, self._x1 = (float(v) for v in x)

    def get_values(self):
        return np.array([self._x0, self._x1])

    def get_bounds(self):
        return [Bounds(-1.0, 1.0), NoBound]


class ExConstraint(ConstraintSet):
    def __init__(self, name="constraint1"):
        super().__init__(1, name)

    # The constraint value minus the constant value "1", moved to bounds.
    def get_values(self):
        x = self.get_variables().get_component("var_set1").get_values()
        return np.array([x[0] ** 2 + x[1]])

    # The only constraint in this set is an equality constraint to 1.
    # Constant values should always be put into get_bounds(), not get_values().
    def get_bounds(self):
        return [Bounds(1.0, 1.0)]

    # This function provides the first derivative of the constraints.
    def fill_jacobian_block(self, var_set, jac_block):
        # must fill only that submatrix of the overall Jacobian that relates
        # to this constraint and "var_set1". even if more constraints or
        # variables classes are added, this submatrix will always start at
        # row 0 and column 0, thereby being independent from the overall
        # problem.
        if var_set == "var_set1":
            x = self.get_variables().get_component("var_set1").get_values()
            jac_block[0, 0] = 2.0 * x[0]  # derivative of first constraint w.r.t x0
            jac_block[0, 1] = 1.0  # derivative of first constraint w.r.t x1


class ExCost(CostTerm):
    def __init__(self, name="cost_term1"):
        super().__init__(name)

    def get_cost(self):
        x = self.get_variables().get_component("var_set1").get_values()
        return -((x[1] - 2.0) ** 2)

    def fill_jacobian_block(self, var_set, jac):
        if var_set == "var_set1":
            x = self.get_variables().get_component("var_set1").get_values()
            jac[0, 0] = 0.0  # derivative of cost w.r.t x0
            jac[0, 1] = -2.0 * (x[1] - 2.0)  # derivative of cost w.r.t x1


def build_problem():
    """Returns the example :class:`Problem` at its initial point"""
    nlp = Problem()
    nlp.add_variable_set(ExVariables())
    nlp.add_constraint_set(ExConstraint())
    nlp.add_cost_set(ExCost())
    return nlp


if __name__ == '__main__':
    from blocknlp.solvers import SolverFactory

    nlp = build_problem()
    nlp.print_current()
    with SolverFactory('scipy') as solver:
        results = solver.solve(nlp)
    nlp.print_current()
    print(results.termination_condition, nlp.get_variable_values())
