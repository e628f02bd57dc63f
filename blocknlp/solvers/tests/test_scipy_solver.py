#  ___________________________________________________________________________
#
#  BlockNLP: Block-structured Nonlinear Programming
#  Copyright (c) 2025 The BlockNLP Developers
#  This software is distributed under the 3-clause BSD License.
#  ___________________________________________________________________________

import logging
from io import StringIO
from types import SimpleNamespace

import blocknlp.common.unittest as unittest
from blocknlp.common.dependencies import numpy as np, scipy, scipy_available
from blocknlp.common.errors import ApplicationError
from blocknlp.common.log import LoggingIntercept
from blocknlp.core import Bounds, ConstraintSet, Problem, VectorVariableSet
from blocknlp.examples.simple_nlp import build_problem
from blocknlp.solvers import SolverFactory, scipy_solver
from blocknlp.solvers.results import SolutionStatus, TerminationCondition


class FixedSum(ConstraintSet):
    """x[0] + x[1] == value"""

    def __init__(self, value):
        super().__init__(1, 'fixed sum')
        self._value = value

    def get_values(self):
        x = self.get_variables().get_component('x').get_values()
        return np.array([x[0] + x[1]])

    def get_bounds(self):
        return [Bounds(self._value, self._value)]

    def fill_jacobian_block(self, var_set, jac_block):
        if var_set == 'x':
            jac_block[0, 0] = 1.0
            jac_block[0, 1] = 1.0


@unittest.pytest.mark.solver('scipy')
@unittest.skipUnless(scipy_available, "scipy is not available")
class TestScipySolver(unittest.TestCase):
    def setUp(self):
        self.nlp = build_problem()
        self.opt = SolverFactory('scipy')

    def test_available(self):
        self.assertTrue(self.opt.available())
        self.assertEqual(str(self.opt.available()), 'FullLicense')
        self.assertIsInstance(self.opt.version(), tuple)
        self.assertGreaterEqual(self.opt.version(), (1, 11))

    def test_solve_example(self):
        res = self.opt.solve(self.nlp)
        self.assertEqual(
            res.termination_condition, TerminationCondition.convergenceCriteriaSatisfied
        )
        self.assertEqual(res.solution_status, SolutionStatus.optimal)
        self.assertStructuredAlmostEqual(
            self.nlp.get_variable_values(), [1.0, 0.0], abstol=1e-5
        )
        self.assertAlmostEqual(res.objective_value, -4.0, places=5)
        self.assertStructuredAlmostEqual(res.solution, [1.0, 0.0], abstol=1e-5)
        self.assertEqual(res.solver_name, 'scipy')
        self.assertGreater(res.iteration_count, 0)
        self.assertGreaterEqual(res.timing_info.wall_time, 0)
        self.assertIsInstance(res.solver_message, str)

    def test_solve_trust_constr(self):
        # start from a strictly feasible point for the interior point method
        self.nlp.set_variables([0.5, 0.5])
        res = self.opt.solve(
            self.nlp,
            method='trust-constr',
            tol=1e-10,
            raise_exception_on_nonoptimal_result=False,
        )
        self.assertNotEqual(res.solution_status, SolutionStatus.infeasible)
        self.assertStructuredAlmostEqual(
            self.nlp.get_variable_values(), [1.0, 0.0], abstol=1e-4
        )

    def test_finite_difference_gradient(self):
        res = self.opt.solve(self.nlp, use_finite_difference_approximation=True)
        self.assertEqual(res.solution_status, SolutionStatus.optimal)
        self.assertStructuredAlmostEqual(
            self.nlp.get_variable_values(), [1.0, 0.0], abstol=1e-4
        )

    def test_iteration_history(self):
        res = self.opt.solve(self.nlp)
        self.assertEqual(self.nlp.get_iteration_count(), res.iteration_count + 1)
        self.nlp.set_opt_variables(0)
        self.assertStructuredAlmostEqual(self.nlp.get_variable_values(), [3.5, 1.5])
        self.nlp.set_opt_variables_final()
        self.assertStructuredAlmostEqual(
            self.nlp.get_variable_values(), [1.0, 0.0], abstol=1e-5
        )

    def test_do_not_load_solution(self):
        res = self.opt.solve(self.nlp, load_solutions=False)
        self.assertStructuredAlmostEqual(self.nlp.get_variable_values(), [3.5, 1.5])
        self.assertStructuredAlmostEqual(res.solution, [1.0, 0.0], abstol=1e-5)

    def test_config_not_modified(self):
        self.opt.solve(self.nlp, max_iter=200, solver_options={'ftol': 1e-10})
        self.assertEqual(self.opt.config.max_iter, 1000)
        self.assertEqual(self.opt.config.solver_options.value(), {})

    def test_solver_options(self):
        self.opt.config.solver_options.ftol = 1e-10
        res = self.opt.solve(self.nlp)
        self.assertEqual(
            res.solver_configuration.solver_options.value(), {'ftol': 1e-10}
        )

    def test_tee_stream(self):
        OUT = StringIO()
        self.opt.solve(self.nlp, tee=OUT)
        out = OUT.getvalue()
        self.assertIn("Solving problem with 2 variables and 1 constraints (SLSQP)", out)
        self.assertIn("iter    1   cost", out)
        self.assertIn("Termination: convergenceCriteriaSatisfied", out)

    def test_tee_logger(self):
        with LoggingIntercept(
            module='blocknlp.solvers.testing', level=logging.INFO
        ) as OUT:
            self.opt.solve(
                self.nlp, tee=logging.getLogger('blocknlp.solvers.testing')
            )
        self.assertIn("Solving problem with 2 variables", OUT.getvalue())
        self.assertIn("Termination: convergenceCriteriaSatisfied", OUT.getvalue())

    def test_infeasible(self):
        nlp = Problem()
        nlp.add_variable_set(VectorVariableSet(2, 'x', bounds=(0, 1)))
        nlp.add_constraint_set(FixedSum(5.0))
        with self.assertRaisesRegex(
            ApplicationError, "did not find an optimal solution"
        ):
            self.opt.solve(nlp)

        res = self.opt.solve(nlp, raise_exception_on_nonoptimal_result=False)
        self.assertEqual(res.solution_status, SolutionStatus.infeasible)
        self.assertGreater(res.extra_info.max_violation, 1)

    def test_no_costs(self):
        # a pure feasibility problem
        nlp = Problem()
        nlp.add_variable_set(VectorVariableSet(2, 'x', values=[0.5, 0.5], bounds=(0, 1)))
        nlp.add_constraint_set(FixedSum(1.5))
        res = self.opt.solve(nlp)
        self.assertEqual(res.solution_status, SolutionStatus.optimal)
        self.assertAlmostEqual(nlp.get_variable_values().sum(), 1.5, places=6)
        self.assertEqual(res.objective_value, 0.0)

    def test_empty_problem(self):
        with self.assertRaisesRegex(ApplicationError, "no optimization variables"):
            self.opt.solve(Problem())
        res = self.opt.solve(Problem(), raise_exception_on_nonoptimal_result=False)
        self.assertEqual(res.termination_condition, TerminationCondition.emptyModel)
        self.assertEqual(res.iteration_count, 0)

    def test_debug_log(self):
        with LoggingIntercept(module='blocknlp.solvers', level=logging.DEBUG) as OUT:
            self.opt.solve(self.nlp, max_iter=200)
        self.assertIn("Solver configuration:", OUT.getvalue())
        self.assertIn("max_iter: 200", OUT.getvalue())
        self.assertIn("method: SLSQP", OUT.getvalue())
        self.assertIn("'maxiter': 200", OUT.getvalue())

    def test_time_limit(self):
        res = self.opt.solve(
            self.nlp, time_limit=0, raise_exception_on_nonoptimal_result=False
        )
        self.assertEqual(res.termination_condition, TerminationCondition.maxTimeLimit)
        self.assertEqual(res.iteration_count, 1)


def _minimize_with_bare_iterates(iterates):
    """Stand-in for scipy.optimize.minimize that reports every iterate to
    the callback as a bare array, as SLSQP does before scipy 1.16"""

    def minimize(fun, x0, callback=None, **kwds):
        for x in iterates:
            callback(np.array(x, dtype=float))
        return scipy.optimize.OptimizeResult(
            x=np.array(iterates[-1], dtype=float),
            status=0,
            message='Optimization terminated successfully',
            success=True,
        )

    return minimize


@unittest.pytest.mark.solver('scipy')
@unittest.skipUnless(scipy_available, "scipy is not available")
class TestScipyCallbackForms(unittest.TestCase):
    def setUp(self):
        self.nlp = build_problem()
        self.opt = SolverFactory('scipy')

    def test_bare_iterate(self):
        minimize = _minimize_with_bare_iterates([[0.5, 0.5], [1.0, 0.0]])
        with unittest.mock.patch('scipy.optimize.minimize', minimize):
            res = self.opt.solve(self.nlp)
        self.assertEqual(
            res.termination_condition, TerminationCondition.convergenceCriteriaSatisfied
        )
        self.assertEqual(res.solution_status, SolutionStatus.optimal)
        self.assertEqual(res.iteration_count, 2)
        self.assertEqual(self.nlp.get_iteration_count(), 3)
        self.nlp.set_opt_variables(1)
        self.assertStructuredAlmostEqual(self.nlp.get_variable_values(), [0.5, 0.5])
        self.nlp.set_opt_variables_final()
        self.assertStructuredAlmostEqual(self.nlp.get_variable_values(), [1.0, 0.0])
        self.assertAlmostEqual(res.objective_value, -4.0)

    def test_time_limit_without_stop_iteration(self):
        minimize = _minimize_with_bare_iterates([[0.5, 0.5], [1.0, 0.0]])
        with unittest.mock.patch('scipy.optimize.minimize', minimize):
            with unittest.mock.patch.object(
                scipy_solver, '_callback_can_stop', lambda method: False
            ):
                res = self.opt.solve(
                    self.nlp, time_limit=0, raise_exception_on_nonoptimal_result=False
                )
        self.assertEqual(res.termination_condition, TerminationCondition.maxTimeLimit)
        self.assertEqual(res.iteration_count, 1)
        self.assertEqual(res.extra_info.status, -1)
        self.assertStructuredAlmostEqual(res.solution, [0.5, 0.5])
        self.assertStructuredAlmostEqual(self.nlp.get_variable_values(), [0.5, 0.5])

    def test_callback_can_stop(self):
        for version, slsqp in [
            ('1.11.4', False),
            ('1.15.3', False),
            ('1.16.0rc1', False),
            ('1.16.0', True),
            ('1.17.1', True),
        ]:
            fake = SimpleNamespace(__version__=version)
            with unittest.mock.patch.object(scipy_solver, 'scipy', fake):
                self.assertEqual(scipy_solver._callback_can_stop('SLSQP'), slsqp)
                self.assertTrue(scipy_solver._callback_can_stop('trust-constr'))


if __name__ == '__main__':
    unittest.main()
