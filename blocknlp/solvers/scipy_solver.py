#  ___________________________________________________________________________
#
#  BlockNLP: Block-structured Nonlinear Programming
#  Copyright (c) 2025 The BlockNLP Developers
#  This software is distributed under the 3-clause BSD License.
#  ___________________________________________________________________________

import datetime
import io
import logging
import time
from typing import Tuple

from blocknlp.common.config import ConfigValue, In
from blocknlp.common.dependencies import (
    check_min_version,
    numpy as np,
    scipy,
    scipy_available,
    version_tuple,
)
from blocknlp.common.errors import ApplicationError
from blocknlp.common.log import is_debug_set
from blocknlp.core.bounds import bounds_to_arrays
from blocknlp.solvers.base import SolverBase
from blocknlp.solvers.config import SolverConfig
from blocknlp.solvers.factory import SolverFactory
from blocknlp.solvers.results import Results, SolutionStatus, TerminationCondition

logger = logging.getLogger('blocknlp.solvers')

# scipy.optimize.minimize status codes
_slsqp_termination_map = {
    0: TerminationCondition.convergenceCriteriaSatisfied,
    2: TerminationCondition.error,  # more equality constraints than variables
    3: TerminationCondition.iterationLimit,  # LSQ subproblem iterations
    4: TerminationCondition.locallyInfeasible,
    5: TerminationCondition.error,
    6: TerminationCondition.error,
    7: TerminationCondition.error,
    8: TerminationCondition.minStepLength,  # positive directional derivative
    9: TerminationCondition.iterationLimit,
}

_trust_constr_termination_map = {
    0: TerminationCondition.iterationLimit,
    1: TerminationCondition.convergenceCriteriaSatisfied,
    2: TerminationCondition.convergenceCriteriaSatisfied,  # xtol
    3: TerminationCondition.interrupted,
}


class ScipyConfig(SolverConfig):
    def __init__(
        self,
        description=None,
        doc=None,
        implicit=False,
        implicit_domain=None,
        visibility=0,
    ):
        super().__init__(
            description=description,
            doc=doc,
            implicit=implicit,
            implicit_domain=implicit_domain,
            visibility=visibility,
        )
        self.method: str = self.declare(
            'method',
            ConfigValue(
                domain=In(['SLSQP', 'trust-constr']),
                default='SLSQP',
                description="The scipy.optimize.minimize method used to solve "
                "the problem.",
            ),
        )
        self.feasibility_tol: float = self.declare(
            'feasibility_tol',
            ConfigValue(
                domain=float,
                default=1e-6,
                description="Maximum bound violation of the final iterate "
                "for the solution to be reported as feasible.",
            ),
        )


class _TimeLimitReached(object):
    def __init__(self):
        self.reached = False
        self.x = None


class _TimeLimitExceeded(Exception):
    pass


def _callback_can_stop(method):
    # SLSQP passes an OptimizeResult to the callback and honors
    # StopIteration only from scipy 1.16 on
    return method == 'trust-constr' or check_min_version(scipy, '1.16')


@SolverFactory.register('scipy', doc='Local NLP solver using scipy.optimize.minimize')
class ScipySolver(SolverBase):
    """Solve a :class:`Problem` with :func:`scipy.optimize.minimize`

    The problem provides the cost, its gradient, the constraint values,
    the constraint Jacobian and the bounds of variables and constraints.
    The current variable values are the initial point.  After every
    iteration the iterate is stored in the problem history (see
    :meth:`Problem.save_current`).
    """

    CONFIG = ScipyConfig()

    def __init__(self, **kwds):
        super().__init__(**kwds)

    def available(self):
        if scipy_available:
            return self.Availability.FullLicense
        return self.Availability.NotFound

    def version(self) -> Tuple:
        if not scipy_available:
            return None
        return version_tuple(scipy.__version__)

    def _log(self, config, msg):
        for stream in config.tee:
            stream.write(msg + '\n')

    def solve(self, problem, **kwds):
        """Solve the problem, starting from its current variable values"""
        tick = time.perf_counter()
        config = self.config(value=kwds, preserve_implicit=True)
        if not self.available():
            raise ApplicationError(
                'Solver %s is not available (%s).' % (self.name, self.available())
            )

        results = Results()
        results.solver_name = self.name
        results.solver_version = self.version()
        results.solver_configuration = config
        results.timing_info.start_timestamp = datetime.datetime.now(
            datetime.timezone.utc
        )

        n = problem.get_number_of_optimization_variables()
        if n == 0:
            results.termination_condition = TerminationCondition.emptyModel
            results.iteration_count = 0
            results.timing_info.wall_time = time.perf_counter() - tick
            if config.raise_exception_on_nonoptimal_result:
                raise ApplicationError(
                    "Problem has no optimization variables; nothing to solve"
                )
            return results

        x0 = problem.get_variable_values()
        lb, ub = bounds_to_arrays(problem.get_bounds_on_optimization_variables())
        method = config.method
        timeout = _TimeLimitReached()

        def fun(x):
            return problem.evaluate_cost_function(x)

        def jac(x):
            return problem.evaluate_cost_function_gradient(
                x,
                config.use_finite_difference_approximation,
                config.finite_difference_step,
            )

        constraints = []
        if problem.get_number_of_constraints():
            c_lb, c_ub = bounds_to_arrays(problem.get_bounds_on_constraints())

            def c_fun(x):
                return problem.evaluate_constraints(x)

            def c_jac(x):
                problem.set_variables(x)
                jac = problem.get_jacobian_of_constraints()
                if method == 'SLSQP':
                    return jac.toarray()
                return jac

            constraints.append(
                scipy.optimize.NonlinearConstraint(
                    fun=c_fun, jac=c_jac, lb=c_lb, ub=c_ub
                )
            )

        can_stop = _callback_can_stop(method)

        def callback(intermediate_result):
            # older SLSQP releases pass the bare iterate
            x = getattr(intermediate_result, 'x', intermediate_result)
            problem.set_variables(x)
            problem.save_current()
            it = problem.get_iteration_count() - 1
            if config.tee:
                self._log(
                    config,
                    "iter %4d   cost %14.8e   max violation %10.3e"
                    % (
                        it,
                        problem.evaluate_cost_function(x),
                        _max_violation(problem),
                    ),
                )
            if (
                config.time_limit is not None
                and time.perf_counter() - tick > config.time_limit
            ):
                timeout.reached = True
                timeout.x = np.array(x, dtype=float)
                if can_stop:
                    raise StopIteration
                raise _TimeLimitExceeded

        options = {'maxiter': config.max_iter}
        if method == 'SLSQP':
            options['disp'] = bool(config.print_level)
        else:
            options['verbose'] = min(config.print_level, 3)
        options.update(config.solver_options.value())

        if config.tee:
            self._log(
                config,
                "Solving problem with %d variables and %d constraints (%s)"
                % (n, problem.get_number_of_constraints(), method),
            )
        if is_debug_set(logger):
            buf = io.StringIO()
            config.display(ostream=buf)
            logger.debug("Solver configuration:\n%s", buf.getvalue())
            logger.debug("scipy.optimize.minimize options: %s", options)

        # the initial point is the first entry of the iteration history
        problem.save_current()
        try:
            res = scipy.optimize.minimize(
                fun,
                x0,
                method=method,
                jac=jac,
                bounds=scipy.optimize.Bounds(lb, ub),
                constraints=constraints,
                tol=config.tol,
                callback=callback,
                options=options,
            )
        except _TimeLimitExceeded:
            res = scipy.optimize.OptimizeResult(
                x=timeout.x, status=-1, message='Time limit reached', success=False
            )
        x = np.asarray(res.x, dtype=float)

        if timeout.reached:
            tc = TerminationCondition.maxTimeLimit
        elif method == 'SLSQP':
            tc = _slsqp_termination_map.get(res.status, TerminationCondition.unknown)
        else:
            tc = _trust_constr_termination_map.get(
                res.status, TerminationCondition.unknown
            )
        results.termination_condition = tc
        results.solver_message = str(res.message)
        results.extra_info.status = int(res.status)
        results.iteration_count = max(problem.get_iteration_count() - 1, 0)
        results.solution = x

        # Evaluating the final point leaves it in the variable sets
        objective = problem.evaluate_cost_function(x)
        violation = _max_violation(problem)
        results.extra_info.max_violation = violation
        if violation <= config.feasibility_tol:
            if tc == TerminationCondition.convergenceCriteriaSatisfied:
                results.solution_status = SolutionStatus.optimal
            else:
                results.solution_status = SolutionStatus.feasible
        else:
            results.solution_status = SolutionStatus.infeasible
        results.objective_value = objective
        if not config.load_solutions:
            problem.set_variables(x0)

        if config.tee:
            self._log(config, "Termination: %s (%s)" % (tc.name, res.message))
            for stream in config.tee:
                stream.flush()
        results.timing_info.wall_time = time.perf_counter() - tick

        if (
            config.raise_exception_on_nonoptimal_result
            and results.solution_status != SolutionStatus.optimal
        ):
            raise ApplicationError(
                "Solver %s did not find an optimal solution (termination "
                "condition: %s, solver message: %s). Set "
                "opt.config.raise_exception_on_nonoptimal_result = False to "
                "bypass this error." % (self.name, tc.name, res.message)
            )
        return results


def _max_violation(problem):
    """Largest bound violation of the variables and constraints at the
    current point"""
    violation = 0.0
    x = problem.get_variable_values()
    lb, ub = bounds_to_arrays(problem.get_bounds_on_optimization_variables())
    if x.size:
        violation = max(violation, float(np.max(np.maximum(lb - x, x - ub))))
    if problem.get_number_of_constraints():
        g = problem.constraints.get_values()
        lb, ub = bounds_to_arrays(problem.get_bounds_on_constraints())
        violation = max(violation, float(np.max(np.maximum(lb - g, g - ub))))
    return violation
