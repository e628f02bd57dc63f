#  ___________________________________________________________________________
#
#  BlockNLP: Block-structured Nonlinear Programming
#  Copyright (c) 2025 The BlockNLP Developers
#  This software is distributed under the 3-clause BSD License.
#  ___________________________________________________________________________

import enum

from blocknlp.common.config import (
    ConfigDict,
    ConfigValue,
    IsInstance,
    NonNegativeInt,
    In,
    NonNegativeFloat,
    ADVANCED_OPTION,
)


class TerminationCondition(enum.Enum):
    """
    An Enum that enumerates all possible exit statuses for a solver call.

    Attributes
    ----------
    convergenceCriteriaSatisfied: 0
        The solver exited because convergence criteria of the problem were
        satisfied.
    maxTimeLimit: 1
        The solver exited due to reaching a specified time limit.
    iterationLimit: 2
        The solver exited due to reaching a specified iteration limit.
    minStepLength: 4
        The solver exited due to a minimum step length.
        Minimum step length reached may mean that the problem is infeasible or
        that the problem is feasible but the solver could not converge.
    unbounded: 5
        The solver exited because the problem has been found to be unbounded.
    locallyInfeasible: 7
        The solver exited because no feasible solution was found to the
        submitted problem, but it could not be proven that no such solution exists.
    error: 9
        The solver exited with some error. The error message will also be
        captured and returned.
    interrupted: 10
        The solver was interrupted while running.
    emptyModel: 12
        The problem being solved did not have any variables
    unknown: 42
        All other unrecognized exit statuses fall in this category.
    """

    convergenceCriteriaSatisfied = 0

    maxTimeLimit = 1

    iterationLimit = 2

    minStepLength = 4

    unbounded = 5

    locallyInfeasible = 7

    error = 9

    interrupted = 10

    emptyModel = 12

    unknown = 42


class SolutionStatus(enum.Enum):
    """
    An enumeration for interpreting the result of a termination. This
    describes the designated status by the solver to be loaded back into
    the problem.

    Attributes
    ----------
    noSolution: 0
        No solution was found.
    infeasible: 10
        Solution point does not satisfy some bounds and/or constraints.
    feasible: 20
        A solution for which all of the constraints in the problem are satisfied.
    optimal: 30
        A feasible solution where the cost reaches a (local) minimum.
    """

    noSolution = 0

    infeasible = 10

    feasible = 20

    optimal = 30


class Results(ConfigDict):
    """
    Attributes
    ----------
    termination_condition: :class:`TerminationCondition<blocknlp.solvers.results.TerminationCondition>`
        The reason the solver exited. This is a member of the
        TerminationCondition enum.
    solution_status: :class:`SolutionStatus<blocknlp.solvers.results.SolutionStatus>`
        The result of the solve call. This is a member of the SolutionStatus
        enum.
    objective_value: float
        If a solution was found, this is the total cost at that point.
        Otherwise, this is None.
    solution: numpy.ndarray
        The final iterate (all optimization variables), or None.
    solver_name: str
        The name of the solver in use.
    solver_version: tuple
        A tuple representing the version of the solver in use.
    solver_message: str
        The exit message reported by the solver.
    iteration_count: int
        The total number of iterations.
    timing_info: ConfigDict
        A ConfigDict containing the ``wall_time`` (elapsed wall clock
        time for the solve, in seconds).
    extra_info: ConfigDict
        A ConfigDict to store extra information such as the status code
        reported by the solver.
    solver_configuration: ConfigDict
        A copy of the SolverConfig ConfigDict, for later inspection/reproducibility.
    """

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

        self.termination_condition: TerminationCondition = self.declare(
            'termination_condition',
            ConfigValue(
                domain=In(TerminationCondition),
                default=TerminationCondition.unknown,
                description="The reason the solver exited. This is a member of the "
                "TerminationCondition enum.",
            ),
        )
        self.solution_status: SolutionStatus = self.declare(
            'solution_status',
            ConfigValue(
                domain=In(SolutionStatus),
                default=SolutionStatus.noSolution,
                description="The result of the solve call. This is a member of "
                "the SolutionStatus enum.",
            ),
        )
        self.objective_value = self.declare(
            'objective_value',
            ConfigValue(
                domain=float,
                default=None,
                description="The total cost at the final iterate (None if no "
                "solution was found).",
            ),
        )
        self.solution = self.declare(
            'solution',
            ConfigValue(
                default=None,
                description="The final values of all optimization variables.",
                visibility=ADVANCED_OPTION,
            ),
        )
        self.solver_name = self.declare(
            'solver_name',
            ConfigValue(domain=str, description="The name of the solver in use."),
        )
        self.solver_message = self.declare(
            'solver_message',
            ConfigValue(
                domain=str,
                default=None,
                description="The exit message reported by the solver.",
            ),
        )
        self.solver_version = self.declare(
            'solver_version',
            ConfigValue(
                domain=tuple,
                description="A tuple representing the version of the solver in use.",
            ),
        )
        self.iteration_count = self.declare(
            'iteration_count',
            ConfigValue(
                domain=NonNegativeInt,
                default=None,
                description="The total number of iterations.",
            ),
        )
        self.timing_info: ConfigDict = self.declare(
            'timing_info', ConfigDict(implicit=True, implicit_domain=None)
        )
        self.timing_info.wall_time = self.timing_info.declare(
            'wall_time',
            ConfigValue(
                domain=NonNegativeFloat,
                description="Elapsed wall clock time for the solve (seconds).",
            ),
        )
        self.extra_info: ConfigDict = self.declare(
            'extra_info', ConfigDict(implicit=True)
        )
        self.solver_configuration: ConfigDict = self.declare(
            'solver_configuration',
            ConfigValue(
                domain=IsInstance(ConfigDict),
                description="A copy of the config object used in the solve call.",
                visibility=ADVANCED_OPTION,
            ),
        )

    def __str__(self):
        s = ''
        s += 'termination_condition: ' + str(self.termination_condition) + '\n'
        s += 'solution_status: ' + str(self.solution_status) + '\n'
        s += 'objective_value: ' + str(self.objective_value) + '\n'
        s += 'iteration_count: ' + str(self.iteration_count)
        return s
