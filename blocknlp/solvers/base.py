#  ___________________________________________________________________________
#
#  BlockNLP: Block-structured Nonlinear Programming
#  Copyright (c) 2025 The BlockNLP Developers
#  This software is distributed under the 3-clause BSD License.
#  ___________________________________________________________________________

import abc
import enum
from typing import Tuple

from blocknlp.core.problem import Problem
from blocknlp.solvers.config import SolverConfig
from blocknlp.solvers.results import Results


class SolverBase(abc.ABC):
    """
    This base class defines the methods required for all solvers:
        - available: Determines whether the solver is able to be run
        - solve: The main method of every solver
        - version: The version of the solver

    Additionally, solvers should have a :attr:`config<SolverBase.config>`
    attribute that inherits from
    :class:`SolverConfig<blocknlp.solvers.config.SolverConfig>`.
    """

    CONFIG = SolverConfig()

    def __init__(self, **kwds) -> None:
        # We allow the user and/or developer to name the solver something else,
        # if they really desire.
        # Otherwise it defaults to the name defined when the solver was registered
        # in the SolverFactory or the class name (all lowercase), whichever is
        # applicable
        if "name" in kwds:
            self.name = kwds.pop('name')
        elif not hasattr(self, 'name'):
            self.name = type(self).__name__.lower()
        self.config = self.CONFIG(value=kwds)

    #
    # Support "with" statements.
    #
    def __enter__(self):
        return self

    def __exit__(self, t, v, traceback):
        """Exit statement - enables `with` statements."""

    class Availability(enum.IntEnum):
        """
        Class to capture different statuses in which a solver can exist in
        order to record its availability for use.
        """

        FullLicense = 2
        NotFound = 0
        BadVersion = -1

        def __bool__(self):
            return self._value_ > 0

        def __format__(self, format_spec):
            # We want general formatting of this Enum to return the
            # formatted string value and not the int (which is the
            # default implementation from IntEnum)
            return format(self.name, format_spec)

        def __str__(self):
            return self.name

    @abc.abstractmethod
    def solve(self, problem: Problem, **kwargs) -> Results:
        """
        Solve a BlockNLP problem.

        The variables of the problem are used as the initial point.
        Every iterate is recorded with :meth:`Problem.save_current`.

        Parameters
        ----------
        problem: Problem
            The problem to be solved
        **kwargs
            Overrides for the solver configuration (including
            solver_options - passthrough options; delivered directly to
            the solver with no validation)

        Returns
        -------
        results: :class:`Results<blocknlp.solvers.results.Results>`
            A results object
        """

    @abc.abstractmethod
    def available(self) -> bool:
        """Test if the solver is available on this system.

        Returns
        -------
        available: SolverBase.Availability
            An enum that indicates "how available" the solver is.
            Note that the enum can be cast to bool, which will
            be True if the solver is runable at all and False
            otherwise.
        """

    @abc.abstractmethod
    def version(self) -> Tuple:
        """
        Returns
        -------
        version: tuple
            A tuple representing the version
        """
