#  ___________________________________________________________________________
#
#  BlockNLP: Block-structured Nonlinear Programming
#  Copyright (c) 2025 The BlockNLP Developers
#  This software is distributed under the 3-clause BSD License.
#  ___________________________________________________________________________

from blocknlp.solvers.base import SolverBase
from blocknlp.solvers.config import SolverConfig
from blocknlp.solvers.factory import SolverFactory
from blocknlp.solvers.results import Results, SolutionStatus, TerminationCondition

# Register the solver interfaces with the SolverFactory
from blocknlp.solvers import scipy_solver
from blocknlp.solvers.scipy_solver import ScipySolver
