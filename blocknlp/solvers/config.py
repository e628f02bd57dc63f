#  ___________________________________________________________________________
#
#  BlockNLP: Block-structured Nonlinear Programming
#  Copyright (c) 2025 The BlockNLP Developers
#  This software is distributed under the 3-clause BSD License.
#  ___________________________________________________________________________

import io
import logging
import sys

from collections.abc import Sequence
from typing import Optional, List, TextIO

from blocknlp.common.config import (
    ConfigDict,
    ConfigValue,
    NonNegativeFloat,
    NonNegativeInt,
    PositiveFloat,
    PositiveInt,
    ADVANCED_OPTION,
    Bool,
)
from blocknlp.common.log import LogStream


def TextIO_or_Logger(val):
    ans = []
    if not isinstance(val, Sequence) or isinstance(val, str):
        val = [val]
    for v in val:
        if type(v) is bool:
            if v:
                ans.append(sys.stdout)
        elif isinstance(v, io.TextIOBase):
            ans.append(v)
        elif isinstance(v, logging.Logger):
            ans.append(LogStream(level=logging.INFO, logger=v))
        else:
            raise ValueError(
                "Expected bool, TextIOBase, or Logger, but received %s"
                % (type(v).__name__,)
            )
    return ans


class SolverConfig(ConfigDict):
    """
    Base config for all solver interfaces
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

        self.tee: List[TextIO] = self.declare(
            'tee',
            ConfigValue(
                domain=TextIO_or_Logger,
                default=False,
                description="""``tee`` accepts :py:class:`bool`,
                :py:class:`io.TextIOBase`, or :py:class:`logging.Logger`
                (or a list of these types).  ``True`` is mapped to
                ``sys.stdout``.  The iteration log will be printed to each
                of these streams / destinations.""",
            ),
        )
        self.load_solutions: bool = self.declare(
            'load_solutions',
            ConfigValue(
                domain=Bool,
                default=True,
                description="If True, the final iterate will be loaded into "
                "the variable sets of the problem.",
            ),
        )
        self.raise_exception_on_nonoptimal_result: bool = self.declare(
            'raise_exception_on_nonoptimal_result',
            ConfigValue(
                domain=Bool,
                default=True,
                description="If False, the `solve` method will continue processing "
                "even if the returned result is nonoptimal.",
            ),
        )
        self.max_iter: int = self.declare(
            'max_iter',
            ConfigValue(
                domain=PositiveInt,
                default=1000,
                description="Maximum number of iterations of the solver.",
            ),
        )
        self.tol: float = self.declare(
            'tol',
            ConfigValue(
                domain=PositiveFloat,
                default=1e-8,
                description="Convergence tolerance passed to the solver.",
            ),
        )
        self.time_limit: Optional[float] = self.declare(
            'time_limit',
            ConfigValue(
                domain=NonNegativeFloat,
                description="Time limit applied to the solver (in seconds).",
            ),
        )
        self.use_finite_difference_approximation: bool = self.declare(
            'use_finite_difference_approximation',
            ConfigValue(
                domain=Bool,
                default=False,
                description="If True, the cost gradient is approximated by "
                "forward differences instead of the cost terms' Jacobians.",
            ),
        )
        self.finite_difference_step: float = self.declare(
            'finite_difference_step',
            ConfigValue(
                domain=PositiveFloat,
                default=1e-8,
                description="Step used for the finite difference approximation.",
                visibility=ADVANCED_OPTION,
            ),
        )
        self.print_level: int = self.declare(
            'print_level',
            ConfigValue(
                domain=NonNegativeInt,
                default=0,
                description="Verbosity of the solver's own output (solver "
                "dependent; 0 is silent).",
                visibility=ADVANCED_OPTION,
            ),
        )
        self.solver_options: ConfigDict = self.declare(
            'solver_options',
            ConfigDict(
                implicit=True,
                description="Options to pass to the solver (with no validation).",
            ),
        )
