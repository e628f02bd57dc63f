#  ___________________________________________________________________________
#
#  BlockNLP: Block-structured Nonlinear Programming
#  Copyright (c) 2025 The BlockNLP Developers
#  This software is distributed under the 3-clause BSD License.
#  ___________________________________________________________________________

from blocknlp.core.bounds import (
    Bounds,
    inf,
    NoBound,
    BoundZero,
    BoundGreaterZero,
    BoundSmallerZero,
    bounds_to_arrays,
)
from blocknlp.core.component import (
    BlockIndex,
    Component,
    Composite,
    IDerivableBlock,
    IVariableBlock,
)
from blocknlp.core.leaves import (
    ConstraintSet,
    CostTerm,
    VariableSet,
    VectorVariableSet,
)
from blocknlp.core.problem import Problem
