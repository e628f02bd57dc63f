#  ___________________________________________________________________________
#
#  BlockNLP: Block-structured Nonlinear Programming
#  Copyright (c) 2025 The BlockNLP Developers
#  This software is distributed under the 3-clause BSD License.
#  ___________________________________________________________________________

from blocknlp.version import version_info, __version__

import blocknlp.common
from blocknlp.common.errors import (
    BlockNLPException,
    DeveloperError,
    DimensionMismatchError,
    LinkError,
)
from blocknlp.core import *
