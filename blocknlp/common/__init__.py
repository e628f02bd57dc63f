#  ___________________________________________________________________________
#
#  BlockNLP: Block-structured Nonlinear Programming
#  Copyright (c) 2025 The BlockNLP Developers
#  This software is distributed under the 3-clause BSD License.
#  ___________________________________________________________________________

# The log should be imported first so that the BlockNLP log handler can
# be set up as soon as possible
from . import log

from . import config, dependencies
from .errors import DeveloperError
