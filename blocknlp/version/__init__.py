#  ___________________________________________________________________________
#
#  BlockNLP: Block-structured Nonlinear Programming
#  Copyright (c) 2025 The BlockNLP Developers
#  This software is distributed under the 3-clause BSD License.
#  ___________________________________________________________________________

"""BlockNLP release information

blocknlp.version provides a mechanism for managing stuff that is related
to releases of the entire BlockNLP software.
"""

from blocknlp.version.info import version, version_info, __version__
