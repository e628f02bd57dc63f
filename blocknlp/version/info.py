#  ___________________________________________________________________________
#
#  BlockNLP: Block-structured Nonlinear Programming
#  Copyright (c) 2025 The BlockNLP Developers
#  This software is distributed under the 3-clause BSD License.
#  ___________________________________________________________________________

# NOTE: releaselevel should be left at 'invalid' for trunk development
#     and set to 'final' for releases.  During development, the
#     major.minor.micro should point to the NEXT release.
major = 1
minor = 0
micro = 0
releaselevel = 'final'
serial = 0

if releaselevel == 'invalid':
    from os.path import exists as _exists, join as _join, dirname as _dirname

    # This module is exec'ed from setup.py, so it must not import anything
    # else from blocknlp.
    if __file__.endswith('setup.py'):
        _rootdir = _dirname(__file__)
    else:
        _rootdir = _join(_dirname(__file__), '..', '..')

    if _exists(_join(_rootdir, '.git')):
        releaselevel = 'devel'
    else:
        releaselevel = 'VOTD'


version_info = (major, minor, micro, releaselevel, serial)

__version__ = '.'.join(str(x) for x in version_info[:3])
if releaselevel.startswith('devel'):
    __version__ += ".dev%d" % (serial,)
elif releaselevel.startswith('VOTD'):
    __version__ += "a%d" % (serial,)

version = __version__
if releaselevel != 'final':
    version += ' (' + releaselevel + ')'
