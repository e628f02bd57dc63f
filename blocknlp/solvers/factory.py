#  ___________________________________________________________________________
#
#  BlockNLP: Block-structured Nonlinear Programming
#  Copyright (c) 2025 The BlockNLP Developers
#  This software is distributed under the 3-clause BSD License.
#  ___________________________________________________________________________

import logging

logger = logging.getLogger('blocknlp.solvers')


class SolverFactoryClass(object):
    """A registry mapping solver names to solver interface classes

    Solver interfaces register themselves with a decorator::

        @SolverFactory.register('scipy', doc='scipy.optimize.minimize')
        class ScipySolver(SolverBase):
            ...

    and are created by calling the factory with the registered name.
    """

    def __init__(self, description=None):
        self._description = description
        self._cls = {}
        self._doc = {}

    def __call__(self, _name, /, **kwds):
        # keywords (including the solver's own 'name') go to the solver
        if _name not in self._cls:
            raise ValueError(
                "Unknown solver '%s'; registered solvers are: %s"
                % (_name, ', '.join(sorted(self._cls)) or '(none)')
            )
        return self._cls[_name](**kwds)

    def __iter__(self):
        yield from self._cls

    def __contains__(self, name):
        return name in self._cls

    def get_class(self, name):
        return self._cls[name]

    def doc(self, name):
        return self._doc[name]

    def unregister(self, name):
        if name in self._cls:
            del self._cls[name]
            del self._doc[name]

    def register(self, name, doc=None):
        def decorator(cls):
            if name in self._cls:
                logger.warning(
                    "Overriding the solver '%s' registered by %s with %s",
                    name,
                    self._cls[name].__name__,
                    cls.__name__,
                )
            self._cls[name] = cls
            self._doc[name] = doc
            # Preserve the preferred name, as registered in the Factory
            cls.name = name
            return cls

        return decorator


SolverFactory = SolverFactoryClass('BlockNLP solvers')
