#  ___________________________________________________________________________
#
#  BlockNLP: Block-structured Nonlinear Programming
#  Copyright (c) 2025 The BlockNLP Developers
#  This software is distributed under the 3-clause BSD License.
#  ___________________________________________________________________________


class FlagType(type):
    """Metaclass to help generate "Flag Types".

    Flag types are used as default arguments so that "argument not
    provided" can be told apart from ``None``.  The classes are not
    constructable (attempts to construct the class return the class),
    and their str() is just the class ``__name__``.

    """

    def __new__(mcs, name, bases, dct):
        def __new_flag__(cls, *args, **kwargs):
            return cls

        dct["__new__"] = __new_flag__
        return type.__new__(mcs, name, bases, dct)

    def __repr__(cls):
        return cls.__module__ + "." + cls.__qualname__

    def __str__(cls):
        return cls.__name__


class NOTSET(object, metaclass=FlagType):
    """
    Indicates that an optional argument was not specified, if `None`
    may be ambiguous.

    Examples
    --------
    >>> def foo(value=NOTSET):
    ...     if value is NOTSET:
    ...         pass  # no argument was provided to `value`

    """

    pass
