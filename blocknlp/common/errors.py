#  ___________________________________________________________________________
#
#  BlockNLP: Block-structured Nonlinear Programming
#  Copyright (c) 2025 The BlockNLP Developers
#  This software is distributed under the 3-clause BSD License.
#  ___________________________________________________________________________

import inspect
import textwrap


def _fill(text, width, initial_indent, subsequent_indent):
    return textwrap.fill(
        text,
        width=width,
        initial_indent=initial_indent,
        subsequent_indent=subsequent_indent,
        break_long_words=False,
        break_on_hyphens=False,
    )


def format_exception(msg, prolog=None, epilog=None, exception=None, width=76):
    """Generate a formatted exception message

    Returns the exception message line wrapped for display on the
    console, optionally surrounded by a prolog and an epilog.  When a
    prolog or epilog is given, ``msg`` is indented one level below them.

    Parameters
    ----------
    msg: str
        The raw exception message

    prolog: str, optional
        A message to output before ``msg``

    epilog: str, optional
        A message to output after ``msg``

    exception: Exception, optional
        The exception (or exception class) being raised.  Its name is
        used to compute the width of the first line.

    width: int, optional
        The line length to wrap the exception message to.

    Returns
    -------
    str
    """
    fields = []
    indent = ' ' * (8 if epilog else 4)

    if exception is None:
        # the length of 'NotImplementedError: '
        first_indent = ' ' * 21
    else:
        if not inspect.isclass(exception):
            exception = exception.__class__
        first_indent = ' ' * (len(exception.__name__) + 2)
        if exception.__module__ != 'builtins':
            first_indent += ' ' * (len(exception.__module__) + 1)

    if prolog is not None:
        if '\n' not in prolog:
            prolog = _fill(prolog, width, first_indent, ' ' * 4).lstrip()
        if '\n' in prolog:
            indent = ' ' * 8
        fields.append(prolog)
        first_indent = indent

    if '\n' not in msg:
        msg = _fill(msg, width, first_indent, indent)
        if not fields:
            msg = msg.lstrip()
    fields.append(msg)

    if epilog is not None:
        if '\n' not in epilog:
            epilog = _fill(epilog, width, ' ' * 4, ' ' * 4)
        fields.append(epilog)

    return '\n'.join(fields)


class ApplicationError(Exception):
    """
    An exception used when an external solver backend generates an error.
    """


class BlockNLPException(Exception):
    """
    Exception class for other BlockNLP exceptions to inherit from,
    allowing BlockNLP exceptions to be caught in a general way.
    Subclasses can define a class-level `default_message` attribute.
    """

    def __init__(self, *args):
        if not args and getattr(self, 'default_message', None):
            args = (self.default_message,)
        super().__init__(*args)


class DeferredImportError(ImportError):
    """Raised when something attempts to access a module that was
    imported by :py:func:`.attempt_import`, but the module import failed.

    """


class DeveloperError(BlockNLPException, NotImplementedError):
    """
    Exception class used for errors that result from misusing the
    modeling interfaces (e.g., asking a variable block for a Jacobian)
    rather than from bad problem data.  There is no sensible recovery:
    the calling code is wrong.
    """

    def __str__(self):
        return format_exception(
            repr(super().__str__()),
            prolog="Invalid use of the BlockNLP modeling interface:",
            epilog="This is a programming error in the code calling BlockNLP.",
            exception=self,
        )


class LinkError(BlockNLPException, RuntimeError):
    """
    Raised when a constraint set is used before it was linked to the
    optimization variables, when it is linked to a second variables
    composite, or when the linked variables no longer exist.
    """

    default_message = "Constraint set is not linked to any optimization variables"


class DimensionMismatchError(BlockNLPException, ValueError):
    """
    Raised when a block produces values, bounds or Jacobian entries
    whose size does not match the number of rows it declared.
    """
