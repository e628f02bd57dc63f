#  ___________________________________________________________________________
#
#  BlockNLP: Block-structured Nonlinear Programming
#  Copyright (c) 2025 The BlockNLP Developers
#  This software is distributed under the 3-clause BSD License.
#  ___________________________________________________________________________
#
# Utility classes for working with the logger
#
import inspect
import io
import logging
import re
import sys
import textwrap

_indentation_re = re.compile(r'\s*')

_DEBUG = logging.DEBUG
_NOTSET = logging.NOTSET


def is_debug_set(logger):
    """A variant of Logger.isEnabledFor that returns False if NOTSET

    Logger.isEnabledFor() returns True if the effective level of the
    logger is NOTSET.  This variant only returns True if the user
    explicitly requested DEBUG output (NOTSET < level <= DEBUG).

    """
    if logger.manager.disable >= _DEBUG:
        return False
    return _NOTSET < logger.getEffectiveLevel() <= _DEBUG


class WrappingFormatter(logging.Formatter):
    """Formatter that line-wraps the message part of each record.

    Messages are cleaned with :py:func:`inspect.cleandoc` (so triple
    quoted messages can be logged directly) and wrapped to ``wrap``
    columns with a hanging indent of ``hang``.

    """

    _flag = "<<!MSG!>>"

    def __init__(self, **kwds):
        if 'fmt' not in kwds:
            kwds['fmt'] = '%(levelname)s: %(message)s'
        self._wrapper = textwrap.TextWrapper(width=kwds.pop('wrap', 78))
        self._wrapper.subsequent_indent = kwds.pop('hang', ' ' * 4) or ''
        super().__init__(**kwds)

    def format(self, record):
        msg = record.getMessage()
        _orig = record.msg, record.args
        record.msg = self._flag
        record.args = None
        try:
            raw_msg = super().format(record)
        finally:
            record.msg, record.args = _orig

        msg = inspect.cleandoc(msg)
        return '\n'.join(
            self._wrap_msg(line, msg) if self._flag in line else line
            for line in raw_msg.splitlines()
        )

    def _wrap_msg(self, format_line, msg):
        _init = self._wrapper.initial_indent, self._wrapper.subsequent_indent
        # An indented format line (e.g., the verbose DEBUG format) sets
        # the indent for every line of the message.
        indent = _indentation_re.match(format_line).group()
        if indent:
            self._wrapper.initial_indent = self._wrapper.subsequent_indent = indent
        try:
            text = format_line.strip().replace(self._flag, msg)
            paragraphs = []
            for par in text.split('\n\n'):
                if any(line[:1].isspace() for line in par.splitlines()[1:]):
                    # preformatted (indented) paragraphs are left alone
                    paragraphs.append(par)
                else:
                    paragraphs.append(self._wrapper.fill(' '.join(par.split())))
            return '\n\n'.join(paragraphs)
        finally:
            self._wrapper.initial_indent, self._wrapper.subsequent_indent = _init


class _GlobalLogFilter(object):
    def __init__(self):
        self.logger = logging.getLogger()

    def filter(self, record):
        # Stay silent if the application registered a global handler
        return not self.logger.handlers


class StdoutHandler(logging.StreamHandler):
    """A logging handler that emits to the current value of sys.stdout"""

    def __init__(self):
        super().__init__()
        self.stream = None

    def flush(self):
        orig = self.stream
        try:
            self.stream = sys.stdout
            super().flush()
        finally:
            self.stream = orig

    def emit(self, record):
        orig = self.stream
        try:
            self.stream = sys.stdout
            super().emit(record)
        finally:
            self.stream = orig


# The package logger uses a terse format, unless DEBUG was explicitly
# requested, in which case the source location is included.
class _VerbosityFormatter(logging.Formatter):
    def __init__(self, verbosity):
        super().__init__()
        self.verbosity = verbosity
        self.standard_formatter = WrappingFormatter()
        self.verbose_formatter = WrappingFormatter(
            fmt='%(levelname)s: "%(pathname)s", %(lineno)d, %(funcName)s\n'
            '    %(message)s',
            hang=False,
        )

    def format(self, record):
        if self.verbosity():
            return self.verbose_formatter.format(record)
        return self.standard_formatter.format(record)


blocknlp_logger = logging.getLogger('blocknlp')
blocknlp_handler = StdoutHandler()
blocknlp_formatter = _VerbosityFormatter(lambda: is_debug_set(blocknlp_logger))
blocknlp_handler.setFormatter(blocknlp_formatter)
blocknlp_handler.addFilter(_GlobalLogFilter())
blocknlp_logger.addHandler(blocknlp_handler)


class LoggingIntercept(object):
    r"""Context manager for intercepting messages sent to a log stream

    The LoggingIntercept context manager will intercept messages sent to
    a log stream matching a specified level and send the messages to the
    specified output stream.  Other handlers registered to the target
    logger are temporarily removed and the logger will not propagate
    messages up to higher-level loggers.

    Parameters
    ----------
    output: io.TextIOBase
        the file stream to send log messages to (a new StringIO if None)

    module: str
        the target logger name to intercept

    level: int
        the logging level to intercept

    formatter: logging.Formatter
        the formatter to use when rendering the log messages.  If not
        specified, uses `'%(message)s'`

    Examples
    --------
    >>> import io, logging
    >>> from blocknlp.common.log import LoggingIntercept
    >>> buf = io.StringIO()
    >>> with LoggingIntercept(buf, 'blocknlp.core', logging.WARNING):
    ...     logging.getLogger('blocknlp.core').warning('a simple message')
    >>> buf.getvalue()
    'a simple message\n'

    """

    def __init__(self, output=None, module=None, level=logging.WARNING, formatter=None):
        self.handler = None
        self.output = output
        self.module = module
        self._level = level
        if formatter is None:
            formatter = logging.Formatter('%(message)s')
        self._formatter = formatter
        self._save = None

    def __enter__(self):
        logger = logging.getLogger(self.module)
        self._save = logger.level, logger.propagate, logger.handlers
        output = self.output
        if output is None:
            output = io.StringIO()
        assert self.handler is None
        self.handler = logging.StreamHandler(output)
        self.handler.setFormatter(self._formatter)
        self.handler.setLevel(self._level)
        logger.handlers = []
        logger.propagate = False
        logger.setLevel(self.handler.level)
        logger.addHandler(self.handler)
        return output

    def __exit__(self, et, ev, tb):
        logger = logging.getLogger(self.module)
        logger.removeHandler(self.handler)
        self.handler = None
        logger.setLevel(self._save[0])
        logger.propagate = self._save[1]
        assert not logger.handlers
        logger.handlers.extend(self._save[2])


class LogStream(io.TextIOBase):
    """
    This class logs whatever gets sent to the write method.
    It is used to route solver iteration output into a logger.
    """

    def __init__(self, level, logger):
        self._level = level
        self._logger = logger
        self._buffer = ''

    def write(self, s: str) -> int:
        res = len(s)
        if self._buffer:
            s = self._buffer + s
        lines = s.split('\n')
        for line in lines[:-1]:
            self._logger.log(self._level, line)
        self._buffer = lines[-1]
        return res

    def flush(self):
        if self._buffer:
            self.write('\n')
