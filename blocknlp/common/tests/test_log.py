#  ___________________________________________________________________________
#
#  BlockNLP: Block-structured Nonlinear Programming
#  Copyright (c) 2025 The BlockNLP Developers
#  This software is distributed under the 3-clause BSD License.
#  ___________________________________________________________________________

import logging
from io import StringIO

import blocknlp.common.unittest as unittest
from blocknlp.common.log import (
    LoggingIntercept,
    LogStream,
    StdoutHandler,
    WrappingFormatter,
    blocknlp_handler,
    is_debug_set,
)

logger = logging.getLogger('blocknlp.common.log.testing')


class TestIsDebugSet(unittest.TestCase):
    def setUp(self):
        self._level = logger.level

    def tearDown(self):
        logger.setLevel(self._level)

    def test_debug_set(self):
        logger.setLevel(logging.DEBUG)
        self.assertTrue(is_debug_set(logger))
        logger.setLevel(logging.INFO)
        self.assertFalse(is_debug_set(logger))

    def test_disabled(self):
        logger.setLevel(logging.DEBUG)
        logging.disable(logging.DEBUG)
        try:
            self.assertFalse(is_debug_set(logger))
        finally:
            logging.disable(logging.NOTSET)


class TestWrappingFormatter(unittest.TestCase):
    def test_short_message(self):
        OUT = StringIO()
        with LoggingIntercept(OUT, 'blocknlp.common.log.testing', formatter=WrappingFormatter()):
            logger.warning("a simple message")
        self.assertEqual(OUT.getvalue(), "WARNING: a simple message\n")

    def test_long_message(self):
        OUT = StringIO()
        msg = ' '.join("word%d" % i for i in range(40))
        with LoggingIntercept(OUT, 'blocknlp.common.log.testing', formatter=WrappingFormatter()):
            logger.warning(msg)
        lines = OUT.getvalue().splitlines()
        self.assertGreater(len(lines), 1)
        for line in lines:
            self.assertLessEqual(len(line), 78)
        for line in lines[1:]:
            self.assertTrue(line.startswith('    '))
        self.assertEqual(' '.join(OUT.getvalue().split()), "WARNING: " + msg)

    def test_docstring_message(self):
        OUT = StringIO()
        with LoggingIntercept(OUT, 'blocknlp.common.log.testing', formatter=WrappingFormatter()):
            logger.warning(
                """
                Constraint set 'c'
                is not linked.
                """
            )
        self.assertEqual(
            OUT.getvalue(), "WARNING: Constraint set 'c' is not linked.\n"
        )

    def test_preformatted_paragraph(self):
        OUT = StringIO()
        with LoggingIntercept(OUT, 'blocknlp.common.log.testing', formatter=WrappingFormatter()):
            logger.warning("Jacobian:\n\nrows:\n  [1, 0]\n  [0, 1]")
        self.assertEqual(OUT.getvalue(), "WARNING: Jacobian:\n\nrows:\n  [1, 0]\n  [0, 1]\n")


class TestLoggingIntercept(unittest.TestCase):
    def test_intercept_level(self):
        OUT = StringIO()
        with LoggingIntercept(OUT, 'blocknlp.common.log.testing', logging.INFO):
            logger.debug("hidden")
            logger.info("shown")
        self.assertEqual(OUT.getvalue(), "shown\n")

    def test_intercept_new_stream(self):
        with LoggingIntercept(module='blocknlp.common.log.testing') as OUT:
            logger.warning("captured")
        self.assertEqual(OUT.getvalue(), "captured\n")

    def test_restores_logger(self):
        _save = logger.level, logger.propagate, list(logger.handlers)
        with LoggingIntercept(StringIO(), 'blocknlp.common.log.testing'):
            self.assertFalse(logger.propagate)
        self.assertEqual((logger.level, logger.propagate, logger.handlers), _save)


class TestLogStream(unittest.TestCase):
    def test_log_stream(self):
        OUT = StringIO()
        with LoggingIntercept(OUT, 'blocknlp.common.log.testing', logging.INFO):
            ls = LogStream(logging.INFO, logger)
            self.assertEqual(ls.write("line 1\nline"), 11)
            self.assertEqual(OUT.getvalue(), "line 1\n")
            ls.write(" 2\n")
            self.assertEqual(OUT.getvalue(), "line 1\nline 2\n")
            ls.write("partial")
            ls.flush()
        self.assertEqual(OUT.getvalue(), "line 1\nline 2\npartial\n")


class TestStdoutHandler(unittest.TestCase):
    def test_package_handler(self):
        self.assertIsInstance(blocknlp_handler, StdoutHandler)
        self.assertIn(blocknlp_handler, logging.getLogger('blocknlp').handlers)


if __name__ == '__main__':
    unittest.main()
