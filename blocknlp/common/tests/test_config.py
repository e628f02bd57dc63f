#  ___________________________________________________________________________
#
#  BlockNLP: Block-structured Nonlinear Programming
#  Copyright (c) 2025 The BlockNLP Developers
#  This software is distributed under the 3-clause BSD License.
#  ___________________________________________________________________________

import enum
from io import StringIO

import blocknlp.common.unittest as unittest
from blocknlp.common.config import (
    ADVANCED_OPTION,
    Bool,
    ConfigDict,
    ConfigValue,
    In,
    IsInstance,
    NonNegativeFloat,
    NonNegativeInt,
    PositiveFloat,
    PositiveInt,
)


class Color(enum.Enum):
    red = 1
    blue = 2


class TestValidators(unittest.TestCase):
    def test_Bool(self):
        c = ConfigValue(domain=Bool)
        for val in (True, 1, 'true', 'YES', 't', 'y', '1'):
            c.set_value(val)
            self.assertIs(c.value(), True)
        for val in (False, 0, 'false', 'No', 'f', 'n', '0'):
            c.set_value(val)
            self.assertIs(c.value(), False)
        with self.assertRaisesRegex(ValueError, 'invalid value for configuration'):
            c.set_value(2)
        with self.assertRaisesRegex(ValueError, 'invalid value for configuration'):
            c.set_value('maybe')

    def test_PositiveInt(self):
        c = ConfigValue(domain=PositiveInt)
        c.set_value(5)
        self.assertEqual(c.value(), 5)
        c.set_value('6')
        self.assertEqual(c.value(), 6)
        for val in (0, -1, 1.5):
            with self.assertRaises(ValueError):
                c.set_value(val)

    def test_NonNegativeInt(self):
        c = ConfigValue(domain=NonNegativeInt)
        c.set_value(0)
        self.assertEqual(c.value(), 0)
        for val in (-1, 0.5):
            with self.assertRaises(ValueError):
                c.set_value(val)

    def test_PositiveFloat(self):
        c = ConfigValue(domain=PositiveFloat)
        c.set_value(1e-8)
        self.assertEqual(c.value(), 1e-8)
        with self.assertRaises(ValueError):
            c.set_value(0)

    def test_NonNegativeFloat(self):
        c = ConfigValue(domain=NonNegativeFloat)
        c.set_value(0)
        self.assertEqual(c.value(), 0.0)
        with self.assertRaises(ValueError):
            c.set_value(-1e-8)

    def test_In(self):
        c = ConfigValue(domain=In(['SLSQP', 'trust-constr']), default='SLSQP')
        self.assertEqual(c.value(), 'SLSQP')
        c.set_value('trust-constr')
        self.assertEqual(c.value(), 'trust-constr')
        with self.assertRaisesRegex(ValueError, 'not in domain'):
            c.set_value('bfgs')

    def test_In_enum(self):
        c = ConfigValue(domain=In(Color), default=Color.red)
        self.assertIs(c.value(), Color.red)
        c.set_value('blue')
        self.assertIs(c.value(), Color.blue)
        c.set_value(1)
        self.assertIs(c.value(), Color.red)
        c.set_value(Color.blue)
        self.assertIs(c.value(), Color.blue)
        with self.assertRaises(ValueError):
            c.set_value('green')

    def test_IsInstance(self):
        c = ConfigValue(domain=IsInstance(int, str))
        c.set_value(5)
        c.set_value('a')
        with self.assertRaisesRegex(ValueError, 'IsInstance\\[int, str\\]'):
            c.set_value(1.5)


class TestConfig(unittest.TestCase):
    def setUp(self):
        self.config = config = ConfigDict(description="Solver options")
        config.declare(
            'max_iter',
            ConfigValue(default=100, domain=PositiveInt, description="Iteration limit"),
        )
        config.declare(
            'tol', ConfigValue(default=1e-6, domain=PositiveFloat, description="tol")
        )
        config.declare(
            'debug_level',
            ConfigValue(default=0, domain=NonNegativeInt, visibility=ADVANCED_OPTION),
        )
        config.declare('options', ConfigDict(implicit=True))

    def test_declared_defaults(self):
        self.assertEqual(self.config.max_iter, 100)
        self.assertEqual(self.config['tol'], 1e-6)
        self.assertIn('options', self.config)
        self.assertEqual(
            list(self.config.keys()), ['max_iter', 'tol', 'debug_level', 'options']
        )
        self.assertEqual(
            self.config.value(),
            {'max_iter': 100, 'tol': 1e-6, 'debug_level': 0, 'options': {}},
        )

    def test_attribute_assignment(self):
        self.config.max_iter = '20'
        self.assertEqual(self.config.max_iter, 20)
        with self.assertRaisesRegex(ValueError, "invalid value for configuration 'max_iter'"):
            self.config.max_iter = -1
        self.assertEqual(self.config.max_iter, 20)
        with self.assertRaises(AttributeError):
            self.config.not_declared

    def test_undeclared_key(self):
        with self.assertRaisesRegex(ValueError, "Key 'bogus' not defined"):
            self.config.bogus = 5
        with self.assertRaisesRegex(ValueError, "key 'bogus' not defined"):
            self.config.set_value({'bogus': 5})

    def test_implicit(self):
        self.config.options.maxfun = 50
        self.config.options['disp'] = True
        self.assertEqual(self.config.options.value(), {'maxfun': 50, 'disp': True})
        self.config.reset()
        self.assertEqual(self.config.options.value(), {})

    def test_call_copies(self):
        other = self.config(value={'max_iter': 10})
        self.assertEqual(other.max_iter, 10)
        self.assertEqual(self.config.max_iter, 100)
        other.tol = 1e-3
        self.assertEqual(self.config.tol, 1e-6)
        self.assertIsNot(other.options, self.config.options)
        self.assertEqual(other.value(), dict(self.config.value(), max_iter=10, tol=1e-3))

    def test_call_preserve_implicit(self):
        self.config.options.maxfun = 50
        self.assertEqual(self.config().options.value(), {})
        self.assertEqual(
            self.config(preserve_implicit=True).options.value(), {'maxfun': 50}
        )

    def test_set_value_is_atomic(self):
        with self.assertRaises(ValueError):
            self.config.set_value({'max_iter': 5, 'tol': -1})
        self.assertEqual(self.config.max_iter, 100)
        self.assertEqual(self.config.tol, 1e-6)

    def test_reset(self):
        self.config.max_iter = 5
        self.config.reset()
        self.assertEqual(self.config.max_iter, 100)

    def test_duplicate_declaration(self):
        with self.assertRaisesRegex(ValueError, "duplicate config 'tol'"):
            self.config.declare('tol', ConfigValue(default=1.0))

    def test_name(self):
        limits = self.config.declare('limits', ConfigDict())
        limits.declare('max fun', ConfigValue(default=5, domain=PositiveInt))
        self.assertEqual(limits.name(), 'limits')
        self.assertEqual(self.config.name(), '')
        self.assertEqual(limits.max_fun, 5)
        with self.assertRaisesRegex(
            ValueError, "invalid value for configuration 'limits.max fun'"
        ):
            self.config.limits.max_fun = 0

    def test_mapping(self):
        self.config.options.maxfun = 50
        self.assertIs(dict(self.config.items())['options'], self.config.options)
        self.assertEqual(self.config.get('max_iter'), 100)
        self.assertIsNone(self.config.get('bogus'))
        self.assertEqual(len(self.config), 4)

    def test_display(self):
        OUT = StringIO()
        self.config.display(ostream=OUT)
        self.assertEqual(OUT.getvalue(), "max_iter: 100\ntol: 1e-06\noptions:\n")

        OUT = StringIO()
        self.config.display(ostream=OUT, visibility=ADVANCED_OPTION)
        self.assertEqual(
            OUT.getvalue(), "max_iter: 100\ntol: 1e-06\ndebug_level: 0\noptions:\n"
        )



if __name__ == '__main__':
    unittest.main()
