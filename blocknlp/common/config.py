#  ___________________________________________________________________________
#
#  BlockNLP: Block-structured Nonlinear Programming
#  Copyright (c) 2025 The BlockNLP Developers
#  This software is distributed under the 3-clause BSD License.
#  ___________________________________________________________________________

"""The BlockNLP configuration system.

This module provides classes for building standardized hierarchical
configuration objects based on the :class:`ConfigDict` and
:class:`ConfigValue` classes.  Solver interfaces declare their options
with it::

    >>> from blocknlp.common.config import ConfigDict, ConfigValue, PositiveInt
    >>> CONFIG = ConfigDict()
    >>> _ = CONFIG.declare('max_iter', ConfigValue(
    ...     default=100, domain=PositiveInt, description="Iteration limit"))
    >>> config = CONFIG(value={'max_iter': 10})
    >>> config.max_iter
    10

"""

import enum
import inspect
import sys

from collections.abc import Mapping
from operator import attrgetter

from blocknlp.common.flags import NOTSET

ADVANCED_OPTION = 10


def Bool(val):
    """Domain validator for flags.

    Accepts bools, the integers 0 and 1, and (case insensitive) the
    strings true/false, yes/no, t/f, y/n, 1/0.  Anything else raises
    :py:class:`ValueError`.
    """
    if type(val) is bool:
        return val
    if isinstance(val, str):
        v = val.upper()
        if v in {'TRUE', 'YES', 'T', 'Y', '1'}:
            return True
        if v in {'FALSE', 'NO', 'F', 'N', '0'}:
            return False
    elif int(val) == float(val):
        v = int(val)
        if v in {0, 1}:
            return bool(v)
    raise ValueError("Expected Boolean, but received %s" % (val,))


def PositiveInt(val):
    """Domain validation function admitting strictly positive integers"""
    ans = int(val)
    # We want to give an error for floating point numbers...
    if ans != float(val) or ans <= 0:
        raise ValueError("Expected positive int, but received %s" % (val,))
    return ans


def NonNegativeInt(val):
    """Domain validation function admitting integers >= 0"""
    ans = int(val)
    if ans != float(val) or ans < 0:
        raise ValueError("Expected non-negative int, but received %s" % (val,))
    return ans


def PositiveFloat(val):
    """Domain validation function admitting strictly positive numbers"""
    ans = float(val)
    if ans <= 0:
        raise ValueError("Expected positive float, but received %s" % (val,))
    return ans


def NonNegativeFloat(val):
    """Domain validation function admitting numbers >= 0"""
    ans = float(val)
    if ans < 0:
        raise ValueError("Expected non-negative float, but received %s" % (val,))
    return ans


class In(object):
    """Domain validator admitting the members of a container

    ``domain`` is a container (list, set, dict) or an :class:`enum.Enum`
    class; enum members are looked up by value or by name.  Values are
    passed through ``cast`` first, if given.
    """

    def __init__(self, domain, cast=None):
        self._domain = domain
        self._cast = cast

    def __call__(self, value):
        if inspect.isclass(self._domain) and issubclass(self._domain, enum.Enum):
            if value in self._domain.__members__:
                return self._domain[value]
            return self._domain(value)
        if self._cast is not None:
            v = self._cast(value)
        else:
            v = value
        if v in self._domain:
            return v
        raise ValueError("value %s not in domain %s" % (value, self._domain))

    def domain_name(self):
        if inspect.isclass(self._domain):
            return 'In[%s]' % (self._domain.__name__,)
        return 'In%s' % (list(self._domain),)


class IsInstance(object):
    """
    Domain validator for type checking.

    Parameters
    ----------
    *bases: tuple of type
        Valid types.

    """

    def __init__(self, *bases):
        assert bases
        self.baseClasses = bases

    def __call__(self, obj):
        if isinstance(obj, self.baseClasses):
            return obj
        raise ValueError(
            "Expected an instance of %s, but received value %s of type %s"
            % (self.domain_name(), obj, type(obj).__name__)
        )

    def domain_name(self):
        names = [b.__name__ for b in self.baseClasses]
        if len(names) == 1:
            return 'IsInstance[%s]' % (names[0],)
        return 'IsInstance[%s]' % (', '.join(names),)


def _domain_name(domain):
    if domain is None:
        return ""
    if hasattr(domain, 'domain_name'):
        return domain.domain_name()
    if hasattr(domain, '__name__'):
        return domain.__name__
    return type(domain).__name__


def _strip_indentation(doc):
    if not doc:
        return doc
    return inspect.cleandoc(doc)


class ConfigBase(object):
    __slots__ = (
        '_parent',
        '_domain',
        '_name',
        '_data',
        '_default',
        '_description',
        '_doc',
        '_visibility',
    )

    def __init__(
        self, default=None, domain=None, description=None, doc=None, visibility=0
    ):
        self._parent = None
        self._name = None
        self._data = NOTSET
        self._default = default
        self._domain = domain
        self._description = _strip_indentation(description)
        self._doc = _strip_indentation(doc)
        self._visibility = visibility

    def __call__(self, value=NOTSET, preserve_implicit=False):
        """Return an independent copy of this configuration.

        The copy starts from the current values.  Implicitly declared
        entries are only carried over when ``preserve_implicit`` is True.
        If ``value`` is given, it is applied to the copy with
        :meth:`set_value`.
        """
        ans = self._copy(preserve_implicit)
        if value is not NOTSET:
            ans.set_value(value)
        return ans

    def name(self, fully_qualified=False):
        # Special case for the top-level dict
        if self._name is None:
            return ""
        elif fully_qualified and self._parent is not None:
            pName = self._parent.name(fully_qualified)
            if not pName:
                return self._name
            return pName + '.' + self._name
        return self._name

    def domain_name(self):
        return _domain_name(self._domain)

    def _cast(self, value):
        if value is None or self._domain is None:
            return value
        try:
            return self._domain(value)
        except Exception as err:
            raise ValueError(
                "invalid value for configuration '%s':\n"
                "\tFailed casting %s\n\tto %s\n\tError: %s"
                % (self.name(True), value, _domain_name(self._domain), err)
            ) from err

    def display(self, indent_spacing=2, ostream=None, visibility=0):
        """Print the current configuration values as YAML-like text"""
        if ostream is None:
            ostream = sys.stdout
        for level, prefix, obj in self._data_collector(0, "", visibility):
            indent = ' ' * indent_spacing * level
            if isinstance(obj, ConfigDict):
                if prefix:
                    ostream.write(indent + prefix.rstrip() + "\n")
            else:
                value = obj.value()
                if isinstance(value, enum.Enum):
                    value = value.name
                ostream.write(indent + prefix + str(value) + "\n")


class ConfigValue(ConfigBase):
    """A single option: a default, a domain and the current value.

    Parameters
    ----------
    default: optional
        The value before anything is assigned (and after :meth:`reset`).

    domain: Callable, optional
        Called on every assigned value; returns the converted value or
        raises.  Type constructors (``int``, ``float``) and the
        validators of this module are typical domains.

    description: str, optional
        One-line description shown in documentation

    doc: str, optional
        Longer documentation

    visibility: int, optional
        Options above the requested visibility are hidden by
        :meth:`display`
    """

    __slots__ = ()

    def __init__(self, *args, **kwds):
        super().__init__(*args, **kwds)
        self._data = self._cast(self._default)

    def value(self):
        return self._data

    def _copy(self, preserve_implicit):
        return type(self)(
            self._data, self._domain, self._description, self._doc, self._visibility
        )

    def set_value(self, value):
        self._data = self._cast(value)

    def reset(self):
        self._data = self._cast(self._default)

    def _data_collector(self, level, prefix, visibility=None):
        if visibility is not None and visibility < self._visibility:
            return
        yield (level, prefix, self)


class ConfigDict(ConfigBase, Mapping):
    """A named group of options, accessible as keys or attributes.

    Entries are added with :meth:`declare`.  Spaces in names are
    replaced by underscores for lookup.

    Parameters
    ----------
    description: str, optional
        One-line description shown in documentation

    doc: str, optional
        Longer documentation

    implicit: bool, optional
        If True, assigning an undeclared key adds it (see :meth:`add`)
        instead of raising.

    implicit_domain: Callable, optional
        Domain of the implicitly added entries.

    visibility: int, optional
        Groups above the requested visibility are hidden by
        :meth:`display`
    """

    __slots__ = ('_implicit_domain', '_declared', '_implicit_declaration')
    _reserved_words = set()

    def __init__(
        self,
        description=None,
        doc=None,
        implicit=False,
        implicit_domain=None,
        visibility=0,
    ):
        self._declared = set()
        self._implicit_declaration = implicit
        self._implicit_domain = implicit_domain
        ConfigBase.__init__(self, None, None, description, doc, visibility)
        self._data = {}

    def __getitem__(self, key):
        _key = str(key).replace(' ', '_')
        if isinstance(self._data[_key], ConfigValue):
            return self._data[_key].value()
        return self._data[_key]

    def __setitem__(self, key, val):
        _key = str(key).replace(' ', '_')
        if _key not in self._data:
            self.add(key, val)
        else:
            cfg = self._data[_key]
            # Trap self-assignment (used by subclasses that declare
            # their entries as attributes)
            if cfg is val:
                return
            cfg.set_value(val)

    def __contains__(self, key):
        return str(key).replace(' ', '_') in self._data

    def __len__(self):
        return len(self._data)

    def __iter__(self):
        return map(attrgetter('_name'), self._data.values())

    def __getattr__(self, attr):
        _attr = attr.replace(' ', '_')
        # Note: we test for "_data" because finding attributes on a
        # partially constructed ConfigDict can lead to infinite recursion.
        if _attr == "_data" or _attr not in self._data:
            raise AttributeError(
                "'%s' object has no attribute '%s'" % (type(self).__name__, attr)
            )
        return ConfigDict.__getitem__(self, _attr)

    def __setattr__(self, name, value):
        if name in ConfigDict._reserved_words:
            super().__setattr__(name, value)
        else:
            ConfigDict.__setitem__(self, name, value)

    def _add(self, name, config):
        name = str(name)
        _name = name.replace(' ', '_')
        if config._parent is not None:
            raise ValueError(
                "config '%s' is already assigned to ConfigDict '%s'; "
                "cannot reassign to '%s'"
                % (name, config._parent.name(True), self.name(True))
            )
        if _name in self._data:
            raise ValueError(
                "duplicate config '%s' defined for ConfigDict '%s'"
                % (name, self.name(True))
            )
        self._data[_name] = config
        config._parent = self
        config._name = name
        return config

    def declare(self, name, config):
        ans = self._add(name, config)
        self._declared.add(str(name).replace(' ', '_'))
        return ans

    def add(self, name, config):
        if not self._implicit_declaration:
            raise ValueError(
                "Key '%s' not defined in ConfigDict '%s'"
                " and Dict disallows implicit entries" % (name, self.name(True))
            )
        if isinstance(config, ConfigBase):
            ans = self._add(name, config)
        else:
            ans = self._add(name, ConfigValue(config, domain=self._implicit_domain))
        return ans

    def value(self):
        return {cfg._name: cfg.value() for cfg in self._data.values()}

    def _copy(self, preserve_implicit):
        # Subclasses re-declare their entries in __init__; the copies below
        # replace them and keep the declaration order
        ans = type(self)(
            description=self._description,
            doc=self._doc,
            implicit=self._implicit_declaration,
            implicit_domain=self._implicit_domain,
            visibility=self._visibility,
        )
        for key, cfg in self._data.items():
            declared = key in self._declared
            if not declared and not preserve_implicit:
                continue
            child = cfg._copy(preserve_implicit)
            child._parent = ans
            child._name = cfg._name
            ans._data[key] = child
            if declared:
                ans._declared.add(key)
        return ans

    def set_value(self, value):
        if value is None:
            return self
        if (type(value) is not dict) and (not isinstance(value, ConfigDict)):
            raise ValueError(
                "Expected dict value for %s.set_value, found %s"
                % (self.name(True), type(value).__name__)
            )
        if not value:
            return self
        _implicit = []
        _decl_map = {}
        for key in value:
            _key = str(key).replace(' ', '_')
            if _key in self._data:
                _decl_map[_key] = key
            elif self._implicit_declaration:
                _implicit.append(key)
            else:
                raise ValueError(
                    "key '%s' not defined for ConfigDict '%s' and "
                    "implicit (undefined) keys are not allowed"
                    % (key, self.name(True))
                )

        # Either set_value succeeds completely, or else nothing happens.
        _old_data = self.value()
        try:
            # set the values in declaration order
            for key in self._data:
                if key in _decl_map:
                    self[key] = value[_decl_map[key]]
            for key in sorted(_implicit):
                self.add(key, value[key])
        except Exception:
            self.reset()
            self.set_value(_old_data)
            raise
        return self

    def reset(self):
        # Reset the values in the order they were declared
        for key, val in list(self._data.items()):
            if key in self._declared:
                val.reset()
            else:
                del self._data[key]

    def _data_collector(self, level, prefix, visibility=None):
        if visibility is not None and visibility < self._visibility:
            return
        if prefix:
            yield (level, prefix, self)
            level += 1
        for cfg in self._data.values():
            yield from cfg._data_collector(level, cfg._name + ': ', visibility)


ConfigDict._reserved_words.update(dir(ConfigDict))
