#  ___________________________________________________________________________
#
#  BlockNLP: Block-structured Nonlinear Programming
#  Copyright (c) 2025 The BlockNLP Developers
#  This software is distributed under the 3-clause BSD License.
#  ___________________________________________________________________________

import importlib

from blocknlp.common.errors import DeferredImportError


class ModuleUnavailable(object):
    """Mock object that raises :py:class:`.DeferredImportError` upon attribute access

    This object is returned by :py:func:`attempt_import()` in lieu of
    the module in the case that the module import fails.  Any attempts
    to access attributes on this object will raise a
    :py:class:`.DeferredImportError` exception.

    Parameters
    ----------
    name: str
        The module name that was being imported

    message: str
        The string message to return in the raised exception

    version_error: str
        A string to add to the message if the module failed to import because
        it did not match the required version

    import_error: str
        A string to add to the message documenting the Exception
        raised when the module failed to import.

    """

    def __init__(self, name, message, version_error, import_error):
        self.__name__ = name
        self._moduleunavailable_info_ = (message, version_error, import_error)

    def __getattr__(self, attr):
        if attr.startswith('__') and attr.endswith('__'):
            raise AttributeError(
                "'%s' object has no attribute '%s'" % (type(self).__name__, attr)
            )
        raise DeferredImportError(self._moduleunavailable_message())

    def _moduleunavailable_message(self, msg=None):
        _err, _ver, _imp = self._moduleunavailable_info_
        if msg is None:
            msg = _err
        if _imp:
            if not msg:
                msg = "The %s module (a BlockNLP dependency) failed to import: %s" % (
                    self.__name__,
                    _imp,
                )
            else:
                msg = "%s (import raised %s)" % (msg, _imp)
        if _ver:
            if not msg:
                msg = "The %s module %s" % (self.__name__, _ver)
            else:
                msg = "%s (%s)" % (msg, _ver)
        return msg


def version_tuple(version):
    """Return the release segment of a version string as a tuple of ints"""
    return packaging.version.parse(str(version)).release


def check_min_version(module, min_version):
    """Return True if ``module.__version__`` is at least ``min_version``"""
    version = getattr(module, '__version__', '0.0.0')
    return packaging.version.parse(min_version) <= packaging.version.parse(version)


def attempt_import(
    name,
    error_message=None,
    minimum_version=None,
    callback=None,
    catch_exceptions=(ImportError,),
):
    """Attempt to import the specified module.

    This will attempt to import the specified module, returning a
    ``(module, available)`` tuple.  If the import was successful,
    ``module`` will be the imported module and ``available`` will be
    True.  If the import results in an exception, then ``module`` will be
    an instance of :py:class:`ModuleUnavailable` and ``available`` will
    be False.

    .. doctest::

       >>> from blocknlp.common.dependencies import attempt_import
       >>> numpy, numpy_available = attempt_import('numpy')

    Parameters
    ----------
    name: str
        The name of the module to import

    error_message: str, optional
        The message for the exception raised by :py:class:`ModuleUnavailable`

    minimum_version: str, optional
        The minimum acceptable module version (retrieved from
        ``module.__version__``)

    callback: Callable[[ModuleType, bool], None], optional
        A function to call after the import attempt, receiving the
        module (or ModuleUnavailable) and the availability flag.  Used
        to import the submodules the package relies on.

    catch_exceptions: Iterable[Exception], optional
        The exceptions that indicate the module is unavailable.

    Returns
    -------
    : module
        the imported module, or an instance of :py:class:`ModuleUnavailable`
    : bool
        True if the module was imported
    """
    import_error = None
    version_error = None
    try:
        module = importlib.import_module(name)
        if minimum_version is None or check_min_version(module, minimum_version):
            if callback is not None:
                callback(module, True)
            return module, True
        version_error = "version %s does not satisfy the minimum version %s" % (
            getattr(module, '__version__', 'UNKNOWN'),
            minimum_version,
        )
    except tuple(catch_exceptions) as e:
        import_error = "%s: %s" % (type(e).__name__, e)

    module = ModuleUnavailable(name, error_message, version_error, import_error)
    if callback is not None:
        callback(module, False)
    return module, False


def _finalize_packaging(module, available):
    if available:
        import packaging.version


def _finalize_scipy(module, available):
    if available:
        # Import the subpackages that BlockNLP assumes are present
        import scipy.sparse
        import scipy.optimize


packaging, packaging_available = attempt_import(
    'packaging',
    'BlockNLP requires the "packaging" package',
    callback=_finalize_packaging,
)
numpy, numpy_available = attempt_import(
    'numpy', 'BlockNLP requires the "numpy" package', minimum_version='1.17.0'
)
scipy, scipy_available = attempt_import(
    'scipy', 'BlockNLP requires the "scipy" package', callback=_finalize_scipy
)
