#!/usr/bin/env python
"""Decorators that mark functions and methods as deprecated"""
import functools
import warnings


def deprecated(func=None,replacement=None):
    """Deprecation decorator for functions and methods. Calls to the wrapped
    function issue a :class:`DeprecationWarning`.

    May be applied bare (``@deprecated``) or with the name of
    a replacement (``@deprecated(replacement="filetype")``).

    Parameters
    ----------
    func : function
        Function to deprecate

    replacement : str or None, optional
        Name of the function or attribute to use instead

    Returns
    -------
    function
        wrapped function
    """
    if func is None:
        return functools.partial(deprecated,replacement=replacement)

    message = "Call to deprecated function %s() which will be removed from future versions of module %s." % (func.__name__,
                                                                                                             func.__module__)
    if replacement is not None:
        message += " Use '%s' instead." % replacement

    @functools.wraps(func)
    def new_func(*args,**kwargs):
        warnings.warn(message,DeprecationWarning,stacklevel=2)
        return func(*args,**kwargs)

    return new_func
