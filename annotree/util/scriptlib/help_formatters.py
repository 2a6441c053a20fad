#!/usr/bin/env python
"""Reformat `numpydoc`_ module docstrings into plain text for command-line
help screens. Sphinx roles, substitutions, and link targets are reduced to
their text, and everything from the first `numpydoc`_ section heading that
documents an API (`Parameters`, `Returns`, and so on) is dropped.

See also
--------
:mod:`re`
    Python regular expressions module
"""
import re

role_pattern = re.compile(r"(?P<spacing>^|\s+)(?::(?P<domain>[^:`<>]+))?:(?P<role>[^:`]*):`~?(?P<argument>[^`<>]+)(?: +<(?P<pointer>[^`]+)>)?`")
"""Matches Sphinx roles such as ``:class:`Name``` or ``:py:func:`~pkg.name```"""

substitution_pattern = re.compile(r"\|([^|\n]*)\|")
"""Matches `reStructuredText`_ substitutions of form ``|substitution|``"""

link_pattern = re.compile(r"`([^`<>]+)( <[^`]+>)?`_")
"""Matches `reStructuredText`_ links of forms ```Linkname`_`` and ```Link text <url>`_``"""

API_SECTIONS = ("Parameters","Returns","Yields","Raises","Attributes")
"""Section headings at which help text is truncated"""

SEPARATOR = "\n" + (78*"-") + "\n"


def shorten_help(inp):
    """Strip markup from a docstring, and truncate it before its first API section

    Parameters
    ----------
    inp : str
        Module, class, or function docstring

    Returns
    -------
    str
        Cleaned help text
    """
    inp = role_pattern.sub(r"\g<spacing>\g<argument>",inp)
    inp = substitution_pattern.sub(r"\g<1>",inp)
    inp = link_pattern.sub(r"\g<1>",inp)

    cut = len(inp)
    for heading in API_SECTIONS:
        match = re.search(r"^\s*%s\s*\n\s*-{3,}" % heading,inp,re.M)
        if match is not None:
            cut = min(cut,match.start())

    return inp[:cut].strip() + "\n"


def format_module_docstring(inp):
    """Format a module docstring for use as the description of a script,
    surrounded by separators

    Parameters
    ----------
    inp : str
        Module docstring

    Returns
    -------
    str
    """
    return SEPARATOR + "\n" + shorten_help(inp) + "\n" + SEPARATOR
