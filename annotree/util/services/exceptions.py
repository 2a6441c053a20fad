#!/usr/bin/env python
"""Exception and warning classes raised while tasting and parsing annotation
files, a custom warning filter action called `"onceperfamily"`, and colorized
warning output.

Contents:

.. contents::
   :local:

Exception types
---------------
|MalformedFileError|
    Base class for files that cannot be parsed as expected. Execution must halt.

|MalformedLine|
    A data line whose field count or field content does not fit its format

|UnrecognizedFormat|
    Neither the file extension nor its content identify a known format

|DuplicateIdentifier|
    Two independent GFF3 features declare the same `ID`

|InvalidModeTransition|
    A parser that began streaming was asked to materialize, or vice versa


Warning types
-------------
|ArgumentWarning|
    Warning for nonsensical but recoverable command-line arguments

|FileFormatWarning|
    Warning for slightly malformed but usable files

|DataWarning|
    Warning for data with unexpected, but recoverable, values

|OrphanedChild|
    Child features whose parents never appeared were dropped. Issued once
    per reconciliation sweep, with the number of dropped features.


The `onceperfamily` action
--------------------------
`onceperfamily` groups warning messages into families by regular expression,
and only prints the first warning that matches a given family. Python's native
`once` action, in contrast, prints each distinct string once.

Use :func:`filterwarnings` to create the filter, and :func:`warn` or
:func:`warn_explicit` to issue warnings that respect it.
"""
import re
import warnings
import inspect
import linecache
import textwrap
from annotree.util.io.filters import colored

_wrapper = textwrap.TextWrapper(break_long_words=False,width=77)



#===============================================================================
# INDEX: Exception classes
#===============================================================================

class MalformedFileError(Exception):
    """Exception class for when files cannot be parsed as they should be"""

    def __init__(self,filename,message,line_num=None):
        """Create a |MalformedFileError|

        Parameters
        ----------
        filename : str
            Name of file causing problem

        message : str
            Message explaining how the file is malformed.

        line_num : int or None, optional
            Number of line causing problems
        """
        Exception.__init__(self,filename,message,line_num)
        self.filename = filename
        self.msg      = message
        self.line_num = line_num

    def __str__(self):
        if self.line_num is None:
            return "Error parsing file '%s': %s" % (self.filename, self.msg)
        else:
            return "Error parsing file '%s' at line %s: %s" % (self.filename, self.line_num, self.msg)


class MalformedLine(MalformedFileError):
    """A data line violates the expected shape of its format: wrong column count,
    non-numeric coordinates, or invalid comma-separated lists.

    Parameters
    ----------
    filename : str
        Name of file

    message : str
        Description of the problem

    line_num : int or None, optional
        Line number, counting from 1

    raw_line : str or None, optional
        Text of offending line
    """

    def __init__(self,filename,message,line_num=None,raw_line=None):
        MalformedFileError.__init__(self,filename,message,line_num)
        self.raw_line = raw_line

    def __str__(self):
        stmp = MalformedFileError.__str__(self)
        if self.raw_line is not None:
            stmp += "\n    %s" % self.raw_line.rstrip("\n")

        return stmp


class UnrecognizedFormat(MalformedFileError):
    """Neither extension nor content of a file match any known annotation format"""

    def __init__(self,filename,message="could not determine annotation format"):
        MalformedFileError.__init__(self,filename,message)


class DuplicateIdentifier(MalformedFileError):
    """Two independent GFF3 features share the same `ID`

    Parameters
    ----------
    filename : str
        Name of file

    identifier : str
        Offending `ID`

    line_num : int or None, optional
        Line at which the second feature was declared
    """

    def __init__(self,filename,identifier,line_num=None):
        message = "ID '%s' is shared by two features" % identifier
        MalformedFileError.__init__(self,filename,message,line_num)
        self.identifier = identifier


class InvalidModeTransition(RuntimeError):
    """Streaming and materializing retrieval were mixed on one parser

    Parameters
    ----------
    current : str
        Mode the parser is in

    requested : str
        Mode that was requested
    """

    def __init__(self,current,requested):
        RuntimeError.__init__(self,current,requested)
        self.current   = current
        self.requested = requested

    def __str__(self):
        return "Cannot begin %s retrieval on a parser that is %s. Open a new parser instead." % (self.requested,
                                                                                                  self.current)



#===============================================================================
# INDEX: Warning classes
#===============================================================================

class ArgumentWarning(Warning):
    """Warning for nonsensical but recoverable combinations of arguments"""
    pass


class FileFormatWarning(Warning):
    """Warning for slightly malformed but usable files"""
    pass


class DataWarning(Warning):
    """Warning for unexpected attributes of data.
    Raised when:

      - data has unexpected attributes
      - data has nonsensical, but recoverable values
    """
    pass


class OrphanedChild(DataWarning):
    """Features whose declared parent never appeared were dropped"""
    pass



#===============================================================================
# INDEX: Extensions to Python warnings
#===============================================================================

once_registry = {}
"""Registry of `onceperfamily` warnings that have been seen in the current execution context"""

family_filters = []
"""Warning filters using the `onceperfamily` action"""

def filterwarnings(action,message="",category=Warning,module="",lineno=0,append=False):
    """Insert an entry into the warnings filter. Behaviors are as in
    :func:`warnings.filterwarnings`, except the additional action
    `'onceperfamily'` shows one warning per family of messages matching
    the regex `message`.

    Parameters
    ----------
    action : str
        One of "error", "ignore", "always", "default", "module", "once",
        or "onceperfamily"

    message : str, optional
        Regex matched against warning messages (Default: `""`, match any message)

    category : Warning or subclass, optional
        Type of warning. (Default: :class:`Warning`)

    module : str, optional
        Regex matched against module names (Default: `""`, match all modules)

    lineno : int, optional
        If not 0 (default), only match warnings issued from that line

    append : bool, optional
        If `True`, add filter to end of list. Otherwise, insert at beginning.
    """
    if action != "onceperfamily":
        warnings.filterwarnings(action,message=message,
                                category=category,module=module,
                                lineno=lineno,append=append)
        return

    tup = (action,re.compile(message,re.I),category,re.compile(module),lineno)
    if tup in family_filters:
        return

    if append:
        family_filters.append(tup)
    else:
        family_filters.insert(0,tup)

def warn(message,category=None,stacklevel=1):
    """Issue a warning, respecting `onceperfamily` filters

    Parameters
    ----------
    message : str
        Message

    category: :class:`Warning`, or subclass, optional
        Type of warning (Default: :class:`UserWarning`)

    stacklevel : int
        Frame to which the warning is attributed, counting
        the caller of :func:`warn` as 1

    See also
    --------
    warnings.warn
        Python's warning system, which this wraps
    """
    if category is None:
        category = UserWarning

    stack = inspect.stack()
    frame_info = stack[min(stacklevel,len(stack)-1)]
    module = frame_info.frame.f_globals.get("__name__",frame_info.filename)
    warn_explicit(message,category,frame_info.filename,frame_info.lineno,module=module)

def warn_explicit(message,category,filename,lineno,module=None,registry=None,module_globals=None):
    """Low-level interface to issue warnings, respecting `onceperfamily` filters

    Parameters
    ----------
    message : str
        Message

    category: :class:`Warning`, or subclass
        Type of warning

    filename : str
        Name of file from which warning is issued

    lineno : int
        Line in file at which warning is issued

    module : str, optional
        Module name

    registry : dict, optional
        Registry of ignore filters (see :func:`warnings.warn_explicit`)

    module_globals : dict, optional
        Dictionary of module-level variables
    """
    if module is None:
        module = __name__

    for _, pat, filter_category, mod, filter_line in family_filters:
        if pat.match(message) and issubclass(category,filter_category) and\
           mod.match(module) and\
           (filter_line == 0 or filter_line == lineno):

            tup = (pat.pattern,filter_category,mod.pattern,filter_line)
            if tup in once_registry:
                return

            once_registry[tup] = 1
            break

    warnings.warn_explicit(message,category,filename,lineno,
                           module=module,registry=registry,
                           module_globals=module_globals)


def formatwarning(message,category,filename,lineno,line=None):
    """Colorize warnings for readability. Replaces :func:`warnings.formatwarning`

    Parameters
    ----------
    message : str
        Warning message

    category : Warning
        Class (not instance) of warning

    filename : str
        Name of file calling warning

    lineno : int
        Line in file calling warning

    line : str
        Text of line in file calling warning. If `None`, nearby lines are
        read from `filename`

    Returns
    -------
    str
        Pretty-printed warning message
    """
    sep     = colored("-"*75,color="cyan")
    message = str(message)
    if "\n" not in message:
        message = _wrapper.fill(message)

    message = colored(message,color="white",attrs=["bold"])
    name    = colored(category.__name__,color="cyan",attrs=["bold"])

    if line is None:
        numwidth = len(str(lineno+3))
        fmtstr   = "{0: >%ss} {1}" % numwidth
        lines    = []
        for x in range(max(0,lineno-2),lineno+3):
            tmpline = linecache.getline(filename,x).strip("\n")
            if tmpline:
                attrs = ["bold"] if x == lineno else []
                lines.append(fmtstr.format(colored(x,color="green",attrs=attrs),
                                           colored(tmpline,attrs=attrs)))
        line = "\n".join(lines)

    location = "in %s, line %s:" % (colored(filename,color="cyan"),lineno)

    return "\n".join([sep,name,message,location,"",line,"",sep,""])


warnings.formatwarning = formatwarning
