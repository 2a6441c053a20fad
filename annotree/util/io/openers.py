#!/usr/bin/env python
"""Wrappers and utilities for opening, closing, and writing files.

Important methods
-----------------
:py:func:`opener`
    Guesses whether a file is gzipped, bzipped, or uncompressed based upon
    its extension, and opens it in text mode.

:py:func:`read_tabular`
    Read a headerless tab-delimited table (e.g. a UCSC auxiliary table)
    into a :class:`pandas.DataFrame` of strings.

:py:func:`argsopener`
    Opens a file for writing within a command-line script and writes to it
    all command-line arguments as commented metadata.

:py:class:`NullWriter`
    Writer that discards everything written to it.
"""
import os
import re
import sys
import datetime
import pandas as pd
from annotree.util.io.filters import AbstractWriter


class NullWriter(AbstractWriter):
    """Writes to the system-dependent null location
    (`/dev/null` on Unix-like systems, `nul` on Windows)
    """

    def __init__(self):
        self.stream = open(os.devnull,"w")

    def filter(self,data):
        return data

    def __repr__(self):
        return "NullWriter()"

    def __str__(self):
        return self.__repr__()


COMPRESSION_EXTENSIONS = (".gz",".bz2")
"""File extensions recognized by :func:`opener` as compressed"""


def opener(filename,mode="r",**kwargs):
    """Open a file, detecting whether it is compressed from its extension:

       +----------------+------------------+
       | File ends with | Presumed to be   |
       +================+==================+
       | gz             |    gzipped       |
       +----------------+------------------+
       | bz2            |    bzipped       |
       +----------------+------------------+
       | anything else  |    uncompressed  |
       +----------------+------------------+

    Compressed files are opened in text mode unless `'b'` is in `mode`.

    Parameters
    ----------
    filename : str
        Name of file to open

    mode : str
        Mode in which to open file (e.g. `'r'`, `'w'`, `'a'`, with or without `'b'`)

    **kwargs
        Other parameters to pass to the appropriate file opener

    Returns
    -------
    file-like
    """
    if filename.endswith(".gz") or filename.endswith(".bz2"):
        if "b" not in mode and "t" not in mode:
            mode += "t"

        if filename.endswith(".gz"):
            import gzip
            call_func = gzip.open
        else:
            import bz2
            call_func = bz2.open
    else:
        call_func = open

    return call_func(filename,mode,**kwargs)


def strip_compression(filename):
    """Remove a trailing compression extension from `filename`, if present

    Parameters
    ----------
    filename : str

    Returns
    -------
    str
    """
    for ext in COMPRESSION_EXTENSIONS:
        if filename.endswith(ext):
            return filename[:-len(ext)]

    return filename


def read_tabular(filename,names,**kwargs):
    """Read a headerless, tab-delimited table into a :class:`pandas.DataFrame`
    of strings, passing these defaults to :func:`pandas.read_csv`:

        ===============   ==========
        Key               Value
        ---------------   ----------
        sep               `"\\t"`
        comment           `"#"`
        header            `None`
        dtype             `str`
        keep_default_na   `False`
        ===============   ==========

    Tables with fewer columns than `names` are padded with empty strings;
    extra columns are discarded.

    Parameters
    ----------
    filename : str
        Name of file. Can be gzipped or bzipped.

    names : list
        Column names, in order

    kwargs : keyword arguments
        Other keyword arguments to pass to :func:`pandas.read_csv`.
        Will override defaults.

    Returns
    -------
    :class:`pandas.DataFrame`
    """
    args = { "sep"             : "\t",
             "comment"         : "#",
             "header"          : None,
             "dtype"           : str,
             "keep_default_na" : False,
             "quoting"         : 3,
           }
    args.update(kwargs)
    table = pd.read_csv(filename,**args)
    table = table.iloc[:,:len(names)]
    table.columns = names[:table.shape[1]]
    for name in names[table.shape[1]:]:
        table[name] = ""

    return table


def get_short_name(inpt,separator=os.path.sep,terminator=""):
    """Gives the basename of a filename or module name passed as a string.
    If the string doesn't match the pattern specified by the separator
    and terminator, it is returned unchanged.

    Examples
    --------
    >>> get_short_name("/home/jdoe/annotation_summary.py",terminator=".py")
    'annotation_summary'

    >>> get_short_name("annotree.bin.annotation_summary",separator="\\.")
    'annotation_summary'

    Parameters
    ----------
    inpt : str
        Input

    separator : str, optional
        Path separator, as a regex fragment (Default: :obj:`os.path.sep`)

    terminator : str, optional
        Suffix to remove (Default: `""`)

    Returns
    -------
    str
    """
    if terminator and inpt.endswith(terminator):
        inpt = inpt[:-len(terminator)]

    match = re.search(r"([^%s]+)$" % separator,inpt)
    if match is None:
        return inpt

    return match.group(1)


def argsopener(filename,namespace,mode="w",**kwargs):
    """Open a file for writing, and write to it command-line arguments
    formatted as a commented block of metadata

    Parameters
    ----------
    filename : str
        Name of file to open. If it terminates in `'.gz'` or `'.bz2'`
        the filehandle will write to a compressed file

    namespace : :py:class:`argparse.Namespace`
        Namespace object from argparse.ArgumentParser

    mode : str
        Mode of writing

    **kwargs
        Other keyword arguments to pass to :func:`opener`

    Returns
    -------
    open filehandle
    """
    if "w" not in mode and "a" not in mode:
        mode += "w"
    fout = opener(filename,mode,**kwargs)
    fout.write(args_to_comment(namespace))
    return fout


def args_to_comment(namespace):
    """Format a :class:`argparse.Namespace` into a comment block
    for the header of output files

    Parameters
    ----------
    namespace  : :py:class:`argparse.Namespace`

    Returns
    -------
    str
    """
    ltmp = ["## date = '%s'" % datetime.datetime.today(),
            "## execstr = '%s'" % " ".join(sys.argv),
            "## args = {",
           ]
    for line in pretty_print_dict(vars(namespace)).split("\n")[1:-2]:
        ltmp.append("##" + line)
    ltmp.append("##        }")
    return "\n".join(ltmp) + "\n"


def pretty_print_dict(dtmp):
    """Pretty print an un-nested dictionary

    Parameters
    ----------
    dtmp : dict

    Returns
    -------
    str
    """
    ltmp = []
    maxlen = 2 + max([len(K) for K in dtmp] + [0])
    for k, v in sorted(dtmp.items(),key=lambda x: x[0]):
        if isinstance(v,str):
            v = "'%s'" % v
        new_k = "'%s'" % k
        ltmp.append(("          {0:<%s} : {1}," % maxlen).format(new_k,v))

    return "{\n%s\n}\n" % "\n".join(ltmp)
