#!/usr/bin/env python
"""Readers and writers that wrap streams, in the manner of Unix pipes.

Readers
-------
:class:`AbstractReader`
    Base class for readers. Subclass it and override
    :py:meth:`~AbstractReader.filter` to convert each unit of input
    (e.g. a line of text) into another type of data. The annotation
    parsers in :mod:`annotree.readers` are built on this class.

Writers
-------
:class:`AbstractWriter`
    Base class for writers. Subclass it and override
    :py:meth:`~AbstractWriter.filter`

:class:`ColorWriter`
    Color text written to streams that support ANSI color

:class:`NameDateWriter`
    Prepend a program name and timestamp to each message. Used as
    the `printer` of parsers and command-line scripts.

And one convenience function:

:func:`colored`
    Colorize text via :func:`termcolor.colored`, if and only if
    :obj:`sys.stderr` supports color


Examples
--------
Report progress to stderr, prepending name and date::

    >>> printer = NameDateWriter("annotation_summary")
    >>> printer.write("Parsing bed12 format file 'some_file.bed'...")
"""
import sys
import datetime
from abc import abstractmethod
from io import IOBase

import termcolor

if hasattr(sys.stderr,"isatty") and sys.stderr.isatty():
    colored = termcolor.colored
else:
    colored = lambda x, **kwargs: str(x)



#===============================================================================
# INDEX: readers
#===============================================================================

class AbstractReader(IOBase):
    """Abstract base class for stream-reading filters, which convert each
    unit of input from an open file-like object into another data type.

    Create a reader by subclassing this, and defining `self.filter()`.
    """

    def __init__(self,stream):
        """Create an |AbstractReader|

        Parameters
        ----------
        stream : file-like
            Input data
        """
        self.stream = stream

    def isatty(self):
        return hasattr(self.stream,"isatty") and self.stream.isatty()

    def writable(self):
        return False

    def seekable(self):
        return False

    def readable(self):
        return True

    def fileno(self):
        raise IOError()

    def __next__(self):
        return self.filter(next(self.stream))

    def __iter__(self):
        return self

    def readlines(self):
        """Process all remaining units of input

        Returns
        -------
        list
            processed data
        """
        return [X for X in self]

    def close(self):
        """Close stream"""
        try:
            self.stream.close()
        except AttributeError:
            pass

    @abstractmethod
    def filter(self,data):
        """Process a single unit of data. Override this in subclasses

        Parameters
        ----------
        data : unit of data
            Whatever data to filter/format. Often string, but not necessarily

        Returns
        -------
        object
            processed data
        """
        pass



#===============================================================================
# INDEX: writers
#===============================================================================

class AbstractWriter(IOBase):
    """Abstract base class for stream-writing filters.
    Create a filter by subclassing this, and defining self.filter().

    Parameters
    ----------
    stream : file-like, open for writing
        Output stream to which filtered/formatted data will be written
    """

    def __init__(self,stream):
        self.stream = stream

    def isatty(self):
        return hasattr(self.stream,"isatty") and self.stream.isatty()

    def writable(self):
        return True

    def seekable(self):
        return False

    def readable(self):
        return False

    def fileno(self):
        raise IOError()

    def write(self,data):
        """Filter `data` and write it to `self.stream`

        Parameters
        ----------
        data : unit of data
            Whatever data to filter/format. Often string, but not necessarily
        """
        self.stream.write(self.filter(data))

    def flush(self):
        """Flush `self.stream`"""
        self.stream.flush()

    def close(self):
        """Flush and close `self.stream`"""
        if self.stream.closed:
            return
        self.flush()
        self.stream.close()

    @abstractmethod
    def filter(self,data):
        """Format each unit of data before it is written. Override this in subclasses

        Parameters
        ----------
        data : unit of data

        Returns
        -------
        object
            formatted data
        """
        pass


class ColorWriter(AbstractWriter):
    """Write to a stream, coloring text if and only if the stream supports it

    Parameters
    ----------
    stream : file-like
        Stream to write to (Default: :obj:`sys.stderr`)
    """

    def __init__(self,stream=None):
        stream = sys.stderr if stream is None else stream
        AbstractWriter.__init__(self,stream=stream)
        if hasattr(self.stream,"isatty") and self.stream.isatty():
            self.color = termcolor.colored

    def color(self,text,**kwargs):
        """Color `text` as specified by `kwargs`, if `stream` supports ANSI color.
        See :func:`termcolor.colored` for usage

        Returns
        -------
        str
        """
        return text


class NameDateWriter(ColorWriter):
    """Prepend program name, date, and time to each message

    Parameters
    ----------
    name : str
        Name to prepend

    line_delimiter : str, optional
        Delimiter appended to each message (Default: `'\\n'`)

    stream : file-like
        Stream to write to (Default: :obj:`sys.stderr`)
    """

    def __init__(self,name,line_delimiter="\n",stream=None):
        ColorWriter.__init__(self,stream=stream)
        self.name = name
        self.delimiter = line_delimiter
        self.fmtstr = "%s %s%s %s%s: {2}%s" % (self.color(name,color="blue",attrs=["bold"]),
                                               self.color("[",color="blue",attrs=["bold"]),
                                               self.color("{0}",color="green"),
                                               self.color("{1}",color="green",attrs=["bold"]),
                                               self.color("]",color="blue",attrs=["bold"]),
                                               self.delimiter
                                              )

    def filter(self,line):
        """Prepend name, date and time to `line`

        Parameters
        ----------
        line : str

        Returns
        -------
        str
        """
        now = datetime.datetime.now()
        d   = now.strftime("%Y-%m-%d")
        t   = now.strftime("%H:%M:%S")
        return self.fmtstr.format(d,t,line.strip(self.delimiter))

    def __call__(self,line):
        self.write(line)
