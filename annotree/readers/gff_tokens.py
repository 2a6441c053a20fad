#!/usr/bin/env python
"""Functions for escaping, unescaping, and parsing tokens from the ninth
column of `GTF2`_ and `GFF3`_ files.

Important methods
-----------------
:py:func:`parse_GFF3_tokens`
    Parse `GFF3`_ column 9 tokens into an ordered dictionary of value lists

:py:func:`parse_GTF2_tokens`
    Parse `GTF2`_ column 9 tokens into an ordered dictionary of value lists

:py:func:`escape_GFF3`, :py:func:`unescape_GFF3`
    Convert reserved characters to and from percent-encoding

See also
--------
  - `The Sequence Ontology GFF3 specification <http://www.sequenceontology.org/gff3.shtml>`_
  - `The Brent lab GTF2.2 specification <http://mblab.wustl.edu/GTF22.html>`_
"""
import re
import shlex
from annotree.util.services.exceptions import FileFormatWarning, warn


_GFF3_reserved = ["%",";",",","=","&","\t","\n","\r"] \
               + [chr(X) for X in range(0,32) if chr(X) not in "\t\n\r"] \
               + [chr(X) for X in range(127,160)]

_GFF3_escape_sequences = [(X,"%%%02X" % ord(X)) for X in _GFF3_reserved]
"""List mapping characters to their escape sequences, per the `GFF3`_ specification.
Percent signs come first, so that escape sequences are not themselves escaped."""

_escape_pat = re.compile(r"%([0-9A-Fa-f]{2})")



#===============================================================================
# INDEX: escaping
#===============================================================================

def escape_GFF3(inp):
    """Escape reserved characters in `GFF3`_ tokens using percent notation.
    Reserved characters include control characters, tab, newline, carriage
    return, semicolons, commas, the percent sign, the equals sign, and the
    ampersand.

    Parameters
    ----------
    inp : str
        Input string

    Returns
    -------
    str
        Escaped output
    """
    for char_, repl in _GFF3_escape_sequences:
        inp = inp.replace(char_,repl)

    return inp

def unescape_GFF3(inp):
    """Decode percent-escaped characters in `GFF3`_ tokens

    Parameters
    ----------
    inp : str
        Input string

    Returns
    -------
    str
        Unescaped output
    """
    if "%" not in inp:
        return inp

    return _escape_pat.sub(lambda m: chr(int(m.group(1),16)),inp)



#===============================================================================
# INDEX: attribute parsing
#===============================================================================

def parse_GFF3_tokens(inp):
    """Parse the ninth column of a `GFF3`_ line into a dictionary.
    Attributes are separated by semicolons, keys from values by `'='`,
    and multiple values by commas. Keys and values are unescaped
    after splitting.

    Examples
    --------
    >>> tokens = "ID=tx1;Parent=gene1,gene2;Note=complete%2C spliced"
    >>> parse_GFF3_tokens(tokens)
    {'ID': ['tx1'], 'Parent': ['gene1', 'gene2'], 'Note': ['complete, spliced']}

    Parameters
    ----------
    inp : str
        Ninth column of `GFF3`_ entry

    Returns
    -------
    dict
        Map of attribute names to lists of values, in the order they appear
    """
    dtmp = {}
    for item in inp.strip().split(";"):
        item = item.strip()
        if item == "":
            continue

        key, sep, val = item.partition("=")
        key = unescape_GFF3(key.strip())
        if not sep:
            warn("GFF3 attribute '%s' has no value. Treating as flag." % key,FileFormatWarning)
            dtmp.setdefault(key,[])
            continue

        values = [unescape_GFF3(X.strip()) for X in val.split(",")]
        dtmp.setdefault(key,[]).extend([X for X in values if X != ""])

    return dtmp

def parse_GTF2_tokens(inp):
    """Parse the ninth column of a `GTF2`_ line into a dictionary.
    Each attribute is a key followed by a double-quoted or bare value,
    terminated by a semicolon. Repeated keys accumulate values.

    Examples
    --------
    >>> tokens = 'gene_id "g1"; transcript_id "t1"; tag "basic"; tag "CCDS"; exon_number 2;'
    >>> parse_GTF2_tokens(tokens)
    {'gene_id': ['g1'], 'transcript_id': ['t1'], 'tag': ['basic', 'CCDS'], 'exon_number': ['2']}

    Parameters
    ----------
    inp : str
        Ninth column of `GTF2`_ entry

    Returns
    -------
    dict
        Map of attribute names to lists of values, in the order they appear

    Raises
    ------
    ValueError
        If quotes are unbalanced
    """
    lexer = shlex.shlex(inp,posix=True)
    lexer.whitespace_split = True
    lexer.quotes     = '"'
    lexer.commenters = ""
    items = list(lexer)

    dtmp = {}
    key = None
    for item in items:
        if key is None:
            key = item.rstrip(";")
            if item.endswith(";"):
                warn("GTF2 attribute '%s' has no value. Treating as flag." % key,FileFormatWarning)
                dtmp.setdefault(key,[])
                key = None
            continue

        dtmp.setdefault(key,[]).append(item[:-1] if item.endswith(";") else item)
        key = None

    if key is not None:
        dtmp.setdefault(key,[])

    return dtmp
