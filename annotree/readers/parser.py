#!/usr/bin/env python
"""Open any supported annotation file with the parser matching its format.

:func:`open_annotation` tastes a file with :func:`~annotree.readers.taster.taste_file`,
and returns a |BED_Parser|, |UCSC_Parser|, or |GFF_Parser| opened on it::

    >>> parser = open_annotation("refGene.txt.gz",do_exon=True,do_cds=True)
    >>> parser.flavor, parser.filetype
    ('ucsc', 'genePredExtBin')

    >>> for gene in parser.top_features:
    >>>     pass
"""
__author__ = "annotree developers"
from annotree.readers.taster import taste_file, FILETYPES
from annotree.readers.bed import BED_Parser
from annotree.readers.ucsc import UCSC_Parser
from annotree.readers.gff import GFF_Parser
from annotree.util.services.exceptions import UnrecognizedFormat


PARSERS = {
    "bed"  : BED_Parser,
    "ucsc" : UCSC_Parser,
    "gff"  : GFF_Parser,
}
"""Parser class for each flavor"""


def get_parser_class(flavor):
    """Return the parser class for `flavor`

    Raises
    ------
    ValueError
        If `flavor` is not one of :data:`PARSERS`
    """
    try:
        return PARSERS[flavor]
    except KeyError:
        raise ValueError("Unknown annotation flavor '%s'. Must be one of: %s" % (flavor,", ".join(sorted(PARSERS))))


def open_annotation(filename,filetype=None,printer=None,**config):
    """Open an annotation file, determining its format if necessary

    Parameters
    ----------
    filename : str
        Path to annotation file, optionally gzipped or bzipped

    filetype : str or None, optional
        Exact dialect (e.g. `'bed12'`, `'gtf'`, `'refFlat'`) or flavor
        (`'bed'`, `'ucsc'`, `'gff'`). If `None`, determined from the file

    printer : file-like, optional
        Logger implementing a ``write()`` method

    **config
        Configuration switches. See |AbstractAnnotationParser|

    Returns
    -------
    |AbstractAnnotationParser|
        Parser of the matching flavor, in state `'open'`

    Raises
    ------
    UnrecognizedFormat
        If the format cannot be determined, or `filetype` is unknown
    """
    if filetype in PARSERS:
        flavor, filetype = taste_file(filename,flavor=filetype)
    elif filetype is not None:
        matches = [K for K, V in FILETYPES.items() if filetype in V]
        if len(matches) == 0:
            raise UnrecognizedFormat(filename,"unknown filetype '%s'" % filetype)
        flavor = matches[0]
    else:
        flavor, filetype = taste_file(filename)

    return get_parser_class(flavor)(filename,filetype=filetype,printer=printer,**config)
