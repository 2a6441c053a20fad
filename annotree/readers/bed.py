#!/usr/bin/env python
"""This module contains |BED_Parser|, which reads each line of a `BED`_ or
extended BED file into a |SeqFeature|, and the decoder functions it uses.

.. contents::
   :local:

Supported dialects
------------------

    ==============   =======   ==============================================
    Filetype         Columns   Features produced
    --------------   -------   ----------------------------------------------
    `bed3`-`bed11`   3-11      One `region` per line
    `bedGraph`       4         One `region` per line, column 4 as score
    `narrowPeak`     10        One `peak` per line, with `signalValue`,
                               `pValue`, `qValue`, and `peak` attributes
    `broadPeak`      9         One `peak` per line, with `signalValue`,
                               `pValue`, and `qValue` attributes
    `bed12`          12        One transcript per line, with exon, CDS, UTR,
                               and codon children as configured
    `gappedPeak`     15        One `gappedPeak` per line, with `peak` children
                               for each block
    ==============   =======   ==============================================

BED coordinates are 0-based and half-open. Features are 1-based and closed,
so a line beginning `chr1  999  1500` gives a feature with `start=1000` and
`end=1500`. The `primary_id` of every feature is built from the original
coordinates, e.g. `'chr1:999-1500'`, whatever the name column holds; repeated
coordinates receive numeric suffixes (`'chr1:999-1500.1'`).

Examples
--------
Read peaks one at a time::

    >>> parser = BED_Parser("sample.narrowPeak")
    >>> for peak in parser:
    >>>     print(peak.primary_id, peak.get_tag_value("signalValue"))

Read transcripts with all of their subfeatures::

    >>> parser = BED_Parser("transcripts.bed",do_exon=True,do_cds=True,do_utr=True)
    >>> transcripts = parser.top_features

See Also
--------
`UCSC file format FAQ <http://genome.ucsc.edu/FAQ/FAQformat.html>`_.
    BED format specification at UCSC
"""
__author__ = "annotree developers"
import numpy

from annotree.readers.common import AbstractAnnotationParser
from annotree.genomics.builder import build_transcript


BED_COLUMNS = { "bed%s" % X : X for X in range(3,13) }
BED_COLUMNS.update({
    "bedGraph"   : 4,
    "narrowPeak" : 10,
    "broadPeak"  : 9,
    "gappedPeak" : 15,
})
"""Number of columns expected for each filetype"""

bed_x_formats = {
    "narrowPeak" : [("signalValue",float),
                    ("pValue",float),
                    ("qValue",float),
                    ("peak",int)],
    "broadPeak"  : [("signalValue",float),
                    ("pValue",float),
                    ("qValue",float)],
    "gappedPeak" : [("signalValue",float),
                    ("pValue",float),
                    ("qValue",float)],
}
"""Names and types of the trailing attribute columns of peak formats"""

PLAIN_BED_ATTRIBUTES = ["thickStart","thickEnd","itemRGB","blockCount","blockSizes"]
"""Attribute names for columns 7-11 of `bed7`-`bed11` files"""



#===============================================================================
# INDEX: field conversion
#===============================================================================

def _to_int(text,name):
    try:
        return int(text)
    except ValueError:
        raise ValueError("%s must be an integer. Found '%s'" % (name,text))

def _to_number(text,name):
    """Convert `text` to `int` if possible, otherwise `float`. `'.'` and `''` give `None`"""
    if text in (".",""):
        return None
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        raise ValueError("%s must be numeric. Found '%s'" % (name,text))

def _to_int_list(text,name):
    """Convert a comma-separated list of integers, ignoring trailing commas"""
    items = [X for X in text.split(",") if X != ""]
    try:
        return numpy.array([int(X) for X in items],dtype=int)
    except ValueError:
        raise ValueError("%s must be a comma-separated list of integers. Found '%s'" % (name,text))

def _name_or_none(text):
    return None if text in (".","") else text

def _location(fields):
    """Return `seq_id`, 0-based start, and end of a BED line"""
    start = _to_int(fields[1],"chromStart")
    end   = _to_int(fields[2],"chromEnd")
    if start < 0 or end < start:
        raise ValueError("chromStart (%s) must be >= 0 and <= chromEnd (%s)" % (start,end))

    return fields[0], start, end

def bed_id(seq_id,start,end):
    """Build the `primary_id` of a BED feature from 0-based, half-open coordinates"""
    return "%s:%s-%s" % (seq_id,start,end)

def _extra_attributes(fields,filetype,offset):
    """Convert trailing peak columns into an attribute dictionary"""
    attributes = {}
    for (name, type_), text in zip(bed_x_formats[filetype],fields[offset:]):
        if type_ is int:
            attributes[name] = _to_int(text,name)
        else:
            attributes[name] = _to_number(text,name)

    return attributes

def _blocks(fields,chrom_start,chrom_end):
    """Convert columns 10-12 of a `bed12` line to absolute exon coordinates"""
    count  = _to_int(fields[9],"blockCount")
    sizes  = _to_int_list(fields[10],"blockSizes")
    starts = _to_int_list(fields[11],"blockStarts")
    if not (count == len(sizes) == len(starts)):
        raise ValueError("blockCount (%s) does not match number of blockSizes (%s) and blockStarts (%s)" % (count,
                                                                                                        len(sizes),
                                                                                                        len(starts)))
    if count == 0:
        raise ValueError("blockCount must be at least 1")

    exon_starts = chrom_start + starts
    exon_ends   = exon_starts + sizes
    if (sizes < 0).any() or (exon_starts < chrom_start).any() or (exon_ends > chrom_end).any():
        raise ValueError("Blocks must lie between chromStart (%s) and chromEnd (%s)" % (chrom_start,chrom_end))

    return numpy.vstack([exon_starts,exon_ends]).T

def _thick_bound(text,default,name):
    """Read thickStart or thickEnd, using `default` when the column is blank"""
    if text in (".",""):
        return default

    return _to_int(text,name)



#===============================================================================
# INDEX: decoders
#===============================================================================

def decode_plain_bed(fields,filetype,options):
    """Decode a `bed3`-`bed11` line into a |SeqFeature|

    Parameters
    ----------
    fields : list
        Tab-delimited fields of line

    filetype : str
        Exact filetype

    options : :class:`~annotree.genomics.builder.BuildOptions`

    Returns
    -------
    |SeqFeature|
    """
    seq_id, start, end = _location(fields)
    name   = _name_or_none(fields[3]) if len(fields) > 3 else None
    score  = _to_number(fields[4],"score") if len(fields) > 4 else None
    strand = fields[5] if len(fields) > 5 else "."

    attributes = {}
    for key, text in zip(PLAIN_BED_ATTRIBUTES,fields[6:]):
        attributes[key] = text

    return options.feature_class(seq_id,start+1,end,strand,
                                 primary_id=bed_id(seq_id,start,end),
                                 display_name=name,
                                 primary_tag="region",
                                 source_tag=options.source,
                                 score=score,
                                 attributes=attributes)

def decode_bedgraph(fields,filetype,options):
    """Decode a `bedGraph` line, whose fourth column is a score"""
    seq_id, start, end = _location(fields)
    score = _to_number(fields[3],"dataValue")
    return options.feature_class(seq_id,start+1,end,".",
                                 primary_id=bed_id(seq_id,start,end),
                                 primary_tag="region",
                                 source_tag=options.source,
                                 score=score)

def decode_peak(fields,filetype,options):
    """Decode a `narrowPeak` or `broadPeak` line into a `peak` |SeqFeature|"""
    seq_id, start, end = _location(fields)
    return options.feature_class(seq_id,start+1,end,fields[5],
                                 primary_id=bed_id(seq_id,start,end),
                                 display_name=_name_or_none(fields[3]),
                                 primary_tag="peak",
                                 source_tag=options.source,
                                 score=_to_number(fields[4],"score"),
                                 attributes=_extra_attributes(fields,filetype,6))

def decode_bed12(fields,filetype,options):
    """Decode a `bed12` line into a transcript |SeqFeature|. Lines
    without thickStart or thickEnd are treated as noncoding.
    """
    seq_id, start, end = _location(fields)
    thick_start = _thick_bound(fields[6],end,"thickStart")
    thick_end   = _thick_bound(fields[7],end,"thickEnd")
    if thick_end < thick_start:
        raise ValueError("thickEnd (%s) must be >= thickStart (%s)" % (thick_end,thick_start))

    attributes = {}
    if fields[8] not in (".",""):
        attributes["itemRGB"] = fields[8]

    return build_transcript(bed_id(seq_id,start,end),seq_id,fields[5],start,end,
                            thick_start,thick_end,_blocks(fields,start,end),
                            options=options,
                            display_name=_name_or_none(fields[3]),
                            score=_to_number(fields[4],"score"),
                            attributes=attributes)

def decode_gapped_peak(fields,filetype,options):
    """Decode a `gappedPeak` line into a `gappedPeak` |SeqFeature| whose
    children are `peak` features for each block
    """
    seq_id, start, end = _location(fields)
    attributes = _extra_attributes(fields,filetype,12)
    if fields[8] not in (".",""):
        attributes["itemRGB"] = fields[8]

    return build_transcript(bed_id(seq_id,start,end),seq_id,fields[5],start,end,
                            end,end,_blocks(fields,start,end),
                            options=options._replace(do_exon=True,do_cds=False,do_utr=False,do_codon=False),
                            primary_tag="gappedPeak",
                            exon_tag="peak",
                            display_name=_name_or_none(fields[3]),
                            score=_to_number(fields[4],"score"),
                            attributes=attributes)


BED_DECODERS = { "bed%s" % X : decode_plain_bed for X in range(3,12) }
BED_DECODERS.update({
    "bed12"      : decode_bed12,
    "bedGraph"   : decode_bedgraph,
    "narrowPeak" : decode_peak,
    "broadPeak"  : decode_peak,
    "gappedPeak" : decode_gapped_peak,
})
"""Decoder function for each BED-family filetype"""



#===============================================================================
# INDEX: parser
#===============================================================================

class BED_Parser(AbstractAnnotationParser):
    """
    BED_Parser(filename=None, filetype=None, printer=None, **config)

    Parse `BED`_, `bedGraph`, and ENCODE peak files into |SeqFeature| objects.
    One feature is produced per line. `do_gene` has no effect.

    Parameters
    ----------
    filename : str or None, optional
        File to open

    filetype : str or None, optional
        One of :data:`BED_COLUMNS`. If `None`, determined from the file

    printer : file-like, optional
        Logger implementing a ``write()`` method. Default: |NullWriter|

    **config
        Configuration switches. See |AbstractAnnotationParser|

    Raises
    ------
    MalformedLine
        If a line has the wrong number of columns for `filetype`, or
        non-numeric coordinates or block lists
    """

    flavor = "bed"

    def filter(self,line):
        """Decode one line into a |SeqFeature|

        Parameters
        ----------
        line : str
            Data line

        Returns
        -------
        |SeqFeature|
        """
        fields = line.split("\t")
        expected = BED_COLUMNS[self.filetype]
        if len(fields) != expected:
            raise self._malformed("%s lines must have %s columns. Found %s." % (self.filetype,expected,len(fields)),line)

        try:
            return BED_DECODERS[self.filetype](fields,self.filetype,self.options)
        except ValueError as e:
            raise self._malformed(str(e),line)

    def typelist(self):
        """Return comma-separated feature types produced from this file"""
        if self.filetype in ("narrowPeak","broadPeak"):
            return "peak"
        if self.filetype == "gappedPeak":
            return "gappedPeak,peak"
        if self.filetype != "bed12":
            return "region"

        types = ["mRNA","ncRNA"]
        if self.do_exon:
            types.append("exon")
        if self.do_cds:
            types.append("CDS")
        if self.do_utr:
            types.extend(["five_prime_UTR","three_prime_UTR"])
        if self.do_codon:
            types.extend(["start_codon","stop_codon"])

        return ",".join(types)
