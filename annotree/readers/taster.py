#!/usr/bin/env python
"""Identify the format of an annotation file from its name and contents.

Annotation files are classified into a `flavor`, the family of formats
whose lines are decoded by the same parser, and a `filetype`, the exact
dialect within that family:

    ========   =========================================================
    Flavor     Filetypes
    --------   ---------------------------------------------------------
    `bed`      `bed3` ... `bed12`, `bedGraph`, `narrowPeak`,
               `broadPeak`, `gappedPeak`

    `ucsc`     `genePred`, `refFlat`, `knownGene`, `genePredExt`,
               `genePredExtBin`

    `gff`      `gff3`, `gtf`
    ========   =========================================================

:func:`taste_file` first consults the file extension (ignoring `.gz` and
`.bz2`). Extensions that name a single dialect, such as `.narrowPeak` or
`.gtf`, are trusted. Otherwise, the first data line is split on tabs, and
the number and content of its fields decide the dialect. `track` lines
declaring a `type`, and column-name header lines written by the UCSC table
browser, are used as hints.


Examples
--------
Taste a few files::

    >>> taste_file("sample.narrowPeak")
    ('bed', 'narrowPeak')

    >>> taste_file("refGene.txt.gz")
    ('ucsc', 'genePredExtBin')
"""
__author__ = "annotree developers"
import os
import re
import shlex
from annotree.util.io.openers import opener, strip_compression
from annotree.util.services.exceptions import UnrecognizedFormat


BED_FILETYPES  = ("bed3","bed4","bed5","bed6","bed7","bed8","bed9","bed10","bed11","bed12",
                  "bedGraph","narrowPeak","broadPeak","gappedPeak")
UCSC_FILETYPES = ("genePred","refFlat","knownGene","genePredExt","genePredExtBin")
GFF_FILETYPES  = ("gff3","gtf")

FILETYPES = {
    "bed"  : BED_FILETYPES,
    "ucsc" : UCSC_FILETYPES,
    "gff"  : GFF_FILETYPES,
}
"""Filetypes belonging to each flavor"""

EXTENSIONS = {
    ".bed"        : ("bed",None),
    ".narrowpeak" : ("bed","narrowPeak"),
    ".broadpeak"  : ("bed","broadPeak"),
    ".gappedpeak" : ("bed","gappedPeak"),
    ".bedgraph"   : ("bed","bedGraph"),
    ".bdg"        : ("bed","bedGraph"),
    ".gff"        : ("gff",None),
    ".gff3"       : ("gff","gff3"),
    ".gtf"        : ("gff","gtf"),
    ".genepred"   : ("ucsc",None),
    ".refflat"    : ("ucsc",None),
    ".knowngene"  : ("ucsc",None),
    ".ucsc"       : ("ucsc",None),
}
"""Map of lowercase file extensions to `(flavor, filetype)`. `None` means
that contents must be inspected to determine the value"""

UCSC_COLUMNS = {
    10 : ("genePred",1),
    11 : ("refFlat",2),
    12 : ("knownGene",1),
    15 : ("genePredExt",1),
    16 : ("genePredExtBin",2),
}
"""Map of column count to UCSC table type, and 0-based column of chromosome name"""

UCSC_COLUMNS_BY_TYPE = { V[0] : K for K, V in UCSC_COLUMNS.items() }

UCSC_HEADER_HINTS = (
    ("bin","genePredExtBin"),
    ("geneName","refFlat"),
    ("proteinID","knownGene"),
    ("name2","genePredExt"),
)
"""Column names in UCSC table-browser headers that identify a table type"""

_int_pat    = re.compile(r"^-?\d+$")
_number_pat = re.compile(r"^[\d\-\+\.,eE]+$")
_list_pat   = re.compile(r"^[\d,]+$")
_rgb_pat    = re.compile(r"^\d+(,\d+){2},?$")
_gtf_pat    = re.compile(r"^\s*[^\s=;]+\s+\"")

MAX_SNIFF_LINES = 1000
"""Maximum number of leading non-data lines read while sniffing"""



#===============================================================================
# INDEX: field tests
#===============================================================================

def _is_int(text):
    return _int_pat.match(text) is not None

def _is_number(text):
    return _number_pat.match(text) is not None

def _is_int_list(text):
    return _list_pat.match(text) is not None

def _list_length(text):
    return len([X for X in text.split(",") if X != ""])

def _is_rgb(text):
    return text == "0" or _rgb_pat.match(text) is not None

def _is_strand(text):
    return text in ("+","-",".")

def _within(fields,columns):
    """Test whether integer columns lie within the chromStart-chromEnd range"""
    if not all(_is_int(fields[X]) for X in columns):
        return False

    start, end = int(fields[1]), int(fields[2])
    return all(start <= int(fields[X]) <= end for X in columns)

def _is_narrow_peak(fields):
    """Test whether a ten-column line has narrowPeak statistics, and a summit
    given as `-1` or as an offset within the peak
    """
    if "," in fields[8] or not all(_is_number(X) for X in fields[6:9]) or not _is_int(fields[9]):
        return False

    summit = int(fields[9])
    return summit == -1 or 0 <= summit <= int(fields[2]) - int(fields[1])



#===============================================================================
# INDEX: classifiers for each flavor
#===============================================================================

def classify_gff(fields,version=None):
    """Classify a data line as `gff3` or `gtf`

    Parameters
    ----------
    fields : list
        Tab-delimited fields of line

    version : str or None, optional
        Value of a `##gff-version` directive, if one was seen

    Returns
    -------
    str or None
        `'gff3'`, `'gtf'`, or `None` if the line is not GFF-shaped
    """
    if len(fields) != 9:
        return None
    if not (_is_int(fields[3]) and _is_int(fields[4])):
        return None
    if fields[6] not in ("+","-",".","?") or fields[7] not in (".","0","1","2"):
        return None

    if version is not None and version.startswith("3"):
        return "gff3"
    if _gtf_pat.match(fields[8]):
        return "gtf"
    if "=" in fields[8] or version is None:
        return "gff3"

    return "gtf"


def classify_ucsc(fields,header=None):
    """Classify a data line as one of the UCSC `genePred`-family tables

    Parameters
    ----------
    fields : list
        Tab-delimited fields of line

    header : list or None, optional
        Column names from a table-browser header line, if present

    Returns
    -------
    str or None
        Table type, or `None` if the line does not fit any of them
    """
    num_fields = len(fields)
    if num_fields not in UCSC_COLUMNS:
        return None

    filetype, chrom_col = UCSC_COLUMNS[num_fields]
    if header is not None and len(header) == num_fields:
        for name, hinted in UCSC_HEADER_HINTS:
            if name in header and UCSC_COLUMNS_BY_TYPE[hinted] == num_fields:
                filetype = hinted
                break

    strand = fields[chrom_col+1]
    coords = fields[chrom_col+2:chrom_col+7]
    starts, ends = fields[chrom_col+7], fields[chrom_col+8]
    if strand not in ("+","-"):
        return None
    if not all(_is_int(X) for X in coords):
        return None
    if not (_is_int_list(starts) and _is_int_list(ends)):
        return None
    if _list_length(starts) != int(coords[4]) or _list_length(ends) != int(coords[4]):
        return None

    return filetype


def classify_bed(fields,track_type=None,strict=True):
    """Classify a data line as one of the BED-family formats

    Parameters
    ----------
    fields : list
        Tab-delimited fields of line

    track_type : str or None, optional
        Value of `type` declared in a preceding `track` line

    strict : bool, optional
        If `True` (default), four-column lines are `bed4` even if their
        last column is numeric. Otherwise they are `bedGraph`.

    Returns
    -------
    str or None
        Filetype, or `None` if the line is not BED-shaped
    """
    num_fields = len(fields)
    if num_fields < 3 or not (_is_int(fields[1]) and _is_int(fields[2])):
        return None
    if int(fields[1]) > int(fields[2]):
        return None

    expected = { "bedGraph" : 4, "narrowPeak" : 10, "broadPeak" : 9, "gappedPeak" : 15 }
    if track_type in expected and expected[track_type] == num_fields:
        return track_type

    if num_fields == 4:
        if not strict and _is_number(fields[3]):
            return "bedGraph"
        return "bed4"

    if num_fields >= 6 and not _is_strand(fields[5]):
        return None

    if num_fields == 15:
        if _is_int(fields[9]) and _is_int_list(fields[10]) and _is_int_list(fields[11]) \
           and all(_is_number(X) for X in fields[12:15]):
            return "gappedPeak"
        return None

    if num_fields == 12:
        if _is_int(fields[9]) and _is_int_list(fields[10]) and _is_int_list(fields[11]):
            return "bed12"
        return None

    if num_fields == 10:
        if _is_narrow_peak(fields):
            return "narrowPeak"
        if _is_rgb(fields[8]) and ("," in fields[8] or _within(fields,(6,7))):
            return "bed10"
        return None

    if num_fields == 9:
        if _is_rgb(fields[8]) and ("," in fields[8] or _within(fields,(6,7))):
            return "bed9"
        if all(_is_number(X) for X in fields[6:9]):
            return "broadPeak"
        return None

    if 3 <= num_fields <= 11:
        return "bed%s" % num_fields

    return None



#===============================================================================
# INDEX: tasting
#===============================================================================

def taste_extension(filename):
    """Look up `(flavor, filetype)` implied by the extension of `filename`

    Parameters
    ----------
    filename : str

    Returns
    -------
    tuple
        `(flavor, filetype)`, either of which may be `None` if the
        extension does not determine it
    """
    _, ext = os.path.splitext(strip_compression(filename))
    return EXTENSIONS.get(ext.lower(),(None,None))


def _parse_track_type(line):
    try:
        items = shlex.split(line)
    except ValueError:
        return None

    for item in items[1:]:
        key, _, value = item.partition("=")
        if key == "type":
            return value

    return None


def read_first_data_line(stream):
    """Read lines from `stream` until the first data line, collecting hints
    from the comment, `track`, and `browser` lines above it

    Parameters
    ----------
    stream : file-like
        Open text stream

    Returns
    -------
    str or None
        First data line, or `None` if there is none

    dict
        Hints: `'track_type'` from a `track` line, `'header'` (list of column
        names) from the last tab-delimited comment, and `'gff_version'`
    """
    hints = { "track_type" : None, "header" : None, "gff_version" : None }
    for n, line in enumerate(stream):
        line = line.rstrip("\r\n")
        if n > MAX_SNIFF_LINES:
            break
        if line.strip() == "":
            continue
        if line.startswith("##gff-version"):
            hints["gff_version"] = line[len("##gff-version"):].strip()
        elif line.startswith("##FASTA"):
            break
        elif line.startswith("#"):
            if "\t" in line:
                hints["header"] = line.lstrip("#").split("\t")
        elif line.startswith("track"):
            hints["track_type"] = _parse_track_type(line)
        elif line.startswith("browser"):
            continue
        else:
            return line, hints

    return None, hints


def taste_file(filename,flavor=None):
    """Determine the flavor and filetype of an annotation file

    Parameters
    ----------
    filename : str
        Path to file, optionally gzipped or bzipped

    flavor : str or None, optional
        If given, only consider filetypes of this flavor

    Returns
    -------
    tuple
        `(flavor, filetype)`, e.g. `('bed', 'narrowPeak')`

    Raises
    ------
    UnrecognizedFormat
        If neither extension nor contents match a known format
    """
    ext_flavor, ext_filetype = taste_extension(filename)
    if flavor is not None and ext_flavor is not None and flavor != ext_flavor:
        raise UnrecognizedFormat(filename,"extension indicates a %s file, not %s" % (ext_flavor,flavor))

    flavor = ext_flavor if flavor is None else flavor
    if ext_filetype is not None:
        return ext_flavor, ext_filetype

    with opener(filename) as fh:
        line, hints = read_first_data_line(fh)

    if line is None:
        if flavor == "gff":
            return "gff", "gtf" if (hints["gff_version"] or "3").startswith("2") else "gff3"
        raise UnrecognizedFormat(filename,"no data lines found")

    fields = line.split("\t")
    if flavor in (None,"gff"):
        filetype = classify_gff(fields,version=hints["gff_version"])
        if filetype is not None:
            return "gff", filetype

    if flavor in (None,"ucsc"):
        filetype = classify_ucsc(fields,header=hints["header"])
        if filetype is not None:
            return "ucsc", filetype

    if flavor in (None,"bed"):
        filetype = classify_bed(fields,track_type=hints["track_type"],strict=(ext_flavor == "bed"))
        if filetype is not None:
            return "bed", filetype

    raise UnrecognizedFormat(filename,"could not determine format from %s tab-delimited fields in line '%s'" % (len(fields),line))
