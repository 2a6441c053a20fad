#!/usr/bin/env python
"""Constants, functions, and classes used by the parsers in this subpackage


Retrieval modes
---------------
Every parser derived from |AbstractAnnotationParser| offers two ways to
retrieve features, which cannot be mixed on one parser:

  - *streaming*, via :meth:`~AbstractAnnotationParser.next_feature` or by
    iterating over the parser. One feature is decoded per call, and memory
    use stays small. Parent references to features that have not yet been
    read cannot be resolved, and are reported immediately.

  - *materializing*, via :meth:`~AbstractAnnotationParser.parse_file`,
    :attr:`~AbstractAnnotationParser.top_features`,
    :meth:`~AbstractAnnotationParser.fetch`, or
    :meth:`~AbstractAnnotationParser.next_top_feature`. The whole file is
    read, all structure is resolved, and results are cached.

Starting one mode after the other raises |InvalidModeTransition|.


Functions & classes
-------------------
:func:`load_feature_class`
    Resolve a class, or the dotted import path of a class, used to build features

:func:`get_source_name`
    Default `source_tag` for features read from a file

|AbstractAnnotationParser|
    Base class for parsers
"""
import os
import importlib
import shlex
import pysam

from annotree.util.io.filters import AbstractReader
from annotree.util.io.openers import NullWriter, opener, strip_compression
from annotree.util.services.exceptions import InvalidModeTransition, MalformedLine, \
                                              ArgumentWarning, UnrecognizedFormat, warn
from annotree.util.services.decorators import deprecated
from annotree.genomics.seqfeature import SeqFeature
from annotree.genomics.builder import BuildOptions
from annotree.readers.taster import taste_file, FILETYPES


DEFAULT_CONFIG = {
    "do_gene"       : True,
    "do_exon"       : False,
    "do_cds"        : False,
    "do_utr"        : False,
    "do_codon"      : False,
    "do_name"       : False,
    "source"        : None,
    "feature_class" : SeqFeature,
    "tabix"         : False,
    "refseqsum"     : None,
    "refseqstat"    : None,
    "kgxref"        : None,
    "ensname"       : None,
    "enssrc"        : None,
}
"""Configuration switches accepted by all parsers, and their defaults"""

AUXILIARY_TABLES = ("refseqsum","refseqstat","kgxref","ensname","enssrc")
"""Configuration keys naming UCSC auxiliary tables"""

COMMENT_PREFIXES = ("#","track","browser")
"""Lines beginning with these are retained as comments, not decoded"""



#===============================================================================
# INDEX: helper functions
#===============================================================================

def load_feature_class(cls):
    """Resolve the class used to build features

    Parameters
    ----------
    cls : class or str
        |SeqFeature| or a subclass, or the dotted import path of one
        (e.g. `'mypackage.features.MyFeature'`)

    Returns
    -------
    class

    Raises
    ------
    ValueError
        If `cls` is a string that cannot be imported

    TypeError
        If the resolved object is not a subclass of |SeqFeature|
    """
    if isinstance(cls,str):
        module_name, _, class_name = cls.rpartition(".")
        if not module_name:
            raise ValueError("Feature class must be given as a dotted path, e.g. 'module.ClassName', not '%s'" % cls)
        try:
            cls = getattr(importlib.import_module(module_name),class_name)
        except (ImportError, AttributeError) as e:
            raise ValueError("Could not load feature class '%s': %s" % (cls,e))

    if not (isinstance(cls,type) and issubclass(cls,SeqFeature)):
        raise TypeError("Feature class must be SeqFeature or a subclass. Got %s" % (cls,))

    return cls


def get_source_name(filename):
    """Return the base name of `filename`, without directory,
    compression, or format extensions

    Examples
    --------
    >>> get_source_name("/data/peaks/sample.narrowPeak.gz")
    'sample'
    """
    base = os.path.basename(strip_compression(filename))
    return os.path.splitext(base)[0]


def parse_track_line(line):
    """Parse the key-value pairs of a `track` line

    Parameters
    ----------
    line : str
        Line beginning with `'track'`

    Returns
    -------
    dict
    """
    try:
        items = shlex.split(line)
    except ValueError:
        items = line.split()

    dtmp = {}
    for item in items[1:]:
        key, sep, value = item.partition("=")
        if sep:
            dtmp[key] = value

    return dtmp


def _tabix_lines(filename):
    """Yield header and data lines from a `tabix`_-indexed file"""
    tabix = pysam.TabixFile(filename)
    try:
        for line in tabix.header:
            yield line
        for line in tabix.fetch():
            yield line
    finally:
        tabix.close()



#===============================================================================
# INDEX: parser base class
#===============================================================================

class AbstractAnnotationParser(AbstractReader):
    """
    AbstractAnnotationParser(filename=None, filetype=None, printer=None, **config)

    Base class for annotation parsers, which decode lines of an annotation
    file into trees of |SeqFeature| objects.

    Subclasses set :attr:`flavor`, and implement :meth:`filter` to decode
    a data line into a feature. Subclasses that resolve structure across
    lines override :meth:`_materialize` and :meth:`_next_streamed`.

    Parameters
    ----------
    filename : str or None, optional
        Annotation file to open. If `None`, call :meth:`open_file` later.

    filetype : str or None, optional
        Exact dialect of file. If `None`, determined by :func:`taste_file`

    printer : file-like, optional
        Logger implementing a ``write()`` method. Default: |NullWriter|

    do_gene : bool, optional
        Assemble gene-level parents (Default: `True`; ignored for BED files)

    do_exon, do_cds, do_utr, do_codon : bool, optional
        Include exon, CDS, UTR, and codon subfeatures (Default: `False`)

    do_name : bool, optional
        UCSC only. Use gene symbols from auxiliary tables as display names
        (Default: `False`)

    source : str or None, optional
        `source_tag` of features. Default: base name of `filename`

    feature_class : class or str, optional
        |SeqFeature| subclass, or its dotted import path, used to build features.
        May also be given under the key `'class'`. (Default: |SeqFeature|)

    tabix : bool, optional
        File is bgzipped and `tabix`_-indexed, and is read through :mod:`pysam`
        (Default: `False`)

    refseqsum, refseqstat, kgxref, ensname, enssrc : str or dict, optional
        UCSC only. Auxiliary tables, as file paths or loaded dictionaries


    Attributes
    ----------
    filename : str
        Name of open file

    flavor : str
        Family of formats handled by the parser (`'bed'`, `'ucsc'`, or `'gff'`)

    filetype : str
        Exact dialect of the open file

    state : str
        One of `'unopened'`, `'open'`, `'streaming'`, `'materializing'`, or `'exhausted'`

    mode : str or None
        Retrieval mode in use: `'streaming'`, `'materializing'`, or `None`

    loaded : dict
        Map of `primary_id` to feature, for lookup

    comments : list
        Comment, `track`, and `browser` lines, verbatim

    metadata : dict
        Key-value pairs parsed from `track` lines and file directives

    counter : int
        Number of lines read so far

    orphan_count : int
        Number of child features dropped because their parents never appeared

    dropped_orphans : list
        Identifiers of dropped child features
    """

    flavor = None

    def __init__(self,filename=None,filetype=None,printer=None,**kwargs):
        self.stream = None
        config = dict(DEFAULT_CONFIG)
        if "class" in kwargs:
            kwargs["feature_class"] = kwargs.pop("class")

        unknown = set(kwargs) - set(DEFAULT_CONFIG)
        if unknown:
            raise TypeError("Unrecognized configuration option(s): %s" % ", ".join(sorted(unknown)))

        config.update(kwargs)
        self.config  = config
        self.printer = NullWriter() if printer is None else printer

        self.do_gene  = bool(config["do_gene"])
        self.do_exon  = bool(config["do_exon"])
        self.do_cds   = bool(config["do_cds"])
        self.do_utr   = bool(config["do_utr"])
        self.do_codon = bool(config["do_codon"])
        self.do_name  = bool(config["do_name"])
        self.feature_class = load_feature_class(config["feature_class"])

        if self.flavor != "ucsc":
            given = [X for X in AUXILIARY_TABLES if config[X] is not None]
            if given:
                warn("Auxiliary tables (%s) apply only to UCSC files, and will be ignored." % ", ".join(given),
                     ArgumentWarning)

        self.filename  = None
        self.filetype  = filetype
        self.source    = None
        self.state     = "unopened"
        self.mode      = None
        self.counter   = 0

        self.loaded          = {}
        self.comments        = []
        self.metadata        = {}
        self.orphan_count    = 0
        self.dropped_orphans = []

        self._top_features = []
        self._top_cursor   = 0
        self._seq_ids      = {}
        self._id_counts    = {}
        self._failed       = False
        self._end_of_data  = False

        if filename is not None:
            self.open_file(filename)

    def __repr__(self):
        return "<%s file='%s' filetype='%s' state='%s'>" % (self.__class__.__name__,
                                                            self.filename,
                                                            self.filetype,
                                                            self.state)

    # opening ----------------------------------------------------------------

    def taste(self):
        """Determine `(flavor, filetype)` of the open file.
        Has no effect if the filetype is already known.

        Returns
        -------
        tuple
            `(flavor, filetype)`

        Raises
        ------
        UnrecognizedFormat
            If the file is not of this parser's flavor, or cannot be identified
        """
        if self.filetype is None:
            _, self.filetype = taste_file(self.filename,flavor=self.flavor)
        elif self.filetype not in FILETYPES[self.flavor]:
            raise UnrecognizedFormat(self.filename,"'%s' is not a %s filetype" % (self.filetype,self.flavor))

        return self.flavor, self.filetype

    def open_file(self,filename):
        """Open `filename` and determine its dialect

        Parameters
        ----------
        filename : str
            Path to annotation file, optionally gzipped or bzipped

        Raises
        ------
        InvalidModeTransition
            If a file has already been opened by this parser

        UnrecognizedFormat
            If the format of `filename` cannot be determined
        """
        if self.state != "unopened":
            raise InvalidModeTransition(self.state,"opening")

        self.filename = filename
        self.taste()
        self.source = self.config["source"] or get_source_name(filename)
        self.options = self._build_options()
        if self.config["tabix"]:
            self.stream = _tabix_lines(filename)
        else:
            self.stream = opener(filename)

        self.state = "open"

    def _build_options(self):
        """Return the :class:`~annotree.genomics.builder.BuildOptions` for this file"""
        return BuildOptions(do_exon=self.do_exon,
                            do_cds=self.do_cds,
                            do_utr=self.do_utr,
                            do_codon=self.do_codon,
                            feature_class=self.feature_class,
                            source=self.source)

    def close(self):
        """Close the underlying file"""
        if self.stream is not None:
            AbstractReader.close(self)
            self.stream = None

    # line handling ----------------------------------------------------------

    def _handle_comment(self,line):
        """Store a comment, `track`, or `browser` line

        Returns
        -------
        bool
            `True` if the line ends feature data in the file
        """
        self.comments.append(line)
        if line.startswith("track"):
            self.metadata.update(parse_track_line(line))

        return False

    def _next_line(self):
        """Return the next data line, storing any comments before it

        Returns
        -------
        str or None
            Line without its line terminator, or `None` at end of data
        """
        if self.stream is None or self._end_of_data:
            return None

        for line in self.stream:
            self.counter += 1
            line = line.rstrip("\r\n")
            if line.strip() == "":
                continue
            if line.startswith(COMMENT_PREFIXES):
                if self._handle_comment(line):
                    self._end_of_data = True
                    return None
                continue

            return line

        return None

    def _malformed(self,message,line):
        """Create a |MalformedLine| for the current line"""
        return MalformedLine(self.filename,message,line_num=self.counter,raw_line=line)

    # identifiers and extents ------------------------------------------------

    def _unique_id(self,primary_id):
        """Return `primary_id`, or if it has been used, `primary_id` followed by
        the lowest numeric suffix (`.1`, `.2` ...) not yet used. The returned
        identifier is reserved.
        """
        if primary_id not in self._id_counts:
            self._id_counts[primary_id] = 0
            return primary_id

        while True:
            self._id_counts[primary_id] += 1
            candidate = "%s.%s" % (primary_id,self._id_counts[primary_id])
            if candidate not in self._id_counts:
                self._id_counts[candidate] = 0
                return candidate

    def _record_extent(self,feature):
        """Update the greatest coordinate seen on the chromosome of `feature`"""
        self._seq_ids[feature.seq_id] = max(self._seq_ids.get(feature.seq_id,0),feature.end)

    def _register(self,feature,top=True,keep=True):
        """Give `feature` a unique identifier, renaming it and its derived
        subfeatures if necessary

        Parameters
        ----------
        feature : |SeqFeature|

        top : bool, optional
            If `True` (default), `feature` is a top-level feature, whose
            chromosome extent is recorded

        keep : bool, optional
            If `True` (default), add `feature` to the materialized collections
        """
        new_id = self._unique_id(feature.primary_id)
        if new_id != feature.primary_id:
            feature.rename(new_id)

        if top:
            self._record_extent(feature)
        if keep:
            self.loaded[feature.primary_id] = feature
            if top:
                self._top_features.append(feature)

    # streaming --------------------------------------------------------------

    def __next__(self):
        feature = self.next_feature()
        if feature is None:
            raise StopIteration

        return feature

    def next_feature(self):
        """Decode and return the next feature from the file

        Returns
        -------
        |SeqFeature| or None
            Next feature, or `None` once the file is exhausted

        Raises
        ------
        InvalidModeTransition
            If materializing retrieval has begun, or no file is open
        """
        if self.mode == "materializing" or self.state == "unopened":
            raise InvalidModeTransition(self.state,"streaming")
        if self.state == "exhausted":
            return None

        self.mode  = "streaming"
        self.state = "streaming"
        feature = self._next_streamed()
        if feature is None:
            self._finish_stream()
            self.close()
            self.state = "exhausted"

        return feature

    def _next_streamed(self):
        """Return the next feature in streaming mode, or `None` at end of data"""
        line = self._next_line()
        if line is None:
            return None

        feature = self.filter(line)
        self._register(feature,keep=False)
        return feature

    def _finish_stream(self):
        """Called once when streaming reaches the end of data"""
        pass

    # materializing ----------------------------------------------------------

    def parse_file(self):
        """Read the entire file, resolve all structure, and cache the results.
        Calling again after the file is exhausted returns the cached results.

        Returns
        -------
        list
            Top-level features, in file order

        Raises
        ------
        InvalidModeTransition
            If streaming retrieval has begun, no file is open, or
            an earlier call failed
        """
        if self.mode == "streaming" or self.state == "unopened" or self._failed:
            state = "failed" if self._failed else self.state
            raise InvalidModeTransition(state,"materializing")
        if self.state == "exhausted":
            return self._top_features

        self.mode  = "materializing"
        self.state = "materializing"
        self.printer.write("Parsing %s format file %s..." % (self.filetype,self.filename))
        try:
            self._materialize()
        except BaseException:
            self._failed = True
            self._top_features = []
            self.loaded = {}
            raise
        finally:
            self.close()
            self.state = "exhausted"

        self.printer.write("Loaded %s top-level features from %s." % (len(self._top_features),self.filename))
        return self._top_features

    def _materialize(self):
        """Decode every remaining line into top-level features"""
        while True:
            line = self._next_line()
            if line is None:
                break
            self._register(self.filter(line))

    @property
    def top_features(self):
        """Top-level features, in file order. Reads the whole file if necessary."""
        return self.parse_file()

    def next_top_feature(self):
        """Return top-level features one at a time, reading the whole file first
        if necessary

        Returns
        -------
        |SeqFeature| or None
            Next top-level feature, or `None` when all have been returned
        """
        features = self.parse_file()
        if self._top_cursor >= len(features):
            return None

        self._top_cursor += 1
        return features[self._top_cursor - 1]

    def fetch(self,primary_id):
        """Look up a feature by `primary_id`, reading the whole file if necessary

        Parameters
        ----------
        primary_id : str

        Returns
        -------
        |SeqFeature| or None
        """
        self.parse_file()
        return self.loaded.get(primary_id)

    get_feature_by_id = fetch

    def number_loaded(self):
        """Return the number of features available through :meth:`fetch`"""
        return len(self.loaded)

    # chromosome extents -----------------------------------------------------

    def seq_id_lengths(self):
        """Return the greatest coordinate observed on each chromosome.
        Reads the whole file unless streaming has begun.

        Returns
        -------
        dict
            Map of chromosome name to greatest `end` coordinate
        """
        if self.state == "open":
            self.parse_file()

        return dict(self._seq_ids)

    def seq_ids(self):
        """Return sorted names of chromosomes with features"""
        return sorted(self.seq_id_lengths())

    # descriptions -----------------------------------------------------------

    def typelist(self):
        """Return comma-separated feature types produced from this file"""
        raise NotImplementedError()

    @deprecated(replacement="filetype")
    def version(self):
        """Return :attr:`filetype`"""
        return self.filetype
