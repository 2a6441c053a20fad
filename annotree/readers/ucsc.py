#!/usr/bin/env python
"""This module contains |UCSC_Parser|, which reads UCSC gene-prediction tables
into gene and transcript |SeqFeature| trees, and the decoder and auxiliary
table functions it uses.

.. contents::
   :local:

Supported tables
----------------
All tables hold one transcript per line, with 0-based, half-open transcript,
coding, and exon coordinates. They differ in their leading and trailing
columns:

    ================   =======   ==========================================
    Filetype           Columns   Columns beyond `genePred`
    ----------------   -------   ------------------------------------------
    `genePred`         10        none
    `refFlat`          11        `geneName`, before `name`
    `knownGene`        12        `proteinID`, `alignID`
    `genePredExt`      15        `score`, `name2`, `cdsStartStat`,
                                 `cdsEndStat`, `exonFrames`
    `genePredExtBin`   16        `bin`, before `name`, plus those
                                 of `genePredExt`
    ================   =======   ==========================================

Transcripts are built by :func:`~annotree.genomics.builder.build_transcript`,
the same routine used for `bed12` files. A transcript is `mRNA` if
`cdsStart < cdsEnd`, and otherwise a noncoding type inferred from auxiliary
tables, or `ncRNA`.


Genes
-----
If `do_gene` is `True` (the default), transcripts are grouped under `gene`
features. The gene name comes from `geneName` (`refFlat`), `name2`
(`genePredExt`), or the `kgXref` or `ensemblToGeneName` auxiliary tables.
When reading the whole file, transcripts sharing a gene name, chromosome,
and strand, and overlapping each other, share one gene. When streaming,
each gene holds only the transcript read with it.


Auxiliary tables
----------------
UCSC distributes tables that describe the transcripts in gene-prediction
tables. These may be passed to the parser as paths or dictionaries:

    ==============   ====================   ==============================
    Keyword          UCSC table             Attributes added
    --------------   --------------------   ------------------------------
    `refseqsum`      `refSeqSummary`        `completeness`, `summary`
    `refseqstat`     `refSeqStatus`         `status`, `mol`
    `kgxref`         `kgXref`               `geneSymbol`, `description`,
                                            `spID`, `refseq`
    `ensname`        `ensemblToGeneName`    `geneSymbol`
    `enssrc`         `ensemblSource`        `biotype`
    ==============   ====================   ==============================

Examples
--------
Read a `refFlat` table, with exons and CDS, and look up a transcript::

    >>> parser = UCSC_Parser("refFlat.txt.gz",do_exon=True,do_cds=True)
    >>> transcript = parser.fetch("NM_000546")
"""
__author__ = "annotree developers"
import numpy

from annotree.readers.common import AbstractAnnotationParser, AUXILIARY_TABLES
from annotree.genomics.builder import build_transcript, infer_transcript_type
from annotree.util.io.openers import read_tabular


_GENEPRED = ["name","chrom","strand","txStart","txEnd","cdsStart","cdsEnd",
             "exonCount","exonStarts","exonEnds"]
_EXT      = ["score","name2","cdsStartStat","cdsEndStat","exonFrames"]

UCSC_TABLE_COLUMNS = {
    "genePred"       : _GENEPRED,
    "refFlat"        : ["geneName"] + _GENEPRED,
    "knownGene"      : _GENEPRED + ["proteinID","alignID"],
    "genePredExt"    : _GENEPRED + _EXT,
    "genePredExtBin" : ["bin"] + _GENEPRED + _EXT,
}
"""Column names of each UCSC gene-prediction table, in order"""

UCSC_COLUMN_OFFSETS = { K : { name : i for i, name in enumerate(V) } for K, V in UCSC_TABLE_COLUMNS.items() }
"""Map of table type to a map of column names to 0-based column numbers"""

EXTRA_ATTRIBUTES = ("proteinID","alignID","cdsStartStat","cdsEndStat","exonFrames")
"""Table columns copied into transcript attributes when present"""

AUXILIARY_COLUMNS = {
    "refseqsum"  : ["mrnaAcc","completeness","summary"],
    "refseqstat" : ["mrnaAcc","status","mol"],
    "kgxref"     : ["kgID","mRNA","spID","spDisplayID","geneSymbol","refseq","protAcc","description"],
    "ensname"    : ["name","geneSymbol"],
    "enssrc"     : ["name","biotype"],
}
"""Column names of auxiliary tables. The first column holds the transcript name."""

AUXILIARY_ATTRIBUTES = {
    "refseqsum"  : ("completeness","summary"),
    "refseqstat" : ("status","mol"),
    "kgxref"     : ("geneSymbol","description","spID","refseq"),
    "ensname"    : ("geneSymbol",),
    "enssrc"     : ("biotype",),
}
"""Auxiliary columns copied into transcript attributes"""



#===============================================================================
# INDEX: auxiliary tables
#===============================================================================

def load_auxiliary_table(source,kind):
    """Load a UCSC auxiliary table into a dictionary

    Parameters
    ----------
    source : str or dict
        Path to a tab-delimited table, optionally compressed, or a dictionary
        mapping transcript names to dictionaries of column values, which is
        returned unchanged

    kind : str
        One of :data:`AUXILIARY_COLUMNS`

    Returns
    -------
    dict
        Map of transcript name to a dictionary of column values. If a name
        appears more than once, its first row is used.
    """
    if isinstance(source,dict):
        return source

    columns = AUXILIARY_COLUMNS[kind]
    key = columns[0]
    table = read_tabular(source,columns)
    table = table.drop_duplicates(subset=key,keep="first").set_index(key)
    return table.to_dict(orient="index")

def _strip_version(name):
    """Remove a trailing version number from an accession, e.g. `NM_000546.5`"""
    base, sep, version = name.rpartition(".")
    if sep and version.isdigit():
        return base

    return name

def lookup_auxiliary(name,tables):
    """Collect attributes for transcript `name` from loaded auxiliary tables

    Parameters
    ----------
    name : str
        Transcript name. If not found, it is looked up again without
        any version suffix

    tables : dict
        Map of table kind to dictionary, as returned by :func:`load_auxiliary_table`

    Returns
    -------
    dict
        Map of attribute names to values
    """
    attributes = {}
    for kind in AUXILIARY_TABLES:
        table = tables.get(kind)
        if not table:
            continue

        row = table.get(name)
        if row is None:
            row = table.get(_strip_version(name))
        if row is None:
            continue

        for column in AUXILIARY_ATTRIBUTES[kind]:
            value = row.get(column)
            if value:
                attributes.setdefault(column,value)

    return attributes



#===============================================================================
# INDEX: decoder
#===============================================================================

def _to_int(text,name):
    try:
        return int(text)
    except ValueError:
        raise ValueError("%s must be an integer. Found '%s'" % (name,text))

def _to_int_list(text,name):
    items = [X for X in text.split(",") if X != ""]
    try:
        return numpy.array([int(X) for X in items],dtype=int)
    except ValueError:
        raise ValueError("%s must be a comma-separated list of integers. Found '%s'" % (name,text))


def decode_gene_prediction(fields,filetype,options,tables=None,do_name=False):
    """Decode a line of a UCSC gene-prediction table into a transcript

    Parameters
    ----------
    fields : list
        Tab-delimited fields of line

    filetype : str
        One of :data:`UCSC_TABLE_COLUMNS`

    options : :class:`~annotree.genomics.builder.BuildOptions`

    tables : dict or None, optional
        Loaded auxiliary tables, keyed by kind

    do_name : bool, optional
        Use the gene name as the display name of the transcript (Default: `False`)

    Returns
    -------
    |SeqFeature|
        Transcript. Its gene name, if known, is stored in attribute `gene_name`

    Raises
    ------
    ValueError
        If coordinates or exon lists are malformed
    """
    cols = UCSC_COLUMN_OFFSETS[filetype]
    get  = lambda key: fields[cols[key]]

    name      = get("name")
    tx_start  = _to_int(get("txStart"),"txStart")
    tx_end    = _to_int(get("txEnd"),"txEnd")
    cds_start = _to_int(get("cdsStart"),"cdsStart")
    cds_end   = _to_int(get("cdsEnd"),"cdsEnd")
    count     = _to_int(get("exonCount"),"exonCount")
    starts    = _to_int_list(get("exonStarts"),"exonStarts")
    ends      = _to_int_list(get("exonEnds"),"exonEnds")

    if tx_end < tx_start:
        raise ValueError("txEnd (%s) must be >= txStart (%s)" % (tx_end,tx_start))
    if not (count == len(starts) == len(ends)) or count == 0:
        raise ValueError("exonCount (%s) does not match number of exonStarts (%s) and exonEnds (%s)" % (count,
                                                                                                       len(starts),
                                                                                                       len(ends)))
    if (ends <= starts).any():
        raise ValueError("Each exon end must be greater than its start")

    attributes = lookup_auxiliary(name,tables or {})
    for key in EXTRA_ATTRIBUTES:
        if key in cols and fields[cols[key]] not in ("","."):
            attributes[key] = fields[cols[key]]

    gene_name = None
    for key in ("geneName","name2"):
        if key in cols and fields[cols[key]] not in ("","."):
            gene_name = fields[cols[key]]
            break
    if gene_name is None:
        gene_name = attributes.get("geneSymbol")
    if gene_name is not None:
        attributes["gene_name"] = gene_name

    score = None
    if "score" in cols and fields[cols["score"]] not in ("","."):
        score = _to_int(fields[cols["score"]],"score")

    coding = cds_start < cds_end
    primary_tag = infer_transcript_type(coding,
                                        mol=attributes.get("mol"),
                                        biotype=attributes.get("biotype"))

    display_name = gene_name if (do_name and gene_name) else name
    return build_transcript(name,get("chrom"),get("strand"),tx_start,tx_end,
                            cds_start,cds_end,numpy.vstack([starts,ends]).T,
                            options=options,
                            primary_tag=primary_tag,
                            display_name=display_name,
                            score=score,
                            attributes=attributes)



#===============================================================================
# INDEX: parser
#===============================================================================

class UCSC_Parser(AbstractAnnotationParser):
    """
    UCSC_Parser(filename=None, filetype=None, printer=None, **config)

    Parse UCSC gene-prediction tables into gene and transcript |SeqFeature| trees

    Parameters
    ----------
    filename : str or None, optional
        File to open

    filetype : str or None, optional
        One of :data:`UCSC_TABLE_COLUMNS`. If `None`, determined from the file

    printer : file-like, optional
        Logger implementing a ``write()`` method. Default: |NullWriter|

    **config
        Configuration switches, including auxiliary tables.
        See |AbstractAnnotationParser|

    Attributes
    ----------
    tables : dict
        Loaded auxiliary tables, keyed by kind
    """

    flavor = "ucsc"

    def __init__(self,filename=None,filetype=None,printer=None,**kwargs):
        AbstractAnnotationParser.__init__(self,filename=filename,filetype=filetype,printer=printer,**kwargs)
        self.tables = {}
        for kind in AUXILIARY_TABLES:
            source = self.config[kind]
            if source is not None:
                self.printer.write("Loading %s table %s..." % (kind,source if isinstance(source,str) else "from dictionary"))
                self.tables[kind] = load_auxiliary_table(source,kind)

        self._genes_by_name = {}

    def filter(self,line):
        """Decode one line into a transcript |SeqFeature|

        Parameters
        ----------
        line : str
            Data line

        Returns
        -------
        |SeqFeature|
        """
        fields = line.split("\t")
        expected = len(UCSC_TABLE_COLUMNS[self.filetype])
        if len(fields) != expected:
            raise self._malformed("%s lines must have %s columns. Found %s." % (self.filetype,expected,len(fields)),line)

        try:
            return decode_gene_prediction(fields,self.filetype,self.options,
                                          tables=self.tables,do_name=self.do_name)
        except ValueError as e:
            raise self._malformed(str(e),line)

    def _new_gene(self,transcript,keep=True):
        """Create and register a gene for `transcript`, without attaching it"""
        gene_name = transcript.get_tag_value("gene_name")
        if gene_name is None:
            primary_id   = "%s.gene" % transcript.primary_id
            display_name = transcript.display_name
        else:
            primary_id   = display_name = gene_name

        gene = self.feature_class(transcript.seq_id,transcript.start,transcript.end,transcript.strand,
                                  primary_id=primary_id,
                                  display_name=display_name,
                                  primary_tag="gene",
                                  source_tag=self.source)
        self._register(gene,keep=keep)
        return gene

    def _next_streamed(self):
        line = self._next_line()
        if line is None:
            return None

        transcript = self.filter(line)
        if not self.do_gene:
            self._register(transcript,keep=False)
            return transcript

        self._register(transcript,top=False,keep=False)
        gene = self._new_gene(transcript,keep=False)
        gene.add_child(transcript)
        return gene

    def _materialize(self):
        while True:
            line = self._next_line()
            if line is None:
                break

            transcript = self.filter(line)
            if not self.do_gene:
                self._register(transcript)
                continue

            self._register(transcript,top=False)
            name = transcript.get_tag_value("gene_name",transcript.primary_id)
            candidates = self._genes_by_name.setdefault(name,[])
            for gene in candidates:
                if gene.overlaps(transcript):
                    gene.expand_to(transcript.start,transcript.end)
                    self._record_extent(gene)
                    break
            else:
                gene = self._new_gene(transcript)
                candidates.append(gene)

            gene.add_child(transcript)

    def typelist(self):
        """Return comma-separated feature types produced from this file"""
        types = ["gene"] if self.do_gene else []
        types += ["mRNA","ncRNA"]
        if self.do_exon:
            types.append("exon")
        if self.do_cds:
            types.append("CDS")
        if self.do_utr:
            types.extend(["five_prime_UTR","three_prime_UTR"])
        if self.do_codon:
            types.extend(["start_codon","stop_codon"])

        return ",".join(types)
