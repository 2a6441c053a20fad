#!/usr/bin/env python
"""Build transcript-shaped |SeqFeature| trees from flat exon lists.

`BED12`_, `gappedPeak`, and all UCSC `genePred`-family tables describe
a transcript the same way: a list of exon (or block) coordinates, plus the
bounds of the coding region. :func:`build_transcript` turns that description
into a transcript with exon, CDS, UTR, and codon children. It keeps no state
between calls, so the BED and UCSC parsers share it.

All coordinates passed to :func:`build_transcript` are 0-based and half-open,
as they are stored in those formats. Features it returns are 1-based and closed.


Rules for children
------------------
Each exon is split at the coding boundaries `[cds_start, cds_end)`:

  - the part left of `cds_start` is a 5' UTR on the forward strand,
    or a 3' UTR on the reverse strand
  - the part inside is CDS
  - the part right of `cds_end` is a 3' UTR on the forward strand,
    or a 5' UTR on the reverse strand

Zero-length parts are never emitted. If `cds_start == cds_end` the transcript
is noncoding and gets neither CDS, UTR, nor codon children.

When codons are requested, the first and last three coding nucleotides
(oriented by strand) become `start_codon` and `stop_codon` children, and are
removed from the CDS children, so that UTR, CDS, and codon children together
tile the exons without overlap. Codons that cross an intron are split into
one child per exon. Coding regions shorter than six nucleotides get no codons.
"""
__author__ = "annotree developers"
from collections import namedtuple
import numpy

from annotree.genomics.seqfeature import SeqFeature


BuildOptions = namedtuple("BuildOptions",["do_exon","do_cds","do_utr","do_codon","feature_class","source"])
"""Options controlling which children :func:`build_transcript` emits.

Attributes
----------
do_exon, do_cds, do_utr, do_codon : bool
    Whether to emit exon, CDS, UTR, and codon children

feature_class : class
    |SeqFeature| or subclass used to build features

source : str or None
    `source_tag` given to all features
"""

DEFAULT_OPTIONS = BuildOptions(do_exon=False,do_cds=False,do_utr=False,do_codon=False,
                               feature_class=SeqFeature,source=None)

NONCODING_TYPES = {
    "lincRNA"     : "lnc_RNA",
    "lncRNA"      : "lnc_RNA",
    "miRNA"       : "miRNA",
    "misc_RNA"    : "ncRNA",
    "ncRNA"       : "ncRNA",
    "piRNA"       : "piRNA",
    "rRNA"        : "rRNA",
    "scaRNA"      : "scaRNA",
    "snoRNA"      : "snoRNA",
    "snRNA"       : "snRNA",
    "tRNA"        : "tRNA",
    "antisense"   : "antisense_RNA",
}
"""Transcript types for noncoding molecule or biotype names found in UCSC
auxiliary tables (`refSeqStatus.mol`, `ensemblSource.source`)"""


def infer_transcript_type(coding,mol=None,biotype=None):
    """Choose a `primary_tag` for a transcript

    Parameters
    ----------
    coding : bool
        Whether transcript has a nonzero coding region

    mol : str or None, optional
        Molecule type, as reported by the UCSC `refSeqStatus` table

    biotype : str or None, optional
        Biotype, as reported by the UCSC `ensemblSource` table

    Returns
    -------
    str
        `'mRNA'` for coding transcripts. For noncoding transcripts, a type
        from :data:`NONCODING_TYPES` if `biotype` or `mol` are recognized,
        `'pseudogenic_transcript'` for pseudogenes, otherwise `'ncRNA'`
    """
    if coding:
        return "mRNA"

    for hint in (biotype,mol):
        if not hint:
            continue
        if "pseudogene" in hint:
            return "pseudogenic_transcript"
        if hint in NONCODING_TYPES:
            return NONCODING_TYPES[hint]

    return "ncRNA"


def sort_exons(exons):
    """Convert exon coordinates to an array sorted by ascending start

    Parameters
    ----------
    exons : list-like
        `(start, end)` pairs, in any order

    Returns
    -------
    :class:`numpy.ndarray`
        Array of shape `(N, 2)`
    """
    exons = numpy.asarray(exons,dtype=int).reshape(-1,2)
    return exons[numpy.argsort(exons[:,0],kind="stable")]


def split_exons(exons,cds_start,cds_end):
    """Split sorted exons at the bounds of the coding region

    Parameters
    ----------
    exons : :class:`numpy.ndarray`
        Sorted `(start, end)` pairs, 0-based half-open

    cds_start, cds_end : int
        Coding region, 0-based half-open

    Returns
    -------
    list
        Left-hand noncoding segments, as `(start, end)` tuples

    list
        Coding segments

    list
        Right-hand noncoding segments
    """
    left  = []
    cds   = []
    right = []
    for start, end in exons:
        start = int(start)
        end   = int(end)
        if start < cds_start:
            left.append((start,min(end,cds_start)))
        if start < cds_end and end > cds_start:
            cds.append((max(start,cds_start),min(end,cds_end)))
        if end > cds_end:
            right.append((max(start,cds_end),end))

    return left, cds, right


def _take_left(segments,n):
    """Remove the leftmost `n` nucleotides from sorted `segments`

    Returns
    -------
    list
        Segments covering those nucleotides

    list
        Remaining segments
    """
    taken  = []
    remain = list(segments)
    while n > 0 and remain:
        start, end = remain.pop(0)
        length = end - start
        if length <= n:
            taken.append((start,end))
            n -= length
        else:
            taken.append((start,start+n))
            remain.insert(0,(start+n,end))
            n = 0

    return taken, remain


def _take_right(segments,n):
    """Remove the rightmost `n` nucleotides from sorted `segments`

    Returns
    -------
    list
        Segments covering those nucleotides, sorted

    list
        Remaining segments
    """
    mirrored = [(-end,-start) for start, end in reversed(segments)]
    taken, remain = _take_left(mirrored,n)
    taken  = [(-end,-start) for start, end in reversed(taken)]
    remain = [(-end,-start) for start, end in reversed(remain)]
    return taken, remain


def extract_codons(cds_segments,strand):
    """Separate start and stop codons from sorted coding segments

    Parameters
    ----------
    cds_segments : list
        Coding segments, 0-based half-open, sorted by start

    strand : str
        `'+'`, `'-'`, or `'.'`. Unstranded features are treated as forward.

    Returns
    -------
    list
        Start codon segments

    list
        Coding segments remaining after codons are removed

    list
        Stop codon segments
    """
    coding_length = sum(end - start for start, end in cds_segments)
    if coding_length < 6:
        return [], list(cds_segments), []

    if strand == "-":
        start_codon, remain = _take_right(cds_segments,3)
        stop_codon,  remain = _take_left(remain,3)
    else:
        start_codon, remain = _take_left(cds_segments,3)
        stop_codon,  remain = _take_right(remain,3)

    return start_codon, remain, stop_codon


def _number_along_strand(segments,strand):
    """Pair each segment with its 1-based rank from the 5' end of the strand"""
    if strand == "-":
        ranked = list(reversed(segments))
    else:
        ranked = list(segments)

    return [(i + 1, seg) for i, seg in enumerate(ranked)]


def build_transcript(transcript_id,seq_id,strand,tx_start,tx_end,cds_start,cds_end,exons,
                     options=DEFAULT_OPTIONS,primary_tag=None,exon_tag="exon",
                     display_name=None,score=None,attributes=None):
    """Build a transcript |SeqFeature| with exon, CDS, UTR, and codon children

    Parameters
    ----------
    transcript_id : str
        `primary_id` of transcript. Children receive identifiers derived
        from it, e.g. `transcript_id.exon1`, `transcript_id.cds2`

    seq_id : str
        Chromosome name

    strand : str
        `'+'`, `'-'`, or `'.'`

    tx_start, tx_end : int
        Bounds of transcript, 0-based half-open

    cds_start, cds_end : int
        Bounds of coding region, 0-based half-open. Equal values
        indicate a noncoding transcript.

    exons : list-like
        Exon `(start, end)` pairs, 0-based half-open, in any order

    options : :class:`BuildOptions`, optional
        Which children to emit, and the feature class to use

    primary_tag : str or None, optional
        Type of transcript. If `None`, `'mRNA'` for coding transcripts,
        otherwise `'ncRNA'`

    exon_tag : str, optional
        Type given to exon children (Default: `'exon'`)

    display_name : str or None, optional
        Name of transcript

    score : number or None, optional
        Score of transcript

    attributes : dict or None, optional
        Attributes of transcript

    Returns
    -------
    |SeqFeature|
        Transcript, with children ordered along its strand
    """
    feature_class = options.feature_class
    source        = options.source
    exons  = sort_exons(exons)
    coding = cds_start < cds_end
    if primary_tag is None:
        primary_tag = infer_transcript_type(coding)

    transcript = feature_class(seq_id,tx_start+1,tx_end,strand,
                               primary_id=transcript_id,
                               display_name=display_name,
                               primary_tag=primary_tag,
                               source_tag=source,
                               score=score,
                               attributes=attributes)
    strand = transcript.strand

    def make_children(segments,tag,label):
        for n, (start, end) in _number_along_strand(segments,strand):
            transcript.add_child(feature_class(seq_id,start+1,end,strand,
                                               primary_id="%s.%s%s" % (transcript_id,label,n),
                                               primary_tag=tag,
                                               source_tag=source))

    if options.do_exon:
        make_children([tuple(X) for X in exons],exon_tag,"exon")

    if not coding:
        return transcript

    left, cds, right = split_exons(exons,cds_start,cds_end)
    if options.do_utr:
        if strand == "-":
            five_prime, three_prime = right, left
        else:
            five_prime, three_prime = left, right

        make_children(five_prime,"five_prime_UTR","utr5p")
        make_children(three_prime,"three_prime_UTR","utr3p")

    if options.do_codon:
        start_codon, cds, stop_codon = extract_codons(cds,strand)
        make_children(start_codon,"start_codon","start_codon")
        make_children(stop_codon,"stop_codon","stop_codon")

    if options.do_cds:
        make_children(cds,"CDS","cds")

    return transcript
