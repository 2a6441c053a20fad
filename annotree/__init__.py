#!/usr/bin/env python
"""Welcome to annotree!

This package reads genomic annotation files written in many dialects, and
converts them into one hierarchical feature model. It provides:

  #. Parsers that identify the dialect of an annotation file, decode its
     coordinate conventions, and rebuild gene, transcript, exon, CDS, UTR,
     and codon structure (see |readers|)

  #. A feature type, |SeqFeature|, and a builder that turns exon lists into
     transcript trees (see |genomics|)

  #. Tools to facilitate writing command-line scripts (see |scriptlib|),
     and a script summarizing annotation files (see |bin|)


Package overview
----------------
annotree is divided into the following subpackages:

    ==============    =========================================================
    Package           Contents
    --------------    ---------------------------------------------------------
    |bin|             Command-line scripts
    |genomics|        Feature type and transcript builder
    |readers|         Parsers for annotation file formats
    |util|            Utilities (e.g. function decorators, exceptions, argument parsers)
    |test|            Unit and functional tests
    ==============    =========================================================

"""
__version__ = "0.1.0"
__author__  = "annotree developers"

from annotree.genomics.seqfeature import SeqFeature
from annotree.readers.bed import BED_Parser
from annotree.readers.ucsc import UCSC_Parser
from annotree.readers.gff import GFF_Parser
from annotree.readers.parser import open_annotation

from annotree.util.services.exceptions import formatwarning
