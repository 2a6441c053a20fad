"""Data structures for annotated genomic features, and builders that
assemble transcripts from exon coordinates.

Modules
-------
:mod:`annotree.genomics.seqfeature`
    |SeqFeature|, the in-memory representation of an annotated interval

:mod:`annotree.genomics.builder`
    Assembly of transcripts, with exon, CDS, UTR, and codon children,
    from flat exon lists
"""
