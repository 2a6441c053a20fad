#!/usr/bin/env python
"""
Package overview
================

This package contains parsers for genomic annotation files. Every parser
converts the lines of a file into trees of |SeqFeature| objects, whose
coordinates are 1-based and closed, whatever the convention of the file.


    ======================================    =======================================
    **Annotation files**
    ---------------------------------------------------------------------------------
    :py:mod:`annotree.readers.bed`            `BED`_, :term:`Extended BED`, `bedGraph`,
                                              and ENCODE peak formats
    :py:mod:`annotree.readers.ucsc`           UCSC `genePred`, `genePredExt`,
                                              `refFlat`, and `knownGene` tables
    :py:mod:`annotree.readers.gff`            `GTF2`_ and `GFF3`_
    ======================================    =======================================


Helper code can be found in the following modules:

    =================================    ==========================================
    **Module**                           **Contents**
    ---------------------------------    ------------------------------------------
    :mod:`annotree.readers.parser`       :func:`open_annotation`, which picks a
                                         parser for any supported file

    :mod:`annotree.readers.taster`       Format detection from file names and
                                         contents

    :mod:`annotree.readers.common`       Base class and helper functions used by
                                         all annotation parsers

    :mod:`annotree.readers.gff_tokens`   Functions for parsing and escaping
                                         attributes in the ninth column of
                                         `GTF2`_ and `GFF3`_ files
    =================================    ==========================================
"""
