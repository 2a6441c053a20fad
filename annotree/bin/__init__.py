#!/usr/bin/env python
"""Command-line scripts built on the annotation parsers in |readers|

    =========================   =============================================================================
    **Annotation files**
    ---------------------------------------------------------------------------------------------------------
    |annotation_summary|         Identify the format of an annotation file, assemble its features,
                                 and tabulate top-level features and chromosome extents
    =========================   =============================================================================

Scripts are installed as console commands by ``pip``, and can be run with ``--help``
for a description of their options.
"""
