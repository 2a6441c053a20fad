#!/usr/bin/env python
"""Summarize a genome annotation file in any supported format.

The format of the file is determined from its name and contents, and its
features are assembled into genes, transcripts, and subfeatures. Two
tab-delimited tables are written:

``OUTBASE_features.txt``
    One row per top-level feature, with its identifier, name, type,
    chromosome, 0-based start, end, strand, and number of children

``OUTBASE_chromosomes.txt``
    One row per chromosome, with the greatest end coordinate of any
    feature on it, and the number of top-level features it carries

Output
------
Both tables begin with a commented header recording the command-line arguments.
"""
import argparse
import inspect
import sys
import warnings
import pandas as pd

from annotree.util.io.filters import NameDateWriter
from annotree.util.io.openers import argsopener, get_short_name
from annotree.util.scriptlib.argparsers import AnnotationParser, BaseParser
from annotree.util.scriptlib.help_formatters import format_module_docstring

warnings.simplefilter("once")
printer = NameDateWriter(get_short_name(inspect.stack()[-1][1]))

FEATURE_COLUMNS = ["primary_id","name","type","seq_id","start","end","strand","children"]
CHROMOSOME_COLUMNS = ["seq_id","max_end","features"]


def summarize_features(features):
    """Tabulate top-level features

    Parameters
    ----------
    features : list
        Top-level |SeqFeature| objects

    Returns
    -------
    :class:`pandas.DataFrame`
        One row per feature, with 0-based, half-open coordinates
    """
    rows = []
    for feature in features:
        start, end = feature.as_bed_coordinates()
        rows.append({ "primary_id" : feature.primary_id,
                      "name"       : feature.display_name,
                      "type"       : feature.primary_tag,
                      "seq_id"     : feature.seq_id,
                      "start"      : start,
                      "end"        : end,
                      "strand"     : feature.strand,
                      "children"   : len(feature.children),
                    })

    return pd.DataFrame(rows,columns=FEATURE_COLUMNS)


def summarize_chromosomes(feature_table,seq_id_lengths):
    """Tabulate the extent of, and number of features on, each chromosome

    Parameters
    ----------
    feature_table : :class:`pandas.DataFrame`
        Table from :func:`summarize_features`

    seq_id_lengths : dict
        Map of chromosome name to greatest end coordinate

    Returns
    -------
    :class:`pandas.DataFrame`
    """
    extents = pd.DataFrame(sorted(seq_id_lengths.items()),columns=["seq_id","max_end"])
    counts  = feature_table.groupby("seq_id").size().rename("features").reset_index()
    table   = extents.merge(counts,on="seq_id",how="left")
    table["features"] = table["features"].fillna(0).astype(int)
    return table[CHROMOSOME_COLUMNS]


def main(argv=sys.argv[1:]):
    """Command-line program

    Parameters
    ----------
    argv : list, optional
        A list of command-line arguments, which will be processed
        as if the script were called from the command line if
        :py:func:`main` is called directly.

        Default: `sys.argv[1:]`. The command-line arguments, if the script is
        invoked from the command line
    """
    ap = AnnotationParser()
    bp = BaseParser()
    parser = argparse.ArgumentParser(description=format_module_docstring(__doc__),
                                     formatter_class=argparse.RawDescriptionHelpFormatter,
                                     parents=[ap.get_parser(),bp.get_parser()])
    parser.add_argument("outbase",type=str,help="Basename for output files")

    args = parser.parse_args(argv)
    bp.get_base_ops_from_args(args)

    with ap.get_parser_from_args(args,printer=printer) as annotation:
        printer.write("Detected %s file (%s format)." % (annotation.flavor,annotation.filetype))
        features = annotation.top_features
        if annotation.orphan_count > 0:
            printer.write("Dropped %s features whose parents never appeared." % annotation.orphan_count)

        feature_table = summarize_features(features)
        chrom_table   = summarize_chromosomes(feature_table,annotation.seq_id_lengths())
        printer.write("Feature types: %s" % annotation.typelist())

    fn = "%s_features.txt" % args.outbase
    printer.write("Writing %s..." % fn)
    with argsopener(fn,args,"w") as fout:
        feature_table.to_csv(fout,sep="\t",header=True,index=False,na_rep="")

    fn = "%s_chromosomes.txt" % args.outbase
    printer.write("Writing %s..." % fn)
    with argsopener(fn,args,"w") as fout:
        chrom_table.to_csv(fout,sep="\t",header=True,index=False)

    printer.write("Done.")


if __name__ == "__main__":
    main()
