#!/usr/bin/env python
"""Test suite for :py:mod:`annotree.bin.annotation_summary`"""
import os
import shlex
import shutil
import tempfile
import unittest
import warnings
import pandas as pd
import pytest

from annotree.bin.annotation_summary import main, summarize_features, summarize_chromosomes, \
                                            FEATURE_COLUMNS, CHROMOSOME_COLUMNS
from annotree.genomics.seqfeature import SeqFeature
from annotree.util.services.exceptions import family_filters, once_registry
from annotree.test.common import write_temp, BED6, GTF2


def _read(fn):
    return pd.read_csv(fn,sep="\t",comment="#",keep_default_na=False)


@pytest.mark.unit
class TestTables(unittest.TestCase):

    def test_summarize_features(self):
        features = [SeqFeature("chrA",101,200,"+",primary_id="a",display_name="A",primary_tag="gene"),
                    SeqFeature("chrB",1,50,"-",primary_id="b")]
        table = summarize_features(features)
        self.assertEqual(list(table.columns),FEATURE_COLUMNS)
        self.assertEqual(list(table["start"]),[100,0])
        self.assertEqual(list(table["name"]),["A","b"])
        self.assertEqual(list(table["type"]),["gene","region"])

    def test_summarize_chromosomes_counts_empty(self):
        features = [SeqFeature("chrA",101,200,"+"),SeqFeature("chrA",301,400,"+")]
        table = summarize_chromosomes(summarize_features(features),{ "chrA" : 400, "chrB" : 90 })
        self.assertEqual(list(table.columns),CHROMOSOME_COLUMNS)
        self.assertEqual(list(table["features"]),[2,0])

    def test_summarize_empty(self):
        table = summarize_chromosomes(summarize_features([]),{})
        self.assertEqual(len(table),0)


@pytest.mark.functional
class TestAnnotationSummary(unittest.TestCase):

    def setUp(self):
        self.tempdir = tempfile.mkdtemp(prefix="annotation_summary")
        self.outbase = os.path.join(self.tempdir,"test")
        self.inputs  = []
        del family_filters[:]
        once_registry.clear()

    def tearDown(self):
        shutil.rmtree(self.tempdir)
        for fn in self.inputs:
            os.remove(fn)
        del family_filters[:]
        once_registry.clear()

    def _run(self,text,suffix,options=""):
        fn = write_temp(text,suffix)
        self.inputs.append(fn)
        argstr = "--annotation_file %s %s %s -q" % (fn,options,self.outbase)
        with warnings.catch_warnings():
            main(shlex.split(argstr))

        return _read(self.outbase + "_features.txt"), _read(self.outbase + "_chromosomes.txt")

    def test_gtf(self):
        features, chroms = self._run(GTF2,".gtf","--do_exon --do_cds")
        self.assertEqual(list(features.columns),FEATURE_COLUMNS)
        self.assertEqual(list(features["primary_id"]),["g1","g2"])
        self.assertEqual(list(features["name"]),["ABC","g2"])
        self.assertEqual(list(features["start"]),[99,9])
        self.assertEqual(list(features["end"]),[1200,50])
        self.assertEqual(list(features["children"]),[2,1])

        self.assertEqual(list(chroms["seq_id"]),["chrI","chrII"])
        self.assertEqual(list(chroms["max_end"]),[1200,50])
        self.assertEqual(list(chroms["features"]),[1,1])

    def test_bed_without_genes(self):
        features, chroms = self._run(BED6,".bed","--no_gene")
        self.assertEqual(len(features),4)
        self.assertEqual(list(features["type"]),["region"]*4)
        self.assertEqual(list(chroms["seq_id"]),["chr1","chr2"])
        self.assertEqual(list(chroms["max_end"]),[2500,100])
        self.assertEqual(list(chroms["features"]),[3,1])

    def test_output_header_records_arguments(self):
        self._run(BED6,".bed")
        with open(self.outbase + "_features.txt") as fh:
            header = [X for X in fh if X.startswith("##")]
        self.assertTrue(any("'annotation_file'" in X for X in header))
