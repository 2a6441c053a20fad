#!/usr/bin/env python
"""Tests for :py:mod:`annotree.readers.taster`"""
import io
import unittest
import pytest

from annotree.readers.taster import taste_file, taste_extension, classify_bed, \
                                    classify_gff, classify_ucsc, read_first_data_line
from annotree.util.services.exceptions import UnrecognizedFormat
from annotree.test.common import TempFileMixin, BED6, BED9, BED12_CODING, BEDGRAPH, \
                                 NARROWPEAK, BROADPEAK, GAPPEDPEAK, REFFLAT, KNOWNGENE, \
                                 GENEPRED_EXT, GFF3, GTF2


@pytest.mark.unit
class TestTasteExtension(unittest.TestCase):

    def test_extensions(self):
        tests = [("sample.narrowPeak",("bed","narrowPeak")),
                 ("sample.narrowpeak.gz",("bed","narrowPeak")),
                 ("sample.bed.bz2",("bed",None)),
                 ("sample.gtf",("gff","gtf")),
                 ("sample.gff",("gff",None)),
                 ("refGene.txt.gz",(None,None)),
                 ("sample.refFlat",("ucsc",None)),
                ]
        for filename, expected in tests:
            self.assertEqual(taste_extension(filename),expected,filename)


@pytest.mark.unit
class TestClassifiers(unittest.TestCase):

    def test_classify_bed_column_counts(self):
        self.assertEqual(classify_bed(["chr1","0","100"]),"bed3")
        self.assertEqual(classify_bed(["chr1","0","100","name","0","+"]),"bed6")
        self.assertEqual(classify_bed(["chr1","0","100","2.5"]),"bed4")
        self.assertEqual(classify_bed(["chr1","0","100","2.5"],strict=False),"bedGraph")

    def test_classify_bed_rejects(self):
        self.assertIsNone(classify_bed(["chr1","a","100"]))
        self.assertIsNone(classify_bed(["chr1","200","100"]))
        self.assertIsNone(classify_bed(["chr1","0","100","name","0","sideways"]))

    def test_classify_bed_track_type(self):
        fields = ["chr1","0","100","n","0",".","1.0","2.0","3.0","50"]
        self.assertEqual(classify_bed(fields),"narrowPeak")
        self.assertEqual(classify_bed(fields,track_type="narrowPeak"),"narrowPeak")

    def test_classify_bed_narrow_peak_with_integer_statistics(self):
        fields = ["chr1","9","100","p","0",".","50","60","0","50"]
        self.assertEqual(classify_bed(fields),"narrowPeak")
        fields[9] = "-1"
        self.assertEqual(classify_bed(fields),"narrowPeak")

    def test_classify_bed_ten_columns(self):
        self.assertEqual(classify_bed(["chr1","9","100","n","0","+","9","100","255,0,0","1"]),"bed10")
        # summit beyond the end of the interval
        self.assertEqual(classify_bed(["chr1","9","100","n","0","+","9","100","0","500"]),"bed10")

    def test_classify_gff(self):
        gff3 = ["chrI","src","exon","1","10",".","+",".","ID=e1"]
        gtf  = ["chrI","src","exon","1","10",".","+",".",'gene_id "g"; transcript_id "t";']
        self.assertEqual(classify_gff(gff3),"gff3")
        self.assertEqual(classify_gff(gtf),"gtf")
        self.assertEqual(classify_gff(gtf,version="3"),"gff3")
        self.assertIsNone(classify_gff(gff3[:8]))
        self.assertIsNone(classify_gff(["chrI","src","exon","a","10",".","+",".","ID=e1"]))

    def test_classify_ucsc(self):
        fields = REFFLAT.split("\n")[0].split("\t")
        self.assertEqual(classify_ucsc(fields),"refFlat")
        self.assertEqual(classify_ucsc(KNOWNGENE.split("\n")[0].split("\t")),"knownGene")
        self.assertEqual(classify_ucsc(GENEPRED_EXT.split("\n")[0].split("\t")),"genePredExt")

    def test_classify_ucsc_rejects_mismatched_exon_count(self):
        fields = REFFLAT.split("\n")[0].split("\t")
        fields[8] = "3"
        self.assertIsNone(classify_ucsc(fields))

    def test_read_first_data_line_collects_hints(self):
        stream = io.StringIO("##gff-version 3\n#name\tchrom\n\ntrack type=bedGraph\nchr1\t0\t10\n")
        line, hints = read_first_data_line(stream)
        self.assertEqual(line,"chr1\t0\t10")
        self.assertEqual(hints["gff_version"],"3")
        self.assertEqual(hints["header"],["name","chrom"])
        self.assertEqual(hints["track_type"],"bedGraph")


@pytest.mark.unit
class TestTasteFile(TempFileMixin,unittest.TestCase):

    def test_trusted_extensions(self):
        fn = self.write(NARROWPEAK,".narrowPeak")
        self.assertEqual(taste_file(fn),("bed","narrowPeak"))

    def test_bed_by_content(self):
        tests = [(BED6,"bed6"),
                 (BED9,"bed9"),
                 (BED12_CODING,"bed12"),
                 (BEDGRAPH,"bedGraph"),
                 (BROADPEAK,"broadPeak"),
                 (NARROWPEAK,"narrowPeak"),
                 (GAPPEDPEAK,"gappedPeak"),
                ]
        for text, expected in tests:
            fn = self.write(text,".bed")
            self.assertEqual(taste_file(fn),("bed",expected),expected)

    def test_four_columns_without_extension(self):
        text = "chr1\t0\t100\t2.5\nchr1\t100\t200\t0\n"
        self.assertEqual(taste_file(self.write(text,".txt")),("bed","bedGraph"))
        self.assertEqual(taste_file(self.write(text,".bed")),("bed","bed4"))

    def test_ucsc_by_content(self):
        self.assertEqual(taste_file(self.write(REFFLAT,".refFlat")),("ucsc","refFlat"))
        self.assertEqual(taste_file(self.write(KNOWNGENE,".txt")),("ucsc","knownGene"))
        self.assertEqual(taste_file(self.write(GENEPRED_EXT,".txt",compress=True)),("ucsc","genePredExt"))

    def test_gff_by_content(self):
        self.assertEqual(taste_file(self.write(GTF2,".gff")),("gff","gtf"))
        self.assertEqual(taste_file(self.write(GFF3,".gff")),("gff","gff3"))

    def test_flavor_mismatch_raises(self):
        fn = self.write(GTF2,".gtf")
        self.assertRaises(UnrecognizedFormat,taste_file,fn,flavor="bed")

    def test_unrecognized_content_raises(self):
        fn = self.write("this is not\tan annotation\n",".txt")
        self.assertRaises(UnrecognizedFormat,taste_file,fn)

    def test_no_data_lines_raises(self):
        fn = self.write("# only a comment\n",".bed")
        self.assertRaises(UnrecognizedFormat,taste_file,fn)
