#!/usr/bin/env python
"""Tests for :py:mod:`annotree.readers.ucsc`"""
import unittest
import pytest

from annotree.readers.ucsc import UCSC_Parser, load_auxiliary_table, lookup_auxiliary
from annotree.util.services.exceptions import MalformedLine
from annotree.test.common import TempFileMixin, ListWriter, REFFLAT, KNOWNGENE, KGXREF, \
                                 GENEPRED_EXT


@pytest.mark.unit
class TestAuxiliaryTables(TempFileMixin,unittest.TestCase):

    def test_load_from_file(self):
        table = load_auxiliary_table(self.write(KGXREF,".txt"),"kgxref")
        self.assertEqual(sorted(table),["uc001aaa.3","uc010nxq.1"])
        self.assertEqual(table["uc001aaa.3"]["geneSymbol"],"DDX11L1")
        self.assertEqual(table["uc010nxq.1"]["spID"],"B7ZGX9")

    def test_load_from_dict_is_unchanged(self):
        dtmp = { "NM_1" : { "status" : "Reviewed" } }
        self.assertIs(load_auxiliary_table(dtmp,"refseqstat"),dtmp)

    def test_lookup_ignores_version_and_blank_values(self):
        tables = { "refseqstat" : { "NM_1" : { "status" : "Reviewed", "mol" : "" } } }
        self.assertEqual(lookup_auxiliary("NM_1.4",tables),{ "status" : "Reviewed" })
        self.assertEqual(lookup_auxiliary("NM_2",tables),{})


@pytest.mark.unit
class TestUCSC_Parser(TempFileMixin,unittest.TestCase):

    def test_refflat_genes(self):
        parser = UCSC_Parser(self.write(REFFLAT,".refFlat"))
        genes = parser.top_features
        self.assertEqual(parser.filetype,"refFlat")
        self.assertEqual([X.primary_id for X in genes],["GENE1","GENE2","GENE1.1"])
        self.assertEqual([X.primary_tag for X in genes],["gene"]*3)
        self.assertEqual(sorted(X.primary_id for X in genes[0].children),["NM_001","NM_002"])
        self.assertEqual((genes[0].start,genes[0].end),(101,1000))
        self.assertEqual(parser.fetch("NR_003").primary_tag,"ncRNA")
        self.assertEqual(parser.fetch("NM_001").primary_tag,"mRNA")
        self.assertEqual(parser.seq_id_lengths(),{ "chr1" : 1000, "chr2" : 500, "chr5" : 20 })

    def test_refflat_without_genes(self):
        parser = UCSC_Parser(self.write(REFFLAT,".refFlat"),do_gene=False)
        transcripts = parser.top_features
        self.assertEqual([X.primary_id for X in transcripts],["NM_001","NM_002","NR_003","NM_004"])
        self.assertEqual(transcripts[0].get_tag_value("gene_name"),"GENE1")

    def test_streaming_wraps_each_transcript_in_gene(self):
        parser = UCSC_Parser(self.write(REFFLAT,".refFlat"))
        genes = list(parser)
        self.assertEqual(len(genes),4)
        self.assertTrue(all(len(X.children) == 1 for X in genes))
        self.assertEqual(parser.state,"exhausted")

    def test_transcript_children(self):
        parser = UCSC_Parser(self.write(REFFLAT,".refFlat"),do_gene=False,do_exon=True,do_cds=True)
        tx = parser.fetch("NM_001")
        self.assertEqual(tx.strand,"+")
        self.assertEqual(sorted((X.start,X.end) for X in tx.get_children("exon")),[(101,300),(701,1000)])
        self.assertEqual(sorted((X.start,X.end) for X in tx.get_children("CDS")),[(251,300),(701,850)])

    def test_refseqstat_sets_noncoding_type(self):
        refseqstat = { "NR_003" : { "status" : "Reviewed", "mol" : "rRNA" } }
        parser = UCSC_Parser(self.write(REFFLAT,".refFlat"),refseqstat=refseqstat)
        tx = parser.fetch("NR_003")
        self.assertEqual(tx.primary_tag,"rRNA")
        self.assertEqual(tx.get_tag_value("status"),"Reviewed")

    def test_knowngene_with_kgxref(self):
        printer = ListWriter()
        parser = UCSC_Parser(self.write(KNOWNGENE,".txt"),
                             kgxref=self.write(KGXREF,".txt"),
                             do_name=True,
                             printer=printer)
        genes = parser.top_features
        self.assertEqual(parser.filetype,"knownGene")
        self.assertEqual(len(genes),1)
        self.assertEqual(genes[0].primary_id,"DDX11L1")
        self.assertEqual(len(genes[0].children),2)
        self.assertEqual(genes[0].children[0].display_name,"DDX11L1")
        self.assertEqual(genes[0].children[0].get_tag_value("proteinID"),"B7ZGX9")
        self.assertTrue(any("kgxref" in X for X in printer.messages))

    def test_knowngene_without_names(self):
        parser = UCSC_Parser(self.write(KNOWNGENE,".txt"))
        genes = parser.top_features
        self.assertEqual([X.primary_id for X in genes],["uc001aaa.3.gene","uc010nxq.1.gene"])

    def test_genepredext_name2_is_gene(self):
        parser = UCSC_Parser(self.write(GENEPRED_EXT,".txt"),do_exon=True)
        gene = parser.top_features[0]
        self.assertEqual(gene.primary_id,"ENSG01")
        tx = gene.children[0]
        self.assertEqual(tx.primary_id,"ENST01")
        self.assertEqual(tx.strand,"-")
        self.assertEqual(tx.get_tag_value("cdsStartStat"),"cmpl")
        self.assertEqual(tx.get_children("exon")[0].start,701)

    def test_wrong_column_count_raises(self):
        parser = UCSC_Parser(self.write(REFFLAT,".txt"),filetype="genePred")
        self.assertRaises(MalformedLine,parser.parse_file)

    def test_typelist(self):
        parser = UCSC_Parser(self.write(REFFLAT,".refFlat"),do_exon=True)
        self.assertEqual(parser.typelist(),"gene,mRNA,ncRNA,exon")
