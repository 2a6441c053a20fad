#!/usr/bin/env python
"""Tests for :py:mod:`annotree.genomics.seqfeature`"""
import unittest
import pytest
from annotree.genomics.seqfeature import SeqFeature, normalize_strand


@pytest.mark.unit
class TestNormalizeStrand(unittest.TestCase):

    def test_accepted_values(self):
        for inp, expected in [("+","+"),("-","-"),(".","."),
                              (1,"+"),(-1,"-"),(0,"."),
                              (None,".")]:
            self.assertEqual(normalize_strand(inp),expected)

    def test_rejects_unknown(self):
        self.assertRaises(ValueError,normalize_strand,"sideways")


@pytest.mark.unit
class TestSeqFeature(unittest.TestCase):

    def test_default_identifier_from_coordinates(self):
        feature = SeqFeature("chrA",101,200,"+")
        self.assertEqual(feature.primary_id,"chrA:101-200")
        self.assertEqual(feature.display_name,"chrA:101-200")

    def test_display_name_overrides_identifier(self):
        feature = SeqFeature("chrA",101,200,"+",primary_id="x",display_name="my name")
        self.assertEqual(feature.primary_id,"x")
        self.assertEqual(feature.display_name,"my name")

    def test_end_before_start_raises(self):
        self.assertRaises(ValueError,SeqFeature,"chrA",200,100,"+")

    def test_single_position_allowed(self):
        feature = SeqFeature("chrA",5,5,"+")
        self.assertEqual(feature.length,1)
        self.assertEqual(len(feature),1)

    def test_as_bed_coordinates(self):
        feature = SeqFeature("chrA",1000,1500,"+")
        self.assertEqual(feature.as_bed_coordinates(),(999,1500))

    def test_overlaps(self):
        a = SeqFeature("chrA",100,200,"+")
        self.assertTrue(a.overlaps(SeqFeature("chrA",200,300,"+")))
        self.assertFalse(a.overlaps(SeqFeature("chrA",201,300,"+")))
        self.assertFalse(a.overlaps(SeqFeature("chrA",150,300,"-")))
        self.assertTrue(a.overlaps(SeqFeature("chrA",150,300,"-"),stranded=False))
        self.assertFalse(a.overlaps(SeqFeature("chrB",150,300,"+")))

    def test_expand_to(self):
        a = SeqFeature("chrA",100,200,"+")
        a.expand_to(150,400)
        self.assertEqual((a.start,a.end),(100,400))
        a.expand_to(50,60)
        self.assertEqual((a.start,a.end),(50,400))

    def test_attributes_are_multivalued(self):
        feature = SeqFeature("chrA",1,10,attributes={ "Note" : ["a","b"], "score_type" : "p" })
        self.assertEqual(feature.get_tag_values("Note"),["a","b"])
        self.assertEqual(feature.get_tag_value("Note"),"a")
        self.assertEqual(feature.get_tag_value("score_type"),"p")
        self.assertEqual(feature.get_tag_value("missing","default"),"default")
        self.assertEqual(feature.get_tag_values("missing"),[])

        feature.add_tag_value("Note","c")
        self.assertEqual(feature.get_tag_values("Note"),["a","b","c"])
        self.assertTrue(feature.has_tag("Note"))
        self.assertEqual(feature.get_all_tags(),["Note","score_type"])

        self.assertEqual(feature.remove_tag("Note"),["a","b","c"])
        self.assertFalse(feature.has_tag("Note"))
        self.assertRaises(KeyError,feature.remove_tag,"Note")

    def test_children_sorted_along_forward_strand(self):
        parent = SeqFeature("chrA",1,1000,"+")
        for start in (500,100,300):
            parent.add_child(SeqFeature("chrA",start,start+50,"+"))
        self.assertEqual([X.start for X in parent.children],[100,300,500])

    def test_children_sorted_along_reverse_strand(self):
        parent = SeqFeature("chrA",1,1000,"-")
        for start in (100,500,300):
            parent.add_child(SeqFeature("chrA",start,start+50,"-"))
        self.assertEqual([X.start for X in parent.children],[500,300,100])

    def test_get_children_by_type(self):
        parent = SeqFeature("chrA",1,1000,"+")
        parent.add_child(SeqFeature("chrA",1,100,"+",primary_tag="exon"))
        parent.add_child(SeqFeature("chrA",50,100,"+",primary_tag="CDS"))
        parent.add_child(SeqFeature("chrA",1,49,"+",primary_tag="five_prime_UTR"))
        self.assertEqual(len(parent.get_children()),3)
        self.assertEqual([X.primary_tag for X in parent.get_children("exon")],["exon"])
        self.assertEqual(len(parent.get_children(("exon","CDS"))),2)

    def test_walk_visits_all_descendants(self):
        gene = SeqFeature("chrA",1,1000,"+",primary_id="g")
        tx = SeqFeature("chrA",1,1000,"+",primary_id="t")
        tx.add_child(SeqFeature("chrA",1,100,"+",primary_id="e"))
        gene.add_child(tx)
        self.assertEqual([X.primary_id for X in gene.walk()],["g","t","e"])

    def test_rename_cascades_to_derived_identifiers(self):
        tx = SeqFeature("chrA",1,1000,"+",primary_id="chrA:0-1000")
        tx.add_child(SeqFeature("chrA",1,100,"+",primary_id="chrA:0-1000.exon1"))
        tx.add_child(SeqFeature("chrA",200,300,"+",primary_id="unrelated"))
        tx.rename("chrA:0-1000.1")
        self.assertEqual(tx.primary_id,"chrA:0-1000.1")
        self.assertEqual(sorted(X.primary_id for X in tx.children),
                         ["chrA:0-1000.1.exon1","unrelated"])

    def test_copy_is_deep(self):
        tx = SeqFeature("chrA",1,1000,"+",primary_id="t",attributes={ "Note" : "x" })
        tx.add_child(SeqFeature("chrA",1,100,"+",primary_id="e"))
        dup = tx.copy(primary_id="t.1")
        dup.add_tag_value("Note","y")
        dup.children[0].primary_id = "changed"
        self.assertEqual(dup.primary_id,"t.1")
        self.assertEqual(tx.primary_id,"t")
        self.assertEqual(tx.get_tag_values("Note"),["x"])
        self.assertEqual(tx.children[0].primary_id,"e")

    def test_str_and_repr(self):
        feature = SeqFeature("chrA",101,200,"-",primary_tag="exon")
        self.assertEqual(str(feature),"chrA:101-200(-)")
        self.assertIn("exon",repr(feature))
        self.assertIn("children=0",repr(feature))
