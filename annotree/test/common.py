#!/usr/bin/env python
"""Annotation file contents and helpers shared by tests.

Each fixture is a string holding the complete text of a small annotation
file. :class:`TempFileMixin` writes them to temporary files, which are
removed after each test.
"""
import os
import gzip
from tempfile import NamedTemporaryFile


def _lines(*rows):
    return "".join("\t".join(str(X) for X in row) + "\n" for row in rows)


#===============================================================================
# INDEX: BED-family files
#===============================================================================

BED6 = "track name=example description=\"six columns\"\n" + _lines(
    ("chr1",999,1500,"foo",500,"+"),
    ("chr1",2000,2500,"bar",0,"-"),
    ("chr2",0,100,"baz",10,"."),
    ("chr1",999,1500,"foo_again",20,"+"),
)

# two blocks, [100,300) and [700,1000). CDS ends midway through block 2.
BED12_CODING = _lines(
    ("chr1",100,1000,"tx1",0,"+",100,850,"0",2,"200,300,","0,600,"),
)

# same blocks, CDS [250,850), on either strand
BED12_TWO_STRANDS = _lines(
    ("chr1",100,1000,"fwd",0,"+",250,850,"255,0,0",2,"200,300","0,600"),
    ("chr1",100,1000,"rev",0,"-",250,850,"255,0,0",2,"200,300","0,600"),
)

# start codon split across the intron
BED12_SPLIT_CODON = _lines(
    ("chr1",100,1000,"split",0,"+",298,850,"0",2,"200,300","0,600"),
)

BED12_NONCODING = _lines(
    ("chr3",100,1000,"nc",0,"+",1000,1000,"0",2,"200,300","0,600"),
)

BED12_BAD_BLOCKS = _lines(
    ("chr1",100,1000,"ok",0,"+",100,850,"0",2,"200,300","0,600"),
    ("chr1",100,1000,"bad",0,"+",100,850,"0",3,"200,300","0,600"),
)

NARROWPEAK = _lines(
    ("chr1",9,100,"p1",0,".",12.5,4.2,3.1,50),
    ("chr2",199,300,"p2",10,"+",8,-1,-1,20),
)

BROADPEAK = _lines(
    ("chr1",9,100,"p1",0,".",12.5,4.2,3.1),
)

GAPPEDPEAK = _lines(
    ("chr2",0,500,"gp1",100,".",0,500,"0",2,"100,100","0,400",5.0,3.2,1.1),
)

BED9 = _lines(
    ("chr1",9,100,"n1",0,"+",9,100,"255,0,0"),
)

BEDGRAPH = "track type=bedGraph\n" + _lines(
    ("chr1",0,100,2.5),
    ("chr1",100,200,0),
)


#===============================================================================
# INDEX: UCSC tables
#===============================================================================

REFFLAT = _lines(
    ("GENE1","NM_001","chr1","+",100,1000,250,850,2,"100,700,","300,1000,"),
    ("GENE1","NM_002","chr1","+",100,900,250,850,2,"100,700,","300,900,"),
    ("GENE2","NR_003","chr2","-",50,500,500,500,1,"50,","500,"),
    ("GENE1","NM_004","chr5","+",10,20,10,20,1,"10,","20,"),
)

KNOWNGENE = _lines(
    ("uc001aaa.3","chr1","+",11873,14409,11873,11873,3,"11873,12612,13220,","12227,12721,14409,","B7ZGX9","uc001aaa.3"),
    ("uc010nxq.1","chr1","+",11873,14409,12189,13639,3,"11873,12594,13402,","12227,12721,14409,","B7ZGX9","uc010nxq.1"),
)

GENEPRED_EXT = _lines(
    ("ENST01","chr1","-",100,1000,250,850,2,"100,700,","300,1000,",0,"ENSG01","cmpl","cmpl","1,0,"),
)

KGXREF = _lines(
    ("uc001aaa.3","NR_046018","","","DDX11L1","NR_046018","","DEAD/H box polypeptide 11 like 1"),
    ("uc010nxq.1","","B7ZGX9","B7ZGX9_HUMAN","DDX11L1","","","DEAD/H box polypeptide 11 like 1"),
)


#===============================================================================
# INDEX: GFF3 & GTF2 files
#===============================================================================

GFF3 = "##gff-version 3\n##sequence-region chrI 1 5000\n" + _lines(
    ("chrI","test","gene",100,900,".","+",".","ID=gene1;Name=ABC1"),
    ("chrI","test","mRNA",100,900,".","+",".","ID=tx1;Parent=gene1;Name=ABC1.1"),
    ("chrI","test","exon",100,300,".","+",".","ID=exon1;Parent=tx1"),
    ("chrI","test","exon",500,900,".","+",".","Parent=tx1"),
    ("chrI","test","CDS",150,300,".","+","0","ID=cds1;Parent=tx1"),
    ("chrI","test","CDS",500,800,".","+","2","ID=cds1;Parent=tx1"),
    ("chrI","test","five_prime_UTR",100,149,".","+",".","Parent=tx1"),
) + "###\n" + _lines(
    ("chrII","test","exon",10,50,".","-",".","Parent=tx2"),
    ("chrII","test","mRNA",10,200,".","-",".","ID=tx2"),
    ("chrII","test","exon",100,200,".","-",".","Parent=tx_missing"),
)

GFF3_DUPLICATE = "##gff-version 3\n" + _lines(
    ("chrI","test","gene",100,900,".","+",".","ID=gene1"),
    ("chrI","test","mRNA",1000,1900,".","+",".","ID=gene1"),
)

GFF3_MULTIPARENT = "##gff-version 3\n" + _lines(
    ("chrI","test","mRNA",100,900,".","+",".","ID=tx1"),
    ("chrI","test","mRNA",100,1200,".","+",".","ID=tx3"),
    ("chrI","test","exon",100,300,".","+",".","ID=shared;Parent=tx1,tx3"),
)

GFF3_SKIPPED_PARENT = "##gff-version 3\n" + _lines(
    ("chrI","test","mRNA",100,900,".","+",".","ID=tx1"),
    ("chrI","test","CDS",150,800,".","+","0","ID=cds1;Parent=tx1"),
    ("chrI","test","CDS_motif",160,190,".","+",".","ID=motif1;Parent=cds1"),
    ("chrI","test","polyA_site",900,900,".","+",".","ID=pA1;Parent=tx1"),
)

# children listed before parents that switches skip
GFF3_CHILDREN_FIRST = "##gff-version 3\n" + _lines(
    ("chrI","test","mRNA",100,900,".","+",".","ID=tx1;Parent=gene1"),
    ("chrI","test","exon",100,300,".","+",".","ID=exon1;Parent=tx1"),
    ("chrI","test","CDS_motif",160,190,".","+",".","ID=motif1;Parent=cds1"),
    ("chrI","test","CDS",150,300,".","+","0","ID=cds1;Parent=tx1"),
    ("chrI","test","gene",100,900,".","+",".","ID=gene1"),
)

# declared identifier equal to one generated from the coordinates of a line without ID
GFF3_COORDINATE_ID = "##gff-version 3\n" + _lines(
    ("chrI","test","repeat_region",100,300,".","+",".","Name=rpt"),
    ("chrI","test","mRNA",100,300,".","+",".","ID=chrI:100-300"),
    ("chrI","test","exon",100,300,".","+",".","Parent=chrI:100-300"),
)

GTF2_TRANSCRIPTS_ONLY = _lines(
    ("chrI","src","transcript",100,900,".","+",".",'gene_id "g1"; transcript_id "t1";'),
    ("chrI","src","exon",100,900,".","+",".",'gene_id "g1"; transcript_id "t1";'),
)

GFF3_FASTA ="##gff-version 3\n" + _lines(
    ("chrI","test","mRNA",100,900,".","+",".","ID=tx1"),
) + "##FASTA\n>chrI\nACGTACGTACGT\n"

GFF3_ESCAPED = "##gff-version 3\n" + _lines(
    ("chrI","test","mRNA",100,900,".","+",".","ID=tx%3B1;Note=complete%2C spliced,second"),
)

GTF2 = _lines(
    ("chrI","src","exon",100,300,".","+",".",'gene_id "g1"; transcript_id "t1"; gene_name "ABC";'),
    ("chrI","src","exon",500,900,".","+",".",'gene_id "g1"; transcript_id "t1"; gene_name "ABC";'),
    ("chrI","src","CDS",150,300,".","+","0",'gene_id "g1"; transcript_id "t1";'),
    ("chrI","src","CDS",500,800,".","+","2",'gene_id "g1"; transcript_id "t1";'),
    ("chrI","src","exon",1000,1200,".","+",".",'gene_id "g1"; transcript_id "t2";'),
    ("chrII","src","exon",10,50,".","-",".",'gene_id "g2"; transcript_id "t3";'),
)

GTF2_EXPLICIT = _lines(
    ("chrI","src","gene",100,1200,".","+",".",'gene_id "g1"; gene_name "ABC";'),
    ("chrI","src","transcript",100,900,".","+",".",'gene_id "g1"; transcript_id "t1"; transcript_name "ABC-201";'),
    ("chrI","src","exon",100,300,".","+",".",'gene_id "g1"; transcript_id "t1";'),
    ("chrI","src","exon",500,900,".","+",".",'gene_id "g1"; transcript_id "t1";'),
)



#===============================================================================
# INDEX: helpers
#===============================================================================

def write_temp(text,suffix,compress=False):
    """Write `text` to a new temporary file ending with `suffix`

    Returns
    -------
    str
        Name of file
    """
    if compress:
        suffix += ".gz"

    fh = NamedTemporaryFile(delete=False,mode="w",suffix=suffix)
    fh.close()
    if compress:
        with gzip.open(fh.name,"wt") as fout:
            fout.write(text)
    else:
        with open(fh.name,"w") as fout:
            fout.write(text)

    return fh.name


class TempFileMixin(object):
    """Mixin for :class:`unittest.TestCase` subclasses that write temporary files"""

    def setUp(self):
        self.temp_files = []

    def tearDown(self):
        for fn in self.temp_files:
            if os.path.exists(fn):
                os.remove(fn)

    def write(self,text,suffix,compress=False):
        fn = write_temp(text,suffix,compress=compress)
        self.temp_files.append(fn)
        return fn


class ListWriter(object):
    """Printer that keeps written messages in a list"""

    def __init__(self):
        self.messages = []

    def write(self,message):
        self.messages.append(message)
