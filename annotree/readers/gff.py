#!/usr/bin/env python
"""This module contains |GFF_Parser|, which reads `GFF3`_ and `GTF2`_ files
and assembles their lines into trees of |SeqFeature| objects.

.. contents::
   :local:

Identifiers and parents
-----------------------
In `GFF3`_ files, each line becomes one feature. Its `primary_id` is the value
of its `ID` attribute. Lines without an `ID` receive an identifier built from
their coordinates (`'chrI:201-300'`), with numeric suffixes when coordinates
repeat. `Parent` attributes link features to their parents. A feature with
several parents is attached to the first, and a copy of it, with a suffixed
identifier, is attached to each of the others.

Two lines with the same `ID` are an error, unless they share a feature type
and parents, in which case they are segments of one discontinuous feature
(e.g. a CDS split across exons). Later segments receive suffixed identifiers.
Identifiers generated for lines without an `ID` never conflict with declared
ones: if a later line declares the same identifier, the generated one is
given a suffix.

In `GTF2`_ files, `gene` and `transcript` lines take their identifiers from
`gene_id` and `transcript_id`. All other lines are children of the transcript
named by their `transcript_id`. Transcripts and genes that are referenced
but never declared are created from the span of their children, including
children skipped by configuration switches, when the file is read in full.
When `do_gene` is off, `gene_id` attributes link nothing, and no genes are
created.


Orphans
-------
Children may appear before their parents. In materializing mode, unresolved
children are queued until the next `###` directive or the end of the file.
Children whose parents still have not appeared are then dropped, counted
in :attr:`~GFF_Parser.orphan_count`, and reported in a single
|OrphanedChild| warning. Children whose parents appear, but are skipped by
a configuration switch, are not orphans: they are promoted or skipped as
described below.

In streaming mode, features whose parents have not yet been read are
returned unlinked and counted immediately. Each `###` directive releases
the identifiers read before it, so links to parents reach back only to the
previous `###`.


Feature types and switches
--------------------------
Which features are kept depends on their type and on the configuration:

    ======================   ===========   ====================================
    Types                    Switch        When switched off
    ----------------------   -----------   ------------------------------------
    :data:`GENE_TYPES`       `do_gene`     Skipped; their children are promoted
                                           to top level
    :data:`EXON_TYPES`       `do_exon`     Skipped with their descendants
    :data:`CDS_TYPES`        `do_cds`      Skipped with their descendants
    :data:`UTR_TYPES`        `do_utr`      Skipped with their descendants
    :data:`CODON_TYPES`      `do_codon`    Skipped with their descendants
    ======================   ===========   ====================================

Features of all other types are always kept.


Examples
--------
Read all transcripts with their exons::

    >>> parser = GFF_Parser("annotation.gff3",do_exon=True)
    >>> for gene in parser.top_features:
    >>>     for transcript in gene.children:
    >>>         print(transcript.primary_id, len(transcript.get_children("exon")))


See also
--------
  - `The Sequence Ontology GFF3 specification <http://www.sequenceontology.org/gff3.shtml>`_
  - `The Brent lab GTF2.2 specification <http://mblab.wustl.edu/GTF22.html>`_
"""
__author__ = "annotree developers"
from annotree.readers.common import AbstractAnnotationParser, parse_track_line
from annotree.readers.gff_tokens import parse_GFF3_tokens, parse_GTF2_tokens, unescape_GFF3
from annotree.util.services.exceptions import DuplicateIdentifier, OrphanedChild, warn


#===============================================================================
# INDEX: feature types
#===============================================================================

GENE_TYPES = {
    "gene",
    "pseudogene",
    "transposable_element_gene",
    "ncRNA_gene",
    "rRNA_gene",
    "tRNA_gene",
    "snRNA_gene",
    "snoRNA_gene",
    "miRNA_gene",
    "lincRNA_gene",
    "protein_coding_gene",
    "engineered_gene",
    "engineered_fusion_gene",
    "foreign_gene",
    "polycistronic_gene",
    "nuclear_gene",
    "mt_gene",
}
"""GFF3 gene-level feature types, following the `Sequence Ontology <http://www.sequenceontology.org>`_.
Any other type ending in `'_gene'` is also treated as gene-level."""

TRANSCRIPT_TYPES = {
    "transcript",
    "primary_transcript",
    "mRNA",
    "ncRNA",
    "lnc_RNA",
    "lincRNA",
    "rRNA",
    "tRNA",
    "snRNA",
    "snoRNA",
    "miRNA",
    "piRNA",
    "scRNA",
    "RNase_P_RNA",
    "RNase_MRP_RNA",
    "SRP_RNA",
    "telomerase_RNA",
    "antisense_RNA",
    "pseudogenic_transcript",
    "processed_transcript",
}
"""Transcript-level feature types. In `GTF2`_ files, lines of these types take
their identifiers from `transcript_id`."""

EXON_TYPES = {
    "exon",
    "coding_exon",
    "noncoding_exon",
    "interior_exon",
    "interior_coding_exon",
    "five_prime_coding_exon",
    "three_prime_coding_exon",
    "five_prime_noncoding_exon",
    "three_prime_noncoding_exon",
    "pseudogenic_exon",
}
"""Exon feature types, controlled by `do_exon`"""

CDS_TYPES = {
    "CDS",
    "CDS_fragment",
    "CDS_predicted",
}
"""Coding-region feature types, controlled by `do_cds`"""

UTR_TYPES = {
    "UTR",
    "five_prime_UTR",
    "three_prime_UTR",
    "5UTR",
    "3UTR",
}
"""Untranslated-region feature types, controlled by `do_utr`"""

CODON_TYPES = {
    "start_codon",
    "stop_codon",
}
"""Codon feature types, controlled by `do_codon`"""

_SWITCHES = {
    "gene"  : "do_gene",
    "exon"  : "do_exon",
    "cds"   : "do_cds",
    "utr"   : "do_utr",
    "codon" : "do_codon",
}

_PHASES = (".","0","1","2")


def feature_category(primary_tag):
    """Return the category of a feature type, which selects the
    configuration switch governing it

    Parameters
    ----------
    primary_tag : str
        Feature type from column 3

    Returns
    -------
    str or None
        `'gene'`, `'exon'`, `'cds'`, `'utr'`, `'codon'`, or `None`
        for types that are always kept
    """
    if primary_tag in GENE_TYPES or primary_tag.endswith("_gene"):
        return "gene"
    if primary_tag in EXON_TYPES:
        return "exon"
    if primary_tag in CDS_TYPES:
        return "cds"
    if primary_tag in UTR_TYPES:
        return "utr"
    if primary_tag in CODON_TYPES:
        return "codon"

    return None



#===============================================================================
# INDEX: line decoding
#===============================================================================

def _first(attributes,key):
    values = attributes.get(key)
    return values[0] if values else None

def _gff3_identity(primary_tag,attributes):
    """Return explicit identifier and parent identifiers of a `GFF3`_ line"""
    return _first(attributes,"ID"), list(attributes.get("Parent",[])), _first(attributes,"Name")

def _gtf_identity(primary_tag,attributes):
    """Return explicit identifier and parent identifiers of a `GTF2`_ line.
    Only `gene` and transcript-type lines carry identifiers of their own.
    """
    gene_id       = _first(attributes,"gene_id")
    transcript_id = _first(attributes,"transcript_id")
    if feature_category(primary_tag) == "gene":
        return gene_id, [], _first(attributes,"gene_name")
    if primary_tag in TRANSCRIPT_TYPES:
        return transcript_id, ([gene_id] if gene_id else []), _first(attributes,"transcript_name")
    if transcript_id:
        return None, [transcript_id], None
    if gene_id:
        return None, [gene_id], None

    return None, [], None


def decode_gff_line(fields,filetype,feature_class,source=None):
    """Decode the nine fields of a `GFF3`_ or `GTF2`_ line

    Parameters
    ----------
    fields : list
        Tab-delimited fields of line

    filetype : str
        `'gff3'` or `'gtf'`

    feature_class : class
        |SeqFeature| or subclass

    source : str or None, optional
        If not `None`, overrides the source in column 2

    Returns
    -------
    |SeqFeature|
        Feature, unlinked. If the line has no explicit identifier, its
        `primary_id` is built from its coordinates.

    str or None
        Explicit identifier, if any

    list
        Identifiers of parents

    Raises
    ------
    ValueError
        If coordinates, strand, score, or phase are malformed
    """
    seq_id, source_tag, primary_tag, start, end, score, strand, phase, tokens = fields
    try:
        start = int(start)
        end   = int(end)
    except ValueError:
        raise ValueError("Start and end must be integers. Found '%s' and '%s'" % (start,end))
    if start < 1 or end < start:
        raise ValueError("Start (%s) must be >= 1 and <= end (%s)" % (start,end))

    if score in (".",""):
        score = None
    else:
        try:
            score = float(score)
        except ValueError:
            raise ValueError("Score must be numeric or '.'. Found '%s'" % score)

    if phase not in _PHASES:
        raise ValueError("Phase must be one of %s. Found '%s'" % (", ".join(_PHASES),phase))

    if strand == "?":
        strand = "."

    if filetype == "gff3":
        seq_id     = unescape_GFF3(seq_id)
        attributes = parse_GFF3_tokens(tokens)
        primary_id, parents, name = _gff3_identity(primary_tag,attributes)
    else:
        attributes = parse_GTF2_tokens(tokens)
        primary_id, parents, name = _gtf_identity(primary_tag,attributes)

    if phase != ".":
        attributes["phase"] = [phase]

    feature = feature_class(seq_id,start,end,strand,
                            primary_id=primary_id,
                            display_name=name,
                            primary_tag=primary_tag,
                            source_tag=source or source_tag,
                            score=score,
                            attributes=attributes)
    return feature, primary_id, parents



#===============================================================================
# INDEX: parser
#===============================================================================

class GFF_Parser(AbstractAnnotationParser):
    """
    GFF_Parser(filename=None, filetype=None, printer=None, **config)

    Parse `GFF3`_ and `GTF2`_ files, linking features to their parents

    Parameters
    ----------
    filename : str or None, optional
        File to open

    filetype : str or None, optional
        `'gff3'` or `'gtf'`. If `None`, determined from the file

    printer : file-like, optional
        Logger implementing a ``write()`` method. Default: |NullWriter|

    **config
        Configuration switches. See |AbstractAnnotationParser|. If `source`
        is not given, each feature keeps the source from column 2.

    Attributes
    ----------
    skipped : dict
        Map of identifiers of features skipped because of configuration
        switches, to the category of the feature that caused the skip

    unlinked_count : int
        Number of features returned without their parents in streaming mode

    Raises
    ------
    MalformedLine
        If a line does not have nine columns, or has malformed coordinates

    DuplicateIdentifier
        If two unrelated lines declare the same `ID`
    """

    flavor = "gff"

    def __init__(self,filename=None,filetype=None,printer=None,**kwargs):
        self.skipped        = {}
        self.unlinked_count = 0
        self._orphans       = []
        self._hidden_children = []
        self._parents_of    = {}
        self._declared_ids  = set()
        self._types_seen    = []
        self._coding_transcripts = set()
        AbstractAnnotationParser.__init__(self,filename=filename,filetype=filetype,printer=printer,**kwargs)

    # comments and directives ------------------------------------------------

    def _handle_comment(self,line):
        """Store comments and directives. `###` resolves pending children when
        materializing, and ends the lookup window for parents when streaming.
        `##FASTA` ends feature data.
        """
        if line.startswith("##FASTA"):
            return True

        self.comments.append(line)
        if line.rstrip() == "###":
            if self.mode == "materializing":
                self._reconcile()
            elif self.mode == "streaming":
                self._forget_block()
        elif line.startswith("##"):
            items = line[2:].split()
            if len(items) == 0:
                return False
            key = items[0]
            if key == "sequence-region" and len(items) >= 4:
                self.metadata.setdefault(key,{})[items[1]] = (items[2],items[3])
            else:
                self.metadata[key] = " ".join(items[1:])
        elif line.startswith("track"):
            self.metadata.update(parse_track_line(line))

        return False

    # decoding ---------------------------------------------------------------

    def filter(self,line):
        """Decode one line

        Parameters
        ----------
        line : str
            Data line

        Returns
        -------
        |SeqFeature|
            Unlinked feature

        str or None
            Explicit identifier

        list
            Parent identifiers
        """
        fields = line.split("\t")
        if len(fields) != 9:
            raise self._malformed("GFF lines must have 9 columns. Found %s." % len(fields),line)

        try:
            return decode_gff_line(fields,self.filetype,self.feature_class,source=self.config["source"])
        except ValueError as e:
            raise self._malformed(str(e),line)

    def _is_wanted(self,category):
        return category is None or getattr(self,_SWITCHES[category])

    def _add_line(self,line):
        """Decode `line`, assign its identifier, and link it to parents that
        have already been read

        Returns
        -------
        |SeqFeature| or None
            The feature, or `None` if it was skipped

        list
            Identifiers of parents not yet read
        """
        feature, explicit_id, parents = self.filter(line)
        category = feature_category(feature.primary_tag)
        if self.filetype == "gtf":
            transcript_ids = feature.get_tag_values("transcript_id")
            if category in ("cds","codon"):
                self._coding_transcripts.update(transcript_ids)
            if not self.do_gene:
                gene_ids = feature.get_tag_values("gene_id")
                parents  = [X for X in parents if X in transcript_ids or X not in gene_ids]

        if not self._is_wanted(category):
            if explicit_id is not None:
                self.skipped[explicit_id] = category
            elif self.filetype == "gtf" and self.mode == "materializing":
                self._hidden_children.extend((feature,X) for X in parents)
            return None, []

        live_parents = []
        for parent_id in parents:
            reason = self.skipped.get(parent_id)
            if reason == "gene":
                continue
            if reason is not None:
                if explicit_id is not None:
                    self.skipped[explicit_id] = reason
                return None, []
            live_parents.append(parent_id)

        if explicit_id is None:
            feature.primary_id = self._unique_id(feature.primary_id)
        elif explicit_id in self._declared_ids:
            first = self.loaded.get(explicit_id)
            if self.filetype == "gff3" and first is not None and first.primary_tag == feature.primary_tag \
               and self._parents_of.get(explicit_id) == live_parents:
                feature.primary_id = self._unique_id(explicit_id)
            else:
                raise DuplicateIdentifier(self.filename,explicit_id,line_num=self.counter)
        else:
            self._declared_ids.add(explicit_id)
            if explicit_id in self.loaded:
                # identifier generated earlier for a line without an ID
                self._rename_generated(explicit_id)
                feature.primary_id = explicit_id
            else:
                feature.primary_id = self._unique_id(explicit_id)

        self.loaded[feature.primary_id] = feature
        self._parents_of[feature.primary_id] = live_parents
        if feature.primary_tag not in self._types_seen:
            self._types_seen.append(feature.primary_tag)

        if len(live_parents) == 0:
            self._record_extent(feature)
            if self.mode == "materializing":
                self._top_features.append(feature)
            return feature, []

        missing = []
        for n, parent_id in enumerate(live_parents):
            if n == 0:
                child = feature
            else:
                child = feature.copy(primary_id=self._unique_id(feature.primary_id))
                self.loaded[child.primary_id] = child
                self._parents_of[child.primary_id] = live_parents

            parent = self.loaded.get(parent_id)
            if parent is None:
                missing.append((child,parent_id))
            else:
                parent.add_child(child)

        return feature, missing

    def _rename_generated(self,primary_id):
        """Give a feature whose identifier was generated from its coordinates
        a new identifier, freeing `primary_id` for a line that declares it
        """
        node    = self.loaded[primary_id]
        old_ids = [X.primary_id for X in node.walk()]
        node.rename(self._unique_id(primary_id))
        for old_id, descendant in zip(old_ids,node.walk()):
            if self.loaded.get(old_id) is descendant:
                del self.loaded[old_id]
                self.loaded[descendant.primary_id] = descendant
                self._parents_of[descendant.primary_id] = self._parents_of.pop(old_id,[])

    def _forget_block(self):
        """Release the identifier table at a `###` directive when streaming.
        Features after the directive cannot link to features before it.
        """
        self.loaded        = {}
        self._parents_of   = {}
        self._declared_ids = set()
        self.skipped       = {}

    # reconciliation ---------------------------------------------------------

    def _imply_parents(self):
        """Create `GTF2`_ transcripts and genes that are referenced by
        pending children but never declared
        """
        while True:
            missing = {}
            order   = []
            for child, parent_id in self._orphans + self._hidden_children:
                if not self.do_gene and child.get_tag_value("transcript_id") != parent_id:
                    continue
                if parent_id not in self.loaded:
                    if parent_id not in missing:
                        order.append(parent_id)
                    missing.setdefault(parent_id,[]).append(child)

            if len(missing) == 0:
                return

            for parent_id in order:
                children = missing[parent_id]
                first = children[0]
                if first.get_tag_value("transcript_id") == parent_id:
                    primary_tag = "mRNA" if parent_id in self._coding_transcripts else "transcript"
                    gene_id = first.get_tag_value("gene_id")
                    parents = [gene_id] if (gene_id and self.do_gene) else []
                    keys = ("gene_id","transcript_id","gene_name","transcript_name")
                    name = first.get_tag_value("transcript_name")
                else:
                    primary_tag = "gene"
                    parents = []
                    keys = ("gene_id","gene_name")
                    name = first.get_tag_value("gene_name")

                attributes = { K : first.get_tag_values(K) for K in keys if first.has_tag(K) }
                node = self.feature_class(first.seq_id,
                                          min(X.start for X in children),
                                          max(X.end for X in children),
                                          first.strand,
                                          primary_id=self._unique_id(parent_id),
                                          display_name=name,
                                          primary_tag=primary_tag,
                                          source_tag=first.source_tag,
                                          attributes=attributes)
                self.loaded[node.primary_id] = node
                self._parents_of[node.primary_id] = parents
                if primary_tag not in self._types_seen:
                    self._types_seen.append(primary_tag)

                if parents and parents[0] in self.loaded:
                    parent = self.loaded[parents[0]]
                    parent.add_child(node)
                    parent.expand_to(node.start,node.end)
                elif parents:
                    self._orphans.append((node,parents[0]))
                else:
                    self._record_extent(node)
                    self._top_features.append(node)

    def _settle_skipped_parent(self,child,parent_id):
        """Place a pending child whose parent was read later, but skipped
        because of a configuration switch. Children of skipped genes become
        top-level features. Other children are skipped along with their parents.
        """
        reason = self.skipped[parent_id]
        if reason == "gene":
            parents = self._parents_of.get(child.primary_id,[parent_id])
            if any(self.skipped.get(X) != "gene" for X in parents):
                return
            if parents[0] == parent_id:
                self._record_extent(child)
                self._top_features.append(child)
            return

        self.skipped[child.primary_id] = reason
        for node in child.walk():
            self.loaded.pop(node.primary_id,None)

    def _reconcile(self):
        """Attach pending children to parents read since, and drop the rest"""
        if self.filetype == "gtf":
            self._imply_parents()
            self._hidden_children = []

        pending, self._orphans = self._orphans, []
        dropped = []
        for child, parent_id in pending:
            parent = self.loaded.get(parent_id)
            if parent is not None:
                parent.add_child(child)
                if parent.primary_tag == "gene" and self.filetype == "gtf":
                    parent.expand_to(child.start,child.end)
            elif parent_id in self.skipped:
                self._settle_skipped_parent(child,parent_id)
            else:
                dropped.append(child)

        if len(dropped) == 0:
            return

        for child in dropped:
            for node in child.walk():
                self.loaded.pop(node.primary_id,None)
            self.dropped_orphans.append(child.primary_id)

        self.orphan_count += len(dropped)
        warn("%s feature(s) in %s were dropped because their parents never appeared: %s" % (len(dropped),
                                                                                           self.filename,
                                                                                           ", ".join(X.primary_id for X in dropped[:10])),
             OrphanedChild)

    # retrieval --------------------------------------------------------------

    def _materialize(self):
        while True:
            line = self._next_line()
            if line is None:
                break

            _, missing = self._add_line(line)
            self._orphans.extend(missing)

        self._reconcile()

    def _next_streamed(self):
        while True:
            line = self._next_line()
            if line is None:
                return None

            feature, missing = self._add_line(line)
            if feature is None:
                continue

            self.unlinked_count += len(missing)
            return feature

    def _finish_stream(self):
        if self.unlinked_count > 0:
            warn("%s feature(s) in %s were returned without their parents, which had not yet been read." % (self.unlinked_count,self.filename),
                 OrphanedChild)

    def typelist(self):
        """Return comma-separated, sorted feature types read so far"""
        return ",".join(sorted(self._types_seen))
