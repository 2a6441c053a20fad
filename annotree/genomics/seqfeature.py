#!/usr/bin/env python
"""This module defines |SeqFeature|, the uniform in-memory representation of
one annotated genomic interval, and its children.

Every parser in :mod:`annotree.readers` emits |SeqFeature| trees, regardless of
the format of its input. A gene is represented as a |SeqFeature| whose children
are transcripts, whose children in turn are exons, CDS, UTRs, and codons. A
gapped peak is represented as a |SeqFeature| whose children are its sub-peaks.


Coordinates
-----------
|SeqFeature| coordinates are always 1-based and closed, whatever the convention
of the file they were read from, so that a feature spanning the first ten
nucleotides of a chromosome has `start=1` and `end=10`. Use
:meth:`SeqFeature.as_bed_coordinates` to recover 0-based, half-open coordinates.


Important classes & functions
-----------------------------
|SeqFeature|
    One annotated interval, with attributes and ordered children

:func:`normalize_strand`
    Convert any of the strand representations found in annotation files
    to one of `'+'`, `'-'`, or `'.'`
"""
__author__ = "annotree developers"
import copy

_STRANDS = {
    "+"  : "+",
    "-"  : "-",
    "."  : ".",
    "?"  : ".",
    ""   : ".",
    "1"  : "+",
    "+1" : "+",
    "-1" : "-",
    "0"  : ".",
    1    : "+",
    -1   : "-",
    0    : ".",
    None : ".",
}


def normalize_strand(strand):
    """Convert a strand representation to `'+'`, `'-'`, or `'.'`

    Parameters
    ----------
    strand : str, int, or None
        Strand as found in an annotation file or passed by a user.
        Accepted values are `'+'`, `'-'`, `'.'`, `'?'`, `''`, `'1'`, `'-1'`,
        `'0'`, `1`, `-1`, `0`, and `None`.

    Returns
    -------
    str
        `'+'` for forward, `'-'` for reverse, and `'.'` for unknown strand

    Raises
    ------
    ValueError
        If `strand` is not recognized
    """
    try:
        return _STRANDS[strand]
    except (KeyError, TypeError):
        raise ValueError("Unrecognized strand '%s'" % (strand,))


class SeqFeature(object):
    """One genomic interval or structural element, with optional children.

    Parameters
    ----------
    seq_id : str
        Chromosome or contig name

    start : int
        1-based, leftmost coordinate of feature

    end : int
        1-based, rightmost coordinate of feature, inclusive. Must be >= `start`

    strand : str or int, optional
        Strand of feature. Any value accepted by :func:`normalize_strand`.
        (Default: `'.'`)

    primary_id : str or None, optional
        Unique identifier. If `None`, generated as `seq_id:start-end`

    display_name : str or None, optional
        Human-readable name. If `None`, `primary_id` is reported

    primary_tag : str, optional
        Feature type, e.g. `'gene'`, `'mRNA'`, `'exon'`, `'peak'` (Default: `'region'`)

    source_tag : str or None, optional
        Provenance of feature, typically the name of the input file

    score : int, float, or None, optional
        Score of feature

    attributes : dict or None, optional
        Format-specific extras. Each value may be a single object or a list
        of objects; values are stored as lists.

    Attributes
    ----------
    children : list
        Child |SeqFeature| objects, ordered by genomic position along
        the strand of this feature
    """

    def __init__(self,seq_id,start,end,strand=".",primary_id=None,display_name=None,
                 primary_tag="region",source_tag=None,score=None,attributes=None):
        start = int(start)
        end   = int(end)
        if end < start:
            raise ValueError("Feature end (%s) must be >= start (%s)" % (end,start))

        self.seq_id       = seq_id
        self.start        = start
        self.end          = end
        self.strand       = normalize_strand(strand)
        self.primary_id   = "%s:%s-%s" % (seq_id,start,end) if primary_id is None else primary_id
        self.display_name = display_name
        self.primary_tag  = primary_tag
        self.source_tag   = source_tag
        self.score        = score
        self.attributes   = {}
        self.children     = []

        if attributes is not None:
            for k, v in attributes.items():
                if isinstance(v,list):
                    self.add_tag_value(k,*v)
                else:
                    self.add_tag_value(k,v)

    @property
    def display_name(self):
        """Human-readable name of feature. Defaults to `primary_id`"""
        return self.primary_id if self._display_name is None else self._display_name

    @display_name.setter
    def display_name(self,value):
        self._display_name = value

    @property
    def length(self):
        """Length of feature, in nucleotides"""
        return self.end - self.start + 1

    def __len__(self):
        return self.length

    def __repr__(self):
        return "<%s %s '%s' %s:%s-%s(%s) children=%s>" % (self.__class__.__name__,
                                                          self.primary_tag,
                                                          self.primary_id,
                                                          self.seq_id,
                                                          self.start,
                                                          self.end,
                                                          self.strand,
                                                          len(self.children))

    def __str__(self):
        return "%s:%s-%s(%s)" % (self.seq_id,self.start,self.end,self.strand)

    def as_bed_coordinates(self):
        """Return coordinates of feature in 0-based, half-open form

        Returns
        -------
        tuple
            `(start, end)`
        """
        return self.start - 1, self.end

    def overlaps(self,other,stranded=True):
        """Test whether `self` and `other` share any position on the same chromosome

        Parameters
        ----------
        other : |SeqFeature|

        stranded : bool, optional
            If `True` (default), features must also share a strand

        Returns
        -------
        bool
        """
        if self.seq_id != other.seq_id:
            return False
        if stranded and self.strand != other.strand:
            return False

        return self.start <= other.end and other.start <= self.end

    def expand_to(self,start,end):
        """Widen feature, if necessary, to cover `start` through `end`

        Parameters
        ----------
        start : int
            1-based leftmost coordinate

        end : int
            1-based rightmost coordinate, inclusive
        """
        self.start = min(self.start,start)
        self.end   = max(self.end,end)

    # attributes -------------------------------------------------------------

    def add_tag_value(self,tag,*values):
        """Append one or more values to attribute `tag`

        Parameters
        ----------
        tag : str
            Name of attribute

        values : objects
            Values to append
        """
        self.attributes.setdefault(tag,[]).extend(values)

    def get_tag_values(self,tag):
        """Return all values of attribute `tag`, or an empty list if absent"""
        return list(self.attributes.get(tag,[]))

    def get_tag_value(self,tag,default=None):
        """Return the first value of attribute `tag`, or `default` if absent"""
        values = self.attributes.get(tag)
        if not values:
            return default

        return values[0]

    def has_tag(self,tag):
        return tag in self.attributes

    def remove_tag(self,tag):
        """Remove attribute `tag`, returning its values

        Raises
        ------
        KeyError
            If `tag` is absent
        """
        return self.attributes.pop(tag)

    def get_all_tags(self):
        """Return names of all attributes, in the order they were added"""
        return list(self.attributes.keys())

    # children ---------------------------------------------------------------

    def _child_key(self,child):
        if self.strand == "-":
            return (-child.end,-child.start)

        return (child.start,child.end)

    def add_child(self,child):
        """Attach `child`, keeping children ordered by position along the
        strand of `self`. Children at identical positions keep the order
        in which they were added.

        Parameters
        ----------
        child : |SeqFeature|
        """
        self.children.append(child)
        self.children.sort(key=self._child_key)

    def get_children(self,primary_tag=None):
        """Return children of `self`, optionally only those of one type

        Parameters
        ----------
        primary_tag : str, tuple, or None, optional
            Type or types of children to return. If `None`, return all.

        Returns
        -------
        list
        """
        if primary_tag is None:
            return list(self.children)
        if isinstance(primary_tag,str):
            primary_tag = (primary_tag,)

        return [X for X in self.children if X.primary_tag in primary_tag]

    def walk(self):
        """Iterate over `self` and all of its descendants, depth first

        Yields
        ------
        |SeqFeature|
        """
        yield self
        for child in self.children:
            for node in child.walk():
                yield node

    def rename(self,new_id):
        """Change `primary_id` of `self`, and of any descendants whose
        identifiers were derived from it (i.e. begin with the old
        identifier followed by a period)

        Parameters
        ----------
        new_id : str
            New identifier
        """
        old_id = self.primary_id
        prefix = old_id + "."
        for node in self.walk():
            if node is self:
                continue
            if node.primary_id.startswith(prefix):
                node.primary_id = new_id + node.primary_id[len(old_id):]

        self.primary_id = new_id

    def copy(self,primary_id=None):
        """Copy `self` and its descendants

        Parameters
        ----------
        primary_id : str or None, optional
            If given, identifier of the copy

        Returns
        -------
        |SeqFeature|
        """
        new = copy.copy(self)
        new.attributes = {K: list(V) for K, V in self.attributes.items()}
        new.children   = [X.copy() for X in self.children]
        if primary_id is not None:
            new.primary_id = primary_id

        return new
