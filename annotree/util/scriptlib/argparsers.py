#!/usr/bin/env python
"""This module contains classes that:

  - build :class:`argparse.ArgumentParser` objects for annotation files and
    for options shared by all command-line scripts

  - convert the parsed arguments into open annotation parsers, and
    warning filters


Arguments are grouped into the following sets:

    ===========================================================   ======================================
    **Parameter/argument set**                                    **Parser building class**
    -----------------------------------------------------------   --------------------------------------
    Generic parameters (e.g. for error reporting, logging)        :class:`BaseParser`

    Genome annotation files                                       :class:`AnnotationParser`
    ===========================================================   ======================================


Example
-------
To use these in your own command line scripts:

  #. Create the parser factories, and supply the parsers they build as
     `parents` of your script's :py:class:`~argparse.ArgumentParser`::

         >>> import argparse
         >>> from annotree.util.scriptlib.argparsers import AnnotationParser, BaseParser
         >>> ap = AnnotationParser()
         >>> bp = BaseParser()
         >>> parser = argparse.ArgumentParser(parents=[ap.get_parser(),bp.get_parser()])
         >>> parser.add_argument("outbase",type=str)

  #. Then, parse the arguments, and open the annotation file::

         >>> args = parser.parse_args()
         >>> bp.get_base_ops_from_args(args)
         >>> annotation = ap.get_parser_from_args(args,printer=printer)
         >>> for feature in annotation.top_features:
         >>>     pass # rest of your script


See Also
--------
:py:mod:`argparse`
    Python documentation on argument parsing

:py:obj:`annotree.bin`
    Source code of command-line scripts, for further examples
"""
import argparse
import warnings

from annotree.util.services.exceptions import ArgumentWarning, FileFormatWarning, OrphanedChild, \
                                              filterwarnings
from annotree.util.io.openers import NullWriter
from annotree.readers.common import AUXILIARY_TABLES
from annotree.readers.parser import open_annotation
from annotree.readers.taster import FILETYPES


#===============================================================================
# INDEX: Constants used in parsers below
#===============================================================================

_DEFAULT_ANNOTATION_PARSER_DESCRIPTION = \
"Open a genome annotation file, and choose which subfeatures to build"

_DEFAULT_ANNOTATION_PARSER_TITLE = \
"annotation file options"

_ANNOTATION_FORMATS = sorted(FILETYPES) + sorted(X for V in FILETYPES.values() for X in V)

ANNOTREE_WARNINGS = [
    # readers.common
    (ArgumentWarning,"apply only to UCSC files"),

    # readers.gff_tokens
    (FileFormatWarning,"has no value. Treating as flag"),

    # readers.gff
    (OrphanedChild,"were dropped because their parents never appeared"),
    (OrphanedChild,"were returned without their parents"),

    # util.services.decorators
    (DeprecationWarning,"which will be removed from future versions"),
]
"""Warning categories and message patterns to which command-line verbosity applies"""



#===============================================================================
# INDEX: Parser base class
#===============================================================================

class Parser(object):
    """Base class for argument parser factories used below

    Parameters
    ----------
    groupname : str, optional
        Name of argument group. If not `None`, an argument group with
        the specified name will be created and added to the parser.
        If not, arguments will be in the main group.

    prefix : str, optional
        string prefix to add to default argument options (Default: "")

    disabled : list, optional
        list of parameter names that should be disabled from parser,
        without preceding dashes
    """

    def __init__(self,groupname=None,prefix="",disabled=None):
        self.prefix    = prefix
        self.disabled  = [] if disabled is None else disabled
        self.groupname = groupname

        # set by subclasses
        self.arguments = []

    def get_parser(self,parser=None,groupname=None,arglist=None,title=None,description=None,**kwargs):
        """Create or populate an :class:`argparse.ArgumentParser`

        Parameters
        ----------
        parser : :class:`argparse.ArgumentParser` or None, optional
            If `None`, a new parser is created. Otherwise, arguments are
            added to `parser`.

        groupname : str or None, optional
            If `None`, defaults to `self.groupname`. If either is not `None`,
            arguments are added to an argument group, to which `title` and
            `description` apply.

        arglist : list, optional
            List of tuples of `('argument_name', dict_of_options)` to add.
            Default: `self.arguments`

        title : str, optional
            Optional title for parser

        description : str, optional
            Optional description for parser

        kwargs : keyword arguments
            Additional arguments passed during creation of :class:`argparse.ArgumentParser`

        Returns
        -------
        :class:`argparse.ArgumentParser`
        """
        if groupname is None:
            groupname = self.groupname

        if parser is None:
            if groupname is None:
                parser = argparse.ArgumentParser(description=description,add_help=False,**kwargs)
            else:
                parser = argparse.ArgumentParser(add_help=False,**kwargs)

        addto = parser
        if groupname is not None:
            addto = parser.add_argument_group(title=title,description=description)

        arglist = self.arguments if arglist is None else arglist
        for arg_name, arg_opts in filter(lambda x: x[0] not in self.disabled,arglist):
            addto.add_argument("--%s%s" % (self.prefix,arg_name),**arg_opts)

        return parser



#===============================================================================
# INDEX: Annotation file parser
#===============================================================================

class AnnotationParser(Parser):
    """Parser for annotation files in any supported format

    Parameters
    ----------
    groupname : str, optional
        Name of argument group (Default: `'annotation_options'`)

    prefix : str, optional
        string prefix to add to default argument options (Default: "")

    disabled : list, optional
        list of parameter names that should be disabled from parser,
        without preceding dashes
    """

    def __init__(self,prefix="",disabled=None,groupname="annotation_options"):
        Parser.__init__(self,groupname=groupname,prefix=prefix,disabled=disabled)
        self.arguments = [
            ("annotation_file"   , dict(metavar="infile",type=str,required=True,
                                        help="Annotation file. May be gzipped or bzipped.")),
            ("annotation_format" , dict(choices=_ANNOTATION_FORMATS,default=None,
                                        help="Format or format family of %sannotation_file (Default: determine from file)" % prefix)),
            ("no_gene"           , dict(default=False,action="store_true",
                                        help="Do not assemble gene-level parents (Default: assemble genes)")),
            ("do_exon"           , dict(default=False,action="store_true",
                                        help="Build exon subfeatures")),
            ("do_cds"            , dict(default=False,action="store_true",
                                        help="Build CDS subfeatures")),
            ("do_utr"            , dict(default=False,action="store_true",
                                        help="Build 5' and 3' UTR subfeatures")),
            ("do_codon"          , dict(default=False,action="store_true",
                                        help="Build start and stop codon subfeatures")),
            ("do_name"           , dict(default=False,action="store_true",
                                        help="UCSC tables only. Use gene symbols as transcript names")),
            ("source"            , dict(type=str,default=None,
                                        help="Source of features (Default: name of %sannotation_file)" % prefix)),
            ("tabix"             , dict(default=False,action="store_true",
                                        help="%sannotation_file is bgzipped and tabix-indexed (Default: False)" % prefix)),
        ]

        self.table_options = [(X,dict(type=str,default=None,metavar="table.txt",
                                      help="UCSC %s auxiliary table (UCSC tables only)" % X)) for X in AUXILIARY_TABLES]

    def get_parser(self,
                   title=_DEFAULT_ANNOTATION_PARSER_TITLE,
                   description=_DEFAULT_ANNOTATION_PARSER_DESCRIPTION,
                   **kwargs):
        """Return an :class:`~argparse.ArgumentParser` that opens annotation files

        Parameters
        ----------
        title : str, optional
            title for option group (used in command-line help screen)

        description : str, optional
            description of parser (used in command-line help screen)

        kwargs : keyword arguments
            Additional arguments to pass to :meth:`Parser.get_parser`

        Returns
        -------
        :class:`argparse.ArgumentParser`
        """
        parser = Parser.get_parser(self,title=title,description=description,**kwargs)
        Parser.get_parser(self,
                          parser=parser,
                          groupname="%s_ucsc_options" % self.groupname,
                          title="UCSC-specific options",
                          arglist=self.table_options)
        return parser

    def get_config_from_args(self,args):
        """Return configuration switches for an annotation parser

        Parameters
        ----------
        args : :py:class:`argparse.Namespace`
            Namespace object from :meth:`get_parser`

        Returns
        -------
        dict
        """
        args = PrefixNamespaceWrapper(args,self.prefix)
        config = {}
        for key in ("do_exon","do_cds","do_utr","do_codon","do_name","source","tabix"):
            if key not in self.disabled:
                config[key] = getattr(args,key)
        if "no_gene" not in self.disabled:
            config["do_gene"] = not args.no_gene
        for key in AUXILIARY_TABLES:
            if key not in self.disabled and getattr(args,key) is not None:
                config[key] = getattr(args,key)

        return config

    def get_parser_from_args(self,args,printer=None):
        """Open the annotation file named in `args`

        Parameters
        ----------
        args : :py:class:`argparse.Namespace`
            Namespace object from :meth:`get_parser`

        printer : file-like, optional
            A stream to which stderr-like info can be written (Default: |NullWriter|)

        Returns
        -------
        |AbstractAnnotationParser|
            Parser for the annotation file, not yet read
        """
        printer = NullWriter() if printer is None else printer
        config  = self.get_config_from_args(args)
        nargs   = PrefixNamespaceWrapper(args,self.prefix)
        return open_annotation(nargs.annotation_file,
                               filetype=nargs.annotation_format,
                               printer=printer,
                               **config)



#===============================================================================
# INDEX: Verbosity & warnings
#===============================================================================

class BaseParser(Parser):
    """Parser for options shared by all scripts, such as warning levels

    Parameters
    ----------
    groupname : str, optional
        Name of argument group (Default: `'base_options'`)

    prefix : str, optional
        string prefix to add to default argument options (Default: "")

    disabled : list, optional
        list of parameter names that should be disabled from parser,
        without preceding dashes
    """

    def __init__(self,groupname="base_options",prefix="",disabled=None):
        Parser.__init__(self,groupname=groupname,prefix=prefix,disabled=disabled)

    def get_parser(self,title=None,description=None):
        """Return an :py:class:`~argparse.ArgumentParser` with `-q` and `-v` flags

        Returns
        -------
        :class:`argparse.ArgumentParser`
        """
        p = Parser.get_parser(self)
        g = p.add_argument_group(title="warning/error options")
        g.add_argument("-q","--quiet",dest="warnlevel",action="store_const",const=-1,
                       help="Suppress all warning messages. Cannot use with '-v'.")
        g.add_argument("-v","--verbose",dest="warnlevel",action="count",
                       help="Increase verbosity. With '-v', show every warning. With '-vv', turn warnings into exceptions. Cannot use with '-q'. (Default: show each type of warning once)")
        p.set_defaults(warnlevel=0)

        return p

    def get_base_ops_from_args(self,args):
        """Set warning filters from the verbosity in `args`

        Parameters
        ----------
        args : :py:class:`argparse.Namespace`
            Namespace object from :meth:`get_parser`

        Returns
        -------
        str
            Filter action applied: `'ignore'`, `'onceperfamily'`, `'always'`, or `'error'`
        """
        warnlevel = PrefixNamespaceWrapper(args,self.prefix).warnlevel
        actions = ["ignore",
                   "onceperfamily",
                   "always",
                   "error"]

        if warnlevel is None:
            warnlevel = 0
        if warnlevel >= len(actions) - 1:
            warnlevel = len(actions) - 2
        if warnlevel < -1:
            warnings.warn("Invalid warning level %s. Showing each type of warning once." % warnlevel,ArgumentWarning)
            warnlevel = 0

        action = actions[warnlevel+1]
        for type_, msg in ANNOTREE_WARNINGS:
            filterwarnings(action,message=msg,category=type_)

        return action



#===============================================================================
# INDEX: Helpers
#===============================================================================

class PrefixNamespaceWrapper(object):
    """Wrap an :class:`argparse.Namespace`, so that attributes added
    with a prefix can be read without it

    Parameters
    ----------
    namespace : :class:`argparse.Namespace`

    prefix : str
        Prefix prepended to argument names
    """

    def __init__(self,namespace,prefix):
        self.namespace = namespace
        self.prefix    = prefix

    def __getattr__(self,k):
        return getattr(self.namespace,"%s%s" % (self.prefix,k))
