"""Argument parsers and help formatters shared by command-line scripts in :mod:`annotree.bin`"""
