#!/usr/bin/env python
"""Test suite for :py:mod:`annotree.util.io.filters`"""
import io
import re
import unittest
import pytest

from annotree.util.io.filters import AbstractReader, NameDateWriter, ColorWriter


class UpperReader(AbstractReader):
    def filter(self,line):
        return line.upper()


@pytest.mark.unit
class TestFilters(unittest.TestCase):

    def test_reader_filters_each_line(self):
        reader = UpperReader(io.StringIO("a\nb\n"))
        self.assertEqual(reader.readlines(),["A\n","B\n"])

    def test_name_date_writer(self):
        stream = io.StringIO()
        printer = NameDateWriter("my_script",stream=stream)
        printer.write("Parsing file...\n")
        printer("Done.")
        lines = stream.getvalue().split("\n")
        pat = re.compile(r"^my_script \[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\]: (.*)$")
        self.assertEqual(pat.match(lines[0]).group(1),"Parsing file...")
        self.assertEqual(pat.match(lines[1]).group(1),"Done.")
        self.assertEqual(lines[2],"")

    def test_color_writer_plain_for_non_tty(self):
        writer = ColorWriter(stream=io.StringIO())
        self.assertEqual(writer.color("text",color="red"),"text")
