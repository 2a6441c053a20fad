#!/usr/bin/env python
"""Test suite for :py:mod:`annotree.util.services.decorators`"""
import unittest
import warnings
import pytest

from annotree.util.services.decorators import deprecated


@deprecated
def old_function(x):
    """Square `x`"""
    return x**2


@deprecated(replacement="new_method")
def old_with_replacement():
    return "value"


@pytest.mark.unit
class TestDeprecated(unittest.TestCase):

    def _call(self,func,*args):
        with warnings.catch_warnings(record=True) as warns:
            warnings.simplefilter("always")
            result = func(*args)

        return result, warns

    def test_result_and_warning(self):
        result, warns = self._call(old_function,3)
        self.assertEqual(result,9)
        self.assertEqual(len(warns),1)
        self.assertTrue(issubclass(warns[0].category,DeprecationWarning))
        self.assertIn("old_function()",str(warns[0].message))

    def test_replacement_named(self):
        _, warns = self._call(old_with_replacement)
        self.assertIn("Use 'new_method' instead.",str(warns[0].message))

    def test_metadata_preserved(self):
        self.assertEqual(old_function.__name__,"old_function")
        self.assertEqual(old_function.__doc__,"Square `x`")
