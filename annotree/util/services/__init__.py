"""Exceptions, warnings, and decorators used throughout :mod:`annotree`"""
