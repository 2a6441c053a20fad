"""Utilities for file opening, stream filtering, warnings, and command-line scripts"""
