"""Unit and functional tests for annotree"""
