#!/usr/bin/env python
"""pytest configuration. Registers the markers used to select test categories::

    $ pytest -m unit annotree
    $ pytest -m functional annotree
"""


def pytest_configure(config):
    config.addinivalue_line("markers","unit: tests of single functions and classes")
    config.addinivalue_line("markers","functional: tests of command-line scripts")
