"""
A subpackage for accessing a bag's files.

The :py:mod:`bagfs` module provides the Path abstraction that lets the rest
of the package read and write bags through the fs (pyfilesystem2) interface.
"""
from .bagfs import Path, open_bag_root, open_text_file, open_bin_file
