"""
A read-only view of an existing bag.
"""
import logging
from collections import OrderedDict

from .constants import BAGIT_TXT, FETCH_TXT, DATA_DIR
from .exceptions import BagError
from .info import read_bag_declaration, read_bag_info
from .manifest import (find_manifests, manifest_filename, read_manifest,
                       list_payload_files, list_tag_files)
from .access.bagfs import open_bag_root

LOGGER = logging.getLogger(__name__)

class Bag(object):
    """
    A representation of a bag opened for reading.

    The bag declaration and bag info are read when the bag is opened; the
    manifests are read (fresh from disk) each time they are requested.
    """

    def __init__(self, location):
        """
        open the bag at the given location

        :param location:  a path to the bag's root directory, an FS URL, an
                          FS instance, or a Path
        :raises BagError:  if the location is not a directory or does not
                          contain a bagit.txt file
        :raises MissingTagError, UnsupportedVersionError,
                UnsupportedEncodingError, MalformedLineError:
                          if bagit.txt or bag-info.txt is not valid
        """
        self._root = open_bag_root(location)
        self._owns_root = self._root is not location
        try:
            if not self._root.relpath(BAGIT_TXT).isfile():
                raise BagError("Expected bagit.txt does not exist: %s" %
                               self._root.relpath(BAGIT_TXT))

            self.declaration = read_bag_declaration(self._root)
            self.info = read_bag_info(self._root)
        except Exception:
            self.close()
            raise

    @property
    def root(self):
        """
        the Path to the bag's root directory
        """
        return self._root

    @property
    def version(self):
        return self.declaration.version

    @property
    def encoding(self):
        return self.declaration.encoding

    def has_payload_dir(self):
        return self._root.relpath(DATA_DIR).isdir()

    def has_oxum(self):
        return self.info.payload_oxum() is not None

    def has_fetch_file(self):
        """
        return True if the bag contains a fetch.txt file.  (Retrieving the
        files it lists is not supported.)
        """
        return self._root.relpath(FETCH_TXT).isfile()

    def algorithms(self, tag=False):
        """
        return the algorithms for which the bag has (payload or tag)
        manifests, strongest first
        """
        return find_manifests(self._root, tag)

    def manifest_files(self):
        """
        iterate through the names of the payload manifest files.
        """
        for alg in self.algorithms():
            yield manifest_filename(alg)

    def tagmanifest_files(self):
        """
        iterate through the names of the tag manifest files.
        """
        for alg in self.algorithms(True):
            yield manifest_filename(alg, True)

    def manifests(self, tag=False):
        """
        read the bag's (payload or tag) manifests

        :return: an OrderedDict mapping algorithm names to Manifests,
                 strongest first
        """
        return OrderedDict((alg, read_manifest(self._root, manifest_filename(alg, tag)))
                           for alg in self.algorithms(tag))

    def payload_files(self):
        """
        return the bag-relative paths of the files under the payload directory
        """
        return list_payload_files(self._root)

    def tag_files(self):
        """
        return the bag-relative paths of the files that tag manifests should
        cover
        """
        return list_tag_files(self._root)

    def close(self):
        """
        release the filesystem opened for this bag, if one was opened when
        the bag was (i.e. it was given as a local path or an FS URL).  A
        Path or FS instance supplied by the caller is left open.
        """
        if self._owns_root:
            self._root.close()

    def __str__(self):
        return str(self._root)

    def __repr__(self):
        return "Bag({0!r})".format(str(self._root))

def open_bag(location):
    """
    open the bag at the given location, returning a Bag instance.
    """
    return Bag(location)

def is_bag(location):
    """
    return True if the given location appears to be a bag (i.e. a directory
    containing a bagit.txt file)
    """
    try:
        root = open_bag_root(location)
    except BagError:
        return False
    try:
        return root.relpath(BAGIT_TXT).isfile()
    finally:
        if root is not location:
            root.close()
