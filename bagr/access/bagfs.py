"""
This module provides access to a bag's files through the fs (pyfilesystem2)
module.  All of the bag operations in this package address files through a
Path, a pointer to a location within an FS instance, so that a bag need not
live in a vanilla directory on local disk (e.g. a MemoryFS works as well).
"""
import os
from contextlib import contextmanager

import fs.osfs
import fs.path
import fs.errors
from fs import open_fs
from fs.base import FS

from ..exceptions import BagError, BagIOError

class Path(object):
    """
    A container class for pointing to a path within a specific FS instance
    """
    def __init__(self, filesys, path, prefix=None, owned=False):
        """
        wrap a path within a filesystem, given as an FS object
        :param filesys FS:  the filesystem, usually as an FS instance,
                            where the path is located
        :param path str:    the path to the location within the filesystem
        :param prefix str:  a prefix to use to represent the filesystem in
                            the string representation of the full path.  It
                            will be prepended to the path value, so it should
                            include any desired delimiters
        :param owned bool:  True if this Path was created along with the
                            filesystem and is responsible for closing it
        """
        self.fs = filesys
        self.path = str(path)
        if prefix is None:
            prefix = repr(filesys) + ":"
        self._pfx = prefix
        self._owned = owned

    def close(self):
        """
        close the underlying filesystem if it was opened for this Path;
        otherwise, do nothing.
        """
        if self._owned and not self.fs.isclosed():
            self.fs.close()

    def relpath(self, relpath):
        """
        return a Path instance that represents another path relative to
        this one.  This assumes that the current Path instance points to
        a directory; the relpath string then refers to a file or directory
        relative to it.  Note that relpath need not point to an existing
        object within the filesystem.
        """
        if not relpath:
            return Path(self.fs, self.path, self._pfx)

        path = ""
        if self.path:
            path += self.path+'/'
        path += relpath.lstrip('/')

        return Path(self.fs, path, self._pfx)

    @property
    def name(self):
        """
        the last field of the path
        """
        return fs.path.basename(self.path)

    def exists(self):
        """
        return true if the file or directory pointed to exists in the filesystem
        """
        return self.fs.exists(self.path)

    def isfile(self):
        """
        return true if the path points to a file that exists in the filesystem
        """
        return self.fs.isfile(self.path)

    def isdir(self):
        """
        return true if the path points to a directory that exists in the filesystem
        """
        return self.fs.isdir(self.path)

    def __str__(self):
        return "{0}{1}".format(self._pfx, self.path)

    def __repr__(self):
        return "{0}:{1}".format(repr(self.fs), self.path)

@contextmanager
def io_errors(path):
    """
    a context manager that re-raises a filesystem failure on the given
    path as a BagIOError.
    """
    try:
        yield
    except (fs.errors.FSError, OSError) as ex:
        raise BagIOError(str(path), ex)

def open_text_file(path, mode='r', encoding='utf-8', errors='strict',
                   newline=''):
    """
    return a file-like object for the text file located at the given Path.
    With the default newline='', lines read keep their terminators, which
    may be any of LF, CR LF or CR.
    """
    return path.fs.open(path.path, mode, encoding=encoding, errors=errors,
                        newline=newline)

def open_bin_file(path, mode='r'):
    """
    return a file-like object for the binary file located at the given Path.
    """
    return path.fs.openbin(path.path, mode)

def replace_file(path, writer):
    """
    (re-)write the file at the given Path by first writing to a temporary
    sibling file and then moving it into place, so that a failure part way
    through never leaves a truncated file behind.

    :param Path path:     the file to write
    :param writer:        a function that accepts an open, writable text
                          file object and writes the content to it
    :raises BagIOError:   if the file cannot be written
    """
    tmp = Path(path.fs, fs.path.join(fs.path.dirname(path.path),
                                     "." + path.name + ".tmp"), path._pfx)
    with io_errors(path):
        try:
            with open_text_file(tmp, 'w', newline='\n') as fd:
                writer(fd)
            path.fs.move(tmp.path, path.path, overwrite=True)
        finally:
            if path.fs.exists(tmp.path):
                path.fs.remove(tmp.path)

def open_bag_root(location, prefix=None):
    """
    return a Path pointing to the root directory of a bag.

    When the location is a local path or an FS URL, a filesystem is opened
    for it and the returned Path owns it: call the Path's close() when done.
    A Path or FS instance passed in is used as is and is never closed here.
    A "mem://" URL is rejected, since it would always open a new, empty
    filesystem; pass a MemoryFS instance instead.

    :param location:  the bag's location: a path to a directory on local
                      disk, an FS URL (e.g. "osfs:///tmp/bag"), or an FS
                      instance (whose root is taken to be the bag's root).
    :raises BagError: if the location does not exist as a directory
    :raises ValueError:  if the location is empty or a "mem://" URL
    """
    if isinstance(location, Path):
        return location
    if isinstance(location, FS):
        return Path(location, "", prefix if prefix is not None else "bag:")
    if not location:
        raise ValueError("open_bag_root: empty location string")

    location = str(location)
    if '://' in location:
        if location.startswith("mem://"):
            raise ValueError("open_bag_root: a memory filesystem must be "
                             "given as an FS instance, not a URL")
        return Path(open_fs(location), "", location+':', owned=True)

    if not os.path.isdir(location):
        raise BagError("Bag directory not found: " + location)
    if prefix is None:
        prefix = location.rstrip("/") + "/"
    return Path(fs.osfs.OSFS(location), "", prefix, owned=True)
