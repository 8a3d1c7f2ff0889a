"""
Tools for bringing an existing bag's manifests and Payload-Oxum back in line
with the files currently in its payload directory.

Rebagging never changes payload files; it only rewrites the bag's metadata
(manifests, tag manifests, and bag-info.txt) to describe them.
"""
import logging
from collections import OrderedDict

import fs.errors

from .constants import DEFAULT_ALGORITHMS, DEFAULT_WORKERS
from .exceptions import BagError, BagCreationError
from .info import read_bag_declaration, read_bag_info, write_bag_info
from .digest import sort_algorithms
from .manifest import (build_manifests, build_tag_manifests,
                       find_manifests, manifest_filename, read_manifest,
                       write_manifest, remove_manifests, diff_manifests)
from .access.bagfs import open_bag_root

LOGGER = logging.getLogger(__name__)

START = "starting"
READ_BAG = "reading bag"
COMPUTE_MANIFESTS = "computing manifests"
COMPARE_MANIFESTS = "comparing manifests"
WRITE_MANIFESTS = "writing manifests"
WRITE_BAG_INFO = "writing bag info"
WRITE_TAG_MANIFESTS = "writing tag manifests"
DONE = "done"

class RebagResult(object):
    """
    a summary of what a rebag operation found and changed
    """

    def __init__(self):
        self.diffs = OrderedDict()
        self.added_algorithms = []
        self.removed_algorithms = []
        self.old_oxum = None
        self.new_oxum = None
        self.updated = False

    def changed(self):
        """
        return True if the bag's metadata did not match its payload
        """
        return bool(self.added_algorithms or self.removed_algorithms or
                    self.old_oxum != self.new_oxum or
                    any(not d.is_empty() for d in self.diffs.values()))

    def __str__(self):
        if not self.changed():
            return "bag metadata is up to date"
        parts = []
        for alg, diff in self.diffs.items():
            if not diff.is_empty():
                parts.append("{0}: {1} added, {2} removed, {3} changed".format(
                    alg, len(diff.added), len(diff.removed), len(diff.changed)))
        if self.added_algorithms:
            parts.append("new manifests: " + ", ".join(self.added_algorithms))
        if self.removed_algorithms:
            parts.append("dropped manifests: " + ", ".join(self.removed_algorithms))
        if self.old_oxum != self.new_oxum:
            parts.append("Payload-Oxum: {0} -> {1}".format(self.old_oxum,
                                                           self.new_oxum))
        return "; ".join(parts)

class Rebagger(object):
    """
    a class that updates an existing bag's metadata to match its payload.

    The payload manifests are recomputed exactly as they are when a bag is
    created and compared with the manifests on disk.  If nothing differs,
    the bag is left untouched.  Otherwise, all payload manifests are
    rewritten, manifests for algorithms no longer wanted are removed, the
    Payload-Oxum is replaced, and the tag manifests are rewritten.
    """

    def __init__(self, location, algorithms=None, workers=DEFAULT_WORKERS,
                 logger=None):
        """
        set up the rebagging of a bag

        :param location:   the bag's root directory (as a path, FS URL, FS
                           instance, or Path)
        :param list algorithms:  the digest algorithms the bag's manifests
                           should use.  If not provided, the algorithms of
                           the existing payload manifests are kept (or the
                           defaults are used if there are none).
        :param int workers:  the number of files that may be digested at once
        :param Logger logger:  a logger to send messages to
        :raises UnsupportedAlgorithmError:  if an algorithm is not supported
        """
        self._root = open_bag_root(location)
        self.algorithms = sort_algorithms(algorithms) if algorithms else None
        self.workers = workers
        self.log = logger or LOGGER

        self.stage = START
        self.info = None
        self.old_manifests = None
        self.manifests = None
        self.oxum = None
        self.result = RebagResult()

    @property
    def root(self):
        return self._root

    def rebag(self):
        """
        update the bag's metadata to match its payload

        :rtype: RebagResult
        :raises BagCreationError:  if any stage fails
        """
        self._run(READ_BAG, self.read_bag)
        self._run(COMPUTE_MANIFESTS, self.compute_manifests)
        self._run(COMPARE_MANIFESTS, self.compare_manifests)

        if self.result.changed():
            self._run(WRITE_MANIFESTS, self.write_manifests)
            self._run(WRITE_BAG_INFO, self.write_bag_info)
            self._run(WRITE_TAG_MANIFESTS, self.write_tag_manifests)
            self.result.updated = True
            self.log.info("%s: updated bag (%s)", self._root, self.result)
        else:
            self.log.info("%s: %s", self._root, self.result)

        self.stage = DONE
        return self.result

    def _run(self, stage, step):
        self.stage = stage
        self.log.debug("%s: %s", self._root, stage)
        try:
            step()
        except (BagError, fs.errors.FSError, OSError) as ex:
            self.log.error("%s: rebag failed while %s: %s", self._root, stage, ex)
            raise BagCreationError(stage, ex)

    def read_bag(self):
        """
        read the bag's declaration, bag info, and current payload manifests
        """
        read_bag_declaration(self._root)
        self.info = read_bag_info(self._root)

        existing = find_manifests(self._root)
        if not self.algorithms:
            self.algorithms = existing or sort_algorithms(DEFAULT_ALGORITHMS)

        self.old_manifests = OrderedDict(
            (alg, read_manifest(self._root, manifest_filename(alg)))
            for alg in existing)

        tag = self.info.payload_oxum()
        self.result.old_oxum = tag.value if tag else None

    def compute_manifests(self):
        self.manifests, self.oxum = build_manifests(self._root, self.algorithms,
                                                    self.workers)
        self.result.new_oxum = str(self.oxum)

    def compare_manifests(self):
        """
        diff the recomputed manifests against those found on disk
        """
        for alg, manifest in self.manifests.items():
            if alg not in self.old_manifests:
                self.result.added_algorithms.append(alg)
                continue
            diff = diff_manifests(self.old_manifests[alg], manifest)
            self.result.diffs[alg] = diff
            if not diff.is_empty():
                self.log.info("%s: %s manifest is out of date: %d added, "
                              "%d removed, %d changed", self._root,
                              manifest.filename, len(diff.added),
                              len(diff.removed), len(diff.changed))
        self.result.removed_algorithms = [a for a in self.old_manifests
                                          if a not in self.manifests]

    def write_manifests(self):
        remove_manifests(self._root, self.algorithms)
        for manifest in self.manifests.values():
            write_manifest(self._root, manifest)

    def write_bag_info(self):
        self.info.add_payload_oxum(self.oxum)
        write_bag_info(self._root, self.info)

    def write_tag_manifests(self):
        """
        rewrite the tag manifests, keeping the algorithms of the existing
        ones (or using the payload algorithms if there are none)
        """
        algorithms = find_manifests(self._root, True) or self.algorithms
        for manifest in build_tag_manifests(self._root, algorithms,
                                            self.workers).values():
            write_manifest(self._root, manifest)

def rebag(location, algorithms=None, workers=DEFAULT_WORKERS, logger=None):
    """
    update an existing bag's manifests and Payload-Oxum to match the files
    in its payload directory.  See :py:class:`Rebagger`.

    :rtype: RebagResult
    :raises BagCreationError:  if the bag could not be updated
    """
    rebagger = Rebagger(location, algorithms, workers, logger)
    try:
        return rebagger.rebag()
    finally:
        if rebagger.root is not location:
            rebagger.root.close()
