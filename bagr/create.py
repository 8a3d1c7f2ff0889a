"""
Tools for creating a bag from a directory of files.

The :py:class:`BagBuilder` class carries out the creation as a fixed
sequence of stages; :py:func:`make_bag` runs all of them in one shot.
"""
import logging
from datetime import date

import fs.errors

from .constants import (DATA_DIR, DEFAULT_ALGORITHMS, DEFAULT_WORKERS,
                        SOFTWARE_NAME, SOFTWARE_VERSION, SOFTWARE_URL)
from .exceptions import BagError, BagCreationError
from .tags import TagList
from .info import BagDeclaration, BagInfo, write_bag_declaration, write_bag_info
from .digest import sort_algorithms
from .manifest import (build_manifests, build_tag_manifests, write_manifest,
                       remove_manifests)
from .bag import Bag
from .access.bagfs import open_bag_root, io_errors

LOGGER = logging.getLogger(__name__)

START = "starting"
WRITE_PAYLOAD = "writing payload"
COMPUTE_MANIFESTS = "computing manifests"
WRITE_BAG_DECLARATION = "writing bag declaration"
WRITE_BAG_INFO = "writing bag info"
WRITE_TAG_MANIFESTS = "writing tag manifests"
DONE = "done"

def software_agent():
    """
    return the value to record as the Software-Agent in bag-info.txt
    """
    return "{0} v{1} <{2}>".format(SOFTWARE_NAME, SOFTWARE_VERSION, SOFTWARE_URL)

def as_bag_info(info):
    """
    return the given bag metadata as a new BagInfo instance.

    :param info:  the metadata as a BagInfo, a TagList, a dict (whose values
                  may be lists for repeated labels), or a sequence of
                  (label, value) pairs.  None yields an empty BagInfo.
    """
    out = BagInfo()
    if info is None:
        return out
    if isinstance(info, (BagInfo, TagList)):
        pairs = [(t.label, t.value) for t in info]
    elif isinstance(info, dict):
        pairs = []
        for label, value in info.items():
            if isinstance(value, (list, tuple)):
                pairs.extend([(label, v) for v in value])
            else:
                pairs.append((label, value))
    else:
        pairs = list(info)

    for label, value in pairs:
        out.add_tag(label, str(value))
    return out

class BagBuilder(object):
    """
    a class that turns a directory into a bag.

    Creation proceeds through the stages WRITE_PAYLOAD, COMPUTE_MANIFESTS,
    WRITE_BAG_DECLARATION, WRITE_BAG_INFO, and WRITE_TAG_MANIFESTS in that
    order; the stage attribute records how far it got.  A failure at any
    stage stops the operation and is raised as a BagCreationError naming the
    stage.  Files written before the failure are left in place, so the
    directory should not be treated as a valid bag after a failure.
    """

    def __init__(self, location, algorithms=DEFAULT_ALGORITHMS, bag_info=None,
                 workers=DEFAULT_WORKERS, logger=None):
        """
        set up the creation of a bag

        :param location:   the bag's root directory (as a path, FS URL, FS
                           instance, or Path).  If it does not contain a
                           "data" subdirectory, its current contents are moved
                           into a new one; otherwise the contents of "data"
                           are taken as the payload.
        :param list algorithms:  the digest algorithms to create manifests for
        :param bag_info:   metadata to write to bag-info.txt in addition to
                           the tags this class sets (see :py:func:`as_bag_info`)
        :param int workers:  the number of files that may be digested at once
        :param Logger logger:  a logger to send messages to; if not provided,
                           this module's logger is used.
        :raises UnsupportedAlgorithmError:  if an algorithm is not supported
        :raises InvalidTagError:  if bag_info contains an illegal tag
        """
        self._root = open_bag_root(location)
        self.algorithms = sort_algorithms(algorithms)
        if not self.algorithms:
            raise ValueError("BagBuilder: at least one digest algorithm is required")
        self.info = as_bag_info(bag_info)
        self.workers = workers
        self.log = logger or LOGGER

        self.stage = START
        self.manifests = None
        self.oxum = None

    @property
    def root(self):
        return self._root

    def build(self):
        """
        create the bag, running each stage in turn.

        :return: the new bag, opened as a Bag instance
        :raises BagCreationError:  if any stage fails
        """
        for stage, step in [(WRITE_PAYLOAD,         self.write_payload),
                            (COMPUTE_MANIFESTS,     self.compute_manifests),
                            (WRITE_BAG_DECLARATION, self.write_bag_declaration),
                            (WRITE_BAG_INFO,        self.write_bag_info),
                            (WRITE_TAG_MANIFESTS,   self.write_tag_manifests)]:
            self._run(stage, step)

        self.stage = DONE
        self.log.info("Created bag %s", self._root)
        return Bag(self._root)

    def _run(self, stage, step):
        self.stage = stage
        self.log.info("%s: %s", self._root, stage)
        try:
            step()
        except (BagError, fs.errors.FSError, OSError) as ex:
            self.log.error("%s: failed while %s: %s", self._root, stage, ex)
            raise BagCreationError(stage, ex)

    def write_payload(self):
        """
        make sure the payload is in the payload directory, moving the
        directory's contents into a new "data" subdirectory if there isn't one
        """
        payload = self._root.relpath(DATA_DIR)
        if payload.isdir():
            self.log.debug("%s: payload already in place", self._root)
            return

        with io_errors(self._root):
            names = sorted(self._root.fs.listdir(self._root.path or "/"))
            self._root.fs.makedir(payload.path)
            for name in names:
                src = self._root.relpath(name)
                dest = payload.relpath(name)
                self.log.debug("Moving %s to %s", src, dest)
                if src.isdir():
                    self._root.fs.movedir(src.path, dest.path, create=True)
                else:
                    self._root.fs.move(src.path, dest.path)

    def compute_manifests(self):
        """
        compute and write the payload manifests, recording the Payload-Oxum
        found in the same pass
        """
        self.manifests, self.oxum = build_manifests(self._root, self.algorithms,
                                                    self.workers)
        remove_manifests(self._root, self.algorithms)
        for manifest in self.manifests.values():
            write_manifest(self._root, manifest)

    def write_bag_declaration(self):
        write_bag_declaration(self._root, BagDeclaration())

    def write_bag_info(self):
        """
        write bag-info.txt, setting the Payload-Oxum and, unless they were
        provided, the Bagging-Date and Software-Agent
        """
        if self.info.bagging_date() is None:
            self.info.add_bagging_date(date.today().isoformat())
        if self.info.software_agent() is None:
            self.info.add_software_agent(software_agent())
        self.info.add_payload_oxum(self.oxum)
        write_bag_info(self._root, self.info)

    def write_tag_manifests(self):
        remove_manifests(self._root, self.algorithms, tag=True)
        for manifest in build_tag_manifests(self._root, self.algorithms,
                                            self.workers).values():
            write_manifest(self._root, manifest)

def make_bag(location, algorithms=DEFAULT_ALGORITHMS, bag_info=None,
             workers=DEFAULT_WORKERS, logger=None):
    """
    turn a directory into a bag.  See :py:class:`BagBuilder` for a
    description of the parameters.

    :return: the new bag, opened as a Bag instance; call its close() when
             done with it to release a filesystem opened for location
    :raises BagCreationError:  if the bag could not be created
    """
    bldr = BagBuilder(location, algorithms, bag_info, workers, logger)
    try:
        bldr.build()
    finally:
        if bldr.root is not location:
            bldr.root.close()
    return Bag(location)
