"""
This module provides the validator implementation for the BagIt
specification (RFC 8493).  It audits a whole bag: its declaration, its
metadata, and every file listed in (or missing from) its manifests.
"""
import logging

from .base import Validator, ValidationResults, PROB
from ..constants import BAGIT_TXT, DATA_DIR
from ..exceptions import BagError
from ..info import read_bag_declaration, read_bag_info
from ..manifest import (find_manifests, manifest_filename, read_manifest,
                        verify_manifests, list_payload_files, MISSING,
                        MISMATCH, UNEXPECTED)
from ..access.bagfs import open_bag_root

LOGGER = logging.getLogger(__name__)

class BagValidator(Validator):
    """
    A validator that tests whether a given bag complies with the BagIt
    specification.  Digest failures do not stop the validation: every file
    is checked so that the results give a complete audit.
    """

    def __init__(self, bagpath, workers=1):
        """
        initialize the validator for the bag with a given location.

        :param bagpath:      the target bag's root directory (as a path, FS
                             URL, FS instance, or Path)
        :param int workers:  the number of files that may be digested at once
        """
        self.root = open_bag_root(bagpath)
        super(BagValidator, self).__init__(str(self.root))
        self.workers = workers

    def validate(self, want=PROB, results=None):
        if not results:
            results = ValidationResults(self.target, want)

        self.test_declaration(results)
        info = self.test_bag_info(results)
        self.test_payload_dir(results)
        manifests = self.test_manifests(results)
        report = self.test_contents(manifests, results)
        self.test_oxum(info, results)
        results.report = report

        for issue in results.failed(want):
            LOGGER.warning("%s: %s", self.target, issue)
        return results

    def test_declaration(self, results):
        issue = results._issue("2.1.1-exists", "Bag must contain a bagit.txt file")
        exists = self.root.relpath(BAGIT_TXT).isfile()
        results._err(issue, exists)
        if not exists:
            return None

        issue = results._issue("2.1.1-valid",
                               "bagit.txt must declare a supported BagIt version "
                               "and tag file encoding")
        try:
            decl = read_bag_declaration(self.root)
            results._err(issue, True)
            return decl
        except BagError as ex:
            results._err(issue, False, str(ex))
            return None

    def test_bag_info(self, results):
        issue = results._issue("2.2.2-format",
                               "bag-info.txt must be a legal tag file, if present")
        try:
            info = read_bag_info(self.root)
            results._err(issue, True)
            return info
        except BagError as ex:
            results._err(issue, False, str(ex))
            return None

    def test_payload_dir(self, results):
        issue = results._issue("2.1.2",
                               "Bag must contain a payload directory named 'data'")
        results._err(issue, self.root.relpath(DATA_DIR).isdir())

    def test_manifests(self, results):
        """
        read the payload and tag manifests, returning the ones that could be
        parsed
        """
        issue = results._issue("2.1.3-exists",
                               "Bag must contain at least one payload manifest")
        payload_algs = find_manifests(self.root)
        results._err(issue, bool(payload_algs))

        tag_algs = find_manifests(self.root, True)
        issue = results._issue("2.2.1-exists", "Bag should contain a tag manifest")
        results._rec(issue, bool(tag_algs))

        manifests = []
        comments = []
        for tag, algs in ((False, payload_algs), (True, tag_algs)):
            for alg in algs:
                try:
                    manifests.append(read_manifest(self.root,
                                                   manifest_filename(alg, tag)))
                except BagError as ex:
                    comments.append(str(ex))
        issue = results._issue("2.1.3-format", "Manifests must be well-formed")
        results._err(issue, not comments, comments)

        return manifests

    def test_contents(self, manifests, results):
        """
        verify the bag's files against the manifests
        """
        if not manifests:
            return None
        try:
            report = verify_manifests(manifests, self.root, self.workers)
        except BagError as ex:
            issue = results._issue("3-valid", "Every file listed in a manifest "
                                   "must be readable")
            results._err(issue, False, str(ex))
            return None

        payload = [m for m in manifests if not m.is_tag]
        tags = [m for m in manifests if m.is_tag]

        if payload:
            problems = [str(r.problem()) for r in report.results(UNEXPECTED)]
            problems += ["{0} is not listed in {1}".format(p, ", ".join(
                             manifest_filename(a) for a in algs))
                         for p, algs in report.partial_listings().items()
                         if p.startswith(DATA_DIR + '/')]
            issue = results._issue("3-complete", "Every payload file must be "
                                   "listed in every payload manifest")
            results._err(issue, not problems, problems)

        for tag, label, spec in (
                (False, "3-valid", "Every payload file listed in a manifest "
                                   "must exist and match its digest"),
                (True,  "2.2.1-valid", "Every tag file listed in a tag manifest "
                                       "must exist and match its digest")):
            if not (tags if tag else payload):
                continue
            listed = set(p for m in manifests if m.is_tag == tag for p in m.paths())
            problems = [str(r.problem()) for r in report.results()
                        if r.status in (MISSING, MISMATCH) and r.path in listed]
            results._err(results._issue(label, spec), not problems, problems)

        return report

    def test_oxum(self, info, results):
        if info is None or info.payload_oxum() is None:
            return

        issue = results._issue("2.2.2-oxum", "Payload-Oxum must match the payload")
        try:
            oxum = info.payload_oxum_value()
        except ValueError as ex:
            results._err(issue, False, str(ex))
            return

        octets = 0
        paths = list_payload_files(self.root)
        for path in paths:
            octets += self.root.fs.getsize(self.root.relpath(path).path)
        passed = oxum.octet_count == octets and oxum.file_count == len(paths)
        comments = None
        if not passed:
            comments = ("Expected {0} files and {1} bytes but found {2} files "
                        "and {3} bytes").format(oxum.file_count, oxum.octet_count,
                                                len(paths), octets)
        results._err(issue, passed, comments)

def validate_bag(bagpath, want=PROB, workers=1):
    """
    validate the bag at the given location, raising an exception if it is
    not compliant.

    :raises BagComplianceError:  if the bag fails any of the requested tests
    """
    valid8r = BagValidator(bagpath, workers)
    try:
        valid8r.ensure_valid(want)
    finally:
        if valid8r.root is not bagpath:
            valid8r.root.close()
