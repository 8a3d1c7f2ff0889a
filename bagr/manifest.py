"""
Payload and tag manifests: building them from the files in a bag, reading
and writing manifest files, and verifying a bag's files against them.

A manifest maps each file's path, relative to the bag's base directory and
always delimited with forward slashes, to its digest under one algorithm.
Payload manifests (manifest-<alg>.txt) cover the files under data/; tag
manifests (tagmanifest-<alg>.txt) cover the other files in the bag,
including the payload manifests themselves.
"""
import io, re, logging
from collections import OrderedDict, namedtuple

import fs.path

from .constants import (DATA_DIR, PAYLOAD_MANIFEST_PREFIX, TAG_MANIFEST_PREFIX)
from .exceptions import (MalformedManifestLineError, DuplicatePathError,
                         DigestMismatch, MissingPayloadFile,
                         UnexpectedPayloadFile)
from .digest import check_algorithm, sort_algorithms, digest_files, DIGEST_ALGORITHMS
from .info import PayloadOxum
from .access.bagfs import open_bin_file, replace_file, io_errors

LOGGER = logging.getLogger(__name__)

_manifest_name_re = re.compile(r"^(tag)?manifest-([A-Za-z0-9-]+)\.txt$")
_encoded_char_re = re.compile(r"%(0[AaDd]|25)")

ManifestEntry = namedtuple('ManifestEntry', 'path digest algorithm')

class ManifestDiff(namedtuple('ManifestDiff', 'added removed changed')):
    """
    the differences between two manifests, each given as a sorted list of
    paths: paths only in the newer one (added), paths only in the older one
    (removed), and paths whose digests differ (changed).
    """
    __slots__ = ()

    def is_empty(self):
        return not (self.added or self.removed or self.changed)

def manifest_filename(algorithm, tag=False):
    """
    return the name of the manifest file for the given algorithm
    """
    prefix = TAG_MANIFEST_PREFIX if tag else PAYLOAD_MANIFEST_PREFIX
    return "{0}-{1}.txt".format(prefix, algorithm)

def parse_manifest_filename(filename):
    """
    return a 2-tuple giving the algorithm named by a manifest file name and
    whether it is a tag manifest, or None if the name is not that of a
    manifest file.  The algorithm is not checked for support.
    """
    m = _manifest_name_re.match(filename)
    if not m:
        return None
    return m.group(2).lower(), bool(m.group(1))

def encode_path(path):
    """
    percent-encode the characters in a path that cannot appear literally
    in a manifest line (CR, LF, and %)
    """
    return path.replace('%', '%25').replace('\r', '%0D').replace('\n', '%0A')

def decode_path(path):
    """
    reverse the encoding applied by encode_path()
    """
    return _encoded_char_re.sub(lambda m: chr(int(m.group(1), 16)), path)

def is_unsafe_path(path):
    """
    return True if the path, as given in a manifest, could refer to a
    location outside of the bag (e.g. an absolute path or one containing
    "..").
    """
    if path.startswith('/') or path.startswith('\\') or re.match(r'^[A-Za-z]:', path):
        return True
    return '..' in re.split(r'[/\\]', path)

class Manifest(object):
    """
    a mapping of bag-relative file paths to digests computed with one
    algorithm.  A path may appear only once.
    """

    def __init__(self, algorithm, tag=False, entries=None):
        """
        :param str algorithm:  the digest algorithm used for this manifest
        :param bool tag:       True if this is a tag manifest
        :param entries:        an iterable of (path, digest) pairs to load
        :raises UnsupportedAlgorithmError:  if the algorithm is not supported
        :raises DuplicatePathError:  if entries lists a path more than once
        """
        self._alg = check_algorithm(algorithm)
        self._tag = bool(tag)
        self._digests = {}
        if entries:
            for path, digest in entries:
                self.add(path, digest)

    @property
    def algorithm(self):
        return self._alg

    @property
    def is_tag(self):
        return self._tag

    @property
    def filename(self):
        """
        the name of the file this manifest is saved to
        """
        return manifest_filename(self._alg, self._tag)

    def add(self, path, digest):
        """
        add an entry to this manifest
        :raises DuplicatePathError:  if the path is already in this manifest
        """
        if path in self._digests:
            raise DuplicatePathError(self.filename, path)
        self._digests[path] = digest.lower()

    def get(self, path):
        """
        return the digest recorded for the given path or None if the path
        is not in this manifest
        """
        return self._digests.get(path)

    def paths(self):
        """
        return the paths in this manifest in sorted order
        """
        return sorted(self._digests)

    def entries(self):
        """
        iterate through the ManifestEntry items in this manifest, sorted by path
        """
        for path in self.paths():
            yield ManifestEntry(path, self._digests[path], self._alg)

    def diff(self, newer):
        """
        compare this manifest with a newer one for the same algorithm
        :rtype: ManifestDiff
        """
        return diff_manifests(self, newer)

    def __iter__(self):
        return self.entries()

    def __contains__(self, path):
        return path in self._digests

    def __len__(self):
        return len(self._digests)

    def __eq__(self, other):
        if not isinstance(other, Manifest):
            return NotImplemented
        return self._alg == other._alg and self._tag == other._tag and \
               self._digests == other._digests

    def __ne__(self, other):
        eq = self.__eq__(other)
        return eq if eq is NotImplemented else not eq

    def __repr__(self):
        return "<Manifest {0}: {1} entries>".format(self.filename, len(self))

def diff_manifests(older, newer):
    """
    compare two manifests, returning a ManifestDiff
    """
    oldpaths = set(older.paths())
    newpaths = set(newer.paths())
    changed = [p for p in oldpaths & newpaths if older.get(p) != newer.get(p)]
    return ManifestDiff(sorted(newpaths - oldpaths), sorted(oldpaths - newpaths),
                        sorted(changed))

def parse_manifest(lines, algorithm, path=None, tag=False):
    """
    parse the lines of a manifest file.  Each line is a digest, followed by
    one or more whitespace characters, followed by a file path.  Blank lines
    are ignored.

    :param lines:           an iterable of text lines
    :param str algorithm:   the algorithm used to compute the digests
    :param str path:        the name of the file the lines came from, used
                            in error messages
    :param bool tag:        True if the lines are from a tag manifest
    :rtype: Manifest
    :raises MalformedManifestLineError:  if a line cannot be parsed or lists
                            an unsafe path
    :raises DuplicatePathError:  if a path is listed more than once
    """
    manifest = Manifest(algorithm, tag)
    if path is None:
        path = manifest.filename

    for num, line in enumerate(lines, 1):
        line = line.rstrip('\r\n')
        if not line.strip():
            continue

        entry = line.split(None, 1)
        if len(entry) != 2:
            raise MalformedManifestLineError(path, num,
                                 "Expected a digest and a path: "+repr(line))
        digest, filepath = entry
        filepath = decode_path(filepath)
        if is_unsafe_path(filepath):
            raise MalformedManifestLineError(path, num,
                                 "Path is unsafe: "+repr(filepath))

        if filepath in manifest:
            raise DuplicatePathError(path, filepath)
        manifest.add(filepath, digest)

    return manifest

def serialize_manifest(manifest):
    """
    return the lines, each with a terminating LF, of a manifest file, sorted
    by path.
    """
    return ["{0} {1}\n".format(e.digest, encode_path(e.path))
            for e in manifest.entries()]

def read_manifest(root, filename):
    """
    read the manifest file with the given name from the bag with the given
    root Path.  The algorithm and manifest type are taken from the name.

    :raises BagIOError:  if the file cannot be read
    :raises MalformedManifestLineError, DuplicatePathError:  if the
                         file's contents are not legal
    """
    parsed = parse_manifest_filename(filename)
    if not parsed:
        raise ValueError("Not a manifest file name: " + filename)
    algorithm, tag = parsed

    path = root.relpath(filename)
    with io_errors(path):
        with open_bin_file(path) as fd:
            content = fd.read()
    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError as ex:
        raise MalformedManifestLineError(str(path),
                                         content[:ex.start].count(b"\n") + 1,
                                         "Manifest is not valid UTF-8")

    return parse_manifest(io.StringIO(text, newline=""), algorithm, str(path), tag)

def write_manifest(root, manifest):
    """
    write a manifest to its file in the bag with the given root Path,
    replacing any existing version.

    :raises BagIOError:  if the file cannot be written
    """
    path = root.relpath(manifest.filename)
    LOGGER.info("Writing manifest %s", path)
    lines = serialize_manifest(manifest)
    replace_file(path, lambda fd: fd.writelines(lines))

def find_manifests(root, tag=False):
    """
    return the algorithms of the manifest files of the requested type found
    in the bag, ordered from strongest to weakest.  Manifests for
    unsupported algorithms, and ones whose names are not lower-case (e.g.
    manifest-SHA256.txt), are skipped with a warning.
    """
    algs = []
    with io_errors(root):
        names = root.fs.listdir(root.path or "/")
    for name in names:
        parsed = parse_manifest_filename(name)
        if not parsed or parsed[1] != tag:
            continue
        if parsed[0] not in DIGEST_ALGORITHMS:
            LOGGER.warning("%s: skipping manifest for unsupported algorithm: %s",
                           root, name)
            continue
        if name != manifest_filename(parsed[0], tag):
            # algorithm names in manifest file names are lower-case
            LOGGER.warning("%s: skipping manifest with non-standard name: %s",
                           root, name)
            continue
        algs.append(parsed[0])
    return sort_algorithms(algs)

def _walk_files(root, dirpath, skip=None):
    # yield the bag-relative paths of regular files below dirpath; symbolic
    # links are neither listed nor followed
    with io_errors(root.relpath(dirpath)):
        infos = sorted(root.fs.scandir(root.relpath(dirpath).path,
                                       namespaces=['link']),
                       key=lambda i: i.name)
    for info in infos:
        path = fs.path.join(dirpath, info.name) if dirpath else info.name
        if skip and skip(path, info):
            continue
        if info.has_namespace('link') and info.is_link:
            LOGGER.debug("Skipping symbolic link %s", path)
            continue
        if info.is_dir:
            for p in _walk_files(root, path, skip):
                yield p
        else:
            yield path

def list_payload_files(root):
    """
    return the sorted, bag-relative paths of all of the files under the bag's
    payload directory
    """
    if not root.relpath(DATA_DIR).isdir():
        return []
    return sorted(_walk_files(root, DATA_DIR))

def _is_not_tag_file(path, info):
    if path == DATA_DIR:
        return True
    if '/' not in path:
        parsed = parse_manifest_filename(path)
        if parsed and parsed[1]:
            return True
    name = fs.path.basename(path)
    return name.startswith('.') and name.endswith('.tmp')

def list_tag_files(root):
    """
    return the sorted, bag-relative paths of all of the files in the bag
    that should be covered by the tag manifests: all files outside of the
    payload directory except the tag manifests themselves.
    """
    return sorted(_walk_files(root, "", _is_not_tag_file))

def _build(root, paths, algorithms, tag, workers):
    algorithms = sort_algorithms(algorithms)
    manifests = OrderedDict((a, Manifest(a, tag)) for a in algorithms)
    octets = 0
    results = digest_files([root.relpath(p) for p in paths], algorithms, workers)
    for path, result in zip(paths, results):
        octets += result.size
        for alg, digest in result.digests.items():
            manifests[alg].add(path, digest)
    return manifests, PayloadOxum(octets, len(paths))

def build_manifests(root, algorithms, workers=1):
    """
    compute payload manifests for the bag with the given root Path by
    walking its payload directory once.

    :param list algorithms:  the digest algorithms to create manifests for
    :param int workers:      the number of files that may be digested at once
    :return: a 2-tuple: an OrderedDict mapping each algorithm (strongest
             first) to its Manifest, and the PayloadOxum for the payload
             read in the same walk
    :raises BagIOError:  if any payload file cannot be read
    """
    paths = list_payload_files(root)
    LOGGER.info("%s: computing %s manifests for %d payload files", root,
                "/".join(sort_algorithms(algorithms)), len(paths))
    return _build(root, paths, algorithms, False, workers)

def build_tag_manifests(root, algorithms, workers=1):
    """
    compute tag manifests for the bag with the given root Path.  This
    should be called after all other tag files have been written.

    :return: an OrderedDict mapping each algorithm to its Manifest
    """
    paths = list_tag_files(root)
    return _build(root, paths, algorithms, True, workers)[0]

OK = "ok"
MISMATCH = "mismatch"
MISSING = "missing"
UNEXPECTED = "unexpected"

class PathResult(namedtuple('PathResult', 'path status algorithm expected actual')):
    """
    the outcome of verifying one file.  For a MISMATCH, algorithm names the
    (strongest) algorithm whose digests disagree, with expected and actual
    holding the recorded and computed digests.
    """
    __slots__ = ()

    def problem(self):
        """
        return a ManifestErrorDetail describing this result, or None if the
        file verified.
        """
        if self.status == MISMATCH:
            return DigestMismatch(self.path, self.algorithm, self.expected,
                                  self.actual)
        if self.status == MISSING:
            return MissingPayloadFile(self.path)
        if self.status == UNEXPECTED:
            return UnexpectedPayloadFile(self.path)
        return None

class ValidationReport(object):
    """
    the results of verifying a bag's files against its manifests.  Each
    path is classified as OK, MISMATCH, MISSING (listed but not found), or
    UNEXPECTED (a payload file that no payload manifest lists).  Paths that
    are listed in some but not all of the manifests of the same type are
    also recorded (see :py:meth:`partial_listings`).
    """

    def __init__(self):
        self._results = {}
        self._partial = {}

    def _set(self, result):
        self._results[result.path] = result

    def _set_partial(self, path, algorithms):
        self._partial[path] = list(algorithms)

    def get(self, path):
        """
        return the PathResult for the given path, or None if it was not checked
        """
        return self._results.get(path)

    def results(self, status=None):
        """
        return the PathResults, sorted by path, optionally restricted to
        those with a given status
        """
        return [self._results[p] for p in sorted(self._results)
                if status is None or self._results[p].status == status]

    def count(self, status=None):
        return len(self.results(status))

    def partial_listings(self):
        """
        return an OrderedDict mapping each path that is missing from some
        manifests to the algorithms of the manifests that do not list it
        """
        return OrderedDict((p, self._partial[p]) for p in sorted(self._partial))

    def problems(self):
        """
        return a list of ManifestErrorDetail instances, one per path that
        did not verify
        """
        return [r.problem() for r in self.results() if r.status != OK]

    def ok(self):
        """
        return True if every listed file verified and there are no
        unexpected or partially listed files
        """
        return not self._partial and \
               all(r.status == OK for r in self._results.values())

    def __len__(self):
        return len(self._results)

def _strength(algorithm):
    return list(DIGEST_ALGORITHMS).index(algorithm)

def verify_manifests(manifests, root, workers=1):
    """
    verify the files of the bag with the given root Path against a set of
    manifests.  Every file listed is re-digested, and, if any payload
    manifests are included, the payload directory is walked to find files
    that none of them list.  The manifests are not changed.

    When several manifests list the same file, its status is MISSING if the
    file does not exist, otherwise MISMATCH if any algorithm disagrees
    (reported under the strongest such algorithm), otherwise OK.

    :param manifests:   the Manifest instances to verify against
    :param int workers: the number of files that may be digested at once
    :rtype: ValidationReport
    :raises BagIOError:  if a listed file exists but cannot be read
    """
    manifests = sorted(manifests, key=lambda m: (m.is_tag, _strength(m.algorithm)))
    report = ValidationReport()

    expected = OrderedDict()
    for m in manifests:
        for entry in m.entries():
            expected.setdefault(entry.path, OrderedDict())[m.algorithm] = entry.digest

    for kind in (False, True):
        ofkind = [m for m in manifests if m.is_tag == kind]
        for path in sorted(set(p for m in ofkind for p in m.paths())):
            lacking = [m.algorithm for m in ofkind if path not in m]
            if lacking:
                LOGGER.warning("%s: %s is not listed in every manifest (missing from %s)",
                               root, path, ", ".join(lacking))
                report._set_partial(path, lacking)

    present = [p for p in expected if root.relpath(p).isfile()]
    algs = sort_algorithms(set(a for d in expected.values() for a in d))
    results = digest_files([root.relpath(p) for p in present], algs, workers)
    computed = dict((p, d.digests) for p, d in zip(present, results))

    for path, digests in expected.items():
        first = next(iter(digests))
        actual = computed.get(path)
        if actual is None:
            result = PathResult(path, MISSING, first, digests[first], None)
        else:
            result = PathResult(path, OK, first, digests[first], actual[first])
            for alg, digest in digests.items():
                if digest != actual[alg]:
                    result = PathResult(path, MISMATCH, alg, digest, actual[alg])
                    break
        if result.status != OK:
            LOGGER.warning("%s: %s", root, result.problem())
        report._set(result)

    if any(not m.is_tag for m in manifests):
        for path in list_payload_files(root):
            if path not in expected:
                result = PathResult(path, UNEXPECTED, None, None, None)
                LOGGER.warning("%s: %s", root, result.problem())
                report._set(result)

    return report

def verify_manifest(manifest, root, workers=1):
    """
    verify the files of the bag with the given root Path against a single
    manifest.  See :py:func:`verify_manifests`.
    """
    return verify_manifests([manifest], root, workers)

def remove_manifests(root, keep, tag=False):
    """
    delete the (payload or tag) manifest files in the bag whose algorithms
    are not among those given in keep.

    :return: the algorithms of the manifests that were removed
    """
    keep = set(check_algorithm(a) for a in keep)
    removed = []
    with io_errors(root):
        names = root.fs.listdir(root.path or "/")
    for name in sorted(names):
        parsed = parse_manifest_filename(name)
        if parsed and parsed[1] == tag and parsed[0] not in keep:
            path = root.relpath(name)
            LOGGER.info("Removing manifest %s", path)
            with io_errors(path):
                root.fs.remove(path.path)
            removed.append(parsed[0])
    return removed
