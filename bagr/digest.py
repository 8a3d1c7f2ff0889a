"""
Content digest computation.

Algorithms are named as they are in manifest file names (e.g. "sha256" for
manifest-sha256.txt).  All of the digests requested for a file are computed
in a single pass over its bytes.
"""
import hashlib, logging
from collections import OrderedDict, namedtuple
from concurrent.futures import ThreadPoolExecutor, wait, FIRST_EXCEPTION
from functools import partial

from .constants import HASH_BLOCK_SIZE
from .exceptions import UnsupportedAlgorithmError
from .access.bagfs import open_bin_file, io_errors

LOGGER = logging.getLogger(__name__)

# listed from strongest to weakest; this order breaks ties whenever one
# algorithm must be chosen over another
DIGEST_ALGORITHMS = OrderedDict([
    ("sha512",      hashlib.sha512),
    ("blake2b-512", partial(hashlib.blake2b, digest_size=64)),
    ("sha384",      hashlib.sha384),
    ("blake2b-384", partial(hashlib.blake2b, digest_size=48)),
    ("sha256",      hashlib.sha256),
    ("blake2b-256", partial(hashlib.blake2b, digest_size=32)),
    ("sha224",      hashlib.sha224),
    ("sha1",        hashlib.sha1),
    ("md5",         hashlib.md5),
])

FileDigest = namedtuple('FileDigest', 'path size digests')

def check_algorithm(algorithm):
    """
    return the normalized (lower-case) name of the given algorithm
    :raises UnsupportedAlgorithmError:  if the algorithm is not supported
    """
    alg = algorithm.lower()
    if alg not in DIGEST_ALGORITHMS:
        raise UnsupportedAlgorithmError(algorithm)
    return alg

def sort_algorithms(algorithms):
    """
    return a list of the given algorithm names with duplicates removed,
    ordered from strongest to weakest.
    :raises UnsupportedAlgorithmError:  if any algorithm is not supported
    """
    algs = set(check_algorithm(a) for a in algorithms)
    return [a for a in DIGEST_ALGORITHMS if a in algs]

def new_hasher(algorithm):
    """
    return a fresh hash object for the given algorithm
    """
    return DIGEST_ALGORITHMS[check_algorithm(algorithm)]()

def digest_stream(stream, algorithms):
    """
    read a binary stream to its end, computing a digest for each of the
    given algorithms.

    :return: a 2-tuple containing a dict of hex digests keyed by algorithm
             name and the number of bytes read
    """
    hashers = OrderedDict((check_algorithm(a), new_hasher(a)) for a in algorithms)
    size = 0
    while True:
        block = stream.read(HASH_BLOCK_SIZE)
        if not block:
            break
        size += len(block)
        for h in hashers.values():
            h.update(block)

    return OrderedDict((alg, h.hexdigest()) for alg, h in hashers.items()), size

def digest_file(path, algorithms):
    """
    compute the digests of the file at the given Path

    :rtype: FileDigest
    :raises BagIOError:  if the file cannot be read
    """
    with io_errors(path):
        with open_bin_file(path) as fd:
            digests, size = digest_stream(fd, algorithms)

    LOGGER.debug("Computed digests for %s (%d bytes)", path, size)
    return FileDigest(path.path, size, digests)

def digest_files(paths, algorithms, workers=1):
    """
    compute the digests of each of the files at the given Paths.

    When workers is greater than 1, files are digested concurrently by a
    pool of that many threads.  Either way, the results are returned in the
    same order as the input paths.  If any file cannot be digested, the
    work not yet started is cancelled and the error for the earliest such
    path is raised.

    :param list paths:       the Paths to the files to digest
    :param list algorithms:  the names of the algorithms to compute
    :param int workers:      the maximum number of files to digest at once
    :rtype: list of FileDigest
    :raises BagIOError:  if any file cannot be read
    """
    algorithms = [check_algorithm(a) for a in algorithms]
    paths = list(paths)
    if not workers or workers <= 1 or len(paths) < 2:
        return [digest_file(p, algorithms) for p in paths]

    executor = ThreadPoolExecutor(max_workers=workers)
    try:
        futures = [executor.submit(digest_file, p, algorithms) for p in paths]
        done, pending = wait(futures, return_when=FIRST_EXCEPTION)
        for f in pending:
            f.cancel()
        for f in futures:
            if f in done and f.exception() is not None:
                raise f.exception()
        return [f.result() for f in futures]
    finally:
        executor.shutdown(wait=True)
