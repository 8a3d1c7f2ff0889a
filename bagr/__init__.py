"""
a Python library for creating, updating, and validating bags conforming to
the BagIt File Packaging Format (RFC 8493), version 1.0.

The :py:func:`make_bag` function turns a directory into a bag; the
:py:func:`rebag` function brings an existing bag's manifests back in line
with its payload; the :py:class:`BagValidator` class audits a bag against
its manifests and the BagIt rules.  Bags are accessed through the fs
(pyfilesystem2) interface, so they may live on local disk or in any
filesystem it supports.
"""
from .constants import DEFAULT_ALGORITHMS, BagItVersion
from .exceptions import (BagError, BagIOError, BagCreationError,
                         BagValidationError, MissingTagError,
                         UnsupportedVersionError, UnsupportedEncodingError,
                         UnsupportedAlgorithmError, InvalidTagError,
                         MalformedLineError, MalformedManifestLineError,
                         DuplicatePathError)
from .tags import Tag, TagList, parse_tag_lines, serialize_tags
from .info import BagDeclaration, BagInfo, PayloadOxum
from .manifest import (Manifest, build_manifests, build_tag_manifests,
                       parse_manifest, serialize_manifest, verify_manifests,
                       ValidationReport)
from .bag import Bag, open_bag, is_bag
from .create import BagBuilder, make_bag
from .rebag import Rebagger, RebagResult, rebag
from .validate import BagValidator, BagComplianceError, validate_bag
