"""
exceptions that can be raised while reading, writing, or validating a bag
"""

class BagError(Exception):
    """
    a general exception while working with a bag
    """
    pass

class MissingTagError(BagError):
    """
    an exception indicating that a tag required in a tag file is missing.
    """
    def __init__(self, label, message=None):
        """
        initialize the exception with the label of the missing tag
        :param str label:    the label of the tag that could not be found
        :param str message:  the exception's message, overriding the default
                             (generated from the label)
        """
        self.label = label
        if not message:
            message = "Missing required tag: " + label
        super(MissingTagError, self).__init__(message)

class UnsupportedVersionError(BagError):
    """
    the bag declares a BagIt version that this package does not support
    """
    def __init__(self, value):
        self.value = value
        super(UnsupportedVersionError, self).__init__(
            "Unsupported BagIt version: {0}".format(value))

class UnsupportedEncodingError(BagError):
    """
    the bag declares a tag file character encoding that this package does
    not support
    """
    def __init__(self, value):
        self.value = value
        super(UnsupportedEncodingError, self).__init__(
            "Unsupported tag file character encoding: {0}".format(value))

class UnsupportedAlgorithmError(BagError, ValueError):
    """
    a digest algorithm was requested that this package does not support
    """
    def __init__(self, algorithm):
        self.algorithm = algorithm
        super(UnsupportedAlgorithmError, self).__init__(
            "Unsupported digest algorithm: {0}".format(algorithm))

class InvalidTagError(BagError):
    """
    a tag label or value violates the tag format (leading or trailing
    whitespace in the label, or a CR or LF character anywhere).
    """
    def __init__(self, label, reason):
        self.label = label
        self.reason = reason
        super(InvalidTagError, self).__init__(
            "Invalid tag {0!r}: {1}".format(label, reason))

class MalformedLineError(BagError):
    """
    a line in a tag file (or manifest) could not be parsed.  The exception
    carries the location of the offending line.
    """
    def __init__(self, path, line_number, reason):
        """
        :param str path:         the file containing the bad line (may be None
                                 if the lines did not come from a file)
        :param int line_number:  the 1-based number of the bad line
        :param str reason:       an explanation of what is wrong with the line
        """
        self.path = path
        self.line_number = line_number
        self.reason = reason
        super(MalformedLineError, self).__init__(
            "{0}, line {1}: {2}".format(path or "<lines>", line_number, reason))

class MalformedManifestLineError(MalformedLineError):
    """
    a line in a manifest file could not be split into a digest and a path
    """
    pass

class DuplicatePathError(BagError):
    """
    a manifest lists the same path more than once
    """
    def __init__(self, manifest, path):
        self.manifest = manifest
        self.path = path
        super(DuplicatePathError, self).__init__(
            "{0} lists {1} multiple times".format(manifest, path))

class BagIOError(BagError):
    """
    an I/O failure while reading or writing a file within a bag
    """
    def __init__(self, path, underlying):
        self.path = path
        self.underlying = underlying
        super(BagIOError, self).__init__(
            "I/O failure on {0}: {1}".format(path, underlying))

class BagCreationError(BagError):
    """
    a failure while creating or updating (rebagging) a bag.  The stage
    attribute names the step of the operation that failed; cause holds the
    originating exception.
    """
    def __init__(self, stage, cause):
        self.stage = stage
        self.cause = cause
        super(BagCreationError, self).__init__(
            "Bag operation failed while {0}: {1}".format(stage, cause))

class BagValidationError(BagError):
    """
    an exception indicating that a bag is not compliant with the BagIt
    specification in one or more ways.  The details attribute lists the
    individual problems.
    """
    def __init__(self, message, details=None):
        super(BagValidationError, self).__init__(message)
        if details is None:
            details = []
        self.message = message
        self.details = details

    def __str__(self):
        if len(self.details) > 0:
            details = "; ".join([str(e) for e in self.details])
            return "%s: %s" % (self.message, details)
        return self.message

class ManifestErrorDetail(BagError):
    """
    a problem with one manifest entry, as recorded in a validation report
    """
    def __init__(self, path):
        self.path = path
        super(ManifestErrorDetail, self).__init__(path)

class DigestMismatch(ManifestErrorDetail):
    """
    the digest recorded in a manifest does not match the file's content
    """
    def __init__(self, path, algorithm, expected, actual):
        super(DigestMismatch, self).__init__(path)
        self.algorithm = algorithm
        self.expected = expected
        self.actual = actual

    def __str__(self):
        return "%s %s validation failed: expected=\"%s\" found=\"%s\"" % (
            self.path, self.algorithm, self.expected, self.actual)

class MissingPayloadFile(ManifestErrorDetail):
    """
    a file listed in a manifest does not exist
    """
    def __str__(self):
        return "%s exists in manifest but was not found on filesystem" % self.path

class UnexpectedPayloadFile(ManifestErrorDetail):
    """
    a payload file exists that no payload manifest lists
    """
    def __str__(self):
        return "%s exists on filesystem but is not in the manifest" % self.path
