"""
Common data about the BagIt format: file names, reserved tag labels, and the
versions and encodings this package can read and write.
"""
from types import MappingProxyType

SOFTWARE_NAME = "bagr-py"
SOFTWARE_VERSION = "0.4"
SOFTWARE_URL = "https://github.com/pwinckles/bagr"

# Filenames
BAGIT_TXT = "bagit.txt"
BAG_INFO_TXT = "bag-info.txt"
FETCH_TXT = "fetch.txt"
DATA_DIR = "data"
PAYLOAD_MANIFEST_PREFIX = "manifest"
TAG_MANIFEST_PREFIX = "tagmanifest"

# bagit.txt tag labels
LABEL_BAGIT_VERSION = "BagIt-Version"
LABEL_FILE_ENCODING = "Tag-File-Character-Encoding"

# bag-info.txt reserved labels
LABEL_BAGGING_DATE = "Bagging-Date"
LABEL_PAYLOAD_OXUM = "Payload-Oxum"
LABEL_SOFTWARE_AGENT = "Software-Agent"
LABEL_SOURCE_ORGANIZATION = "Source-Organization"
LABEL_ORGANIZATION_ADDRESS = "Organization-Address"
LABEL_CONTACT_NAME = "Contact-Name"
LABEL_CONTACT_PHONE = "Contact-Phone"
LABEL_CONTACT_EMAIL = "Contact-Email"
LABEL_EXTERNAL_DESCRIPTION = "External-Description"
LABEL_EXTERNAL_IDENTIFIER = "External-Identifier"
LABEL_BAG_SIZE = "Bag-Size"
LABEL_BAG_GROUP_IDENTIFIER = "Bag-Group-Identifier"
LABEL_BAG_COUNT = "Bag-Count"
LABEL_INTERNAL_SENDER_IDENTIFIER = "Internal-Sender-Identifier"
LABEL_INTERNAL_SENDER_DESCRIPTION = "Internal-Sender-Description"
LABEL_BAGIT_PROFILE_IDENTIFIER = "BagIt-Profile-Identifier"

# keys are lower-cased so that lookups can be case-insensitive
LABEL_REPEATABLE = MappingProxyType(dict((label.lower(), repeatable) for label, repeatable in [
    (LABEL_BAGGING_DATE, False),
    (LABEL_PAYLOAD_OXUM, False),
    (LABEL_SOFTWARE_AGENT, False),
    (LABEL_SOURCE_ORGANIZATION, True),
    (LABEL_ORGANIZATION_ADDRESS, True),
    (LABEL_CONTACT_NAME, True),
    (LABEL_CONTACT_PHONE, True),
    (LABEL_CONTACT_EMAIL, True),
    (LABEL_EXTERNAL_DESCRIPTION, True),
    (LABEL_EXTERNAL_IDENTIFIER, True),
    (LABEL_BAG_SIZE, False),
    (LABEL_BAG_GROUP_IDENTIFIER, False),
    (LABEL_BAG_COUNT, False),
    (LABEL_INTERNAL_SENDER_IDENTIFIER, True),
    (LABEL_INTERNAL_SENDER_DESCRIPTION, True),
    (LABEL_BAGIT_PROFILE_IDENTIFIER, True),
]))

def is_repeatable(label):
    """
    return True if a tag with the given label may appear more than once in
    bag-info.txt.  Labels not reserved by the BagIt specification are
    considered repeatable.
    """
    return LABEL_REPEATABLE.get(label.lower(), True)

UTF_8 = "UTF-8"

DEFAULT_ALGORITHMS = ("md5", "sha256")
DEFAULT_WORKERS = 1
HASH_BLOCK_SIZE = 512 * 1024

class BagItVersion(object):
    """
    a BagIt version (MAJOR.MINOR) that can facilitate comparisons
    """

    def __init__(self, vers):
        """
        convert a version string or (major, minor) tuple to a BagItVersion
        instance

        :raises ValueError:  if vers is not of the form MAJOR.MINOR
        """
        if isinstance(vers, str):
            parts = vers.split('.')
            if len(parts) != 2 or not all(p.isdigit() for p in parts):
                raise ValueError("BagIt version must be MAJOR.MINOR: " + vers)
            self.fields = tuple(int(p) for p in parts)
        elif isinstance(vers, tuple):
            if len(vers) != 2:
                raise ValueError("BagIt version must be (major, minor): " +
                                 str(vers))
            self.fields = tuple(int(v) for v in vers)
        else:
            raise TypeError("Input version is not str or tuple: " + str(vers))

    @property
    def major(self):
        return self.fields[0]

    @property
    def minor(self):
        return self.fields[1]

    def __str__(self):
        return "{0}.{1}".format(*self.fields)

    def __repr__(self):
        return "BagItVersion('{0}')".format(self)

    def __hash__(self):
        return hash(self.fields)

    def __eq__(self, other):
        if not isinstance(other, BagItVersion):
            other = BagItVersion(other)
        return self.fields == other.fields

    def __lt__(self, other):
        if not isinstance(other, BagItVersion):
            other = BagItVersion(other)
        return self.fields < other.fields

    def __le__(self, other):
        if not isinstance(other, BagItVersion):
            other = BagItVersion(other)
        return self < other or self == other

    def __ge__(self, other):
        return not (self < other)
    def __gt__(self, other):
        return not self.__le__(other)
    def __ne__(self, other):
        return not (self == other)

BAGIT_1_0 = BagItVersion((1, 0))
BAGIT_DEFAULT_VERSION = BAGIT_1_0
