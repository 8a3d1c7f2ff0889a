"""
Typed views over the two standard tag files: the bag declaration (bagit.txt)
and the bag metadata (bag-info.txt).
"""
import logging
from collections import namedtuple

from .constants import (BAGIT_TXT, BAG_INFO_TXT, BAGIT_1_0, BAGIT_DEFAULT_VERSION,
                        UTF_8, LABEL_BAGIT_VERSION, LABEL_FILE_ENCODING,
                        LABEL_BAGGING_DATE, LABEL_PAYLOAD_OXUM,
                        LABEL_SOFTWARE_AGENT, LABEL_SOURCE_ORGANIZATION,
                        LABEL_ORGANIZATION_ADDRESS, LABEL_CONTACT_NAME,
                        LABEL_CONTACT_PHONE, LABEL_CONTACT_EMAIL,
                        LABEL_EXTERNAL_DESCRIPTION, LABEL_EXTERNAL_IDENTIFIER,
                        LABEL_BAG_SIZE, LABEL_BAG_GROUP_IDENTIFIER,
                        LABEL_BAG_COUNT, LABEL_INTERNAL_SENDER_IDENTIFIER,
                        LABEL_INTERNAL_SENDER_DESCRIPTION,
                        LABEL_BAGIT_PROFILE_IDENTIFIER, BagItVersion,
                        is_repeatable)
from .exceptions import (MissingTagError, UnsupportedVersionError,
                         UnsupportedEncodingError)
from .tags import Tag, TagList, read_tag_file, write_tag_file

LOGGER = logging.getLogger(__name__)

class PayloadOxum(namedtuple('PayloadOxum', 'octet_count file_count')):
    """
    the "octetstream sum" of a bag's payload: the total number of bytes
    and the number of files.  Its string form is "<octets>.<files>".
    """
    __slots__ = ()

    @classmethod
    def parse(cls, value):
        """
        parse a Payload-Oxum tag value
        :raises ValueError:  if the value is not of the form "<int>.<int>"
        """
        octets, sep, files = value.partition('.')
        if not sep or not octets.isdigit() or not files.isdigit():
            raise ValueError("Malformed Payload-Oxum value: " + value)
        return cls(int(octets), int(files))

    def __str__(self):
        return "{0}.{1}".format(self.octet_count, self.file_count)

class BagDeclaration(object):
    """
    the contents of a bag's bagit.txt file: the BagIt version the bag
    conforms to and the character encoding of its tag files.  Only version
    1.0 and UTF-8 are supported.
    """

    def __init__(self, version=BAGIT_DEFAULT_VERSION, encoding=UTF_8):
        """
        :param version:   the BagIt version, given as a BagItVersion or a
                          "MAJOR.MINOR" string
        :param str encoding:  the tag file character encoding
        :raises UnsupportedVersionError:   if the version is not 1.0
        :raises UnsupportedEncodingError:  if the encoding is not UTF-8
        """
        if not isinstance(version, BagItVersion):
            try:
                version = BagItVersion(version)
            except ValueError:
                raise UnsupportedVersionError(version)
        if version != BAGIT_1_0:
            raise UnsupportedVersionError(str(version))
        if encoding != UTF_8:
            raise UnsupportedEncodingError(encoding)

        self._version = version
        self._encoding = encoding

    @property
    def version(self):
        return self._version

    @property
    def encoding(self):
        return self._encoding

    def to_tags(self):
        """
        return the declaration as a TagList: the BagIt-Version tag followed
        by the Tag-File-Character-Encoding tag.
        """
        tags = TagList()
        tags.add_tag(LABEL_BAGIT_VERSION, str(self._version))
        tags.add_tag(LABEL_FILE_ENCODING, self._encoding)
        return tags

    @classmethod
    def from_tags(cls, tags):
        """
        create a BagDeclaration from the tags read from a bagit.txt file

        :raises MissingTagError:  if either required tag is missing
        :raises UnsupportedVersionError:   if the version is not 1.0
        :raises UnsupportedEncodingError:  if the encoding is not UTF-8
        """
        version = tags.get_tag(LABEL_BAGIT_VERSION)
        if version is None:
            raise MissingTagError(LABEL_BAGIT_VERSION)
        encoding = tags.get_tag(LABEL_FILE_ENCODING)
        if encoding is None:
            raise MissingTagError(LABEL_FILE_ENCODING)

        return cls(version.value, encoding.value)

    def __eq__(self, other):
        if not isinstance(other, BagDeclaration):
            return NotImplemented
        return self._version == other._version and \
               self._encoding == other._encoding

    def __ne__(self, other):
        eq = self.__eq__(other)
        return eq if eq is NotImplemented else not eq

    def __repr__(self):
        return "BagDeclaration(version={0}, encoding={1})".format(
            self._version, self._encoding)

class BagInfo(object):
    """
    the metadata in a bag's bag-info.txt file.

    Tags with reserved, non-repeatable labels (e.g. Bagging-Date,
    Payload-Oxum) can appear at most once: adding one replaces any that
    already exist.  All other labels, including ones not reserved by the
    BagIt specification, may be repeated.
    """

    def __init__(self, tags=None):
        """
        wrap a TagList.  If tags is not provided, the BagInfo starts empty.
        """
        if tags is None:
            tags = TagList()
        self._tags = tags

    @property
    def tags(self):
        """
        the underlying TagList
        """
        return self._tags

    def add_tag(self, label, value):
        """
        add a tag with the given label and value.  If the label is reserved
        as non-repeatable, all existing tags with that label are removed
        first.

        :raises InvalidTagError:  if the label or value is not legal
        """
        if is_repeatable(label):
            self._add_repeatable(label, value)
        else:
            self._add_non_repeatable(label, value)

    def get_tag(self, label):
        """
        return the first tag that matches the given label (case-insensitive)
        or None if there is none.
        """
        return self._tags.get_tag(label)

    def get_tags(self, label):
        """
        iterate through all of the tags that match the specified label
        (case-insensitive).  See :py:meth:`TagList.get_tags`.
        """
        return self._tags.get_tags(label)

    def remove_tags(self, label):
        self._tags.remove_tags(label)

    def add_bagging_date(self, value):
        self._add_non_repeatable(LABEL_BAGGING_DATE, value)

    def bagging_date(self):
        return self.get_tag(LABEL_BAGGING_DATE)

    def add_payload_oxum(self, value):
        """
        set the Payload-Oxum tag.
        :param value:  either a PayloadOxum instance or its string form
        """
        self._add_non_repeatable(LABEL_PAYLOAD_OXUM, str(value))

    def payload_oxum(self):
        return self.get_tag(LABEL_PAYLOAD_OXUM)

    def payload_oxum_value(self):
        """
        return the Payload-Oxum tag value as a PayloadOxum instance, or None
        if the tag is not set.
        :raises ValueError:  if the tag value is malformed
        """
        tag = self.payload_oxum()
        if tag is None:
            return None
        return PayloadOxum.parse(tag.value)

    def add_software_agent(self, value):
        self._add_non_repeatable(LABEL_SOFTWARE_AGENT, value)

    def software_agent(self):
        return self.get_tag(LABEL_SOFTWARE_AGENT)

    def add_source_organization(self, value):
        self._add_repeatable(LABEL_SOURCE_ORGANIZATION, value)

    def source_organization(self):
        return self.get_tags(LABEL_SOURCE_ORGANIZATION)

    def add_organization_address(self, value):
        self._add_repeatable(LABEL_ORGANIZATION_ADDRESS, value)

    def organization_address(self):
        return self.get_tags(LABEL_ORGANIZATION_ADDRESS)

    def add_contact_name(self, value):
        self._add_repeatable(LABEL_CONTACT_NAME, value)

    def contact_name(self):
        return self.get_tags(LABEL_CONTACT_NAME)

    def add_contact_phone(self, value):
        self._add_repeatable(LABEL_CONTACT_PHONE, value)

    def contact_phone(self):
        return self.get_tags(LABEL_CONTACT_PHONE)

    def add_contact_email(self, value):
        self._add_repeatable(LABEL_CONTACT_EMAIL, value)

    def contact_email(self):
        return self.get_tags(LABEL_CONTACT_EMAIL)

    def add_external_description(self, value):
        self._add_repeatable(LABEL_EXTERNAL_DESCRIPTION, value)

    def external_description(self):
        return self.get_tags(LABEL_EXTERNAL_DESCRIPTION)

    def add_external_identifier(self, value):
        self._add_repeatable(LABEL_EXTERNAL_IDENTIFIER, value)

    def external_identifier(self):
        return self.get_tags(LABEL_EXTERNAL_IDENTIFIER)

    def add_bag_size(self, value):
        self._add_non_repeatable(LABEL_BAG_SIZE, value)

    def bag_size(self):
        return self.get_tag(LABEL_BAG_SIZE)

    def add_bag_group_identifier(self, value):
        self._add_non_repeatable(LABEL_BAG_GROUP_IDENTIFIER, value)

    def bag_group_identifier(self):
        return self.get_tag(LABEL_BAG_GROUP_IDENTIFIER)

    def add_bag_count(self, value):
        self._add_non_repeatable(LABEL_BAG_COUNT, value)

    def bag_count(self):
        return self.get_tag(LABEL_BAG_COUNT)

    def add_internal_sender_identifier(self, value):
        self._add_repeatable(LABEL_INTERNAL_SENDER_IDENTIFIER, value)

    def internal_sender_identifier(self):
        return self.get_tags(LABEL_INTERNAL_SENDER_IDENTIFIER)

    def add_internal_sender_description(self, value):
        self._add_repeatable(LABEL_INTERNAL_SENDER_DESCRIPTION, value)

    def internal_sender_description(self):
        return self.get_tags(LABEL_INTERNAL_SENDER_DESCRIPTION)

    def add_bagit_profile_identifier(self, value):
        self._add_repeatable(LABEL_BAGIT_PROFILE_IDENTIFIER, value)

    def bagit_profile_identifier(self):
        return self.get_tags(LABEL_BAGIT_PROFILE_IDENTIFIER)

    def _add_non_repeatable(self, label, value):
        # build the tag first so that a bad value leaves existing tags in place
        tag = Tag(label, value)
        self._tags.remove_tags(label)
        self._tags.add(tag)

    def _add_repeatable(self, label, value):
        self._tags.add_tag(label, value)

    def __iter__(self):
        return iter(self._tags)

    def __len__(self):
        return len(self._tags)

    def __repr__(self):
        return "BagInfo({0!r})".format(self._tags)

def read_bag_declaration(root):
    """
    read the bag declaration (bagit.txt) from the bag with the given root
    Path.

    :raises BagIOError:          if the file cannot be read
    :raises MalformedLineError:  if the file is not a legal tag file
    :raises MissingTagError, UnsupportedVersionError, UnsupportedEncodingError:
                                 if the declaration's contents are not valid
    """
    return BagDeclaration.from_tags(read_tag_file(root.relpath(BAGIT_TXT)))

def write_bag_declaration(root, declaration=None):
    """
    write bagit.txt to the bag with the given root Path
    """
    if declaration is None:
        declaration = BagDeclaration()
    write_tag_file(root.relpath(BAGIT_TXT), declaration.to_tags())

def read_bag_info(root):
    """
    read the bag metadata (bag-info.txt) from the bag with the given root
    Path.  An empty BagInfo is returned if the bag has no bag-info.txt.
    """
    path = root.relpath(BAG_INFO_TXT)
    if not path.isfile():
        LOGGER.debug("%s not found; starting with empty bag info", path)
        return BagInfo()
    return BagInfo(read_tag_file(path))

def write_bag_info(root, info):
    """
    write bag-info.txt to the bag with the given root Path
    """
    write_tag_file(root.relpath(BAG_INFO_TXT), info.tags)
