"""
The tag file data model and codec.

A tag file (e.g. bagit.txt, bag-info.txt) is a sequence of lines of the form
``<label>: <value>``.  A :py:class:`Tag` is one label/value pair; a
:py:class:`TagList` is the ordered sequence of tags read from (or to be
written to) one tag file.  Labels are always compared case-insensitively, and
a label may appear more than once.

Continuation lines (a value folded across several physical lines) are not
supported: a line that begins with whitespace is rejected as malformed.
"""
import io, logging
from collections import namedtuple

from .exceptions import InvalidTagError, MalformedLineError
from .access.bagfs import open_bin_file, replace_file, io_errors

LOGGER = logging.getLogger(__name__)

CR = '\r'
LF = '\n'
SPACE_OR_TAB = ' \t'
UNICODE_BYTE_ORDER_MARK = '\ufeff'

class Tag(namedtuple('Tag', 'label value')):
    """
    an immutable label/value pair.  Construction fails with an
    InvalidTagError if the label has leading or trailing whitespace or if
    either part contains a CR or LF character.  Tags made through _make()
    or _replace() are checked the same way.

    A label may contain a colon, but such a tag cannot be read back from a
    tag file: the line is split on its first colon, so the remainder of the
    label would be taken as the start of the value.
    """
    __slots__ = ()

    def __new__(cls, label, value):
        if label and (label[0] in SPACE_OR_TAB or label[-1] in SPACE_OR_TAB):
            raise InvalidTagError(label,
                                  "Label must not start or end with whitespace")
        if CR in label or LF in label:
            raise InvalidTagError(label,
                                  "Label must not contain CR or LF characters")
        if CR in value or LF in value:
            raise InvalidTagError(label,
                                  "Value must not contain CR or LF characters")
        return super(Tag, cls).__new__(cls, label, value)

    @classmethod
    def _make(cls, iterable):
        return cls(*iterable)

    def matches(self, label):
        """
        return True if this tag has the given label (compared case-insensitively)
        """
        return self.label.lower() == label.lower()

    def __str__(self):
        return "{0}: {1}".format(self.label, self.value)

class TagList(object):
    """
    an ordered collection of Tags.  Order is significant: it is the order
    the tags are serialized in and the order lookups search in.
    """

    def __init__(self, tags=None):
        self._tags = []
        self._mods = 0
        if tags:
            for tag in tags:
                self.add(tag)

    def get_tag(self, label):
        """
        return the first tag with the given label (case-insensitive) or None
        if there is no such tag.
        """
        for tag in self._tags:
            if tag.matches(label):
                return tag
        return None

    def get_tags(self, label):
        """
        iterate through all of the tags with the given label (case-insensitive)
        in order.  The iteration reads the live list; it raises a RuntimeError
        if the list is changed before the iteration is finished.
        """
        mods = self._mods
        for tag in self._tags:
            if self._mods != mods:
                raise RuntimeError("TagList changed during iteration")
            if tag.matches(label):
                yield tag
                if self._mods != mods:
                    raise RuntimeError("TagList changed during iteration")

    def add(self, tag):
        """
        append a Tag to the end of the list
        """
        if not isinstance(tag, Tag):
            raise TypeError("TagList.add(): not a Tag: " + repr(tag))
        self._tags.append(tag)
        self._mods += 1

    def add_tag(self, label, value):
        """
        create a Tag and append it to the end of the list
        :raises InvalidTagError:  if the label or value is not legal
        """
        self.add(Tag(label, value))

    def remove_tags(self, label):
        """
        remove all of the tags with the given label (case-insensitive)
        """
        self._tags = [t for t in self._tags if not t.matches(label)]
        self._mods += 1

    def labels(self):
        """
        return the labels in this list in order of first appearance
        """
        out = []
        seen = set()
        for tag in self._tags:
            if tag.label.lower() not in seen:
                seen.add(tag.label.lower())
                out.append(tag.label)
        return out

    def __iter__(self):
        return iter(list(self._tags))

    def __len__(self):
        return len(self._tags)

    def __eq__(self, other):
        if not isinstance(other, TagList):
            return NotImplemented
        return self._tags == other._tags

    def __ne__(self, other):
        eq = self.__eq__(other)
        return eq if eq is NotImplemented else not eq

    def __repr__(self):
        return "TagList({0!r})".format(self._tags)

def parse_tag_line(line):
    """
    parse a single tag line (without its line terminator) into a Tag

    :raises ValueError:       if the line is not of the form "label: value"
    :raises InvalidTagError:  if the label or value is not legal
    """
    if line[:1] and line[:1] in SPACE_OR_TAB:
        raise ValueError("Continuation lines are not supported")
    label, sep, value = line.partition(':')
    if not sep:
        raise ValueError("Missing colon separating the label and value")
    if not value[:1] or value[:1] not in SPACE_OR_TAB:
        raise ValueError("Value part must start with one whitespace character")
    return Tag(label, value[1:])

def parse_tag_lines(lines, path=None):
    """
    parse the lines of a tag file into a TagList.  Parsing stops at the first
    bad line.

    :param lines:     an iterable of text lines; each may still carry its
                      line terminator (LF, CR LF, or CR).
    :param str path:  the name of the file the lines came from, used in
                      error messages
    :raises MalformedLineError:  if any line cannot be parsed
    """
    tags = TagList()
    for num, line in enumerate(lines, 1):
        line = _chomp(line)
        if num == 1 and line.startswith(UNICODE_BYTE_ORDER_MARK):
            raise MalformedLineError(path, num, "Tag file must not start "
                                                "with a byte-order mark")
        try:
            tag = parse_tag_line(line)
        except InvalidTagError as ex:
            raise MalformedLineError(path, num, ex.reason)
        except ValueError as ex:
            raise MalformedLineError(path, num, str(ex))

        LOGGER.debug("Tag [`%s`:`%s`]", tag.label, tag.value)
        tags.add(tag)

    return tags

def _chomp(line):
    if line.endswith(CR+LF):
        return line[:-2]
    if line.endswith(LF) or line.endswith(CR):
        return line[:-1]
    return line

def serialize_tags(tags):
    """
    return the lines, each with a terminating LF, that encode the given tags
    as a tag file.  Long values are not wrapped.
    """
    return ["{0}: {1}\n".format(tag.label, tag.value) for tag in tags]

def read_tag_file(path):
    """
    read and parse the tag file at the given Path

    :rtype: TagList
    :raises BagIOError:          if the file cannot be read
    :raises MalformedLineError:  if the file's contents are not legal
    """
    with io_errors(path):
        with open_bin_file(path) as fd:
            content = fd.read()

    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError as ex:
        raise MalformedLineError(str(path), content[:ex.start].count(b"\n") + 1,
                                 "Tag file is not valid UTF-8")

    # newline="" splits on LF, CR LF and CR alike without translating
    return parse_tag_lines(io.StringIO(text, newline=""), str(path))

def write_tag_file(path, tags):
    """
    write the given tags to a tag file at the given Path, replacing any
    existing file.

    :raises BagIOError:  if the file cannot be written
    """
    LOGGER.info("Writing tag file %s", path)
    lines = serialize_tags(tags)
    replace_file(path, lambda fd: fd.writelines(lines))
