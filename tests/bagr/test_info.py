# encoding: utf-8

import os
import tempfile, shutil
import unittest as test

import bagr.info as info
from bagr.info import BagDeclaration, BagInfo, PayloadOxum
from bagr.tags import Tag, TagList
from bagr.constants import BAGIT_1_0
from bagr.exceptions import (MissingTagError, UnsupportedVersionError,
                             UnsupportedEncodingError, MalformedLineError,
                             InvalidTagError)
from bagr.access.bagfs import open_bag_root

class TestPayloadOxum(test.TestCase):

    def test_parse(self):
        oxum = PayloadOxum.parse("2468.2")
        self.assertEqual(oxum.octet_count, 2468)
        self.assertEqual(oxum.file_count, 2)
        self.assertEqual(str(oxum), "2468.2")
        self.assertEqual(str(PayloadOxum(1234, 2)), "1234.2")

    def test_parse_bad(self):
        for bad in ["2468", "2468.", ".2", "a.b", "1.2.3", "-1.2", ""]:
            with self.assertRaises(ValueError):
                PayloadOxum.parse(bad)

class TestBagDeclaration(test.TestCase):

    def test_defaults(self):
        decl = BagDeclaration()
        self.assertEqual(decl.version, BAGIT_1_0)
        self.assertEqual(decl.encoding, "UTF-8")
        self.assertEqual(BagDeclaration("1.0", "UTF-8"), decl)

    def test_unsupported(self):
        with self.assertRaises(UnsupportedVersionError):
            BagDeclaration("2.0")
        with self.assertRaises(UnsupportedVersionError):
            BagDeclaration("0.97")
        with self.assertRaises(UnsupportedVersionError) as cm:
            BagDeclaration("one")
        self.assertEqual(cm.exception.value, "one")
        with self.assertRaises(UnsupportedEncodingError):
            BagDeclaration("1.0", "ISO-8859-1")

    def test_to_tags(self):
        tags = BagDeclaration().to_tags()
        self.assertEqual(list(tags), [Tag("BagIt-Version", "1.0"),
                                      Tag("Tag-File-Character-Encoding", "UTF-8")])

    def test_from_tags(self):
        decl = BagDeclaration.from_tags(TagList([
            Tag("Tag-File-Character-Encoding", "UTF-8"),
            Tag("BagIt-Version", "1.0")]))
        self.assertEqual(decl, BagDeclaration())

        with self.assertRaises(MissingTagError) as cm:
            BagDeclaration.from_tags(TagList([Tag("BagIt-Version", "1.0")]))
        self.assertEqual(cm.exception.label, "Tag-File-Character-Encoding")
        with self.assertRaises(MissingTagError):
            BagDeclaration.from_tags(TagList([
                Tag("Tag-File-Character-Encoding", "UTF-8")]))

class TestBagInfo(test.TestCase):

    def test_non_repeatable(self):
        bi = BagInfo()
        bi.add_bagging_date("2024-01-01")
        bi.add_bagging_date("2024-02-02")
        self.assertEqual(len(list(bi.get_tags("Bagging-Date"))), 1)
        self.assertEqual(bi.bagging_date().value, "2024-02-02")

        bi.add_tag("payload-oxum", "1.1")
        bi.add_payload_oxum(PayloadOxum(10, 2))
        self.assertEqual(len(list(bi.get_tags("Payload-Oxum"))), 1)
        self.assertEqual(bi.payload_oxum().value, "10.2")
        self.assertEqual(bi.payload_oxum_value(), PayloadOxum(10, 2))

    def test_repeatable(self):
        bi = BagInfo()
        bi.add_contact_name("Gurn")
        bi.add_contact_name("Cranston")
        bi.add_tag("Goober", "a")
        bi.add_tag("goober", "b")
        self.assertEqual([t.value for t in bi.contact_name()], ["Gurn", "Cranston"])
        self.assertEqual(len(list(bi.get_tags("GOOBER"))), 2)
        self.assertEqual(len(bi), 4)

    def test_accessors(self):
        bi = BagInfo()
        self.assertIsNone(bi.bagging_date())
        self.assertIsNone(bi.payload_oxum())
        self.assertIsNone(bi.payload_oxum_value())
        self.assertEqual(list(bi.external_identifier()), [])

        bi.add_software_agent("bagr")
        bi.add_source_organization("NIST")
        bi.add_organization_address("Gaithersburg")
        bi.add_contact_phone("555-1212")
        bi.add_contact_email("gurn@example.com")
        bi.add_external_description("a bag")
        bi.add_external_identifier("ark:/88434/goob")
        bi.add_bag_size("10 KB")
        bi.add_bag_group_identifier("group")
        bi.add_bag_count("1 of 2")
        bi.add_bag_count("2 of 2")
        bi.add_internal_sender_identifier("x")
        bi.add_internal_sender_description("y")
        bi.add_bagit_profile_identifier("https://example.com/profile")

        self.assertEqual(bi.software_agent().value, "bagr")
        self.assertEqual(bi.bag_size().value, "10 KB")
        self.assertEqual(bi.bag_group_identifier().value, "group")
        self.assertEqual(bi.bag_count().value, "2 of 2")
        self.assertEqual([t.value for t in bi.source_organization()], ["NIST"])
        self.assertEqual([t.value for t in bi.organization_address()],
                         ["Gaithersburg"])
        self.assertEqual([t.value for t in bi.contact_phone()], ["555-1212"])
        self.assertEqual([t.value for t in bi.contact_email()],
                         ["gurn@example.com"])
        self.assertEqual([t.value for t in bi.external_description()], ["a bag"])
        self.assertEqual([t.value for t in bi.internal_sender_identifier()], ["x"])
        self.assertEqual([t.value for t in bi.internal_sender_description()], ["y"])
        self.assertEqual([t.value for t in bi.bagit_profile_identifier()],
                         ["https://example.com/profile"])
        self.assertEqual(len(bi), 13)

    def test_remove(self):
        bi = BagInfo(TagList([Tag("Contact-Name", "a"), Tag("Contact-Name", "b")]))
        bi.remove_tags("contact-name")
        self.assertEqual(len(bi), 0)

    def test_invalid(self):
        with self.assertRaises(InvalidTagError):
            BagInfo().add_tag("Contact-Name", "Gurn\nCranston")

    def test_invalid_keeps_existing(self):
        bi = BagInfo()
        bi.add_bagging_date("2024-01-01")
        with self.assertRaises(InvalidTagError):
            bi.add_tag("Bagging-Date", "2024\n01")
        with self.assertRaises(InvalidTagError):
            bi.add_bagging_date("2024\r01")
        self.assertEqual(bi.bagging_date().value, "2024-01-01")
        self.assertEqual(len(bi), 1)

    def test_bad_oxum(self):
        bi = BagInfo()
        bi.add_payload_oxum("goob")
        with self.assertRaises(ValueError):
            bi.payload_oxum_value()

class TestTagFiles(test.TestCase):

    def setUp(self):
        self.tempdir = tempfile.mkdtemp(prefix="bagr-info-")
        self.root = open_bag_root(self.tempdir)

    def tearDown(self):
        shutil.rmtree(self.tempdir)

    def write(self, name, content):
        with open(os.path.join(self.tempdir, name), 'wb') as fd:
            fd.write(content)

    def test_declaration(self):
        info.write_bag_declaration(self.root)
        with open(os.path.join(self.tempdir, "bagit.txt")) as fd:
            self.assertEqual(fd.read(), "BagIt-Version: 1.0\n"
                                        "Tag-File-Character-Encoding: UTF-8\n")
        self.assertEqual(info.read_bag_declaration(self.root), BagDeclaration())

    def test_declaration_unsupported(self):
        self.write("bagit.txt", b"BagIt-Version: 2.0\n"
                                b"Tag-File-Character-Encoding: UTF-8\n")
        with self.assertRaises(UnsupportedVersionError):
            info.read_bag_declaration(self.root)

    def test_bag_info(self):
        self.assertEqual(len(info.read_bag_info(self.root)), 0)

        bi = BagInfo()
        bi.add_bagging_date("2024-01-01")
        bi.add_contact_name("Gurn")
        info.write_bag_info(self.root, bi)
        got = info.read_bag_info(self.root)
        self.assertEqual(got.tags, bi.tags)

    def test_bag_info_malformed(self):
        self.write("bag-info.txt", b"Bagging-Date:2024-01-01\n")
        with self.assertRaises(MalformedLineError) as cm:
            info.read_bag_info(self.root)
        self.assertEqual(cm.exception.line_number, 1)


if __name__ == '__main__':
    test.main()
