# encoding: utf-8

import os
import tempfile, shutil
import unittest as test

import fs.memoryfs

import bagr.bag as bg
from bagr.create import make_bag
from bagr.constants import BAGIT_1_0
from bagr.exceptions import BagError, UnsupportedVersionError
from bagr.access.bagfs import open_bag_root

class TestBag(test.TestCase):

    def setUp(self):
        self.tempdir = tempfile.mkdtemp(prefix="bagr-bag-")
        self.bagdir = os.path.join(self.tempdir, "bag")
        os.makedirs(os.path.join(self.bagdir, "sub"))
        with open(os.path.join(self.bagdir, "sub", "a.txt"), 'w') as fd:
            fd.write("alpha\n")
        make_bag(self.bagdir, ["sha256"], {"Contact-Name": "Gurn"})

    def tearDown(self):
        shutil.rmtree(self.tempdir)

    def test_open(self):
        bag = bg.open_bag(self.bagdir)
        self.assertEqual(bag.version, BAGIT_1_0)
        self.assertEqual(bag.encoding, "UTF-8")
        self.assertTrue(bag.has_payload_dir())
        self.assertTrue(bag.has_oxum())
        self.assertFalse(bag.has_fetch_file())
        self.assertEqual(next(bag.info.contact_name()).value, "Gurn")
        self.assertIn(self.bagdir, str(bag))
        self.assertTrue(repr(bag).startswith("Bag("))

    def test_manifests(self):
        bag = bg.Bag(self.bagdir)
        self.assertEqual(bag.algorithms(), ["sha256"])
        self.assertEqual(list(bag.manifest_files()), ["manifest-sha256.txt"])
        self.assertEqual(list(bag.tagmanifest_files()), ["tagmanifest-sha256.txt"])
        manifests = bag.manifests()
        self.assertEqual(list(manifests), ["sha256"])
        self.assertEqual(manifests["sha256"].paths(), ["data/sub/a.txt"])
        self.assertTrue(bag.manifests(True)["sha256"].is_tag)

    def test_files(self):
        bag = bg.Bag(self.bagdir)
        self.assertEqual(bag.payload_files(), ["data/sub/a.txt"])
        self.assertEqual(bag.tag_files(), ["bag-info.txt", "bagit.txt",
                                           "manifest-sha256.txt"])

    def test_is_bag(self):
        self.assertTrue(bg.is_bag(self.bagdir))
        root = open_bag_root(self.bagdir)
        self.assertTrue(bg.is_bag(root))
        self.assertFalse(root.fs.isclosed())
        root.close()
        self.assertFalse(bg.is_bag(os.path.join(self.bagdir, "data")))
        self.assertFalse(bg.is_bag(os.path.join(self.tempdir, "goob")))

    def test_close(self):
        bag = bg.open_bag(self.bagdir)
        bag.close()
        self.assertTrue(bag.root.fs.isclosed())

        mem = fs.memoryfs.MemoryFS()
        mem.writebytes("a.txt", b"alpha\n")
        bag = make_bag(mem, ["md5"])
        bag.close()
        self.assertFalse(mem.isclosed())

    def test_not_a_bag(self):
        with self.assertRaises(BagError):
            bg.Bag(os.path.join(self.bagdir, "data"))
        with self.assertRaises(BagError):
            bg.Bag(os.path.join(self.tempdir, "goob"))

    def test_bad_version(self):
        with open(os.path.join(self.bagdir, "bagit.txt"), 'w') as fd:
            fd.write("BagIt-Version: 2.0\nTag-File-Character-Encoding: UTF-8\n")
        with self.assertRaises(UnsupportedVersionError):
            bg.Bag(self.bagdir)


if __name__ == '__main__':
    test.main()
