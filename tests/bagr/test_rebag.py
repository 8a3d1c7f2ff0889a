# encoding: utf-8

import os
import tempfile, shutil
import unittest as test

import bagit

import importlib
rb = importlib.import_module("bagr.rebag")
from bagr.create import make_bag
from bagr.bag import open_bag
from bagr.exceptions import BagCreationError
from bagr.access.bagfs import open_bag_root

def write(dirpath, path, content):
    fp = os.path.join(dirpath, *path.split('/'))
    if not os.path.isdir(os.path.dirname(fp)):
        os.makedirs(os.path.dirname(fp))
    with open(fp, 'wb') as fd:
        fd.write(content)

def snapshot(dirpath):
    out = {}
    for base, dirs, files in os.walk(dirpath):
        for f in files:
            fp = os.path.join(base, f)
            with open(fp, 'rb') as fd:
                out[os.path.relpath(fp, dirpath)] = fd.read()
    return out

class TestRebag(test.TestCase):

    def setUp(self):
        self.tempdir = tempfile.mkdtemp(prefix="bagr-rebag-")
        self.bagdir = os.path.join(self.tempdir, "bag")
        write(self.bagdir, "a.txt", b"alpha\n")
        write(self.bagdir, "sub/b.txt", b"bravo\n")
        make_bag(self.bagdir, ["md5", "sha256"])

    def tearDown(self):
        shutil.rmtree(self.tempdir)

    def test_no_change(self):
        before = snapshot(self.bagdir)
        result = rb.rebag(self.bagdir)
        self.assertFalse(result.changed())
        self.assertFalse(result.updated)
        self.assertEqual(result.old_oxum, "12.2")
        self.assertEqual(result.new_oxum, "12.2")
        self.assertEqual(str(result), "bag metadata is up to date")
        self.assertEqual(snapshot(self.bagdir), before)

    def test_added_file(self):
        write(self.bagdir, "data/sub/c.txt", b"charlie\n")
        result = rb.rebag(self.bagdir)
        self.assertTrue(result.changed())
        self.assertTrue(result.updated)
        self.assertEqual(result.diffs["sha256"].added, ["data/sub/c.txt"])
        self.assertEqual(result.diffs["md5"].removed, [])
        self.assertEqual(result.new_oxum, "20.3")
        self.assertIn("Payload-Oxum: 12.2 -> 20.3", str(result))

        bag = open_bag(self.bagdir)
        self.assertEqual(bag.info.payload_oxum().value, "20.3")
        self.assertIn("data/sub/c.txt", bag.manifests()["md5"])
        bagit.Bag(self.bagdir).validate()

        # a second pass has nothing left to do
        self.assertFalse(rb.rebag(self.bagdir).updated)

    def test_changed_and_removed(self):
        write(self.bagdir, "data/a.txt", b"ALPHA\n")
        os.remove(os.path.join(self.bagdir, "data", "sub", "b.txt"))
        result = rb.rebag(self.bagdir)
        self.assertEqual(result.diffs["md5"].changed, ["data/a.txt"])
        self.assertEqual(result.diffs["md5"].removed, ["data/sub/b.txt"])
        self.assertEqual(result.new_oxum, "6.1")
        bagit.Bag(self.bagdir).validate()

    def test_change_algorithms(self):
        result = rb.rebag(self.bagdir, ["sha512"])
        self.assertEqual(result.added_algorithms, ["sha512"])
        self.assertEqual(result.removed_algorithms, ["sha256", "md5"])
        self.assertTrue(result.updated)

        bag = open_bag(self.bagdir)
        self.assertEqual(bag.algorithms(), ["sha512"])
        self.assertEqual(bag.algorithms(True), ["sha256", "md5"])
        self.assertEqual(sorted(bag.manifests(True)["md5"].paths()),
                         ["bag-info.txt", "bagit.txt", "manifest-sha512.txt"])
        bagit.Bag(self.bagdir).validate()

    def test_missing_oxum(self):
        with open(os.path.join(self.bagdir, "bag-info.txt"), 'w') as fd:
            fd.write("Contact-Name: Gurn\n")
        result = rb.rebag(self.bagdir)
        self.assertIsNone(result.old_oxum)
        self.assertTrue(result.updated)
        bag = open_bag(self.bagdir)
        self.assertEqual(bag.info.payload_oxum().value, "12.2")
        self.assertEqual([t.value for t in bag.info.contact_name()], ["Gurn"])

    def test_caller_filesystem_left_open(self):
        write(self.bagdir, "data/c.txt", b"charlie\n")
        root = open_bag_root(self.bagdir)
        self.assertTrue(rb.rebag(root).updated)
        self.assertFalse(root.fs.isclosed())
        root.close()

    def test_not_a_bag(self):
        os.remove(os.path.join(self.bagdir, "bagit.txt"))
        rebagger = rb.Rebagger(self.bagdir)
        with self.assertRaises(BagCreationError) as cm:
            rebagger.rebag()
        self.assertEqual(cm.exception.stage, rb.READ_BAG)


if __name__ == '__main__':
    test.main()
