# encoding: utf-8

import unittest as test

import bagr.validate.base as val
from bagr.exceptions import BagValidationError

class TestValidationIssue(test.TestCase):

    def test_ctor(self):
        issue = val.ValidationIssue("2.1.1")

        self.assertEqual(issue.bagit_version, "1.0")
        self.assertEqual(issue.label, "2.1.1")
        self.assertEqual(issue.type, issue.ERROR)
        self.assertTrue(issue.passed())
        self.assertFalse(issue.failed())
        self.assertEqual(issue.specification, "")
        self.assertEqual(len(issue.comments), 0)

        issue = val.ValidationIssue("2.2.1", val.REC, version="0.97",
                                    spec="Bag should have a tag manifest",
                                    passed=False)

        self.assertEqual(issue.bagit_version, "0.97")
        self.assertEqual(issue.type, issue.REC)
        self.assertFalse(issue.passed())
        self.assertTrue(issue.failed())
        self.assertEqual(issue.specification, "Bag should have a tag manifest")

        issue = val.ValidationIssue("3", val.WARN, comments=("little", "green"))
        self.assertEqual(issue.comments, ("little", "green"))

        issue = val.ValidationIssue("3", comments="one")
        self.assertEqual(issue.comments, ("one",))

        with self.assertRaises(ValueError):
            val.ValidationIssue("3", 8)

    def test_description(self):
        issue = val.ValidationIssue("2.1.1")
        self.assertEqual(issue.summary, "PASSED: BagIt 1.0 2.1.1")
        self.assertEqual(str(issue), issue.summary)
        self.assertEqual(issue.description, issue.summary)

        issue = val.ValidationIssue("2.1.2", spec="Bag must have a data dir",
                                    passed=False)
        self.assertEqual(issue.summary,
                         "ERROR: BagIt 1.0 2.1.2: Bag must have a data dir")

        issue.add_comment("no data")
        issue.add_comment("really")
        self.assertEqual(str(issue), issue.summary + " (no data)")
        self.assertEqual(issue.description,
                         issue.summary + "\n   no data\n   really")

    def test_to_json_obj(self):
        issue = val.ValidationIssue("3", val.WARN, "be careful", False, ["x"])
        data = issue.to_json_obj()
        self.assertEqual(data["type"], "warning")
        self.assertEqual(data["label"], "3")
        self.assertEqual(data["spec"], "be careful")
        self.assertFalse(data["passed"])
        self.assertEqual(data["comments"], ("x",))

class TestValidationResults(test.TestCase):

    def setUp(self):
        self.res = val.ValidationResults("bag", val.PROB)
        self.res._err(self.res._issue("1", "err passes"), True)
        self.res._err(self.res._issue("2", "err fails"), False, "bad")
        self.res._warn(self.res._issue("3", "warn passes"), True)
        self.res._rec(self.res._issue("4", "rec fails"), False, ["meh", "eh"])

    def test_counts(self):
        self.assertEqual(self.res.count_applied(), 4)
        self.assertEqual(self.res.count_applied(val.ERROR), 2)
        self.assertEqual(self.res.count_failed(), 2)
        self.assertEqual(self.res.count_failed(val.PROB), 1)
        self.assertEqual(self.res.count_passed(val.WARN), 1)
        self.assertEqual(self.res.failed(val.REC)[0].comments, ("meh", "eh"))
        self.assertEqual(self.res.failed(val.ERROR)[0].type, val.ERROR)
        self.assertIsNone(self.res.report)

    def test_ok(self):
        self.assertFalse(self.res.ok())
        res = val.ValidationResults("bag", val.REC)
        res._err(res._issue("2", "err fails"), False)
        self.assertTrue(res.ok())

class TestBagComplianceError(test.TestCase):

    def test_one(self):
        res = val.ValidationResults("bag")
        res._err(res._issue("2.1.2", "need data"), False, "data is gone")
        ex = val.BagComplianceError(res)
        self.assertIsInstance(ex, BagValidationError)
        self.assertIs(ex.results, res)
        self.assertEqual(ex.message, "ERROR: BagIt 1.0 2.1.2: need data")
        self.assertEqual(ex.details, ["data is gone"])
        self.assertEqual(str(ex), ex.message + ": data is gone")

    def test_many(self):
        res = val.ValidationResults("bag")
        for i in range(5):
            res._err(res._issue(str(i), "fails"), False)
        ex = val.BagComplianceError(res)
        self.assertEqual(ex.message, "5 validation errors detected")
        self.assertTrue(str(ex).startswith("5 validation errors detected, including:"))
        self.assertEqual(str(ex).count(" * "), 3)

class TestValidator(test.TestCase):

    def test_base(self):
        v = val.Validator("bag")
        res = v.validate()
        self.assertEqual(res.count_applied(), 0)
        self.assertTrue(v.is_valid())
        v.ensure_valid()


if __name__ == '__main__':
    test.main()
