from unittest import TestLoader, TestSuite

def additional_tests():
    from . import (test_constants, test_tags, test_info, test_digest,
                   test_manifest, test_bag, test_create, test_rebag)

    suites = [TestLoader().loadTestsFromModule(m)
              for m in (test_constants, test_tags, test_info, test_digest,
                        test_manifest, test_bag, test_create, test_rebag)]
    return TestSuite(suites)
