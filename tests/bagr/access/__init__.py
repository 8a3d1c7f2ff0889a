from unittest import TestLoader, TestSuite

def additional_tests():
    from . import test_bagfs

    return TestSuite([TestLoader().loadTestsFromModule(test_bagfs)])
