from setuptools import setup

setup(name='bagr-py',
      version='0.4',
      description="bagr: a Python library for creating, updating, and validating BagIt (RFC 8493) bags",
      author="Peter Winckles",
      author_email="pwinckles@pm.me",
      url='https://github.com/pwinckles/bagr',
      scripts=[ ],
      packages=['bagr', 'bagr.access', 'bagr.validate'],
      # fs still loads its openers through pkg_resources
      install_requires=['fs>=2.4', 'setuptools<81'],
      extras_require={'test': ['bagit>=1.8', 'pytest']},
      test_suite="tests.suite",
      test_runner="unittest:TextTestRunner"
)
