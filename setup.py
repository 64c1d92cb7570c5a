"""Declarative positional arguments, flags, and subcommands for
command-line tools, with validation, async-friendly binding, and
dispatch to plain handler functions.
"""

from setuptools import setup


__author__ = 'clause contributors'
__version__ = '0.1.0dev'
__contact__ = ''
__url__ = ''
__license__ = 'BSD'


setup(name='clause',
      version=__version__,
      description="Declare command-line arguments, flags, and subcommands; get validated, bound values in your handler.",
      long_description=__doc__,
      author=__author__,
      author_email=__contact__,
      url=__url__,
      packages=['clause', 'clause.test'],
      include_package_data=True,
      zip_safe=False,
      license=__license__,
      platforms='any',
      python_requires='>=3.7',
      install_requires=['boltons>=20.0.0'],
      extras_require={'test': ['pytest>=6.0']},
      classifiers=[
          'Topic :: Utilities',
          'Intended Audience :: Developers',
          'Topic :: Software Development :: Libraries',
          'Programming Language :: Python :: 3.7',
          'Programming Language :: Python :: 3.8',
          'Programming Language :: Python :: 3.9',
          'Programming Language :: Python :: 3.10',
          'Programming Language :: Python :: 3.11',
          'Programming Language :: Python :: 3.12',
          'Programming Language :: Python :: 3 :: Only',
          'Programming Language :: Python :: Implementation :: CPython',
          'Programming Language :: Python :: Implementation :: PyPy', ]
      )

"""
A brief checklist for release:

* tox
* git commit (if applicable)
* Bump setup.py version off of -dev
* git commit -a -m "bump version for vx.y.z release"
* rm -rf dist/*
* python setup.py sdist bdist_wheel
* twine upload dist/*
* git tag -a vx.y.z -m "brief summary"
* write CHANGELOG
* git commit
* bump setup.py version onto n+1 dev
* git commit
* git push

"""
