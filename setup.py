import os

from setuptools import setup, find_packages

metadata = dict(
  name='droidsign',
  version='1.0.0',
  description='droidsign signs Android release files (APK/AAB) with zipalign, apksigner and jarsigner.',
  classifiers=[
    "Topic :: Software Development :: Build Tools",
    "Operating System :: Android",
    "Programming Language :: Python :: 3",
    "License :: OSI Approved :: GNU General Public License v3 or later (GPLv3+)"
  ],
  url='https://github.com/droidsign/droidsign',
  keywords='android apk aab signing apksigner jarsigner zipalign ci',
)

README = open('README.rst').read() if os.path.exists('README.rst') else ''

setup(
  long_description=README,
  packages=find_packages(exclude=['tests', 'tests.*']),
  include_package_data=True,
  zip_safe=False,
  python_requires='>=3.9',
  install_requires=[
    "attrs",
    "pypubsub",
    "termcolor",
    "progressbar2",
    "typing_extensions",
  ],
  extras_require={
    'test':[
      "pytest",
      "hypothesis",
    ],
  },
  setup_requires=[
    "wheel",
  ],
  entry_points = {'console_scripts':['droidsign = droidsign.shell:entry']},
  **metadata
)
