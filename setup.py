#!/usr/bin/env python3

import re
from os import path

from setuptools import setup, find_packages

packages = find_packages(exclude=['tests', 'tests.*'])
projname = packages[0]
projdir = path.abspath(path.dirname(__file__))

# Not importing the package, as its dependencies may not be installed yet
with open(path.join(projdir, projname, '__init__.py'), encoding='utf-8') as f:
    project = dict(re.findall(r"^__(\w+)__\s*=\s*['\"](.*)['\"]", f.read(), re.MULTILINE))

with open(path.join(projdir, 'README.md'), encoding='utf-8') as f:
    readme = f.read().strip()

setup(
    name             = project['title'],
    version          = project['version'],
    author           = project['author'],
    author_email     = project['email'],
    description      = project['description'],
    long_description = readme,
    long_description_content_type = 'text/markdown',
    keywords         = "minecraft save nbt world release level.dat",
    url              = f"https://github.com/MestreLion/{projname}",
    project_urls     = {
        "Bug Tracker": f"https://github.com/MestreLion/{projname}/issues",
        "Source Code": f"https://github.com/MestreLion/{projname}",
    },
    classifiers      = [
        "Development Status :: 3 - Alpha",
        "Environment :: Console",
        "Intended Audience :: End Users/Desktop",
        "License :: DFSG approved",
        "License :: OSI Approved :: GNU General Public License v3 or later (GPLv3+)",
        "Natural Language :: English",
        "Operating System :: OS Independent",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Topic :: Games/Entertainment",
        "Topic :: Utilities",
    ],
    packages         = packages,
    package_data     = {
        '': ['*.md', 'LICENSE*'],
    },
    python_requires  = '>=3.8',
    install_requires = [
        'mutf8',
        'nbtlib',
        'numpy',
        'tqdm',
    ],
    extras_require   = {
        'test': ['pytest'],
    },
    entry_points     = {
        'console_scripts': [
            f'{projname} = {projname}.cli:main',
        ],
    },
)
