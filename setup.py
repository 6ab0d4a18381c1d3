from setuptools import setup, find_packages

import os

install_requires = [
    "colorama",
    "python-dateutil",
    "tqdm",
    "tomlkit",
    "typeguard>=3",
]

extras_require = {"test": ["pytest"]}

# Get tvspdx version from the VERSION file.
version_file = os.path.join(os.path.dirname(__file__), "VERSION")
with open(version_file) as f:
    tvspdx_version = f.read().strip()

with open(os.path.join(os.path.dirname(__file__), "README.md")) as f:
    long_description = f.read()

setup(
    name="tvspdx",
    version=tvspdx_version,
    license="GPLv3",
    description="Parser for SPDX 2.3 documents in tag-value format",
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: GNU General Public License v3 (GPLv3)",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Software Development :: Libraries",
    ],
    python_requires=">=3.9",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=install_requires,
    extras_require=extras_require,
    entry_points={"console_scripts": ["tvspdx = tvspdx.main:main"]},
)
