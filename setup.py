from setuptools import setup, find_packages
import os
import io
import re

here = os.path.abspath(os.path.dirname(__file__))
pkgdir = os.path.join(here, "src", "cppconfig")

# The package lives under src/ so read the version without importing it
with io.open(os.path.join(pkgdir, "version.py"), encoding="utf-8") as ff:
    __version__ = re.search(r'^__version__ = "([^"]+)"', ff.read(), re.M).group(1)

# Get the long description from the README file
with io.open(os.path.join(pkgdir, "README.cppconfig.rst"), encoding="utf-8") as ff:
    long_description = ff.read()

setup(
    name="cppconfig",
    version=__version__,
    description="Work out the include paths, defines and standard a C/C++ compiler uses",
    long_description=long_description,
    long_description_content_type="text/x-rst",
    python_requires=">=3.10",
    license="GPLv3+",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Build Tools",
        "License :: OSI Approved :: GNU General Public License v3 or later (GPLv3+)",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13"
    ],
    keywords="c++ clang msvc intellisense development",
    package_dir={"": "src"},
    packages=find_packages("src"),
    package_data={"cppconfig": ["README*", "samples/*.txt"]},
    include_package_data=True,
    install_requires=[
        "configargparse>=1.5.3",
        "appdirs>=1.4.4",
        "psutil>=5.9.0",
        "rich>=12.0.0",
        "rich_rst>=1.1.7",
    ],
    extras_require={"test": ["pytest"]},
    entry_points={
        "console_scripts": ["cppconfig = cppconfig.cppconfig:main"],
    },
)
