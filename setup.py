from setuptools import setup, find_packages
import os
import re

TEST_REQUIRES = ["pytest", "numpy"]

DEV_REQUIRES = TEST_REQUIRES + [
    "black",
    "flake8",
    "sphinx",
    "sphinx-autodoc-typehints",
    "sphinx-rtd-theme",
    "sphinxcontrib-spelling",
    "codecov",
]

classifiers = [
    "Development Status :: 3 - Alpha",
    "Programming Language :: Python",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3.9",
    "License :: OSI Approved :: MIT License",
    "Topic :: Scientific/Engineering",
    "Topic :: Scientific/Engineering :: Mathematics",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
]

# Get the long description from the README file
with open("README.rst", "r", encoding="utf8") as fh:
    long_description = fh.read()

# Get version string from module
init_path = os.path.join(os.path.dirname(__file__), "psdtorch/__init__.py")
with open(init_path, "r", encoding="utf8") as f:
    version = re.search(r"__version__ = ['\"]([^'\"]*)['\"]", f.read(), re.M).group(1)

setup(
    name="psdtorch",
    version=version,
    description="Symmetric positive semi-definite matrices stored through a factor, in Pytorch",
    license="MIT",
    long_description=long_description,
    long_description_content_type="text/x-rst",
    classifiers=classifiers,
    keywords=["Linear Algebra", "Positive Semi-Definite Matrices", "Covariance", "Pytorch"],
    packages=find_packages(exclude=["test", "test.*"]),
    python_requires=">=3.9",
    install_requires=["torch>=1.13"],
    extras_require={"dev": DEV_REQUIRES, "test": TEST_REQUIRES},
)
