import pathlib
from setuptools import setup

from segwitsigner import __doc__ as docstring, __version__ as version

setup(
    name="segwitsigner",
    version=version,
    description=docstring.strip(),
    long_description=(pathlib.Path(__file__).parent / "README.rst").read_text(),
    long_description_content_type="text/x-rst",
    license="MIT",
    classifiers=[
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.7",
    ],
    python_requires=">=3.7",
    packages=[
        "segwitsigner",
        "segwitsigner.ECDSA",
        "segwitsigner.BTC",
    ],
)
