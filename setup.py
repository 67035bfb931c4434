import re

import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

with open("pyalfen/__init__.py", "r") as fh:
    version_tuple = re.search(r"^version_tuple = \((\d+), (\d+), (\d+)\)", fh.read(), re.M).groups()

setuptools.setup(
    name="pyalfen",
    version=".".join(version_tuple),
    description="Python module to access the local HTTP API of Alfen EV chargers",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(exclude=["*.tests", "*.tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        'requests',
        'urllib3',
        'python-dotenv',
    ],
    extras_require={
        'test': ['pytest'],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
