from os import path

from setuptools import find_packages, setup

here = path.abspath(path.dirname(__file__))

with open(path.join(here, "README.md"), encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="sampletrace",
    version="0.1.0",
    description=("Synthetic CPU workload that records a sampled profile of itself"),
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: GNU General Public License v3 (GPLv3)",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    keywords="profiler stack sampler pprof speedscope",
    packages=find_packages(exclude=["docs", "test", "test.*"]),
    include_package_data=True,
    package_data={"sampletrace.format": ["profile.proto"]},
    python_requires=">=3.9",
    install_requires=["aiohttp", "protobuf>=4.21,<6", "psutil", "pyfiglet"],
    extras_require={"test": ["pytest", "flaky"]},
    entry_points={
        "console_scripts": [
            "sampletrace=sampletrace.main:main",
            "sampletrace-web=sampletrace.web:main",
        ]
    },
)
