"""
Setup file.
"""

import os

from setuptools import find_packages, setup

URL = "https://github.com/zackees/craftc"
KEYWORDS = "c compiler build incremental make archiver linker object static-library"
HERE = os.path.dirname(os.path.abspath(__file__))


def get_version() -> str:
    with open(os.path.join(HERE, "src", "craftc", "__init__.py"), encoding="utf-8") as f:
        for line in f:
            if line.startswith("__version__"):
                return line.split("=")[1].strip().strip('"')
    raise RuntimeError("Unable to find version string")


if __name__ == "__main__":
    setup(
        name="craftc",
        version=get_version(),
        description="A fast, minimal incremental build driver for C projects",
        maintainer="Zachary Vorhies",
        keywords=KEYWORDS,
        url=URL,
        package_dir={"": "src"},
        packages=find_packages(where="src"),
        python_requires=">=3.9",
        install_requires=[
            "psutil",
        ],
        extras_require={
            "test": [
                "pytest",
            ],
        },
        entry_points={
            "console_scripts": ["craftc=craftc.cli:main"],
        })
