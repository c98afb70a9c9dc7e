"""Setup configuration for release-watcher"""

from setuptools import setup, find_packages

setup(
    name="release-watcher",
    version="0.1.0",
    description=(
        "CLI tool reporting release stream health: stale built and accepted "
        "payloads and missing recent upgrade edges."
    ),
    author="Release Watcher Contributors",
    author_email="",
    python_requires=">=3.10",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "requests>=2.28.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "black>=22.0",
            "flake8>=4.0",
            "mypy>=0.950",
        ],
    },
    entry_points={
        "console_scripts": [
            "release-watcher=release_watcher.main:main",
        ],
    },
)
