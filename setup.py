import os
from setuptools import setup

base_dir = os.path.abspath(os.path.dirname(__file__))

# Read version from version.txt
with open(os.path.join(base_dir, 'version.txt'), 'r') as f:
    version = f.read().strip()

setup(
    name="scene_release_scraper",
    version=version,
    description="Indexer search, grouping, catalog matching and quality selection for scene releases",
    python_requires=">=3.8",
    packages=[
        "release_scraper",
        "release_scraper.functions",
        "utilities",
    ],
    py_modules=["logging_config", "api_tracker"],
    install_requires=[
        "requests",
        "tenacity",
        "python-Levenshtein",
    ],
    extras_require={
        "semantic": ["sentence-transformers"],
        "test": ["pytest"],
    },
)
