from setuptools import setup, find_packages

setup(
    name="doc_indexer",
    version="0.3.0",
    packages=find_packages(include=["doc_indexer", "doc_indexer.*"]),
    install_requires=[
        "numpy>=1.21.0",
    ],
    extras_require={
        "pdf": ["pdfplumber>=0.7.0"],
        "html": ["beautifulsoup4>=4.11.0"],
        "all": [
            "pdfplumber>=0.7.0",
            "beautifulsoup4>=4.11.0",
        ],
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "doc-indexer=doc_indexer.__main__:main",
        ],
    },
    python_requires=">=3.8",
)
