"""Setup script for oracle-mcp.

This package extracts a structured model of Rust code (functions, structs,
enums, traits, impls, modules, type aliases, consts, statics) and the crate
dependency graph, and serves both over MCP.

Installation:
    pip install -e .

Usage:
    from mcp_oracle.analyzer import RustAnalyzer

    items = RustAnalyzer().analyze_source("pub fn hello() {}")

    # Or run the MCP server over stdio
    mcp-oracle
"""

from setuptools import setup, find_packages

setup(
    name="oracle-mcp",
    version="0.1.0",
    description="Rust code model and dependency graph inspector over MCP",
    author="nerdsane",
    author_email="",
    url="https://github.com/nerdsane/kelpie",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "tree-sitter>=0.23.0",
        "tree-sitter-rust>=0.23.0",
        "rustworkx>=0.14.0",
        "mcp>=1.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
        ],
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "mypy>=1.0.0",
            "black>=23.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "mcp-oracle=mcp_oracle.server:cli_main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
