"""
Persephone - versioned key-value persistence
"""

from setuptools import setup, find_packages

setup(
    name="persephone-kv",
    version="0.1.0",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.10",
    description="Versioned key-value persistence with schema migrations over pluggable async stores",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    license="MIT",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Framework :: AsyncIO",
    ],
    install_requires=[
        "aiofiles>=23.1.0",
        "aiosqlite>=0.19.0",
        "click>=8.0.0",
        "pydantic>=2.0.0",
        "pyyaml>=6.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "black>=23.0.0",
            "mypy>=1.0.0",
        ],
        "keydb": ["redis>=5.0.0"],
    },
    entry_points={
        "console_scripts": [
            "persephone=persephone.cli:main",
        ],
    },
)
