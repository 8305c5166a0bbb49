# setup.py

from setuptools import setup, find_packages
from pathlib import Path

readme = Path(__file__).parent / "README.md"
long_description = readme.read_text() if readme.exists() else ""

setup(
    name="cardwatch-streaming",
    version="0.1.0",
    author="Aurelien Courreges-Clercq",
    description="Windowed micro-batch fraud alerting for credit-card transaction feeds",
    long_description=long_description,
    long_description_content_type="text/markdown",

    packages=find_packages(exclude=["tests", "tests.*"]),

    install_requires=[
        "pydantic>=2.0.0",
        "sqlalchemy[asyncio]>=2.0.0",
        "asyncpg>=0.29.0",
        "kafka-python>=2.0.3",
    ],

    extras_require={
        "test": ["pytest", "pytest-asyncio>=0.21", "aiosqlite>=0.19"],
        "dev": ["pytest", "pytest-asyncio>=0.21", "aiosqlite>=0.19", "black", "mypy"]
    },

    entry_points={
        "console_scripts": [
            "cardwatch=cardwatch.main:main",
            "cardwatch-simulate=cardwatch.simulator:main",
        ]
    },

    python_requires=">=3.9",

    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ]
)
