"""Setup configuration for the Travis Discord moderation bot."""

from setuptools import setup, find_packages

setup(
    name="travis",
    version="1.0.0",
    description="A Discord bot that moderates toxic messages using the Perspective API",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.11",
    install_requires=[
        "py-cord>=2.6",
        "aiohttp>=3.9",
        "python-dotenv>=1.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "travis=travis.main:main",
        ],
    },
)
