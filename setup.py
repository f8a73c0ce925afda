"""Setup configuration for the community moderation bot."""

from setuptools import setup, find_packages

setup(
    name="cwebot",
    version="0.1.0",
    description="A Discord bot for community moderation and infraction tracking",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.11",
    install_requires=[
        "py-cord",
        "aiosqlite",
        "PyYAML",
        "python-dotenv",
        "prompt_toolkit",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    entry_points={
        "console_scripts": [
            "cwebot=cwebot.main:main",
        ],
    },
)
