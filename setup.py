# setup.py
from setuptools import setup, find_packages

setup(
    name="speed_scout",
    version="0.1.0",
    description="Resumable bulk PageSpeed Insights checker driven by a sitemap",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"speed_scout": ["templates/*.j2"]},
    install_requires=[
        "aiohttp>=3.9",
        "click>=8.1",
        "Jinja2>=3.1",
        "lxml>=5.0",
        "pydantic>=2.5",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0,<9",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": ["speed_scout=speed_scout.cli:cli"],
    },
    python_requires=">=3.11",
)
