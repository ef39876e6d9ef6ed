# setup.py
from setuptools import setup, find_packages

setup(
    name="link_crawler",
    version="0.1.0",
    description="Bounded-concurrency web crawler LinkCrawler",
    packages=find_packages(exclude=("tests", "tests.*")),
    package_data={"link_crawler": ["templates/*.j2", "configs/*.yaml"]},
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "click>=8.1",
        "jinja2>=3.1",
        "pydantic>=2.5",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4,<9",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": ["link-crawler=link_crawler.cli:cli"],
    },
    python_requires=">=3.11",
)
