# setup.py
from setuptools import setup, find_packages

setup(
    name="site_diff",
    version="0.1.0",
    description="Visual and structural regression between two deployments of a site",
    packages=find_packages(include=["site_diff", "site_diff.*"]),
    package_data={"site_diff": ["templates/*.j2"]},
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "click>=8.1",
        "jinja2>=3.1",
        "lxml>=5.0",
        "numpy>=1.26",
        "pillow>=10.0",
        "playwright>=1.40",
        "pydantic>=2.5",
        "pyyaml>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": ["site-diff=site_diff.cli:cli"],
    },
    python_requires=">=3.11",
)
