from setuptools import setup, find_packages

setup(
    name="vintageshock",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "aiohttp>=3.9",
        "fastapi>=0.100",
        "uvicorn[standard]>=0.23",
    ],
    extras_require={
        "test": ["pytest", "pytest-asyncio", "httpx"],
        "dev": ["pytest", "pytest-asyncio", "httpx", "black", "isort"],
    },
    entry_points={
        "console_scripts": [
            "vintageshock=vintageshock.cli:main",
        ],
    },
    python_requires=">=3.10",
)
