from setuptools import setup, find_packages

setup(
    name="lunchbox_backend",
    version="0.1.0",
    packages=find_packages(include=["lunchbox", "lunchbox.*"]),
    install_requires=[
        "fastapi",
        "uvicorn",
        "pydantic>=2",
        "pydantic-settings",
        "redis",
        "python-dotenv",
        "httpx",
        "spotipy",
        "requests",
        "PyJWT",
        "pytz",
        "cachetools",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    python_requires=">=3.9",
)
