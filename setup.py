from setuptools import setup, find_namespace_packages

setup(
    name="subnft-api",
    version="0.1.0",
    packages=find_namespace_packages(include=["src", "src.*"]),
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "fastapi",
        "uvicorn",
        "sqlalchemy[asyncio]>=2.0",
        "asyncpg",
        "aiosqlite",
        "pydantic>=2",
        "pydantic-settings",
        "python-dotenv",
        "python-jose[cryptography]",
        "pyyaml",
        "boto3",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
            "httpx",
        ],
    },
    entry_points={
        "console_scripts": [
            "subnft-init-db=src.subnft.db.init_db:main",
            "subnft-issue-tokens=src.subnft.db.issue_tokens:main",
        ],
    },
)
