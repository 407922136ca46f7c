from setuptools import setup, find_packages

setup(
    name="jangatub-api",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "fastapi",
        "uvicorn",
        "sqlalchemy[asyncio]>=2.0",
        "alembic",
        "psycopg2-binary",
        "asyncpg",
        "pydantic>=2",
        "pydantic-settings",
        "python-dotenv",
        "email-validator",
        "python-jose[cryptography]",
        "passlib[bcrypt]",
        "bcrypt>=4,<5",
        "python-multipart",
        "pyyaml",
        "httpx",
        "groq",
        "pypdf",
        "aioboto3",
        "redis",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
            "aiosqlite",
            "httpx",
        ],
    },
)
