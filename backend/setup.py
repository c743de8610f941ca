from setuptools import find_namespace_packages, setup

setup(
    name="churchbuddy-backend",
    version="0.1.0",
    packages=find_namespace_packages(include=["models*", "services*", "shared*"]),
    py_modules=["app", "database"],
    install_requires=[
        "fastapi>=0.110",
        "uvicorn[standard]>=0.27",
        "pydantic>=2.6",
        "sqlalchemy>=2.0",
        "aiohttp>=3.9",
        "python-dotenv>=1.0",
        "pyyaml>=6.0",
        "beautifulsoup4>=4.12",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
            "httpx>=0.27",
        ],
    },
    include_package_data=True,
    description="Backend package for ChurchBuddy (slide sync and storage API)",
)
