"""
Setup script for eduagent.

EduAgent is the adaptive content-orchestration core of a personalized
learning platform:

1. Agent - decides what to generate next for learners needing attention
2. Roadmaps - day-by-day curricula with just-in-time lessons, quizzes
   and flashcards
3. API / CLI - FastAPI action layer and the 'eduagent' command

The 'eduagent' command is the primary entry point.
"""

from setuptools import find_packages, setup

setup(
    name="eduagent",
    version="0.1.0",
    description="Adaptive content orchestration for personalized learning",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(include=["src", "src.*"]),
    py_modules=["config", "main"],
    python_requires=">=3.11",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Database
        "sqlalchemy[asyncio]>=2.0.0",
        "asyncpg>=0.29.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # HTTP / API
        "httpx>=0.25.0",
        "fastapi>=0.110.0",
        "uvicorn>=0.27.0",
        # LLM
        "google-generativeai>=0.5.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
            "aiosqlite>=0.19.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "eduagent=src.cli.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="learning adaptive agent roadmap education llm",
)
