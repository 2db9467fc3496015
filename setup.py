"""
Pomodoro Sync - Setup Configuration
"""
from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="pomodoro-sync",
    version="0.1.0",
    author="PRO-Ka-Po Team",
    author_email="contact@example.com",
    description="Rdzeń klienta timera Pomodoro z synchronizacją sesji i trybem offline",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["pomodoro_sync", "pomodoro_sync.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: End Users/Desktop",
        "Topic :: Office/Business :: Scheduling",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
        "Natural Language :: Polish",
        "Natural Language :: English",
    ],
    python_requires=">=3.11",
    install_requires=requirements,
    extras_require={
        "test": [
            "pytest>=7.4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "pomodoro-sync=pomodoro_sync.main:main",
        ],
    },
)
