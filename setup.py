# setup.py
from setuptools import setup, find_packages

setup(
    name="recurbook",
    version="0.1.0",
    description="A small CLI and library for scheduling recurring transactions",
    author="Your Name",
    author_email="you@example.com",
    url="https://github.com/yourusername/recurbook",
    packages=find_packages(include=["recurring_tracker", "recurring_tracker.*"]),
    python_requires=">=3.9",
    install_requires=[
        "click>=7.0",
        "pyyaml>=5.3",
        "python-dotenv>=0.19",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "recurbook=recurring_tracker.cli:main",
            "recurbook-watch=recurring_tracker.watcher:main",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
