# setup.py
from setuptools import setup, find_packages

setup(
    name="transaction-dashboard",
    version="0.1.0",
    description="Transaction reporting API and dashboard for monthly sales statistics and charts",
    author="Your Name",
    author_email="you@example.com",
    url="https://github.com/yourusername/transaction-dashboard",
    packages=find_packages(include=["transaction_dashboard", "transaction_dashboard.*"]),
    python_requires=">=3.10",
    install_requires=[
        "click>=7.0",
        "pyyaml>=5.3",
        "python-dotenv>=0.19",
        "fastapi>=0.100",
        "uvicorn>=0.22",
        "anyio>=3.6",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "httpx>=0.24",
        ],
    },
    entry_points={
        "console_scripts": [
            "txdash=transaction_dashboard.cli:main",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
