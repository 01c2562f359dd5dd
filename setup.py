"""
Setup script for edastats package.
"""

from setuptools import setup, find_packages

setup(
    name="edastats",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        # Core numerical dependencies
        "numpy>=1.20.0",
        "pandas>=1.3.0",
        "scipy>=1.7.0",

        # Utilities
        "pyyaml>=6.0.0",
    ],
    extras_require={
        "tests": ["pytest>=6.0.0", "pytest-cov>=2.12.0", "scikit-learn>=1.0.0"],
    },
    author="Edastats Team",
    description="Standardization, correlation and PCA for exploratory data analysis",
    keywords="pca, correlation, standardization, exploratory data analysis",
    python_requires=">=3.8",
)
