from setuptools import setup, find_packages

setup(
    name="compressibility-study",
    version="0.1.0",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "numpy>=1.24.0",
        "pandas>=2.0.0",
        "matplotlib>=3.7.0",
        "pyyaml>=6.0",
        "httpx>=0.24.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    author="Votre Nom",
    description="Compressibility study: reproducible stratified randomization schedules",
    python_requires=">=3.10",
)
