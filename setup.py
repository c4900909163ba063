"""
/setup.py

Developer tools for analysis modules: results table comparison for unit
tests and local environment setup.
"""

import setuptools

with open("requirements.txt", "r", encoding="utf-8") as file:
    requirements = file.read().splitlines()

setuptools.setup(
    name="analysis-devtools",
    version="0.1.0",
    description="Table comparison and environment setup for analysis module development",
    package_dir={"": "src"},
    packages=setuptools.find_packages(where="src"),
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.10",
    install_requires=requirements,
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "compare_tables = table_compare.commands:main",
            "devsetup = devsetup.commands:main",
        ]
    },
)
