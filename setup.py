from setuptools import setup, find_packages
from pathlib import Path

readme_file = Path(__file__).parent / "README.rst"
readme = readme_file.read_text() if readme_file.exists() else ""

requirements = [
    "pyyaml",
    "requests",
    "numpy",
    "pandas>=2",
    "click",
    "sqlalchemy>=2",
]
test_requirements = ["pytest"]

setup(
    name="regulation_extract",
    version="1.0.0",
    license="MIT",
    description="Hourly multi-source extracts of unit telemetry for frequency regulation reporting",
    long_description=readme,
    install_requires=requirements,
    extras_require={"test": test_requirements},
    include_package_data=True,
    packages=find_packages(include=["regulation_extract", "regulation_extract.*"]),
    python_requires=">=3.9",
    test_suite="tests",
    keywords=["regulation_extract", "time series", "historian", "export"],
    classifiers=[
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    entry_points={
        "console_scripts": [
            "regulation_extract=regulation_extract.__main__:cli",
            "run_export=regulation_extract.run_export:run_export_cli",
            "export_inventory=regulation_extract.inventory:inventory_cli",
        ]
    },
)
