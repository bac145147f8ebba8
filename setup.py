from setuptools import setup


setup(
    name="timing-harvest",
    version="0.1.0",
    description="Convert Timing time-tracking CSV exports into Harvest timesheet imports",
    packages=["timing_harvest"],
    install_requires=[
        "pandas",
        "chardet",
        "openpyxl",
    ],
    entry_points={
        "console_scripts": [
            "timing-harvest=timing_harvest.cli:main",
        ]
    },
)
