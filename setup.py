"""Setup script for the Calendar File Exporter."""

from pathlib import Path

from setuptools import find_packages, setup

HERE = Path(__file__).parent
TEST_PACKAGES = ("pytest",)


def read_requirements(path: Path) -> tuple[list[str], list[str]]:
    """Split requirements.txt into runtime and test requirements."""
    runtime: list[str] = []
    testing: list[str] = []
    if not path.exists():
        return runtime, testing

    for raw in path.read_text(encoding="utf-8").splitlines():
        requirement = raw.split("#", 1)[0].strip()
        if not requirement:
            continue
        target = testing if requirement.lower().startswith(TEST_PACKAGES) else runtime
        target.append(requirement)
    return runtime, testing


readme_file = HERE / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""
requirements, test_requirements = read_requirements(HERE / "requirements.txt")

setup(
    name="calendar-exporter",
    version="1.0.0",
    description="Convert ICS calendar files and zip archives to CSV, JSON, Excel and XML",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="Calendar Exporter Team",
    author_email="support@calendar-exporter.local",
    # Package configuration
    packages=find_packages(include=["calendar_exporter", "calendar_exporter.*"]),
    include_package_data=True,
    # Dependencies
    install_requires=requirements,
    extras_require={
        "test": test_requirements,
        "dev": test_requirements
        + [
            "black>=23.0.0",
            "isort>=5.12.0",
            "mypy>=1.0.0",
            "types-PyYAML",
            "types-pytz",
        ],
    },
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Office/Business :: Scheduling",
        "Topic :: Utilities",
        "Framework :: AsyncIO",
    ],
    keywords="calendar ics icalendar export csv json excel xlsx xml google-calendar",
    # Entry points
    entry_points={
        "console_scripts": [
            "calendar-exporter=calendar_exporter.__main__:main",
        ],
    },
    zip_safe=False,
)
