# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="filefinder",
    version="0.1.0",
    description="Concurrent recursive file search by glob pattern using a pool of worker threads",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["filefinder", "filefinder.*"]),
    python_requires=">=3.9",
    install_requires=[],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        'console_scripts': [
            'filefinder=filefinder.interface.cli.app:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
