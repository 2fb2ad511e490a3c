from setuptools import find_packages, setup

setup(
    name="sftp-fileops",
    version="0.1.0",
    description="Append, overwrite, read, list and create directories on a remote host over SFTP",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "paramiko>=3.0.0",
    ],
    python_requires=">=3.10",
    extras_require={
        "dev": [
            "pytest",
            "build",
            "twine",
        ],
    },
)
