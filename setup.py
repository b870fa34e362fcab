from setuptools import setup, find_packages

setup(
    name="vpsctl",
    version="1.2.0",
    description="VPSCTL: provision, audit and manage Docker Compose projects on Ubuntu VPS hosts",
    author="vpsctl contributors",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={
        "vpsctl": ["data/*.sh"],
    },
    install_requires=[
        "requests",
        "pyyaml",
        "colorama",
    ],
    extras_require={
        "test": ["pytest"],
        "build": ["pyinstaller"],
    },
    entry_points={
        "console_scripts": [
            "vps=vpsctl.cli:main",
        ],
    },
    python_requires=">=3.8",
)
