from setuptools import setup, find_packages


setup(
    name="farc",
    version="0.1",
    packages=find_packages(include=["farc", "farc.*"]),
    description="Extractor for the encrypted/compressed FArc archives of Fate/Grand Order Arcade.",
    install_requires=[
        "pycryptodomex>=3.23.0",
        "zstandard>=0.22.0",
    ],
    entry_points={
        "console_scripts": [
            "farc=farc.cli:main",
        ]
    },
)
