# -*- coding: utf-8 -*-
from setuptools import setup, find_packages

long_description = "Market State Score: adaptive EMA-slope regime bands, streaming and vectorised"

setup(
    name = "market_state_ta",
    packages = find_packages(exclude=["tests", "tests.*", "scripts"]),
    version = "0.1.0",
    description=long_description,
    long_description=long_description,
    keywords = ['technical analysis', 'market state', 'python3', 'pandas'],
    license="The MIT License (MIT)",
    classifiers = [
        'Programming Language :: Python :: 3.8',
        'Development Status :: 3 - Alpha',
        'License :: OSI Approved :: MIT License',
        'Natural Language :: English',
        'Intended Audience :: Developers',
        'Intended Audience :: Financial and Insurance Industry',
        'Topic :: Office/Business :: Financial :: Investment',
    ],
    python_requires=">=3.8",
    install_requires=['numpy', 'pandas', 'numba'],

    # List additional groups of dependencies here (e.g. development dependencies).
    # You can install these using the following syntax, for example:
    # $ pip install -e .[dev,test]
    extras_require = {
        'dev': ['pytest'],
        'test': ['pytest'],
    },
)
