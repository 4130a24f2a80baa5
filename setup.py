import os
from setuptools import setup

def read(fname):
    return open(os.path.join(os.path.dirname(__file__), fname)).read()

setup(
    name = "tag-statsd",
    version = "0.1.0",
    description = ("StatsD client with sampling, DogStatsD-style tags and multi-stat sends over UDP."),
    license = "BSD",
    packages=['tagstatsd'],
    long_description=read('README.txt'),
    python_requires='>=3.7',
    install_requires=[],
    extras_require={
        'test': ['pytest'],
    },
    classifiers=[
        "License :: OSI Approved :: BSD License",
        "Programming Language :: Python :: 3",
    ],
)
