# setup.py - Package smallcat
from setuptools import setup

setup(
    name="smallcat",
    version="0.1.0",
    description="Finite category theory, computed: Kan extensions, group canonicalization, homology, optics",
    packages=["smallcat"],
    python_requires=">=3.8",
    install_requires=["numpy"],
    extras_require={"test": ["pytest"]},
)
