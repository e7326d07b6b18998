from setuptools import setup, find_packages

setup(
    name="burrows_wheeler_library",
    version="0.0.1",
    packages=find_packages(include=["bwtlib", "bwtlib.*"]),
    description="Burrows-Wheeler transform and inverse, with a block-wise file coder",
    license="MIT",
    install_requires=[
        "pytest",
        "numpy",
        "bitarray",
    ],
)
