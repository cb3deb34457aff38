#!/usr/bin/env python
"""
Kibrary: linear waveform inversion library for Python
"""

import os
from setuptools import setup, find_packages



def readme():
	with open("README.md", "r") as f:
		return f.read()


here = os.path.abspath(os.path.dirname(__file__))
about = {}
with open(os.path.join(here, 'kibrary', "__version__.py")) as f:
	exec(f.read(), about)


pkg_metadata = dict(
		name="kibrary",
		version=about["__version__"],
		description="Assembly and solution of the normal equations of waveform inversions",
		long_description=readme(),
		long_description_content_type="text/markdown",
		license="GPL-3.0",
		packages=find_packages(exclude=["tests", "tests.*"]),
		include_package_data=True,
		python_requires=">=3.9",
		keywords="Seismology, Waveform Inversion, Normal Equations, Conjugate Gradient, Tomographic Inversion",
		install_requires=['obspy>=1.1.0',
						  'numpy>=1.16.0',
						  'scipy>=1.12.0',
						  'matplotlib>=3.0.2',
						  'cartopy>=0.17.0',
						  'pyyaml>=5.1'],
		extras_require={"test": ["pytest"]},
		entry_points={
			"console_scripts": ["kibrary=kibrary.operations.cli:main"]
			},
		classifiers=["Programming Language :: Python :: 3"]
		)

setup(**pkg_metadata)
