# -*- coding: utf-8 -*-
#!/usr/bin/env python
#

from setuptools import setup, find_packages

import pathlib

import ast
import os

def get_version():
	with open(os.path.join(os.path.dirname(__file__), 'src', 'radiocalib', '__init__.py')) as f:
		tree = ast.parse(f.read())
		for node in tree.body:
			if isinstance(node, ast.Assign):
				if node.targets[0].id == 'version_info':
					return '.'.join(map(str, ast.literal_eval(node.value)))

here = pathlib.Path(__file__).parent.resolve()

long_description = (here / "README.md").read_text(encoding="utf-8")

setup(
	name="radiocalib",
	version=get_version(),
	description="RadioCalib - Radiocarbon calibration, realm conversion and contamination modelling",
	long_description=long_description,
	long_description_content_type="text/markdown",
	classifiers=[
		"Development Status :: 4 - Beta",
		"Intended Audience :: Science/Research",
		"Topic :: Scientific/Engineering",
		"License :: OSI Approved :: GNU General Public License v3 (GPLv3)",
		"Programming Language :: Python :: 3",
	],
	keywords="archaeology, radiocarbon, calibration, chronology, F14C",
	package_dir={"": "src"},
	packages=find_packages(where="src"),
	include_package_data=True,
	python_requires=">=3.10",
	install_requires=[
		'numpy>=1.26.4',
		'scipy>=1.13.0, <2',
		'tqdm>=4.66.0, <5',
		'requests>=2.31.0, <3',
	],
	extras_require={
		'tests': [
			'pytest>=7.0',
		],
	},
)
