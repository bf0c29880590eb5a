#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""The setup script."""

from setuptools import setup, find_packages

with open('README.rst') as readme_file:
    readme = readme_file.read()

requirements = [
    'PyYAML',
    'netaddr',
    'huepy',
    'mach.py',
]

test_requirements = ['pytest', ]

setup(
    name='kubestrap',
    version='0.1.0',
    description='Render startup scripts for kubernetes masters and nodes',
    long_description=readme,
    long_description_content_type='text/x-rst',
    license='Apache-2.0',
    packages=find_packages(include=['kubestrap', 'kubestrap.*']),
    python_requires='>=3.8',
    install_requires=requirements,
    extras_require={'test': test_requirements},
    entry_points={
        'console_scripts': ['kubestrap=kubestrap.kubestrap:main'],
    },
)
