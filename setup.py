#!/usr/bin/env python

import setuptools

setuptools.setup(
    name="flipbook",
    version="0.3.0",
    description="A desktop PDF flipbook viewer with page-turn animation, keyboard and drag navigation, and responsive page sizing.",
    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
    package_data={"flipbook": ["configs/*.yaml"]},
    include_package_data=True,
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    install_requires=['qtpy>=2.0.0',
                      'PyQt5>=5.15.7',
                      'PyMuPDF>=1.23.0',
                      'PyYAML>=5.3',
                      'termcolor>=1.1.0',
                      'colorama>=0.4.4; os_name=="nt"',
                      ],
    extras_require={
        'test': ['pytest>=7.0'],
    },
    python_requires='>=3.10',

    entry_points={
        'console_scripts': [
            'flipbook = flipbook.gui.app:main',
        ],
    },


)
