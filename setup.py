from setuptools import setup, find_packages
import os.path

# Get the long description from the relevant file
__here__ = os.path.dirname(os.path.realpath(__file__))
with open(os.path.join(__here__, 'README.rst'), 'r') as f:
    long_description = f.read()

setup(
    name='costbasis',
    version='0.0.1dev',

    description='Cost basis and unrealized P&L for USD securities held in GBP',
    long_description=long_description,

    license='MIT',

    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Developers',
        'Intended Audience :: Financial and Insurance Industry',
        'Topic :: Software Development :: Libraries :: Python Modules',
        'Topic :: Office/Business :: Financial',
        'Topic :: Office/Business :: Financial :: Accounting',
        'Topic :: Office/Business :: Financial :: Investment',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
        'Natural Language :: English',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
    ],

    keywords=['tax', 'investment', 'cost basis', 'tax lots', 'capital gains'],

    packages=find_packages(exclude=['tests']),

    python_requires='>=3.8',

    install_requires=[
        'ofxtools >= 0.8.20',
        'sqlalchemy >= 1.4',
        'tablib >= 1.0.0',
    ],

    extras_require={
        'test': ['pytest'],
    },

    entry_points={
        'console_scripts': [
            'costbasis=costbasis.script:main',
        ],
    },
)
