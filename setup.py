from setuptools import setup

from ldacore import __version__

setup(
    name='ldacore',
    version=__version__,
    description='local mail delivery to mbox files and maildirs',
    long_description=open('README').read(),
    license='GNU GPL version 2',
    python_requires='>=3.8',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Environment :: Console',
        'Intended Audience :: System Administrators',
        'License :: OSI Approved :: GNU General Public License (GPL)',
        'Natural Language :: English',
        'Operating System :: POSIX',
        'Programming Language :: Python :: 3',
        'Topic :: Communications :: Email',
        'Topic :: Communications :: Email :: Mail Transport Agents',
        'Topic :: Software Development :: Libraries :: Python Modules',
    ],
    packages=[
        'ldacore'
    ],
    extras_require={
        'test': ['pytest'],
    },
)
