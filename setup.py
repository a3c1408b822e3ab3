"""Install the blox accounts package."""

from setuptools import setup, find_packages

setup(
    name='blox-accounts',
    version='0.1.0',
    packages=find_packages(exclude=['*test*']),
    install_requires=[
        "sqlalchemy>=1.4",
        "python-dateutil",
        "pytz",
        "pyjwt>=2",
        "redis>=4.1",
        "python-json-logger>=3.1",
        "click",
    ],
    extras_require={
        'test': [
            "pytest",
            "fakeredis",
            "faker",
        ]
    },
    entry_points={
        'console_scripts': ['blox-accounts=blox_accounts.cli:cli'],
    },
    zip_safe=False
)
