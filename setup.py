"""Install the gitsubmit package."""

from setuptools import setup, find_packages

setup(
    name='gitsubmit',
    version='2.0.0',
    description='Client for managing student submission repositories on'
                ' GitHub Enterprise.',
    packages=find_packages(include=['gitsubmit', 'gitsubmit.*']),
    zip_safe=False,
    python_requires='>=3.7',
    install_requires=[
        'flask',
        'requests',
        'pytz',
        'typing_extensions'
    ],
    extras_require={
        'test': ['pytest']
    },
    include_package_data=True
)
