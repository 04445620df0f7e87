from setuptools import setup, find_packages

# Find all packages in the current directory
packages = find_packages(include=['mysqli_python', 'mysqli_python.*'])

setup(
    name='mysqli-python',
    version='1.0.0',
    description='A Python library for interacting with MySQL and MariaDB through prepared statements',
    long_description=open('PyPI_Description.md', encoding='utf-8').read(),
    long_description_content_type='text/markdown',
    author='The mysqli-python developers',
    packages=packages,
    # Requires >= Python 3.10
    python_requires='>=3.10',
    install_requires=[
        # collation= keyword of pymysql.connect
        'PyMySQL>=1.1',
    ],
    extras_require={
        'test': ['pytest'],
    },
    classifiers=[
        'Programming Language :: Python :: 3',
        'Operating System :: OS Independent',
        'Topic :: Database',
    ],
    zip_safe=False,
)
