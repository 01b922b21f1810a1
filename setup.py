from setuptools import setup, find_packages

setup(
    name='check-certs',
    version='1.0.0',
    author='Grégoire Compagnon (obeone)',
    url='https://github.com/obeone/check-certs',
    license='MIT',
    package_dir={'': 'src'},
    packages=find_packages('src'),
    python_requires='>=3.9',
    install_requires=[
        'cryptography>=42',
        'coloredlogs',
        'flask',
        'jinja2',
        'shtab'
    ],
    extras_require={
        'test': [
            'pytest'
        ],
    },
    entry_points={
        'console_scripts': [
            'check-certs = check_certs.main:main',
        ],
    },
)
