from setuptools import setup, find_packages

setup(
    name="json-validators",
    version="0.1.0",
    description="JSON Schema keyword validators and combinators for form controls",
    author="Jude Payne",
    packages=find_packages(exclude=['tests', 'tests.*']),
    package_data={
        'json_validators': ['validators-config.yaml'],
    },
    include_package_data=True,
    install_requires=[
        'pyyaml>=6.0',
        'jsonschema>=4.17.0',
        'requests>=2.28.0',
    ],
    extras_require={
        'test': ['pytest>=7.0'],
    },
    python_requires='>=3.9',
)
