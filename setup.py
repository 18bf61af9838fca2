from setuptools import setup, find_packages
import os

# Get all rule documents under field_validation/rules/ recursively
def get_rule_files():
    rule_files = []
    package_dir = 'field_validation'
    for root, dirs, files in os.walk(os.path.join(package_dir, 'rules')):
        for file in files:
            # Get path relative to package root
            path = os.path.relpath(os.path.join(root, file), package_dir)
            rule_files.append(path)
    return rule_files

setup(
    name="field-validation",
    version="0.1.0",
    description="Data-driven record validation with JSON rule documents and shared definitions",
    packages=find_packages(exclude=['tests', 'tests.*']),
    package_data={
        'field_validation': ['local-config.yaml'] + get_rule_files(),
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
