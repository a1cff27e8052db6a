"""Setup configuration for visdeploy."""

from setuptools import setup, find_packages

# Read README
with open('README.md', 'r', encoding='utf-8') as f:
    long_description = f.read()

# Read requirements
with open('requirements.txt', 'r') as f:
    requirements = [line.strip() for line in f if line.strip() and not line.startswith('#')]

# Test requirements
test_requirements = [
    'pytest>=7.0.0',
    'pytest-asyncio>=0.21.0',
    'pytest-cov>=4.0.0',
]

setup(
    name='visdeploy',
    version='1.0.0',
    author='visdeploy Development Team',
    description='Version-gated deployment of Visual Studio debugger visualizers',
    long_description=long_description,
    long_description_content_type='text/markdown',
    packages=find_packages(exclude=['tests', 'tests.*']),
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'Topic :: Software Development :: Debuggers',
        'Topic :: System :: Software Distribution',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Operating System :: Microsoft :: Windows',
    ],
    python_requires='>=3.8',
    install_requires=requirements,
    extras_require={
        'test': test_requirements,
        'dev': test_requirements,
    },
    entry_points={
        'console_scripts': [
            'visdeploy=visdeploy.cli:main',
        ],
    },
    include_package_data=True,
    zip_safe=False,
)
