from setuptools import setup, find_packages

setup(
    name="packet-import",
    version="0.1.0",
    description="Multi-row MySQL INSERT imports bounded by max_allowed_packet",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    include_package_data=True,
    python_requires=">=3.8",
    install_requires=[
        'click==8.1.8',
        'polars==1.27.1',
        'PyMySQL==1.1.1',
        'rich==13.9.4',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'packet-import=packet_import.cli:main',
        ],
    },
)
