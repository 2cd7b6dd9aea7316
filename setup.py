from setuptools import setup, find_packages

setup(
    name="urlbits",
    version="0.1.0",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "requests>=2.20.0",
        "confluent-kafka",
        "tqdm",
    ],
    extras_require={
        "dev": [
            "pytest",
        ]
    },
    python_requires=">=3.9",
    entry_points={
        "console_scripts": [
            "urlbits=urlbits.cli:main",
        ],
    },
)
