from setuptools import setup, find_packages

setup(
    name="glossary",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"glossary": ["config.yaml"]},
    install_requires=[
        "pydantic>=2",
        "tinydb>=4",
        "pyyaml",
        "python-dotenv",
    ],
    extras_require={
        "test": ["pytest"],
    },
    python_requires=">=3.9",
)
