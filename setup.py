import os

from setuptools import find_packages, setup

README = os.path.join(os.path.dirname(__file__), "README.md")


def readme() -> str:
    with open(README, encoding="utf-8") as f:
        return f.read()


setup(
    name="typespace",
    version="0.3.0",
    description="Convert JSON Schema into Python dataclasses and check them against reference declarations",
    long_description=readme(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 4 - Beta",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Code Generators",
        "Topic :: Software Development :: Testing",
        "Intended Audience :: Developers",
    ],
    keywords="json schema code generation python dataclass structural equivalence testing",
    license="MIT",
    packages=find_packages(),
    python_requires=">=3.12",
    install_requires=[
        "jinja2>=3.0.0",
        "pydantic>=2.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "black>=23.0.0",
            "ruff>=0.1.0",
            "dataclasses-json>=0.6.0",
        ],
    },
    include_package_data=True,
    package_data={
        "typespace": ["templates/*.jinja2", "tests/test_data/**/*"],
    },
    zip_safe=False,
)
