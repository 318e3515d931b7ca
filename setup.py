from setuptools import find_packages, setup

# Retrieve release number from text file VERSION.
# See https://packaging.python.org/guides/single-sourcing-package-version/.
with open("httpcall/__init__.py", encoding="utf8") as f:
    for line in f:
        if line.startswith("__version__"):
            version = line.split("=")[1].split('"')[1]

with open("README.md", encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="httpcall",
    packages=find_packages(exclude=["tests", "tests.*"]),
    version=version,
    description="httpcall: fluent HTTP request builder with gzip bodies and content-type based response decoding",
    author="httpcall contributors",
    python_requires=">=3.10",
    long_description=long_description,
    long_description_content_type="text/markdown",
    install_requires=[
        "requests",
        "urllib3",
        "python-dotenv",
        "toml",
    ],
    extras_require={
        "dev": [
            "ruff>=0.9.6,<1.0.0",
            "mypy>=1.0.0,<2.0.0",
            "pytest",
            "types-requests",
            "types-toml",
        ]
    },
    license="MIT",
    zip_safe=False,
    keywords=["http", "requests", "client", "builder", "gzip"],
)
