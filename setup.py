from setuptools import setup, find_packages

setup(
    name="pagelang",
    version="0.1.0",
    description="Declarative page definitions: per-method responses and macros evaluated to a render tree",
    packages=find_packages(include=["pagelang", "pagelang.*"]),
    package_data={"pagelang": ["grammar.lark"]},
    install_requires=[
        "lark>=1.1",
        "pydantic>=2.0",
    ],
    extras_require={
        "test": ["pytest"],
    },
    python_requires=">=3.9",
)
