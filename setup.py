from setuptools import setup, find_namespace_packages
from os import path

requires = [
    "colorlog~=6.4",
    "pe~=0.5",
    # lower bound because the export models use the v2 api (model_dump_json, ConfigDict)
    "pydantic>=2,<3",
    "pyyaml~=6.0",
]


# read the contents of your README file
this_directory = path.abspath(path.dirname(__file__))
with open(path.join(this_directory, "README.md"), encoding="utf-8") as f:
    long_description = f.read()

version = "1.0.0"

setup(
    version=version,
    python_requires=">=3.9",  # also update classifiers
    # Meta data
    name="soyparse",
    description="Parser for Closure style template files, producing a source annotated syntax tree",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="Inmanta",
    author_email="code@inmanta.com",
    license="Apache Software License 2",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Operating System :: POSIX :: Linux",
        "Topic :: Software Development :: Compilers",
        "Topic :: Text Processing :: Markup",
        "Programming Language :: Python :: 3.9",
    ],
    keywords="templates parser closure soy ast",
    # Packaging
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src"),
    zip_safe=False,
    include_package_data=True,
    install_requires=requires,
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "soyparse = soyparse.app:app",
        ],
    },
)
