from pathlib import Path
from setuptools import setup, find_packages
import re

README_PATH = Path(__file__).parent / "README.md"
README = README_PATH.read_text(encoding="utf-8") if README_PATH.exists() else ""

def read_version() -> str:
    p = Path(__file__).parent / "starlight" / "__init__.py"
    if p.exists():
        m = re.search(r'__version__\s*=\s*["\']([^"\']+)["\']', p.read_text(encoding="utf-8"))
        if m:
            return m.group(1)
    raise RuntimeError("Version string not found in starlight/__init__.py")

setup(
    name="starlight-field",
    version=read_version(),
    author="StarLight contributors",
    description="Closed-loop field dynamics engine with cognitive synthesis and telemetry physics.",
    long_description=README,
    long_description_content_type="text/markdown",
    license="Apache-2.0",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3 :: Only",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
        "Intended Audience :: Developers",
        "Topic :: Scientific/Engineering :: Artificial Intelligence",
    ],
    packages=find_packages(include=["starlight", "starlight.*"], exclude=("tests", "examples", "docs")),
    include_package_data=True,
    package_data={"starlight": ["py.typed", "__init__.pyi"]},
    zip_safe=False,
    python_requires=">=3.10",
    install_requires=[
        "numpy>=1.26",
    ],
    extras_require={

        "viz": ["pandas>=2.2", "matplotlib>=3.8"],
        "dev": ["pytest>=7", "ruff>=0.4", "mypy>=1.8", "black>=23.12.1", "build>=1.0.3", "twine>=4.0.2"],

        "all": [
            "pandas>=2.2", "matplotlib>=3.8",
            "pytest>=7", "ruff>=0.4", "mypy>=1.8", "black>=23.12.1", "build>=1.0.3", "twine>=4.0.2"
        ],
    },
)
