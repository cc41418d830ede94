[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kubegrade"
version = "0.1.0"
description = "Checks that grade Kubernetes object definitions for reliability and security."
requires-python = ">=3.10"
dependencies = []
keywords = ["kubernetes", "linter", "static-analysis", "manifests", "security", "best-practices"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Quality Assurance",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["kubegrade"]

[tool.pytest.ini_options]
addopts = "-ra"
