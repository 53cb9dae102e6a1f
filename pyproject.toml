[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "apiqube"
version = "0.1.0"
description = "Declarative API test manifests: parsing, dependency graphs, assertions and run events"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = ["api", "testing", "yaml", "manifest", "assertions", "dependency-graph"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Testing",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["apiqube"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]
