[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "metalanalyzer"
version = "0.1.5"
description = "Language analysis toolkit for Metal Shading Language: settings, AST indexing, go-to-definition lookup and completion."
requires-python = ">=3.10"
dependencies = []
keywords = ["metal", "shader", "msl", "language-server", "completion", "clang", "ast"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["metalanalyzer"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
