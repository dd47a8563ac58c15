[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hanzikit"
version = "0.1.0"
description = "Custom phrase dictionaries and pinyin dictionary file management for Chinese input"
requires-python = ">=3.10"
dependencies = []
keywords = ["pinyin", "chinese", "input-method", "custom-phrase", "dictionary"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Natural Language :: Chinese (Simplified)",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Text Processing :: Linguistic",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["hanzikit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
