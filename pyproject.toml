[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fuzzwell"
version = "2.0.0"
description = "Web fuzzing building blocks: wordlist and command inputs, response filters and matchers, scrapers and report writers"
requires-python = ">=3.10"
keywords = ["fuzzing", "web", "http", "wordlist", "content-discovery", "scraping"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Information Technology",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security",
    "Topic :: Internet :: WWW/HTTP",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "beautifulsoup4",
    "brotli",
    "jinja2",
    "requests",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["fuzzwell"]

[tool.pytest.ini_options]
addopts = "-ra"
