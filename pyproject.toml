[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rpccompat"
version = "0.1.0"
description = "Fixture-driven compatibility checker for Solana JSON-RPC endpoints"
requires-python = ">=3.10"
keywords = ["solana", "json-rpc", "rpc", "compatibility", "fixtures", "testing"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Testing",
    "Topic :: Internet",
]
dependencies = [
    "requests>=2.28",
    "python-dotenv>=1.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
    "responses>=0.23",
]

[project.scripts]
rpccompat = "rpccompat.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["rpccompat"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
