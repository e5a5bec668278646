[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "agentshub"
version = "0.1.0"
description = "Spawn, track and monitor Claude, Copilot and Gemini CLI agent sessions running in terminal windows."
requires-python = ">=3.10"
dependencies = [
    "psutil",
]
keywords = [
    "claude",
    "copilot",
    "gemini",
    "agents",
    "cli",
    "terminal",
    "jsonl",
    "session",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Win32 (MS Windows)",
    "Intended Audience :: Developers",
    "Operating System :: Microsoft :: Windows",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["agentshub"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
