[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "wtui"
version = "0.1.0"
description = "Manage multi-repository git worktrees grouped into tasks"
requires-python = ">=3.11"
dependencies = []
keywords = ["git", "worktree", "tasks", "multi-repo", "branches"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Version Control :: Git",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["wtui"]

[tool.pytest.ini_options]
addopts = "-ra"
