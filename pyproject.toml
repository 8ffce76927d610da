[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "syslab"
version = "0.1.0"
description = "Systems toolkit: a Unix V6 disk image reader, a process ring, a pipeline shell, a typed string list and an ARM simulator shell"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "unix-v6",
    "filesystem",
    "disk-image",
    "inode",
    "checksum",
    "pipeline",
    "shell",
    "simulator",
    "arm",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Filesystems",
    "Topic :: System :: Emulators",
    "Topic :: System :: Shells",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
diskimageaccess = "syslab.diskimageaccess:main"
syslab-ring = "syslab.ring:main"
syslab-shell = "syslab.pipeshell:main"
syslab-armsim = "syslab.armsim:main"

[tool.hatch.build.targets.wheel]
packages = ["syslab"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
