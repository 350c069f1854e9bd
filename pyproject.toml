[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "labosfs"
version = "0.1.0"
description = "Disk-image builders for a small teaching filesystem, with a shell command parser and simple text utilities"
requires-python = ">=3.10"
dependencies = []
keywords = ["filesystem", "disk image", "mkfs", "inode", "shell parser", "grep", "teaching"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Filesystems",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
labosfs-mkfs = "labosfs.mkfs:main"
labosfs-genuser = "labosfs.genuser:main"

[tool.hatch.build.targets.wheel]
packages = ["labosfs"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
