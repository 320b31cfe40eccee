[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "imgpipe"
version = "1.0.0"
description = "Build chains of image treatments and apply them to images and videos"
requires-python = ">=3.10"
keywords = ["image", "video", "pipeline", "filters", "edge detection", "threshold"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Intended Audience :: Education",
    "Natural Language :: French",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: Editors :: Raster-Based",
    "Topic :: Multimedia :: Video :: Conversion",
    "Topic :: Scientific/Engineering :: Image Processing",
]
dependencies = [
    "numpy",
    "scipy",
    "pillow",
    "imageio",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
imgpipe = "imgpipe.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["imgpipe"]

[tool.hatch.build.targets.sdist]
include = ["imgpipe", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"
