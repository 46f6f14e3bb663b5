[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "drowsewatch"
version = "0.1.0"
description = "Driver fatigue detection from facial landmarks: eye and mouth aspect ratios, head pitch and per-minute fatigue verdicts."
requires-python = ">=3.10"
keywords = ["fatigue", "drowsiness", "facial-landmarks", "head-pose", "eye-aspect-ratio"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Image Recognition",
]
dependencies = [
    "numpy",
    "scipy",
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["drowsewatch"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
