[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "starfighter"
version = "0.1.0"
description = "A 3D space shooter: fly a ship inside a world sphere and shoot down roaming enemy ships"
requires-python = ">=3.10"
keywords = ["game", "arcade", "shooter", "3d", "opengl", "space", "quaternion", "wavefront-obj"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: End Users/Desktop",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Arcade",
]
dependencies = [
    "numpy",
    "pyglet",
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
starfighter = "starfighter.app:main"

[tool.hatch.build.targets.wheel]
packages = ["starfighter"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
