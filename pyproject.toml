[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sxassets"
version = "0.1.0"
description = "Readers, converters and tools for helicopter-simulation game assets: 3DO models, KDA animations, BC3 textures, radio messages, waypoints and terrain heightfields"
requires-python = ">=3.10"
dependencies = [
    "pillow",
]
keywords = ["game-assets", "bc3", "dxt5", "bc4", "bc5", "3do", "kda", "heightfield", "texture-compression"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Simulation",
    "Topic :: Multimedia :: Graphics :: Graphics Conversion",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
sx-model = "sxassets.modeltool:main"
sx-anim = "sxassets.modeltool:anim_main"
sx-png2bc3 = "sxassets.png2bc3:main"

[tool.hatch.build.targets.wheel]
packages = ["sxassets"]

[tool.pytest.ini_options]
addopts = "-ra"
