[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sentinelview"
version = "0.1.0"
description = "Market-data view models: trade charts, order-book heatmaps and stream polling for live trading displays"
requires-python = ">=3.10"
dependencies = []
keywords = ["trading", "order book", "heatmap", "market data", "charting"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Financial and Insurance Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial :: Investment",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["sentinelview"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
