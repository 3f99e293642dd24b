from setuptools import setup, find_packages

setup(
    name="biliverec-hooks",
    version="0.1.0",
    description="Webhook relay and HEVC transcode queue for a live stream recorder",
    author="",
    python_requires=">=3.9",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "aiohttp>=3.9.0",
        "pydantic>=2.0.0",
        "pyyaml>=6.0.0",
        "pypubsub>=4.0.3",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "biliverec-hooks=biliverec_hooks.main:main",
        ],
    },
)
