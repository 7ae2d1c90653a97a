from setuptools import setup, find_packages

setup(
    name="talk2text",
    version="0.1.0",
    description="Dictation through ffmpeg and whisper.cpp with on-demand engine installation",
    author="",
    python_requires=">=3.8",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "rich>=12.5.0",
        "pyyaml>=6.0.0",
        "pypubsub>=4.0.3",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "numpy>=1.21.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "talk2text=talk2text.main:main",
        ],
    },
)
