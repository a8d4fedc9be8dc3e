from setuptools import setup, find_packages

setup(
    name="quiz-runner",
    version="0.1.0",
    description="Topic-filtered multiple-choice quiz runner with immediate grading",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.9",
    install_requires=[
        "PyYAML>=6.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "quiz-runner=quiz_runner.runner:main",
        ],
    },
)
