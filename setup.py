from setuptools import setup, find_packages

with open("VERSION", "r") as f:
    version = f.read().strip()

with open("requirements.txt", "r") as f:
    requirements = [line.strip() for line in f if line.strip() and not line.startswith("#")]

setup(
    name="layercfg",
    version=version,
    description="Layered configuration container with typed access and hot-reload observers",
    packages=find_packages(include=["layercfg", "layercfg.*"]),
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.11",
    include_package_data=True,
    entry_points={
        "console_scripts": [
            "layercfg=layercfg.cli:main",
        ]
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
