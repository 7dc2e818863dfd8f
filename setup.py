from setuptools import setup, find_packages
setup(
    name="doorknocking_tracker",
    version="0.1.0",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    include_package_data=True,
    package_data={"doorknocking_tracker": ["data/*.csv"]},
    python_requires=">=3.9",
    install_requires=[
        "fastapi>=0.100",
        "pydantic>=2",
        "httpx>=0.24",
        "uvicorn>=0.22",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        'console_scripts': [
            'doorknocking_tracker=doorknocking_tracker.__main__:main'
        ]
    }
)
