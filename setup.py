from setuptools import setup, find_packages

setup(
    name='genui',
    version='0.1.0',
    license="Apache 2.0",
    description="GenUI: A2UI protocol core and hybrid streaming renderer for generative UI",
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    package_data={"genui": ["configs/*.yaml"]},
    install_requires=[
        "pydantic>=2.0",
        "PyYAML>=6.0",
        "python-dotenv>=1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
    ],
    python_requires='>=3.9',
)
