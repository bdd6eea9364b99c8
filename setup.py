from setuptools import setup, find_packages

setup(
    name="ogis_map_editor",
    version="1.0.0",
    description="Map feature editor with undo/redo, local persistence and GeoJSON import/export",
    author="OGIS Team",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    py_modules=["main"],
    install_requires=[
        "PyQt6>=6.6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "ogis-editor=main:main",
        ],
    },
    python_requires=">=3.8",
)
