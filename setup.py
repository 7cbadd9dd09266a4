"""setuptools / py2app setup for FocusMove.

Install for development:
    pip install -e ".[test]"

Build a macOS .app bundle:
    pip install py2app
    python setup.py py2app
"""

import sys

from setuptools import find_packages, setup

APP = ["main.py"]
DATA_FILES = []
OPTIONS = {
    "argv_emulation": False,
    "iconfile": None,  # Replace with .icns path when a proper icon exists
    "plist": {
        "CFBundleName": "FocusMove",
        "CFBundleDisplayName": "FocusMove",
        "CFBundleIdentifier": "com.focusmove.app",
        "CFBundleVersion": "0.1.0",
        "CFBundleShortVersionString": "0.1.0",
        "NSHighResolutionCapable": True,
        "LSMinimumSystemVersion": "13.0",
    },
}

py2app_kwargs = {}
if "py2app" in sys.argv:
    py2app_kwargs = {
        "app": APP,
        "data_files": DATA_FILES,
        "options": {"py2app": OPTIONS},
        "setup_requires": ["py2app"],
    }

setup(
    name="FocusMove",
    version="0.1.0",
    description="Work/break interval timer with mandatory mobility breaks",
    packages=find_packages(include=["focusmove", "focusmove.*"]),
    python_requires=">=3.10",
    install_requires=[
        "PyQt6>=6.5",
        "numpy>=1.24",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "gui_scripts": ["focusmove = focusmove.__main__:main"],
    },
    **py2app_kwargs,
)
