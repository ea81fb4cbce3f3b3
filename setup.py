import re
import setuptools

# Read the version without importing the package (its dependencies may not be installed yet)
with open("tuyarelay/core/core.py", "r") as fh:
    version_tuple = re.search(r"^version_tuple = \((\d+), (\d+), (\d+)\)", fh.read(), re.M).groups()

with open("README.md", "r") as fh:
    long_description = fh.read()

INSTALL_REQUIRES = [
    'tinytuya',      # Tuya LAN protocol - device discovery, session and status reports
    'HAP-python',    # HomeKit Accessory Protocol server (import name: pyhap)
    'colorama',      # Makes ANSI escape character sequences work under MS Windows.
]

TESTS_REQUIRE = [
    'pytest',
    'pytest-asyncio',
]

setuptools.setup(
    name="tuyarelay",
    version=".".join(version_tuple),
    author="tuyarelay",
    description="Bridge a Tuya WiFi smart bulb to HomeKit and relay its power state to a local TCP peer",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(exclude=("tests", "examples")),
    python_requires=">=3.9",
    install_requires=INSTALL_REQUIRES,
    extras_require={"test": TESTS_REQUIRE},
    entry_points={"console_scripts": ["tuyarelay=tuyarelay.__main__:main"]},
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
