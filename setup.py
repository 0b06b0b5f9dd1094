from setuptools import setup

with open("README.md") as f:
    readme = f.read()

_ = setup(
    name="certvault",
    version="1.0.0",
    license="MIT",
    long_description=readme,
    long_description_content_type="text/markdown",
    python_requires=">=3.8",
    install_requires=[
        "asn1crypto~=1.5.1",
        "cryptography>=42.0.8",
        "httpx~=0.28.1",
        "argcomplete>=3.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    packages=[
        "certvault",
        "certvault.commands",
        "certvault.commands.parsers",
        "certvault.lib",
    ],
    entry_points={
        "console_scripts": ["certvault=certvault.entry:main"],
    },
    description="Obtain X.509 certificates from a Vault PKI secrets engine",
)
