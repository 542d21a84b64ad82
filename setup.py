""" hdkeyring build script for setuptools.

"""

from setuptools import find_packages, setup  # type: ignore

import hdkeyring

with open("README.md", "r", encoding="ascii") as file_:
    longdescription = file_.read()

setup(
    name=hdkeyring.name,
    version=hdkeyring.__version__,
    license=hdkeyring.__license__,
    author=hdkeyring.__author__,
    author_email=hdkeyring.__author_email__,
    description="Hierarchical deterministic keyring for bitcoin-like wallets",
    long_description=longdescription,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    install_requires=["btclib>=2022.7.20,<2024"],
    extras_require={
        "secp256k1": ["btclib_libsecp256k1"],
        "test": ["pytest"],
    },
    keywords=(
        "bitcoin hd-wallet keyring bip32 bip39 bip44 psbt "
        "message-signing wif"
    ),
    python_requires=">=3.8",
    classifiers=[
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Natural Language :: English",
        "Operating System :: OS Independent",
        "Topic :: Security :: Cryptography",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
)
