from setuptools import setup, find_namespace_packages


setup(
    name="arktx",
    version="0.1.0",
    author="T. R. Stovall",
    author_email="arkacoin.io@gmail.com",
    description="Transaction builder and multisignature co-signer for ARK networks",
    long_description=open('README.md').read(),
    long_description_content_type="text/markdown",
    license="MIT",
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Programming Language :: Python :: 3.13',
    ],
    packages=find_namespace_packages(include=["arktx"]),
    python_requires=">=3.10, <4",
    install_requires=[
        "ecdsa>=0.18",
        "base58>=2.1",
        "httpx>=0.24",
        "pydantic>=2.0",
        "pydantic-settings>=2.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
)
