import setuptools

with open("README.md") as f:
    long_description = f.read()

setuptools.setup(
    name="appctl",
    version="0.0.1",
    description="asyncio controller managing Deployments for Application resources",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_namespace_packages(include=["appctl", "appctl.*"]),
    install_requires=["kubernetes_asyncio"],
    extras_require={"test": ["pytest"]},
    entry_points={
        "console_scripts": ["appctl-controller=appctl.cmd.main:main"],
    },
    classifiers=[
        "Development Status :: 2 - Pre-Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
    ],
    python_requires=">=3.8",
)
