#!/usr/bin/env python3
"""
Setup script for the wsecho WebSocket echo server and client
"""

from setuptools import setup, find_packages

setup(
    name="wsecho",
    version="0.0.1",
    description="WebSocket echo server with a heartbeat client",
    packages=find_packages(include=["server", "server.*", "client", "client.*", "shared", "shared.*"]),
    install_requires=[
        "websockets==15.0",
        "click==8.1.7",
        "typer==0.12.3",
        "rich==13.9.2",
        "PyYAML==6.0.2",
    ],
    extras_require={
        "test": [
            "pytest==8.4.2",
            "pytest-asyncio==1.2.0",
        ],
    },
    python_requires=">=3.9",
    entry_points={
        'console_scripts': [
            'wsecho-server=server.server:main',
            'wsecho-client=client.echo_cli:main',
        ],
    },
)
