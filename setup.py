"""
Conductor 安装配置
"""
from setuptools import setup, find_packages

setup(
    name="make-conductor",
    version="1.0.0",
    description="分布式 make 风格构建调度系统",
    author="Conductor Team",
    author_email="",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "loguru>=0.7",
        "pydantic>=2.0",
        "pydantic-settings>=2.0",
        "fastapi>=0.100",
        "uvicorn>=0.23",
        "httpx>=0.24",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "conductor=scheduler.main:main",
            "conductor-worker=worker.main:main",
        ],
    },
)
