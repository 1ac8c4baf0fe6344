"""
Worker Service - 远程命令执行服务

职责：
- 接收协调进程提交的命令
- 在 bash 中执行并返回退出码

架构：
- schemas.py: 请求/响应模型
- app.py: FastAPI 应用
- main.py: 命令行入口
"""

__version__ = "1.0.0"
