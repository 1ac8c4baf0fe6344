"""
Core - 配置、枚举、异常和通用工具
"""
