"""
任务资源解析引擎
"""
__version__ = "1.0.0"
