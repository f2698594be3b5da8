"""Rewards Bot：多账号积分任务编排"""

__version__ = "0.1.0"
