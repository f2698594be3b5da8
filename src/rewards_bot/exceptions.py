"""异常定义"""


class RewardsBotError(Exception):
    """基础异常"""


class RemoteError(RewardsBotError):
    """远程调用失败（超时、网络错误、响应格式异常）"""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RiskDetectedError(RewardsBotError):
    """远程服务返回风控信号（封禁、限流、需要验证）"""

    def __init__(self, message: str, status_code: int | None = None, fatal: bool = True):
        super().__init__(message)
        self.status_code = status_code
        self.fatal = fatal


class TokenError(RewardsBotError):
    """Token 刷新或兑换被拒绝"""


class ConfigurationError(RewardsBotError):
    """配置错误（Cron 表达式无效、缺少凭证等）"""


class CredentialInputError(RewardsBotError):
    """无法识别的凭证输入"""


class SyncError(RewardsBotError):
    """备份或云同步失败"""
