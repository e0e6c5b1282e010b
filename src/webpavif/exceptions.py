"""异常定义"""

from pathlib import Path


class ConverterError(Exception):
    """转换相关错误基类"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidArgument(ConverterError):
    """参数无效"""


class MissingArgument(InvalidArgument):
    """缺少必需的路径参数"""


class ConfigError(ConverterError):
    """配置文件无法读取或格式错误"""


class EncoderFailure(ConverterError):
    """编码器调用失败（找不到可执行文件、无法执行或返回非零状态）"""

    def __init__(
        self,
        message: str,
        source: Path | None = None,
        output: Path | None = None,
        returncode: int | None = None,
    ):
        super().__init__(message)
        self.source = source
        self.output = output
        self.returncode = returncode
