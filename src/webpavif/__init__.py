"""
PNG/JPG → WebP + AVIF 批量转换器

示例用法:
    from pathlib import Path
    from webpavif import convert_single, convert_batch

    # 单个文件，输出到当前目录
    convert_single("photo.png")

    # 批量转换，输出到 out/
    result = convert_batch(Path("images"), output_dir=Path("out"), max_workers=4)
    print(result.success, result.failed)
"""

__version__ = "1.0.0"

from .converter import base_name, convert_batch, convert_single, find_files
from .encoders import CommandLineEncoder, Encoder, PillowEncoder
from .exceptions import (
    ConfigError,
    ConverterError,
    EncoderFailure,
    InvalidArgument,
    MissingArgument,
)

__all__ = [
    "__version__",
    "base_name",
    "convert_batch",
    "convert_single",
    "find_files",
    "CommandLineEncoder",
    "Encoder",
    "PillowEncoder",
    "ConfigError",
    "ConverterError",
    "EncoderFailure",
    "InvalidArgument",
    "MissingArgument",
]
