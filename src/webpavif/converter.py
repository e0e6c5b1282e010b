"""核心转换功能模块"""

import logging
import os
from collections.abc import Callable
from pathlib import Path, PurePath

from .encoders import CommandLineEncoder, Encoder
from .exceptions import EncoderFailure, InvalidArgument, MissingArgument

logger = logging.getLogger(__name__)

# 扫描顺序：先 PNG 组，再 JPG 组
SOURCE_GROUPS = ("png", "jpg")
OUTPUT_FORMATS = ("webp", "avif")


def base_name(path: str | os.PathLike) -> str:
    """
    从路径得到输出文件的基础名

    取最后一个路径分隔符之后的部分，再截掉第一个 "." 及其后的全部内容。
    "my.photo.png" 得到 "my"，没有 "." 时返回整个文件名。

    Args:
        path: 文件路径

    Returns:
        基础名（可能为空字符串，如 ".png"）
    """
    return PurePath(path).name.split(".", 1)[0]


def output_path(source: str | os.PathLike, fmt: str, output_dir: Path) -> Path:
    """输出文件路径：<output_dir>/<base_name>.<fmt>"""
    return output_dir / f"{base_name(source)}.{fmt}"


def find_files(directory: Path, extension: str) -> list[Path]:
    """
    查找目录下指定扩展名的文件（不递归，不区分大小写）

    以 "." 开头的隐藏文件和目录不参与匹配。

    Args:
        directory: 搜索目录
        extension: 扩展名（不含点），如 "png"

    Returns:
        按文件名排序的文件路径列表
    """
    if not directory.is_dir():
        return []

    suffix = f".{extension.lower()}"
    return sorted(
        (
            f
            for f in directory.iterdir()
            if not f.name.startswith(".")
            and f.name.lower().endswith(suffix)
            and f.is_file()
        ),
        key=lambda f: f.name,
    )


def sync_filesystem() -> None:
    """把缓冲区中的数据刷到磁盘"""
    if hasattr(os, "sync"):
        os.sync()
    logger.debug("sync 完成")


def convert_single(
    path: str | os.PathLike | None,
    encoder: Encoder | None = None,
    output_dir: Path | None = None,
    sync: Callable[[], None] | None = sync_filesystem,
) -> list[Path]:
    """
    单个文件转换：先 WebP 再 AVIF

    WebP 失败时不再尝试 AVIF，异常直接向上抛出。

    Args:
        path: 源图片路径
        encoder: 编码器，默认使用 cwebp/avifenc
        output_dir: 输出目录，默认为当前工作目录
        sync: 编码结束后调用的同步函数，None 表示不同步

    Returns:
        已写入的输出文件列表

    Raises:
        MissingArgument: 未提供路径
        InvalidArgument: 无法从路径得到基础名
        EncoderFailure: 编码器失败
    """
    # Path("") 会变成 "."
    if path is None or os.fspath(path) in ("", "."):
        raise MissingArgument("需要提供图片路径")

    source = Path(path)
    if not base_name(source):
        raise InvalidArgument(f"无法从文件名得到输出名：{source}")

    encoder = encoder or CommandLineEncoder()
    output_dir = Path.cwd() if output_dir is None else output_dir

    written: list[Path] = []
    try:
        for fmt in OUTPUT_FORMATS:
            out = output_path(source, fmt, output_dir)
            encode(encoder, fmt, source, out)
            written.append(out)
    finally:
        if sync is not None:
            sync()

    return written


def encode(encoder: Encoder, fmt: str, source: Path, out: Path) -> None:
    """按输出格式分派到编码器"""
    if fmt == "webp":
        encoder.encode_webp(source, out)
    elif fmt == "avif":
        encoder.encode_avif(source, out)
    else:
        raise EncoderFailure(f"未知格式：{fmt}", source, out)


def convert_batch(
    directory: Path,
    encoder: Encoder | None = None,
    output_dir: Path | None = None,
    sync: Callable[[], None] | None = sync_filesystem,
    **processor_options,
):
    """
    批量转换目录中的 PNG/JPG 图片

    Args:
        directory: 源目录
        encoder: 编码器，默认使用 cwebp/avifenc
        output_dir: 输出目录，默认为当前工作目录
        sync: 全部完成后调用一次的同步函数，None 表示不同步
        **processor_options: 传给 BatchProcessor 的参数（max_workers 等）

    Returns:
        TaskResult
    """
    from .progress import BatchProcessor

    processor = BatchProcessor(
        encoder=encoder or CommandLineEncoder(),
        sync=sync,
        **processor_options,
    )
    return processor.process(directory, Path.cwd() if output_dir is None else output_dir)
