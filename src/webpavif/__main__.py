#!/usr/bin/env python3
"""
PNG/JPG → WebP + AVIF 转换器
用法：
    convert-image photo.png        # 单个文件
    convert-images                 # 当前目录下所有 *.png / *.jpg
    python -m webpavif -d images/  # 同 convert-images
"""

import argparse
import logging
import sys
import time
from pathlib import Path

from . import __version__
from .config_data import ConverterConfig
from .converter import convert_batch, convert_single, sync_filesystem
from .exceptions import ConfigError, EncoderFailure, InvalidArgument
from .worker import setup_signal_handlers

logger = logging.getLogger(__name__)

# 收到中断信号后的退出状态（128 + SIGINT）
EXIT_INTERRUPTED = 130


def _add_common_arguments(p: argparse.ArgumentParser) -> None:
    p.add_argument("-o", "--output-dir", type=Path, help="输出目录（默认：当前目录）")
    p.add_argument("-c", "--config", type=Path, help="JSON 配置文件")
    p.add_argument("--backend", choices=["cli", "pillow"], help="编码后端")
    p.add_argument("--cwebp", dest="webp_binary", help="cwebp 可执行文件")
    p.add_argument("--avifenc", dest="avif_binary", help="avifenc 可执行文件")
    p.add_argument("--no-sync", dest="sync", action="store_false", default=None, help="结束后不调用 sync")
    p.add_argument("-v", "--verbose", action="store_true", help="输出调试信息")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _load_config(args: argparse.Namespace, **overrides) -> ConverterConfig:
    config = ConverterConfig.from_file(args.config) if args.config else ConverterConfig()
    return config.merged(
        backend=args.backend,
        webp_binary=args.webp_binary,
        avif_binary=args.avif_binary,
        sync=args.sync,
        **overrides,
    )


def main_single(argv: list[str] | None = None) -> int:
    """convert-image：转换单个文件"""
    p = argparse.ArgumentParser(prog="convert-image", description="把一张图片转换为 WebP 和 AVIF")
    p.add_argument("path", nargs="?", help="源图片路径")
    _add_common_arguments(p)
    args = p.parse_args(argv)
    _setup_logging(args.verbose)

    try:
        config = _load_config(args)
        outputs = convert_single(
            args.path,
            encoder=config.build_encoder(),
            output_dir=args.output_dir,
            sync=sync_filesystem if config.sync else None,
        )
    except InvalidArgument as e:
        print(f"❌ {e.message}", file=sys.stderr, flush=True)
        return 2
    except ConfigError as e:
        print(f"❌ {e.message}", file=sys.stderr, flush=True)
        return 2
    except EncoderFailure as e:
        print(f"❌ {e.source} - {e.message}", file=sys.stderr, flush=True)
        return 1

    for out in outputs:
        print(f"✓ {out}", flush=True)
    return 0


def main_batch(argv: list[str] | None = None) -> int:
    """convert-images：转换目录下所有 PNG/JPG"""
    p = argparse.ArgumentParser(prog="convert-images", description="把目录中的 PNG/JPG 批量转换为 WebP 和 AVIF")
    p.add_argument("-d", "--directory", type=Path, default=None, help="源目录（默认：当前目录）")
    p.add_argument("-j", "--jobs", dest="max_workers", type=int, help="同一遍内的并行数")
    p.add_argument("--skip-existing", action="store_true", default=None, help="跳过已存在的输出文件")
    p.add_argument("--no-progress", dest="show_progress", action="store_false", help="不显示进度条")
    _add_common_arguments(p)
    args = p.parse_args(argv)
    _setup_logging(args.verbose)

    try:
        config = _load_config(
            args,
            max_workers=args.max_workers,
            skip_existing=args.skip_existing,
        )
    except ConfigError as e:
        print(f"❌ {e.message}", file=sys.stderr, flush=True)
        return 2

    directory = args.directory or Path.cwd()
    if not directory.is_dir():
        print(f"❌ 目录不存在：{directory}", file=sys.stderr, flush=True)
        return 2

    setup_signal_handlers()
    start = time.time()
    result = convert_batch(
        directory,
        encoder=config.build_encoder(),
        output_dir=args.output_dir,
        sync=sync_filesystem if config.sync else None,
        max_workers=config.max_workers,
        skip_existing=config.skip_existing,
        show_progress=args.show_progress,
    )

    if not result.outcomes and not result.skipped and not result.interrupted:
        print(f"⚠️  未找到 PNG/JPG 文件：{directory}", flush=True)
        return 0

    elapsed = time.time() - start
    print(
        f"\n✅ 成功:{result.success}, 失败:{result.failed}, 跳过:{result.skipped} "
        f"(耗时:{elapsed:.0f}秒)",
        flush=True,
    )
    if result.interrupted:
        return EXIT_INTERRUPTED
    return 0 if result.ok else 1


def main() -> None:
    sys.exit(main_batch())


def run_single() -> None:
    sys.exit(main_single())


if __name__ == "__main__":
    main()
