"""编码器模块 - 调用 cwebp/avifenc 或使用 Pillow 生成 WebP/AVIF"""

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Protocol, Sequence

from PIL import Image, UnidentifiedImageError, features

from .exceptions import EncoderFailure

logger = logging.getLogger(__name__)

DEFAULT_WEBP_FLAGS = ("-af", "-mt")
DEFAULT_AVIF_SPEED = 0


class Encoder(Protocol):
    """编码器接口：两个操作，失败时抛出 EncoderFailure"""

    def encode_webp(self, source: Path, output: Path) -> None: ...

    def encode_avif(self, source: Path, output: Path) -> None: ...


class CommandLineEncoder:
    """通过外部命令行工具编码（cwebp / avifenc）"""

    def __init__(
        self,
        webp_binary: str = "cwebp",
        avif_binary: str = "avifenc",
        webp_flags: Sequence[str] = DEFAULT_WEBP_FLAGS,
        avif_speed: int = DEFAULT_AVIF_SPEED,
    ):
        self.webp_binary = webp_binary
        self.avif_binary = avif_binary
        self.webp_flags = tuple(webp_flags)
        self.avif_speed = avif_speed

    def webp_command(self, source: Path, output: Path) -> list[str]:
        """cwebp <flags> SRC -o DST"""
        return [self.webp_binary, *self.webp_flags, str(source), "-o", str(output)]

    def avif_command(self, source: Path, output: Path) -> list[str]:
        """avifenc --speed N SRC DST（输出路径为位置参数）"""
        return [self.avif_binary, "--speed", str(self.avif_speed), str(source), str(output)]

    def encode_webp(self, source: Path, output: Path) -> None:
        self._run(self.webp_command(source, output), source, output)

    def encode_avif(self, source: Path, output: Path) -> None:
        self._run(self.avif_command(source, output), source, output)

    def _run(self, cmd: list[str], source: Path, output: Path) -> None:
        """
        执行编码命令

        编码器自身的 stdout/stderr 不做捕获，原样输出到终端。

        Raises:
            EncoderFailure: 可执行文件不存在、无法执行或返回非零状态
        """
        exe = shutil.which(cmd[0])
        if exe is None:
            raise EncoderFailure(f"找不到编码器：{cmd[0]}", source, output)

        logger.debug("运行：%s", " ".join(cmd))
        try:
            proc = subprocess.run([exe, *cmd[1:]], check=False)
        except OSError as e:
            raise EncoderFailure(f"无法执行 {cmd[0]}：{e}", source, output) from e

        if proc.returncode != 0:
            raise EncoderFailure(
                f"{cmd[0]} 退出状态 {proc.returncode}",
                source,
                output,
                returncode=proc.returncode,
            )


class PillowEncoder:
    """使用 Pillow 在进程内编码，适用于未安装命令行工具的环境"""

    def __init__(self, webp_quality: int = 75, avif_speed: int = DEFAULT_AVIF_SPEED):
        self.webp_quality = webp_quality
        self.avif_speed = avif_speed

    def encode_webp(self, source: Path, output: Path) -> None:
        self._save(source, output, "WEBP", quality=self.webp_quality, method=6)

    def encode_avif(self, source: Path, output: Path) -> None:
        self._save(source, output, "AVIF", speed=self.avif_speed)

    def _save(self, source: Path, output: Path, fmt: str, **params) -> None:
        if not features.check(fmt.lower()):
            raise EncoderFailure(f"当前 Pillow 不支持 {fmt} 编码", source, output)

        try:
            with Image.open(source) as img:
                # 保留透明通道，其余模式统一转为 RGB
                if img.mode in ("RGBA", "LA") or (
                    img.mode == "P" and "transparency" in img.info
                ):
                    frame = img.convert("RGBA")
                elif img.mode != "RGB":
                    frame = img.convert("RGB")
                else:
                    frame = img.copy()

            with frame:
                frame.save(output, format=fmt, **params)
        except (
            UnidentifiedImageError,
            Image.DecompressionBombError,
            OSError,
            SyntaxError,
            ValueError,
        ) as e:
            raise EncoderFailure(f"{fmt} 编码失败：{e}", source, output) from e

        logger.debug("Pillow 已写入 %s", output)


def make_encoder(backend: str, **options) -> Encoder:
    """
    根据后端名称创建编码器

    Args:
        backend: "cli" 或 "pillow"
        **options: 传给编码器构造函数的参数，未识别的参数会被忽略

    Returns:
        编码器实例
    """
    if backend == "cli":
        keys = ("webp_binary", "avif_binary", "webp_flags", "avif_speed")
        return CommandLineEncoder(**{k: options[k] for k in keys if k in options})
    if backend == "pillow":
        keys = ("webp_quality", "avif_speed")
        return PillowEncoder(**{k: options[k] for k in keys if k in options})
    raise ValueError(f"未知编码后端：{backend}")
