"""测试配置文件。

提供测试所需的fixtures。
"""

from pathlib import Path

import pytest
from PIL import Image

from webpavif.exceptions import EncoderFailure
from webpavif.worker import reset_shutdown


class RecordingEncoder:
    """记录调用的假编码器，写出空的输出文件"""

    def __init__(self, fail_on: set[str] | None = None):
        self.calls: list[tuple[str, str, str]] = []
        self.fail_on = fail_on or set()

    def encode_webp(self, source: Path, output: Path) -> None:
        self._record("webp", source, output)

    def encode_avif(self, source: Path, output: Path) -> None:
        self._record("avif", source, output)

    def _record(self, fmt: str, source: Path, output: Path) -> None:
        self.calls.append((fmt, Path(source).name, Path(output).name))
        if Path(source).name in self.fail_on:
            raise EncoderFailure("模拟失败", Path(source), Path(output), returncode=1)
        Path(output).write_bytes(b"")

    @property
    def outputs(self) -> list[str]:
        return [out for _, _, out in self.calls]


@pytest.fixture(autouse=True)
def _reset_shutdown():
    reset_shutdown()
    yield
    reset_shutdown()


@pytest.fixture
def encoder() -> RecordingEncoder:
    return RecordingEncoder()


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "src"
    directory.mkdir()
    return directory


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "out"
    directory.mkdir()
    return directory


@pytest.fixture
def sample_png(source_dir: Path) -> Path:
    """带透明通道的小 PNG"""
    path = source_dir / "sample.png"
    Image.new("RGBA", (32, 24), color=(200, 40, 40, 128)).save(path, "PNG")
    return path


@pytest.fixture
def sample_jpg(source_dir: Path) -> Path:
    path = source_dir / "sample.jpg"
    Image.new("RGB", (32, 24), color="blue").save(path, "JPEG")
    return path


def touch(directory: Path, *names: str) -> None:
    for name in names:
        (directory / name).write_bytes(b"")
