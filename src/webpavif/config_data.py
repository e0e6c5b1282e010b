"""配置处理模块"""

import json
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Literal

from .encoders import DEFAULT_AVIF_SPEED, DEFAULT_WEBP_FLAGS, Encoder, make_encoder
from .exceptions import ConfigError

Backend = Literal["cli", "pillow"]


def _is_int(value) -> bool:
    # JSON 的 true/false 会被解析成 bool，而 bool 是 int 的子类
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass
class ConverterConfig:
    """转换配置"""

    backend: Backend = "cli"
    webp_binary: str = "cwebp"
    avif_binary: str = "avifenc"
    webp_flags: list[str] = field(default_factory=lambda: list(DEFAULT_WEBP_FLAGS))
    avif_speed: int = DEFAULT_AVIF_SPEED
    webp_quality: int = 75
    max_workers: int = 1
    skip_existing: bool = False
    sync: bool = True

    @classmethod
    def from_dict(cls, data: dict) -> "ConverterConfig":
        """从字典创建配置，忽略未知字段"""
        known = {f.name for f in fields(cls)}
        config = cls(**{k: v for k, v in data.items() if k in known})
        config.validate()
        return config

    @classmethod
    def from_file(cls, path: Path) -> "ConverterConfig":
        """从 JSON 文件加载配置"""
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise ConfigError(f"无法读取配置：{path} ({e.strerror})") from e
        except json.JSONDecodeError as e:
            raise ConfigError(f"配置格式错误：{path} ({e})") from e

        if not isinstance(data, dict):
            raise ConfigError(f"配置必须是 JSON 对象：{path}")
        return cls.from_dict(data)

    def validate(self) -> None:
        if self.backend not in ("cli", "pillow"):
            raise ConfigError(f"未知编码后端：{self.backend}")
        if not _is_int(self.max_workers) or self.max_workers < 1:
            raise ConfigError(f"max_workers 必须是正整数：{self.max_workers}")
        if not _is_int(self.avif_speed) or not 0 <= self.avif_speed <= 10:
            raise ConfigError(f"avif_speed 必须在 0-10 之间：{self.avif_speed}")
        if not _is_int(self.webp_quality) or not 0 <= self.webp_quality <= 100:
            raise ConfigError(f"webp_quality 必须在 0-100 之间：{self.webp_quality}")
        if not isinstance(self.webp_flags, list) or not all(
            isinstance(flag, str) for flag in self.webp_flags
        ):
            raise ConfigError(f"webp_flags 必须是字符串列表：{self.webp_flags!r}")
        for name in ("webp_binary", "avif_binary"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise ConfigError(f"{name} 必须是非空字符串：{value!r}")
        for name in ("skip_existing", "sync"):
            value = getattr(self, name)
            if not isinstance(value, bool):
                raise ConfigError(f"{name} 必须是 true 或 false：{value!r}")

    def merged(self, **overrides) -> "ConverterConfig":
        """返回应用了覆盖项的新配置，值为 None 的覆盖项被忽略"""
        config = replace(self, **{k: v for k, v in overrides.items() if v is not None})
        config.validate()
        return config

    def build_encoder(self) -> Encoder:
        return make_encoder(
            self.backend,
            webp_binary=self.webp_binary,
            avif_binary=self.avif_binary,
            webp_flags=self.webp_flags,
            avif_speed=self.avif_speed,
            webp_quality=self.webp_quality,
        )
