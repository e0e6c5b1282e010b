"""配置测试。"""

import json
from pathlib import Path

import pytest

from webpavif.config_data import ConverterConfig
from webpavif.encoders import CommandLineEncoder, PillowEncoder
from webpavif.exceptions import ConfigError


class TestConverterConfig:
    def test_defaults(self):
        config = ConverterConfig()
        assert config.backend == "cli"
        assert config.webp_flags == ["-af", "-mt"]
        assert config.avif_speed == 0
        assert config.max_workers == 1
        assert config.sync is True

    def test_from_file(self, tmp_path: Path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({
            "backend": "pillow",
            "webp_quality": 60,
            "max_workers": 4,
            "unknown_key": "ignored",
        }))

        config = ConverterConfig.from_file(path)

        assert config.backend == "pillow"
        assert config.webp_quality == 60
        assert config.max_workers == 4
        assert isinstance(config.build_encoder(), PillowEncoder)

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="无法读取配置"):
            ConverterConfig.from_file(tmp_path / "nope.json")

    def test_malformed_file(self, tmp_path: Path):
        path = tmp_path / "config.json"
        path.write_text("{not json")
        with pytest.raises(ConfigError, match="配置格式错误"):
            ConverterConfig.from_file(path)

    def test_not_an_object(self, tmp_path: Path):
        path = tmp_path / "config.json"
        path.write_text("[1, 2]")
        with pytest.raises(ConfigError):
            ConverterConfig.from_file(path)

    @pytest.mark.parametrize(
        "data",
        [
            {"backend": "magick"},
            {"max_workers": 0},
            {"max_workers": True},
            {"avif_speed": 11},
            {"avif_speed": "0"},
            {"webp_quality": 101},
            {"webp_quality": "75"},
            {"webp_flags": "-af -mt"},
            {"webp_flags": None},
            {"webp_flags": ["-af", 1]},
            {"webp_binary": None},
            {"avif_binary": ""},
            {"sync": "false"},
            {"skip_existing": "no"},
            {"skip_existing": 1},
        ],
    )
    def test_invalid_values(self, data: dict):
        with pytest.raises(ConfigError):
            ConverterConfig.from_dict(data)

    def test_bool_values_from_file(self, tmp_path: Path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"sync": False, "skip_existing": True, "webp_flags": ["-q", "80"]}))

        config = ConverterConfig.from_file(path)

        assert config.sync is False
        assert config.skip_existing is True
        assert config.build_encoder().webp_flags == ("-q", "80")

    def test_merged_ignores_none(self):
        config = ConverterConfig(max_workers=3).merged(max_workers=None, webp_binary="/opt/cwebp")
        assert config.max_workers == 3
        assert config.webp_binary == "/opt/cwebp"

    def test_build_cli_encoder(self):
        encoder = ConverterConfig(avif_binary="/opt/avifenc", avif_speed=4).build_encoder()
        assert isinstance(encoder, CommandLineEncoder)
        assert encoder.avif_binary == "/opt/avifenc"
        assert encoder.avif_speed == 4
